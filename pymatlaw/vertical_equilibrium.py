"""
Vertical equilibrium (VE) upscaling of the regularized Brooks-Corey law.

A vertically resolved column of height H is represented by one coarse cell.
Instead of the pointwise saturation, the state is the height h of the
non-wetting phase below the cap rock, which follows from the coarse
non-wetting saturation S and its historical maximum Smax:

    h    = H (S (1 - swr) - Smax snr) / ((1 - swr) (1 - swr - snr))
    hmax = H Smax / (1 - swr)

Between h and hmax the non-wetting phase is trapped at residual saturation.
The fine-scale capillary pressure is neglected (sharp interface), so the
coarse capillary pressure is the buoyancy of the non-wetting column.
"""
import logging

import numpy as np

from pymatlaw.brooks_corey import MaterialLaw, RegularizedBrooksCorey
from pymatlaw.errors import DomainError, InvalidParameterError
from pymatlaw.fluid_state import TWO_PHASE, TwoPhaseTraits
from pymatlaw.params import BrooksCoreyParams

logger = logging.getLogger(__name__)

GRAVITY = 9.80665  # [m/s^2]


class RegularizedBrooksCoreyVE(MaterialLaw):
    """
    VE upscaled Brooks-Corey law.

    Smax is tracked by the caller and must not decrease during drainage;
    this is not checked here, and neither is Smax >= S.

    Args:
        params (BrooksCoreyParams): Parameters with a VE extension.
        traits (TwoPhaseTraits, optional): Phase indices.
        gravity (float, optional): Gravitational acceleration [m/s^2].
            Default is 9.80665.
    """

    name = "ve"

    def __init__(
        self,
        params: BrooksCoreyParams,
        traits: TwoPhaseTraits = TWO_PHASE,
        gravity=GRAVITY,
    ):
        super().__init__(params, traits)
        if params.ve is None:
            raise InvalidParameterError("the VE law needs parameters with a column height")
        if params.ve.height <= 0.0:
            raise InvalidParameterError(
                f"VE column height must be positive, got {params.ve.height}"
            )
        self.gravity = gravity
        self.fine_scale = RegularizedBrooksCorey(params, traits)

    @property
    def height(self) -> float:
        return self.params.ve.height

    def interface_height(self, s, smax):
        """
        Calculates the height of the free non-wetting phase column.

        Args:
            s (float or np.ndarray): Coarse non-wetting phase saturation.
            smax (float or np.ndarray): Historical maximum of s.

        Returns:
            float or np.ndarray: Interface height h [m].
        """
        swr, snr = self.params.swr, self.params.snr
        return (
            self.height
            * (np.asarray(s) * (1.0 - swr) - np.asarray(smax) * snr)
            / ((1.0 - swr) * (1.0 - swr - snr))
        )

    def max_interface_height(self, s, smax):
        """
        Calculates the height reached by the non-wetting phase at its
        historical maximum; below h and above this height the non-wetting
        phase is trapped at residual saturation.
        """
        # s does not enter; kept for symmetry with interface_height
        return self.height * np.asarray(smax) / (1.0 - self.params.swr)

    def saturation_from_height(self, h, smax):
        """Coarse non-wetting saturation for an interface height h [m]."""
        swr, snr = self.params.swr, self.params.snr
        return (
            np.asarray(h) / self.height * (1.0 - swr) * (1.0 - swr - snr)
            + np.asarray(smax) * snr
        ) / (1.0 - swr)

    def pcnw(self, s, smax, rho_w, rho_n):
        """Buoyancy pressure (rho_w - rho_n) g h [Pa] of the non-wetting column."""
        h = self.interface_height(s, smax)
        return (np.asarray(rho_w) - np.asarray(rho_n)) * self.gravity * h

    def krn(self, h):
        """Non-wetting phase relative permeability krn0 h / H."""
        return self.params.krn0 * np.asarray(h) / self.height

    def krw(self, h, hmax, mu_w):
        """
        Wetting phase relative permeability

            (H - hmax)/H + mu_w krw0 (hmax - h)/H

        The first term is the wetting phase below hmax, the second the
        contribution of the zone between h and hmax.
        """
        H = self.height
        h, hmax = np.asarray(h), np.asarray(hmax)
        return (H - hmax) / H + np.asarray(mu_w) * self.params.krw0 * (hmax - h) / H

    def sw(self, pc):
        return self.fine_scale.sw(pc)

    def _read_state(self, fs):
        smax = getattr(fs, "smax", None)
        if smax is None:
            raise DomainError(
                "the VE law needs a fluid state with the historical maximum saturation"
            )
        s = fs.saturation(self.traits.non_wetting_phase_idx)
        return s, smax()

    def capillary_pressures(self, values, fs):
        """
        Writes the capillary pressures into values; the wetting phase is the
        reference (0), the non-wetting entry is the buoyancy pressure of the
        non-wetting column.
        """
        w, n = self.traits.wetting_phase_idx, self.traits.non_wetting_phase_idx
        s, smax = self._read_state(fs)
        values[w] = 0.0
        values[n] = self.pcnw(s, smax, fs.density(w), fs.density(n))
        return values

    def saturations(self, values, fs):
        """Inverse of the fine-scale (regularized) capillary pressure curve."""
        return self.fine_scale.saturations(values, fs)

    def relative_permeabilities(self, values, fs):
        w, n = self.traits.wetting_phase_idx, self.traits.non_wetting_phase_idx
        s, smax = self._read_state(fs)
        h = self.interface_height(s, smax)
        hmax = self.max_interface_height(s, smax)
        values[w] = self.krw(h, hmax, fs.viscosity(w))
        values[n] = self.krn(h)
        return values

    def visualize(self, mu_w=1.0):
        """
        Plots the relative permeabilities along primary drainage (Smax = S).

        Requires matplotlib.
        """
        import matplotlib.pyplot as plt

        s = np.linspace(0.0, 1.0 - self.params.swr, 100)
        h = self.interface_height(s, s)
        hmax = self.max_interface_height(s, s)
        fig = plt.figure()
        plt.plot(s, self.krw(h, hmax, mu_w), label="Wetting")
        plt.plot(s, self.krn(h), label="Non-wetting")
        plt.xlabel("Non-wetting phase saturation")
        plt.ylabel("Relative permeability")
        plt.legend()
        return fig
