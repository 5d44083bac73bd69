import numpy as np

from pymatlaw.errors import DomainError


class TwoPhaseTraits:
    """
    Phase indices of a two-phase system.

    Attributes:
        wetting_phase_idx (int): Index of the wetting phase. Default is 0.
        non_wetting_phase_idx (int): Index of the non-wetting phase. Default is 1.
    """

    num_phases = 2

    def __init__(self, wetting_phase_idx=0, non_wetting_phase_idx=1):
        if {wetting_phase_idx, non_wetting_phase_idx} != {0, 1}:
            raise DomainError(
                "phase indices of a two-phase system must be 0 and 1, got "
                f"{wetting_phase_idx} and {non_wetting_phase_idx}"
            )
        self.wetting_phase_idx = wetting_phase_idx
        self.non_wetting_phase_idx = non_wetting_phase_idx

    def __repr__(self):
        return (
            f"TwoPhaseTraits(wetting_phase_idx={self.wetting_phase_idx}, "
            f"non_wetting_phase_idx={self.non_wetting_phase_idx})"
        )


TWO_PHASE = TwoPhaseTraits()


def _complement(saturation):
    if np.ndim(saturation):
        return 1.0 - np.asarray(saturation, dtype=float)
    return 1.0 - saturation


class SimpleFluidState:
    """
    Per-phase saturations, pressures, densities and viscosities of one
    cell, or of many cells when the values are numpy arrays.

    The historical maximum (non-wetting) saturation is tracked by the caller
    and only stored here for the vertical equilibrium law.
    """

    def __init__(
        self,
        sw=1.0,
        pressure_w=1e5,
        pressure_n=1e5,
        rho_w=1000.0,
        rho_n=800.0,
        mu_w=0.001,
        mu_n=0.003,
        smax=None,
        traits: TwoPhaseTraits = TWO_PHASE,
    ) -> None:
        self.traits = traits
        self._saturation = [None, None]
        self._pressure = [None, None]
        self._density = [None, None]
        self._viscosity = [None, None]
        w, n = traits.wetting_phase_idx, traits.non_wetting_phase_idx
        self._saturation[w] = sw
        self._saturation[n] = _complement(sw)
        self._pressure[w] = pressure_w
        self._pressure[n] = pressure_n
        self._density[w] = rho_w
        self._density[n] = rho_n
        self._viscosity[w] = mu_w
        self._viscosity[n] = mu_n
        self._smax = smax

    def _check_phase(self, phase_idx):
        if phase_idx not in (0, 1):
            raise DomainError(f"no phase with index {phase_idx} in a two-phase system")

    def saturation(self, phase_idx):
        self._check_phase(phase_idx)
        return self._saturation[phase_idx]

    def pressure(self, phase_idx):
        self._check_phase(phase_idx)
        return self._pressure[phase_idx]

    def density(self, phase_idx):
        self._check_phase(phase_idx)
        return self._density[phase_idx]

    def viscosity(self, phase_idx):
        self._check_phase(phase_idx)
        return self._viscosity[phase_idx]

    def smax(self):
        if self._smax is None:
            raise DomainError("the historical maximum saturation has not been set")
        return self._smax

    def set_saturation(self, phase_idx, value):
        """Sets the saturation of one phase and the other one to the complement."""
        self._check_phase(phase_idx)
        self._saturation[phase_idx] = value
        self._saturation[1 - phase_idx] = _complement(value)

    def set_pressure(self, phase_idx, value):
        self._check_phase(phase_idx)
        self._pressure[phase_idx] = value

    def set_density(self, phase_idx, value):
        self._check_phase(phase_idx)
        self._density[phase_idx] = value

    def set_viscosity(self, phase_idx, value):
        self._check_phase(phase_idx)
        self._viscosity[phase_idx] = value

    def set_smax(self, value):
        self._smax = value
