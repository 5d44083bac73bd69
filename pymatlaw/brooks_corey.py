import logging

import numpy as np
import scipy.optimize as opt
from scipy.interpolate import CubicHermiteSpline

from pymatlaw.errors import NumericalSingularity
from pymatlaw.fluid_state import TWO_PHASE, TwoPhaseTraits
from pymatlaw.params import BrooksCoreyParams, check_thresholds

logger = logging.getLogger(__name__)


def _as_array(x):
    return np.atleast_1d(np.asarray(x, dtype=float))


def _result(res, x):
    # scalars in, scalars out
    if np.ndim(x) == 0:
        return float(res[0])
    return res


class MaterialLaw:
    """
    Common interface of the saturation dependent material laws.

    A law is created once per material region and keeps a reference to the
    (immutable) parameters of that region. It has no state of its own, so
    the same object can be evaluated for any number of cells.

    The two-phase API writes into a container indexed by phase index, e.g.
    the array returned by new_values().
    """

    name = None

    def __init__(self, params: BrooksCoreyParams, traits: TwoPhaseTraits = TWO_PHASE):
        self.params = params
        self.traits = traits

    def __repr__(self):
        return f"{type(self).__name__}({self.params!r})"

    def new_values(self, n_cells=None) -> np.ndarray:
        """Returns a zeroed result container for one cell or n_cells cells."""
        if n_cells is None:
            return np.zeros(self.traits.num_phases)
        return np.zeros((self.traits.num_phases, n_cells))

    def pcnw(self, sw):
        raise NotImplementedError

    def sw(self, pc):
        raise NotImplementedError

    def krw(self, sw):
        raise NotImplementedError

    def krn(self, sw):
        raise NotImplementedError

    def saturation_range(self):
        """Saturation interval used for plotting the curves."""
        return 1e-3, 1.0

    def capillary_pressures(self, values, fs):
        """
        Writes the capillary pressure of each phase relative to the wetting
        phase into values.

        Args:
            values: Container indexed by phase index.
            fs: Fluid state providing saturation(phase_idx).

        Returns:
            values
        """
        w, n = self.traits.wetting_phase_idx, self.traits.non_wetting_phase_idx
        sw = fs.saturation(w)
        values[w] = 0.0  # reference phase
        values[n] = self.pcnw(sw)
        return values

    def saturations(self, values, fs):
        """
        Writes the phase saturations that correspond to the pressure
        difference p_n - p_w of the fluid state into values.
        """
        w, n = self.traits.wetting_phase_idx, self.traits.non_wetting_phase_idx
        sw = self.sw(np.asarray(fs.pressure(n)) - np.asarray(fs.pressure(w)))
        values[w] = sw
        values[n] = 1.0 - sw
        return values

    def relative_permeabilities(self, values, fs):
        """
        Writes the relative permeability of each phase into values. The
        values are not clamped to [0, 1].
        """
        w, n = self.traits.wetting_phase_idx, self.traits.non_wetting_phase_idx
        sw = fs.saturation(w)
        values[w] = self.krw(sw)
        values[n] = self.krn(sw)
        return values

    def visualize(self):
        """
        Plots the capillary pressure and relative permeability curves.

        Requires matplotlib.
        """
        import matplotlib.pyplot as plt

        sw_ = np.linspace(*self.saturation_range(), 200)
        fig, (ax_pc, ax_kr) = plt.subplots(1, 2, figsize=(10, 4))
        ax_pc.plot(sw_, self.pcnw(sw_))
        ax_pc.set_xlabel("Wetting phase saturation")
        ax_pc.set_ylabel("Capillary pressure [Pa]")
        ax_kr.plot(sw_, self.krw(sw_), label="Wetting")
        ax_kr.plot(sw_, self.krn(sw_), label="Non-wetting")
        ax_kr.set_xlabel("Wetting phase saturation")
        ax_kr.set_ylabel("Relative permeability")
        ax_kr.legend()
        return fig


class BrooksCorey(MaterialLaw):
    """
    Brooks-Corey capillary pressure and relative permeabilities as functions
    of the effective wetting phase saturation se.

    The curves are not regularized: pc and its derivative are unbounded for
    se -> 0. Evaluating pc at se <= 0, or the saturation at pc <= 0, raises
    NumericalSingularity.
    """

    name = "raw"

    def pcnw(self, se):
        """
        Calculates the capillary pressure pce * se**(-1/labda).

        Args:
            se (float or np.ndarray): Effective wetting phase saturation.

        Returns:
            float or np.ndarray: Capillary pressure [Pa].
        """
        se_ = _as_array(se)
        if np.any(se_ <= 0.0):
            raise NumericalSingularity("capillary pressure is infinite at se <= 0")
        return _result(self.params.pce * se_ ** (-1.0 / self.params.labda), se)

    def dpcnw_dse(self, se):
        se_ = _as_array(se)
        if np.any(se_ <= 0.0):
            raise NumericalSingularity("capillary pressure slope is infinite at se <= 0")
        labda = self.params.labda
        return _result(-self.params.pce / labda * se_ ** (-1.0 / labda - 1.0), se)

    def sw(self, pc):
        """
        Calculates the effective saturation (pc/pce)**(-labda), the inverse
        of pcnw().

        Args:
            pc (float or np.ndarray): Capillary pressure [Pa].

        Returns:
            float or np.ndarray: Effective wetting phase saturation.
        """
        pc_ = _as_array(pc)
        if np.any(pc_ <= 0.0):
            raise NumericalSingularity("saturation is infinite at pc <= 0")
        return _result((pc_ / self.params.pce) ** (-self.params.labda), pc)

    def dsw_dpc(self, pc):
        pc_ = _as_array(pc)
        if np.any(pc_ <= 0.0):
            raise NumericalSingularity("saturation slope is infinite at pc <= 0")
        pce, labda = self.params.pce, self.params.labda
        return _result(-labda / pce * (pc_ / pce) ** (-labda - 1.0), pc)

    def krw(self, se):
        """Wetting phase relative permeability se**((2 + 3 labda)/labda)."""
        se_ = _as_array(se)
        labda = self.params.labda
        return _result(se_ ** ((2.0 + 3.0 * labda) / labda), se)

    def dkrw_dse(self, se):
        se_ = _as_array(se)
        labda = self.params.labda
        a = (2.0 + 3.0 * labda) / labda
        return _result(a * se_ ** (a - 1.0), se)

    def krn(self, se):
        """Non-wetting phase relative permeability (1 - se)**2 (1 - se**((2 + labda)/labda))."""
        se_ = _as_array(se)
        labda = self.params.labda
        b = (2.0 + labda) / labda
        return _result((1.0 - se_) ** 2 * (1.0 - se_ ** b), se)

    def dkrn_dse(self, se):
        se_ = _as_array(se)
        labda = self.params.labda
        b = (2.0 + labda) / labda
        res = -2.0 * (1.0 - se_) * (1.0 - se_ ** b) - (1.0 - se_) ** 2 * b * se_ ** (b - 1.0)
        return _result(res, se)


def _hermite(x, y, dydx, label):
    """
    Cubic Hermite spline through (x, y) with slopes dydx. Warns when the
    end slopes violate the Fritsch-Carlson monotonicity condition.
    """
    secant = (y[1] - y[0]) / (x[1] - x[0])
    if secant != 0.0:
        alpha, beta = dydx[0] / secant, dydx[1] / secant
        if alpha < 0.0 or beta < 0.0 or alpha**2 + beta**2 > 9.0:
            logger.warning(
                "%s branch on [%g, %g] may not be monotonic (alpha=%g, beta=%g)",
                label,
                x[0],
                x[1],
                alpha,
                beta,
            )
    return CubicHermiteSpline(x, y, dydx)


class RegularizedBrooksCorey(MaterialLaw):
    """
    Brooks-Corey law with bounded slopes near the saturation end points.

    Below pc_low_se and above pc_high_se the raw curves are replaced by
    cubic Hermite splines which match the raw value and slope at the splice
    points, so the curves stay C1 continuous:

    - pc: a straight line for se < pc_low_se, a spline between pc_high_se
      and 1, and a straight line with the slope at se = 1 for se > 1.
    - krw: a spline between pc_high_se and 1 reaching 1 with zero slope,
      0 for se <= 0 and 1 for se >= 1.
    - krn: a spline between 0 and pc_low_se starting at 1 with zero slope,
      1 for se <= 0 and 0 for se >= 1.

    The inverse sw(pc) uses the branch that matches the pressure range, so
    sw(pcnw(se)) == se holds on every branch.
    """

    name = "regularized"

    def __init__(self, params: BrooksCoreyParams, traits: TwoPhaseTraits = TWO_PHASE):
        super().__init__(params, traits)
        check_thresholds(params.pc_low_se, params.pc_high_se)
        self.raw = BrooksCorey(params, traits)
        raw = self.raw
        se_low, se_high = params.pc_low_se, params.pc_high_se

        self.pc_low = raw.pcnw(se_low)
        self.pc_slope_low = raw.dpcnw_dse(se_low)
        self.pc_high = raw.pcnw(se_high)
        self.pc_slope_one = raw.dpcnw_dse(1.0)
        # extrapolates linearly below se = 0
        self._pc_low_branch = CubicHermiteSpline(
            [0.0, se_low],
            [self.pc_low - self.pc_slope_low * se_low, self.pc_low],
            [self.pc_slope_low, self.pc_slope_low],
        )
        self._pc_high_branch = _hermite(
            [se_high, 1.0],
            [self.pc_high, params.pce],
            [raw.dpcnw_dse(se_high), self.pc_slope_one],
            "pc",
        )
        self._krw_branch = _hermite(
            [se_high, 1.0], [raw.krw(se_high), 1.0], [raw.dkrw_dse(se_high), 0.0], "krw"
        )
        self._krn_branch = _hermite(
            [0.0, se_low], [1.0, raw.krn(se_low)], [0.0, raw.dkrn_dse(se_low)], "krn"
        )
        logger.debug(
            "regularized Brooks-Corey: pc(%g)=%g, pc(%g)=%g",
            se_low,
            self.pc_low,
            se_high,
            self.pc_high,
        )

    def _pc_masks(self, se_):
        low = se_ < self.params.pc_low_se
        high = (se_ > self.params.pc_high_se) & (se_ < 1.0)
        over = se_ >= 1.0
        return low, high, over, ~(low | high | over)

    def pcnw(self, se):
        """
        Calculates the regularized capillary pressure.

        Args:
            se (float or np.ndarray): Effective wetting phase saturation, any value.

        Returns:
            float or np.ndarray: Capillary pressure [Pa].
        """
        se_ = _as_array(se)
        res = np.zeros_like(se_)
        low, high, over, mid = self._pc_masks(se_)
        res[low] = self._pc_low_branch(se_[low])
        res[high] = self._pc_high_branch(se_[high])
        res[over] = self.params.pce + self.pc_slope_one * (se_[over] - 1.0)
        if np.any(mid):
            res[mid] = self.raw.pcnw(se_[mid])
        return _result(res, se)

    def dpcnw_dse(self, se):
        se_ = _as_array(se)
        res = np.zeros_like(se_)
        low, high, over, mid = self._pc_masks(se_)
        res[low] = self.pc_slope_low
        res[high] = self._pc_high_branch(se_[high], nu=1)
        res[over] = self.pc_slope_one
        if np.any(mid):
            res[mid] = self.raw.dpcnw_dse(se_[mid])
        return _result(res, se)

    def _solve_high(self, pc):
        def residual(se):
            return float(self._pc_high_branch(se)) - pc

        lo, hi = self.params.pc_high_se, 1.0
        # rounding at the ends of the spline interval
        if residual(hi) >= 0.0:
            return hi
        if residual(lo) <= 0.0:
            return lo
        return opt.brentq(residual, lo, hi, xtol=1e-14)

    def sw(self, pc):
        """
        Calculates the effective saturation for a capillary pressure, the
        inverse of pcnw().

        Args:
            pc (float or np.ndarray): Capillary pressure [Pa], any value.

        Returns:
            float or np.ndarray: Effective wetting phase saturation.
        """
        pc_ = _as_array(pc)
        res = np.zeros_like(pc_)
        low = pc_ >= self.pc_low
        over = pc_ < self.params.pce
        high = (pc_ >= self.params.pce) & (pc_ <= self.pc_high) & ~low
        mid = ~(low | over | high)
        res[low] = self.params.pc_low_se + (pc_[low] - self.pc_low) / self.pc_slope_low
        res[over] = 1.0 + (pc_[over] - self.params.pce) / self.pc_slope_one
        if np.any(high):
            res[high] = [self._solve_high(p) for p in pc_[high]]
        if np.any(mid):
            res[mid] = self.raw.sw(pc_[mid])
        return _result(res, pc)

    def dsw_dpc(self, pc):
        pc_ = _as_array(pc)
        res = np.zeros_like(pc_)
        low = pc_ >= self.pc_low
        over = pc_ < self.params.pce
        high = (pc_ >= self.params.pce) & (pc_ <= self.pc_high) & ~low
        mid = ~(low | over | high)
        res[low] = 1.0 / self.pc_slope_low
        res[over] = 1.0 / self.pc_slope_one
        if np.any(high):
            se_high = np.array([self._solve_high(p) for p in pc_[high]])
            res[high] = 1.0 / self._pc_high_branch(se_high, nu=1)
        if np.any(mid):
            res[mid] = self.raw.dsw_dpc(pc_[mid])
        return _result(res, pc)

    def krw(self, se):
        """Regularized wetting phase relative permeability."""
        se_ = _as_array(se)
        res = np.zeros_like(se_)
        high = (se_ > self.params.pc_high_se) & (se_ < 1.0)
        mid = (se_ > 0.0) & (se_ <= self.params.pc_high_se)
        res[high] = self._krw_branch(se_[high])
        res[mid] = self.raw.krw(se_[mid])
        res[se_ >= 1.0] = 1.0
        return _result(res, se)

    def dkrw_dse(self, se):
        se_ = _as_array(se)
        res = np.zeros_like(se_)
        high = (se_ > self.params.pc_high_se) & (se_ < 1.0)
        mid = (se_ > 0.0) & (se_ <= self.params.pc_high_se)
        res[high] = self._krw_branch(se_[high], nu=1)
        res[mid] = self.raw.dkrw_dse(se_[mid])
        return _result(res, se)

    def krn(self, se):
        """Regularized non-wetting phase relative permeability."""
        se_ = _as_array(se)
        res = np.zeros_like(se_)
        low = (se_ > 0.0) & (se_ < self.params.pc_low_se)
        mid = (se_ >= self.params.pc_low_se) & (se_ < 1.0)
        res[low] = self._krn_branch(se_[low])
        res[mid] = self.raw.krn(se_[mid])
        res[se_ <= 0.0] = 1.0
        return _result(res, se)

    def dkrn_dse(self, se):
        se_ = _as_array(se)
        res = np.zeros_like(se_)
        low = (se_ > 0.0) & (se_ < self.params.pc_low_se)
        mid = (se_ >= self.params.pc_low_se) & (se_ < 1.0)
        res[low] = self._krn_branch(se_[low], nu=1)
        res[mid] = self.raw.dkrn_dse(se_[mid])
        return _result(res, se)

    def saturation_range(self):
        return 0.0, 1.0
