import logging

import numpy as np

from pymatlaw.brooks_corey import MaterialLaw, _as_array, _result

logger = logging.getLogger(__name__)


class EffToAbsLaw(MaterialLaw):
    """
    Adapter which evaluates a law of effective saturations for absolute
    (measured) saturations.

    The absolute wetting saturation sw is converted to

        se = (sw - swr) / (1 - swr - snr)

    before the inner law is called; relative permeabilities are scaled with
    the end points krw0 and krn0. Absolute saturations outside
    [swr, 1 - snr] are clamped to the effective range [0, 1].

    Args:
        inner (MaterialLaw): Law of effective saturations, e.g. a
            RegularizedBrooksCorey. Its parameters are used by the adapter.
    """

    name = "eff_to_abs"

    def __init__(self, inner: MaterialLaw):
        super().__init__(inner.params, inner.traits)
        self.inner = inner

    def __repr__(self):
        return f"{type(self).__name__}({self.inner!r})"

    def sw_to_swe(self, sw):
        """
        Converts an absolute wetting phase saturation to an effective one.

        Args:
            sw (float or np.ndarray): Absolute wetting phase saturation.

        Returns:
            float or np.ndarray: Effective saturation in [0, 1].
        """
        sw_ = _as_array(sw)
        se = (sw_ - self.params.swr) / self.params.mobile_range
        clamped = (se < 0.0) | (se > 1.0)
        if np.any(clamped):
            logger.debug(
                "clamped %d absolute saturation(s) outside [%g, %g]",
                np.count_nonzero(clamped),
                self.params.swr,
                1.0 - self.params.snr,
            )
        return _result(np.clip(se, 0.0, 1.0), sw)

    def swe_to_sw(self, se):
        """Converts an effective wetting phase saturation to an absolute one."""
        se_ = _as_array(se)
        return _result(se_ * self.params.mobile_range + self.params.swr, se)

    def dswe_dsw(self, sw):
        sw_ = _as_array(sw)
        res = np.full_like(sw_, 1.0 / self.params.mobile_range)
        # zero where the conversion is clamped
        res[(sw_ < self.params.swr) | (sw_ > 1.0 - self.params.snr)] = 0.0
        return _result(res, sw)

    def pcnw(self, sw):
        """Capillary pressure [Pa] for an absolute wetting phase saturation."""
        return self.inner.pcnw(self.sw_to_swe(sw))

    def dpcnw_dsw(self, sw):
        return self.inner.dpcnw_dse(self.sw_to_swe(sw)) * self.dswe_dsw(sw)

    def sw(self, pc):
        """Absolute wetting phase saturation for a capillary pressure [Pa]."""
        return self.swe_to_sw(self.inner.sw(pc))

    def dsw_dpc(self, pc):
        return self.inner.dsw_dpc(pc) * self.params.mobile_range

    def krw(self, sw):
        """Wetting phase relative permeability krw0 * krw(se)."""
        return self.params.krw0 * self.inner.krw(self.sw_to_swe(sw))

    def dkrw_dsw(self, sw):
        return self.params.krw0 * self.inner.dkrw_dse(self.sw_to_swe(sw)) * self.dswe_dsw(sw)

    def krn(self, sw):
        """Non-wetting phase relative permeability krn0 * krn(se)."""
        return self.params.krn0 * self.inner.krn(self.sw_to_swe(sw))

    def dkrn_dsw(self, sw):
        return self.params.krn0 * self.inner.dkrn_dse(self.sw_to_swe(sw)) * self.dswe_dsw(sw)

    def saturation_range(self):
        return self.params.swr, 1.0 - self.params.snr
