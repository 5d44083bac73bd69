import numpy as np
import pytest

from pymatlaw.brooks_corey import BrooksCorey, RegularizedBrooksCorey
from pymatlaw.eff_to_abs import EffToAbsLaw
from pymatlaw.errors import NumericalSingularity
from pymatlaw.fluid_state import SimpleFluidState
from pymatlaw.params import BrooksCoreyParams

SWR = 0.2
SNR = 0.1


@pytest.fixture
def params():
    return BrooksCoreyParams(pce=1e4, labda=2.0, swr=SWR, snr=SNR, krw0=0.6, krn0=0.9)


@pytest.fixture
def law(params):
    return EffToAbsLaw(RegularizedBrooksCorey(params))


def test_saturation_conversion(law):
    assert law.sw_to_swe(SWR) == pytest.approx(0.0)
    assert law.sw_to_swe(1.0 - SNR) == pytest.approx(1.0)
    assert law.sw_to_swe(0.55) == pytest.approx(0.5)
    assert law.swe_to_sw(0.5) == pytest.approx(0.55)


def test_absolute_effective_round_trip(law):
    sw = np.linspace(SWR, 1.0 - SNR, 71)
    np.testing.assert_allclose(law.swe_to_sw(law.sw_to_swe(sw)), sw, rtol=0.0, atol=1e-14)


def test_out_of_range_saturations_are_clamped(law):
    assert law.sw_to_swe(0.05) == 0.0
    assert law.sw_to_swe(0.95) == 1.0
    assert law.dswe_dsw(0.05) == 0.0
    assert law.dswe_dsw(0.95) == 0.0
    assert law.dswe_dsw(0.5) == pytest.approx(1.0 / 0.7)
    assert law.krn(0.0) == pytest.approx(0.9)
    assert law.krw(1.0) == pytest.approx(0.6)


def test_end_point_relative_permeabilities(law):
    assert law.krw(1.0 - SNR) == pytest.approx(0.6)
    assert law.krw(SWR) == 0.0
    assert law.krn(SWR) == pytest.approx(0.9)
    assert law.krn(1.0 - SNR) == pytest.approx(0.0, abs=1e-12)
    assert law.krw(0.55) == pytest.approx(0.6 * 0.5**4)
    assert law.krn(0.55) == pytest.approx(0.9 * 0.25 * (1.0 - 0.5**2))


def test_capillary_pressure(law):
    assert law.pcnw(0.55) == pytest.approx(1e4 * 0.5**-0.5)
    assert law.pcnw(1.0 - SNR) == pytest.approx(1e4)
    assert law.sw(law.pcnw(0.55)) == pytest.approx(0.55)
    assert np.isfinite(law.pcnw(SWR))


def test_chain_rule_derivatives(law):
    sw = np.array([0.3, 0.55, 0.8])
    eps = 1e-7
    for f, df in [
        (law.pcnw, law.dpcnw_dsw),
        (law.krw, law.dkrw_dsw),
        (law.krn, law.dkrn_dsw),
    ]:
        numeric = (f(sw + eps) - f(sw - eps)) / (2 * eps)
        np.testing.assert_allclose(df(sw), numeric, rtol=1e-5)
    pc = law.pcnw(sw)
    assert law.dsw_dpc(pc) == pytest.approx(1.0 / law.dpcnw_dsw(sw), rel=1e-6)


def test_raw_inner_law_is_singular_at_residual_saturation(params):
    law = EffToAbsLaw(BrooksCorey(params))
    with pytest.raises(NumericalSingularity):
        law.pcnw(SWR)


def test_two_phase_api(law):
    fs = SimpleFluidState(sw=np.array([0.2, 0.55, 0.9]))
    values = law.capillary_pressures(law.new_values(3), fs)
    np.testing.assert_array_equal(values[0], 0.0)
    np.testing.assert_allclose(values[1], law.pcnw(fs.saturation(0)))
    kr = law.relative_permeabilities(law.new_values(3), fs)
    np.testing.assert_allclose(kr[0], [0.0, 0.6 * 0.5**4, 0.6])
    np.testing.assert_allclose(kr[1], [0.9, 0.9 * 0.25 * 0.75, 0.0], atol=1e-12)

    fs = SimpleFluidState(sw=0.55, pressure_w=2e5, pressure_n=2e5 + law.pcnw(0.55))
    sat = law.saturations(law.new_values(), fs)
    assert sat[0] == pytest.approx(0.55)
    assert sat[1] == pytest.approx(0.45)
