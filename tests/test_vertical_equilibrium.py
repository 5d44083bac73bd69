import numpy as np
import pytest

from pymatlaw.errors import DomainError, InvalidParameterError
from pymatlaw.fluid_state import SimpleFluidState
from pymatlaw.params import BrooksCoreyParams, BrooksCoreyParamsBuilder
from pymatlaw.vertical_equilibrium import GRAVITY, RegularizedBrooksCoreyVE

H = 10.0


@pytest.fixture
def ve():
    params = BrooksCoreyParams.create(1e4, 2.0, height=H, swr=0.2, snr=0.1, krw0=0.6, krn0=0.9)
    return RegularizedBrooksCoreyVE(params)


def test_interface_heights(ve):
    h = ve.interface_height(0.5, 0.6)
    assert h == pytest.approx(10.0 * (0.5 * 0.8 - 0.6 * 0.1) / (0.8 * 0.7), abs=1e-6)
    assert h == pytest.approx(6.071428571, abs=1e-6)
    assert ve.max_interface_height(0.5, 0.6) == pytest.approx(7.5, abs=1e-6)


def test_full_and_empty_column():
    params = BrooksCoreyParams.create(1e4, 2.0, height=H, swr=0.0, snr=0.1, krn0=0.9)
    ve = RegularizedBrooksCoreyVE(params)
    assert ve.interface_height(1.0, 1.0) == pytest.approx(H)
    assert ve.interface_height(0.0, 0.0) == 0.0
    assert ve.krn(0.0) == 0.0
    assert ve.krn(H) == pytest.approx(0.9)


def test_saturation_from_height(ve):
    s = np.array([0.1, 0.3, 0.5])
    h = ve.interface_height(s, 0.6)
    np.testing.assert_allclose(ve.saturation_from_height(h, 0.6), s)


def test_capillary_pressure_is_buoyancy(ve):
    h = ve.interface_height(0.5, 0.6)
    assert ve.pcnw(0.5, 0.6, 1000.0, 700.0) == pytest.approx(300.0 * GRAVITY * h)

    fs = SimpleFluidState(sw=0.5, rho_w=1000.0, rho_n=700.0, smax=0.6)
    values = ve.capillary_pressures(ve.new_values(), fs)
    assert values[0] == 0.0
    assert values[1] == pytest.approx(300.0 * GRAVITY * h)


def test_custom_gravity():
    params = BrooksCoreyParams.create(1e4, 2.0, height=H)
    ve = RegularizedBrooksCoreyVE(params, gravity=10.0)
    assert ve.pcnw(0.5, 0.5, 1000.0, 800.0) == pytest.approx(200.0 * 10.0 * 5.0)


def test_relative_permeabilities(ve):
    h = ve.interface_height(0.5, 0.6)
    hmax = 7.5
    mu_w = 0.5
    expected_krw = (H - hmax) / H + mu_w * 0.6 * (hmax - h) / H
    assert ve.krw(h, hmax, mu_w) == pytest.approx(expected_krw)
    assert ve.krn(h) == pytest.approx(0.9 * h / H)

    fs = SimpleFluidState(sw=0.5, mu_w=mu_w, smax=0.6)
    kr = ve.relative_permeabilities(ve.new_values(), fs)
    assert kr[0] == pytest.approx(expected_krw)
    assert kr[1] == pytest.approx(0.9 * h / H)


def test_relative_permeabilities_are_not_clamped(ve):
    # inconsistent history (Smax < S) is passed through
    fs = SimpleFluidState(sw=0.0, mu_w=1.0, smax=0.1)
    kr = ve.relative_permeabilities(ve.new_values(), fs)
    assert kr[1] > 0.9


def test_many_cells(ve):
    s = np.array([0.0, 0.2, 0.4])
    smax = np.array([0.0, 0.4, 0.4])
    fs = SimpleFluidState(sw=1.0 - s, mu_w=1.0, smax=smax)
    values = ve.capillary_pressures(ve.new_values(3), fs)
    np.testing.assert_allclose(values[1], (1000.0 - 800.0) * GRAVITY * ve.interface_height(s, smax))
    kr = ve.relative_permeabilities(ve.new_values(3), fs)
    np.testing.assert_allclose(kr[1], 0.9 * ve.interface_height(s, smax) / H)


def test_saturations_use_fine_scale_curve(ve):
    pc = ve.fine_scale.pcnw(0.4)
    fs = SimpleFluidState(pressure_w=1e5, pressure_n=1e5 + pc, smax=0.0)
    values = ve.saturations(ve.new_values(), fs)
    assert values[0] == pytest.approx(0.4)
    assert ve.sw(pc) == pytest.approx(0.4)


def test_missing_historical_maximum(ve):
    fs = SimpleFluidState(sw=0.5)
    with pytest.raises(DomainError):
        ve.relative_permeabilities(ve.new_values(), fs)

    class NoHistory:
        def saturation(self, phase_idx):
            return 0.5

    with pytest.raises(DomainError):
        ve.capillary_pressures(ve.new_values(), NoHistory())


def test_needs_column_height():
    with pytest.raises(InvalidParameterError):
        RegularizedBrooksCoreyVE(BrooksCoreyParams(pce=1e4, labda=2.0))


def test_builder_rejects_zero_height():
    builder = BrooksCoreyParamsBuilder(vertical_equilibrium=True)
    builder.set_entry_pressure(1e4)
    builder.set_labda(2.0)
    builder.set_height(0.0)
    with pytest.raises(InvalidParameterError):
        builder.finalize()
