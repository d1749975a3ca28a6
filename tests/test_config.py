import numpy as np
import pytest

from resequil import (
    Config,
    Constants,
    PhaseUsage,
    PressureFormulation,
    ValidationError,
    c,
    equilibrate,
    get_constant,
    get_dtype,
    uniform_properties,
    with_precision,
)


def test_config_defaults():
    config = Config()
    assert config.gravity is None
    assert config.root_finder_tolerance == pytest.approx(1e-12)
    assert config.root_finder_max_iterations == 100
    assert config.saturation_closure_tolerance == pytest.approx(1e-8)
    assert config.pressure_formulation is PressureFormulation.WETTING
    assert config.max_workers == 1


def test_pressure_formulation_is_converted_from_string():
    assert Config(pressure_formulation="pglobal").pressure_formulation is (
        PressureFormulation.GLOBAL
    )
    assert Config(pressure_formulation="pn").pressure_formulation is (
        PressureFormulation.NONWETTING
    )


def test_unknown_pressure_formulation_is_rejected():
    with pytest.raises(ValidationError, match="pressure formulation"):
        Config(pressure_formulation="pt")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"gravity": 0.0},
        {"root_finder_tolerance": 0.0},
        {"root_finder_tolerance": 1e-3},
        {"root_finder_max_iterations": 0},
        {"root_finder_max_iterations": 501},
        {"saturation_closure_tolerance": -1.0},
        {"max_workers": 0},
    ],
)
def test_invalid_config_values(kwargs):
    with pytest.raises(ValueError):
        Config(**kwargs)


def test_constants_context_overrides_proxy():
    constants = Constants(ACCELERATION_DUE_TO_GRAVITY=10.0)
    assert "ACCELERATION_DUE_TO_GRAVITY" in constants
    assert c.ACCELERATION_DUE_TO_GRAVITY == pytest.approx(9.80665)
    with constants():
        assert c.ACCELERATION_DUE_TO_GRAVITY == pytest.approx(10.0)
    assert c.ACCELERATION_DUE_TO_GRAVITY == pytest.approx(9.80665)


def test_constant_metadata():
    constant = c["HYDROSTATIC_RELATIVE_TOLERANCE"]
    assert constant.value == pytest.approx(1e-10)
    assert constant.unit == "fraction"


def test_precision_context():
    assert get_dtype() == np.float64
    with with_precision(np.float32):
        assert get_dtype() == np.float32
    assert get_dtype() == np.float64


def test_single_precision_outputs(saturation_functions, incompressible):
    properties = uniform_properties(1, saturation_functions, incompressible)
    rows = [(2000.0, 200e5, 2200.0, 0.0, 1900.0)]
    with with_precision(np.float32):
        result = equilibrate([2100.0], rows, properties, PhaseUsage())
    assert result.pressures.dtype == np.float32
    assert result.saturations.dtype == np.float32
    assert get_dtype() == np.float64
    expected = 200e5 + 800.0 * 9.80665 * 100.0
    assert result.pressure("oil")[0] == pytest.approx(expected, abs=2.0)


def test_gravity_follows_config_constants(saturation_functions, incompressible):
    properties = uniform_properties(1, saturation_functions, incompressible)
    rows = [(2000.0, 200e5, 2200.0, 0.0, 1900.0)]
    usage = PhaseUsage(water=False, gas=False)

    config = Config(constants=Constants(ACCELERATION_DUE_TO_GRAVITY=10.0))
    result = equilibrate([2100.0], rows, properties, usage, config=config)
    assert result.pressure("oil")[0] == pytest.approx(200e5 + 800.0 * 10.0 * 100.0)

    # An explicit gravity wins over the constants
    config = Config(gravity=9.0, constants=Constants(ACCELERATION_DUE_TO_GRAVITY=10.0))
    result = equilibrate([2100.0], rows, properties, usage, config=config)
    assert result.pressure("oil")[0] == pytest.approx(200e5 + 800.0 * 9.0 * 100.0)


def test_get_constant():
    assert get_constant("SATURATION_TOLERANCE").value == pytest.approx(1e-12)
    assert get_constant("NOT_A_CONSTANT") is None
