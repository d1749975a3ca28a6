import numpy as np
import pytest

from resequil import (
    EquilibrationRecord,
    IncompressibleDensity,
    PhasePair,
    PhaseUsage,
    SaturationFunctions,
    TwoPhaseCapillaryPressureTable,
    build_region,
    uniform_properties,
)


@pytest.fixture
def oil_water_table():
    return TwoPhaseCapillaryPressureTable(
        pair=PhasePair.OIL_WATER,
        saturation=[0.2, 0.6, 1.0],
        capillary_pressure=[1.0e5, 0.2e5, 0.0],
    )


@pytest.fixture
def gas_oil_table():
    return TwoPhaseCapillaryPressureTable(
        pair=PhasePair.GAS_OIL,
        saturation=[0.0, 0.4, 0.8],
        capillary_pressure=[0.0, 0.1e5, 0.5e5],
    )


@pytest.fixture
def saturation_functions(oil_water_table, gas_oil_table):
    return SaturationFunctions(oil_water=oil_water_table, gas_oil=gas_oil_table)


@pytest.fixture
def incompressible():
    return IncompressibleDensity(water=1000.0, oil=800.0, gas=100.0)


@pytest.fixture
def three_phase():
    return PhaseUsage(water=True, oil=True, gas=True)


@pytest.fixture
def record():
    return EquilibrationRecord(
        datum_depth=2000.0,
        datum_pressure=200e5,
        water_oil_contact_depth=2200.0,
        gas_oil_contact_depth=1900.0,
    )


@pytest.fixture
def depths():
    return np.linspace(1800.0, 2300.0, 26)


@pytest.fixture
def properties(depths, saturation_functions, incompressible):
    return uniform_properties(depths.size, saturation_functions, incompressible)


@pytest.fixture
def region(record, incompressible, three_phase):
    return build_region(0, record, incompressible, three_phase)
