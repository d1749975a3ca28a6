import math

import numpy as np
import pytest

from resequil import (
    ComputationError,
    CompressibleDensity,
    ConfigurationError,
    EquilibrationRecord,
    FluidPhase,
    PhaseUsage,
    build_phase_profiles,
    build_region,
    compute_phase_pressures,
)


GRAVITY = 9.80665


def test_incompressible_oil_pressure_is_linear_in_depth(region, depths):
    pressures = compute_phase_pressures(region, depths, gravity=GRAVITY)
    oil = pressures[region.phase_usage.position(FluidPhase.OIL)]
    expected = 200e5 + 800.0 * GRAVITY * (depths - 2000.0)
    np.testing.assert_allclose(oil, expected, rtol=1e-15, atol=0.0)


def test_phase_pressures_are_anchored_at_contacts(incompressible, three_phase):
    record = EquilibrationRecord(
        datum_depth=2000.0,
        datum_pressure=200e5,
        water_oil_contact_depth=2200.0,
        water_oil_capillary_pressure=3e4,
        gas_oil_contact_depth=1900.0,
        gas_oil_capillary_pressure=1e4,
    )
    region = build_region(0, record, incompressible, three_phase)
    profiles = build_phase_profiles(region, np.array([2000.0]), gravity=GRAVITY)

    oil_at_woc = profiles[FluidPhase.OIL](2200.0)
    oil_at_goc = profiles[FluidPhase.OIL](1900.0)
    assert profiles[FluidPhase.WATER](2200.0) == pytest.approx(oil_at_woc - 3e4)
    assert profiles[FluidPhase.GAS](1900.0) == pytest.approx(oil_at_goc + 1e4)
    assert oil_at_woc == pytest.approx(200e5 + 800.0 * GRAVITY * 200.0)

    # Water gradient below the contact
    assert profiles[FluidPhase.WATER](2300.0) - profiles[FluidPhase.WATER](
        2200.0
    ) == pytest.approx(1000.0 * GRAVITY * 100.0)


def test_pressure_rows_follow_phase_usage(record, incompressible):
    usage = PhaseUsage(water=False, oil=True, gas=True)
    region = build_region(0, record, incompressible, usage)
    pressures = compute_phase_pressures(region, np.array([1850.0, 1950.0]), GRAVITY)
    assert pressures.shape == (2, 2)
    # Above the gas-oil contact gas pressure exceeds oil pressure
    assert pressures[1, 0] > pressures[0, 0]


def test_oil_must_be_active(record, incompressible):
    region = build_region(0, record, incompressible, PhaseUsage(oil=False))
    with pytest.raises(ConfigurationError, match="active oil phase"):
        compute_phase_pressures(region, np.array([2000.0]))


def test_compressible_matches_incompressible_without_compressibility(
    record, incompressible, three_phase, depths
):
    compressible = CompressibleDensity(
        reference_densities={
            FluidPhase.WATER: incompressible.water,
            FluidPhase.OIL: incompressible.oil,
            FluidPhase.GAS: incompressible.gas,
        },
        compressibilities={},
    )
    exact = build_region(0, record, incompressible, three_phase)
    integrated = build_region(0, record, compressible, three_phase)

    expected = compute_phase_pressures(exact, depths, gravity=GRAVITY)
    actual = compute_phase_pressures(integrated, depths, gravity=GRAVITY)
    np.testing.assert_allclose(actual, expected, rtol=1e-9)


def test_compressible_oil_matches_analytical_profile(record, depths):
    reference_density, compressibility, reference_pressure = 800.0, 1e-8, 1e5
    density = CompressibleDensity(
        reference_densities={FluidPhase.OIL: reference_density},
        compressibilities={FluidPhase.OIL: compressibility},
        reference_pressure=reference_pressure,
    )
    region = build_region(0, record, density, PhaseUsage(water=False, gas=False))
    pressures = compute_phase_pressures(region, depths, gravity=GRAVITY)

    # dp/dz = g ρref exp(c (p - pref)) integrated from the datum
    expected = [
        reference_pressure
        - math.log(
            math.exp(-compressibility * (200e5 - reference_pressure))
            - compressibility * GRAVITY * reference_density * (depth - 2000.0)
        )
        / compressibility
        for depth in depths
    ]
    np.testing.assert_allclose(pressures[0], expected, rtol=1e-8)


def test_compressible_profile_is_continuous_across_contacts(record, three_phase):
    density = CompressibleDensity(
        reference_densities={
            FluidPhase.WATER: 1000.0,
            FluidPhase.OIL: 800.0,
            FluidPhase.GAS: 150.0,
        },
        compressibilities={
            FluidPhase.WATER: 4e-10,
            FluidPhase.OIL: 1e-9,
            FluidPhase.GAS: 5e-9,
        },
    )
    region = build_region(0, record, density, three_phase)
    profiles = build_phase_profiles(region, np.array([1800.0, 2300.0]), GRAVITY)
    oil = profiles[FluidPhase.OIL]
    for contact in (1900.0, 2200.0):
        assert oil(contact - 1e-6) == pytest.approx(oil(contact + 1e-6), abs=1.0)
    assert oil(2000.0) == pytest.approx(200e5)


def test_non_finite_density_is_reported(record):
    class BrokenDensity:
        is_incompressible = False

        def density(self, phase, pressure, mixing_ratio=0.0):
            return math.nan

    region = build_region(4, record, BrokenDensity(), PhaseUsage(water=False, gas=False))
    with pytest.raises(ComputationError, match="region 4"):
        compute_phase_pressures(region, np.array([2100.0]), GRAVITY)
