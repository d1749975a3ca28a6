import math

import pytest

from resequil import (
    BlackOilDensity,
    CompressibleDensity,
    DepthTabulatedRatio,
    FluidPhase,
    FormationVolumeFactorTable,
    IncompressibleDensity,
    NoMixing,
    SaturatedRatioTable,
    ValidationError,
)


def test_incompressible_density_ignores_pressure():
    density = IncompressibleDensity(water=1030.0, oil=780.0, gas=120.0)
    assert density.is_incompressible
    assert density.density(FluidPhase.WATER, 1e5) == 1030.0
    assert density.density(FluidPhase.OIL, 500e5, mixing_ratio=100.0) == 780.0
    assert density.density(FluidPhase.GAS, 0.0) == 120.0


def test_incompressible_density_must_be_positive():
    with pytest.raises(ValidationError, match="Oil density must be positive"):
        IncompressibleDensity(oil=0.0)


def test_unknown_phase_is_rejected():
    with pytest.raises(ValidationError, match="Unknown fluid phase"):
        IncompressibleDensity().density("brine", 1e5)


def test_compressible_density():
    density = CompressibleDensity(
        reference_densities={FluidPhase.WATER: 1000.0, FluidPhase.OIL: 800.0},
        compressibilities={FluidPhase.WATER: 4.5e-10},
        reference_pressure=1e5,
    )
    assert not density.is_incompressible
    assert density.density(FluidPhase.WATER, 1e5) == pytest.approx(1000.0)
    assert density.density(FluidPhase.WATER, 201e5) == pytest.approx(
        1000.0 * math.exp(4.5e-10 * 200e5)
    )
    # No compressibility given for oil
    assert density.density(FluidPhase.OIL, 201e5) == pytest.approx(800.0)
    with pytest.raises(ValidationError):
        density.density(FluidPhase.GAS, 1e5)


def test_compressible_density_validation():
    with pytest.raises(ValidationError, match="non-negative"):
        CompressibleDensity(
            reference_densities={FluidPhase.OIL: 800.0},
            compressibilities={FluidPhase.OIL: -1e-9},
        )


@pytest.fixture
def black_oil():
    return BlackOilDensity(
        surface_densities={
            FluidPhase.WATER: 1000.0,
            FluidPhase.OIL: 850.0,
            FluidPhase.GAS: 0.9,
        },
        formation_volume_factors={
            FluidPhase.WATER: FormationVolumeFactorTable([1e5, 400e5], [1.02, 1.0]),
            FluidPhase.OIL: FormationVolumeFactorTable([1e5, 400e5], [1.1, 1.3]),
            FluidPhase.GAS: FormationVolumeFactorTable([1e5, 400e5], [0.5, 0.004]),
        },
    )


def test_black_oil_density(black_oil):
    assert black_oil.density(FluidPhase.WATER, 1e5) == pytest.approx(1000.0 / 1.02)
    assert black_oil.density(FluidPhase.OIL, 1e5) == pytest.approx(850.0 / 1.1)
    assert black_oil.density(FluidPhase.OIL, 1e5, mixing_ratio=100.0) == pytest.approx(
        (850.0 + 100.0 * 0.9) / 1.1
    )
    assert black_oil.density(FluidPhase.GAS, 400e5, mixing_ratio=1e-4) == pytest.approx(
        (0.9 + 1e-4 * 850.0) / 0.004
    )


def test_formation_volume_factor_table_interpolates():
    table = FormationVolumeFactorTable([1e5, 3e5], [1.0, 2.0])
    assert table(2e5) == pytest.approx(1.5)
    assert table(10e5) == pytest.approx(2.0)
    with pytest.raises(ValidationError, match="positive"):
        FormationVolumeFactorTable([1e5, 3e5], [1.0, 0.0])


def test_black_oil_density_needs_surface_densities():
    with pytest.raises(ValidationError, match="surface density"):
        BlackOilDensity(
            surface_densities={FluidPhase.OIL: 850.0},
            formation_volume_factors={
                FluidPhase.WATER: FormationVolumeFactorTable([1e5], [1.0])
            },
        )


def test_mixing_policies():
    assert NoMixing()(2000.0, 200e5) == 0.0

    saturated = SaturatedRatioTable(pressure=[100e5, 200e5], ratio=[40.0, 80.0])
    assert saturated.ratio_at(150e5) == pytest.approx(60.0)
    assert saturated(2500.0, 150e5) == pytest.approx(60.0)

    by_depth = DepthTabulatedRatio(depth=[1000.0, 3000.0], ratio=[100.0, 100.0])
    assert by_depth(2000.0, 100e5) == pytest.approx(100.0)

    capped = DepthTabulatedRatio(
        depth=[1000.0, 3000.0], ratio=[100.0, 100.0], saturated=saturated
    )
    assert capped(2000.0, 100e5) == pytest.approx(40.0)
    assert capped(2000.0, 400e5) == pytest.approx(80.0)
