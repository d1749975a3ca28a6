import numpy as np
import pytest

from resequil import (
    FluidPhase,
    NoMixing,
    RegionMapping,
    SaturatedRatioTable,
    ValidationError,
    build_region,
    default_region_numbers,
)


def test_region_mapping_partitions_cells():
    mapping = RegionMapping([0, 1, 0, 2, 1, 1])
    assert mapping.num_regions == 3
    assert len(mapping) == 3
    assert mapping.cells(0).tolist() == [0, 2]
    assert mapping.cells(1).tolist() == [1, 4, 5]
    assert mapping.cells(2).tolist() == [3]
    assert mapping.region(3) == 2

    covered = np.concatenate([cells for _, cells in mapping])
    assert sorted(covered.tolist()) == list(range(6))


def test_cell_ranges_are_read_only_and_restartable():
    mapping = RegionMapping([1, 0, 1])
    cells = mapping.cells(1)
    with pytest.raises(ValueError):
        cells[0] = 5
    assert list(cells) == list(cells) == [0, 2]


def test_unused_region_number_gives_empty_range():
    mapping = RegionMapping([0, 2, 2])
    assert mapping.num_regions == 3
    assert mapping.cells(1).size == 0


def test_region_id_out_of_range():
    with pytest.raises(ValidationError, match="out of range"):
        RegionMapping([0, 0]).cells(1)


def test_uniform_mapping():
    mapping = RegionMapping.uniform(4)
    assert mapping.num_regions == 1
    assert mapping.cells(0).tolist() == [0, 1, 2, 3]


def test_default_region_numbers():
    assert default_region_numbers(3).tolist() == [0, 0, 0]
    assert default_region_numbers(2, [1.0, 0.0]).tolist() == [1, 0]
    with pytest.raises(ValidationError, match="one entry per cell"):
        default_region_numbers(3, [0, 1])
    with pytest.raises(ValidationError, match="non-negative"):
        default_region_numbers(2, [0, -1])
    with pytest.raises(ValidationError, match="integers"):
        default_region_numbers(2, [0.5, 1.0])


def test_build_region_defaults_to_no_mixing(record, incompressible, three_phase):
    region = build_region(3, record, incompressible, three_phase)
    assert region.region_id == 3
    assert isinstance(region.dissolved_gas, NoMixing)
    assert isinstance(region.vaporized_oil, NoMixing)
    assert region.datum_depth == record.datum_depth
    assert region.phase_density(FluidPhase.OIL, 2000.0, 200e5) == 800.0


def test_region_mixing_ratio_uses_phase_policy(record, incompressible, three_phase):
    rs = SaturatedRatioTable(pressure=[100e5, 300e5], ratio=[50.0, 150.0])
    region = build_region(0, record, incompressible, three_phase, dissolved_gas=rs)
    assert region.mixing_ratio(FluidPhase.OIL, 2000.0, 200e5) == pytest.approx(100.0)
    assert region.mixing_ratio(FluidPhase.GAS, 2000.0, 200e5) == 0.0
    assert region.mixing_ratio(FluidPhase.WATER, 2000.0, 200e5) == 0.0
