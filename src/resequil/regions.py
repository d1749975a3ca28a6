"""Equilibration regions: the cell partition and the per-region input bindings."""

import typing

import attrs
import numpy as np
import numpy.typing as npt

from resequil.errors import ValidationError
from resequil.miscibility import NoMixing
from resequil.phases import PhaseUsage
from resequil.records import EquilibrationRecord
from resequil.types import CellRange, DensityModel, FluidPhase, MiscibilityPolicy


__all__ = [
    "RegionMapping",
    "EquilibrationRegion",
    "build_region",
    "default_region_numbers",
]


def default_region_numbers(
    num_cells: int,
    region_numbers: typing.Optional[typing.Sequence[int]] = None,
) -> npt.NDArray[np.intp]:
    """
    Return whole-grid region numbers, defaulting every cell to region 0.

    :param num_cells: Number of cells in the grid.
    :param region_numbers: Optional cell-to-region array (zero based).
    :return: Integer array of length `num_cells`.
    :raises ValidationError: If the array length or values are invalid.
    """
    if region_numbers is None:
        return np.zeros(num_cells, dtype=np.intp)

    numbers = np.asarray(region_numbers)
    if numbers.ndim != 1 or numbers.size != num_cells:
        raise ValidationError(
            f"Region numbers must be a flat array with one entry per cell ({num_cells}), "
            f"got shape {numbers.shape}."
        )
    if numbers.size and not np.issubdtype(numbers.dtype, np.integer):
        if not np.all(np.equal(np.mod(numbers, 1), 0)):
            raise ValidationError("Region numbers must be integers.")
    numbers = numbers.astype(np.intp)
    if numbers.size and numbers.min() < 0:
        raise ValidationError("Region numbers must be non-negative.")
    return numbers


class RegionMapping:
    """
    Index-based partition of a flat cell array into regions.

    Cells of region `r` are kept in ascending cell order. Every cell belongs to
    exactly one region, so the cell ranges of distinct regions never overlap.

    Example:
    ```python
    mapping = RegionMapping([0, 1, 0, 1, 1])
    mapping.num_regions   # 2
    mapping.cells(1)      # array([1, 3, 4])
    ```
    """

    def __init__(self, region_numbers: typing.Sequence[int]) -> None:
        """
        :param region_numbers: Zero-based region number of every cell.
        """
        numbers = default_region_numbers(len(region_numbers), region_numbers)
        self._region_numbers = numbers
        num_regions = int(numbers.max()) + 1 if numbers.size else 0

        # Stable sort keeps each region's cells in ascending order
        order = np.argsort(numbers, kind="stable").astype(np.intp)
        counts = np.bincount(numbers, minlength=num_regions)
        offsets = np.concatenate(([0], np.cumsum(counts)))
        order.setflags(write=False)

        self._cells = order
        self._offsets = offsets
        self._num_regions = num_regions

    @classmethod
    def uniform(cls, num_cells: int) -> "RegionMapping":
        """Mapping with every cell in region 0."""
        return cls(default_region_numbers(num_cells))

    @property
    def num_regions(self) -> int:
        """Number of regions, i.e. the largest region number plus one."""
        return self._num_regions

    @property
    def num_cells(self) -> int:
        return int(self._region_numbers.size)

    def region(self, cell: int) -> int:
        """Region number of a cell."""
        return int(self._region_numbers[cell])

    def cells(self, region_id: int) -> CellRange:
        """
        Cells belonging to a region.

        :param region_id: Region number.
        :return: Read-only array of cell indices, in ascending order. Empty if
            no cell carries that region number.
        :raises ValidationError: If `region_id` is out of range.
        """
        if not 0 <= region_id < self._num_regions:
            raise ValidationError(
                f"Region id {region_id} out of range [0, {self._num_regions})."
            )
        start, stop = self._offsets[region_id], self._offsets[region_id + 1]
        return self._cells[start:stop]

    def __iter__(self) -> typing.Iterator[typing.Tuple[int, CellRange]]:
        for region_id in range(self._num_regions):
            yield region_id, self.cells(region_id)

    def __len__(self) -> int:
        return self._num_regions

    def __repr__(self) -> str:
        return f"{type(self).__name__}(num_regions={self._num_regions}, num_cells={self.num_cells})"


@attrs.frozen
class EquilibrationRegion:
    """
    Everything needed to equilibrate one region.

    Binds the region's equilibration record to the density model of its
    representative cell, the mixing policies and the run's phase usage. Built once
    per region and only read afterwards.
    """

    region_id: int
    """Region number."""
    record: EquilibrationRecord
    """Datum and contact depths/pressures of the region."""
    density: DensityModel
    """Density model of the region's representative cell."""
    phase_usage: PhaseUsage
    """Active phases of the run."""
    dissolved_gas: MiscibilityPolicy
    """Dissolved gas-oil ratio (Rs) policy, feeds the oil density."""
    vaporized_oil: MiscibilityPolicy
    """Vaporised oil-gas ratio (Rv) policy, feeds the gas density."""

    @property
    def datum_depth(self) -> float:
        return self.record.datum_depth

    @property
    def datum_pressure(self) -> float:
        return self.record.datum_pressure

    @property
    def water_oil_contact_depth(self) -> float:
        return self.record.water_oil_contact_depth

    @property
    def gas_oil_contact_depth(self) -> float:
        return self.record.gas_oil_contact_depth

    def mixing_ratio(self, phase: FluidPhase, depth: float, pressure: float) -> float:
        if phase is FluidPhase.OIL:
            return self.dissolved_gas(depth, pressure)
        if phase is FluidPhase.GAS:
            return self.vaporized_oil(depth, pressure)
        return 0.0

    def phase_density(self, phase: FluidPhase, depth: float, pressure: float) -> float:
        """
        Density of a phase at a depth and phase pressure.

        :param phase: Fluid phase.
        :param depth: Depth (m), used by the mixing policies.
        :param pressure: Phase pressure (Pa).
        :return: Density (kg/m³).
        """
        return self.density.density(
            phase, pressure, self.mixing_ratio(phase, depth, pressure)
        )


def build_region(
    region_id: int,
    record: EquilibrationRecord,
    density: DensityModel,
    phase_usage: PhaseUsage,
    dissolved_gas: typing.Optional[MiscibilityPolicy] = None,
    vaporized_oil: typing.Optional[MiscibilityPolicy] = None,
) -> EquilibrationRegion:
    """
    Bind the inputs of one equilibration region.

    Mixing policies that are not given default to `NoMixing`.

    :param region_id: Region number.
    :param record: Equilibration record of the region.
    :param density: Density model of the region's representative cell.
    :param phase_usage: Active phases of the run.
    :param dissolved_gas: Optional dissolved gas-oil ratio policy.
    :param vaporized_oil: Optional vaporised oil-gas ratio policy.
    :return: `EquilibrationRegion`.
    """
    return EquilibrationRegion(
        region_id=region_id,
        record=record,
        density=density,
        phase_usage=phase_usage,
        dissolved_gas=dissolved_gas if dissolved_gas is not None else NoMixing(),
        vaporized_oil=vaporized_oil if vaporized_oil is not None else NoMixing(),
    )
