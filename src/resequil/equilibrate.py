"""
Hydrostatic equilibration of a reservoir grid.

Example:
```python
from resequil import (
    FluidPhase,
    IncompressibleDensity,
    PhaseUsage,
    SaturationFunctions,
    TwoPhaseCapillaryPressureTable,
    PhasePair,
    equilibrate,
    uniform_properties,
)

oil_water = TwoPhaseCapillaryPressureTable(
    pair=PhasePair.OIL_WATER,
    saturation=[0.2, 0.5, 1.0],
    capillary_pressure=[2e5, 0.5e5, 0.0],
)
properties = uniform_properties(
    num_cells=len(depths),
    saturation_functions=SaturationFunctions(oil_water=oil_water),
    density_model=IncompressibleDensity(water=1030.0, oil=780.0),
)
result = equilibrate(
    depths,
    records=[(2000.0, 200e5, 2200.0, 0.0, 1900.0)],
    properties=properties,
    phase_usage=PhaseUsage(water=True, oil=True, gas=False),
)
result.saturation(FluidPhase.WATER)
```
"""

from concurrent.futures import ThreadPoolExecutor
import contextvars
import logging
import typing

import attrs
import numpy as np
import numpy.typing as npt

from resequil._precision import get_dtype
from resequil.config import Config, _to_formulation
from resequil.errors import ConfigurationError, ValidationError
from resequil.formulations import compute_primary_pressure
from resequil.phases import PhaseUsage
from resequil.pressures import compute_phase_pressures
from resequil.properties import EquilibrationProperties
from resequil.records import EquilibrationRecord, build_equilibration_records
from resequil.regions import EquilibrationRegion, RegionMapping, build_region
from resequil.saturations import compute_phase_saturations
from resequil.types import (
    CellRange,
    FluidPhase,
    MiscibilityPolicy,
    PhaseField,
    PressureFormulation,
)
from resequil.utils import scatter_phase_field


logger = logging.getLogger(__name__)

__all__ = ["EquilibrationResult", "Equilibrator", "equilibrate"]

MiscibilityPolicies = typing.Tuple[
    typing.Optional[MiscibilityPolicy], typing.Optional[MiscibilityPolicy]
]
"""`(dissolved gas policy, vaporised oil policy)` of one region."""

RecordsInput = typing.Iterable[
    typing.Union[EquilibrationRecord, typing.Sequence[float]]
]


def _read_only(array: npt.ArrayLike) -> npt.NDArray:
    array = np.array(array, dtype=get_dtype())
    array.setflags(write=False)
    return array


@attrs.frozen
class EquilibrationResult:
    """
    Whole-grid equilibrium phase pressures and saturations.

    Both arrays are read-only and laid out as `(number of active phases, number of cells)`,
    rows in phase-usage order (water, oil, gas).
    """

    pressures: PhaseField = attrs.field(converter=_read_only)
    """Phase pressures (Pa)."""
    saturations: PhaseField = attrs.field(converter=_read_only)
    """Phase saturations."""
    phase_usage: PhaseUsage
    """Active phases."""
    pressure_formulation: PressureFormulation = attrs.field(
        default=PressureFormulation.WETTING, converter=_to_formulation
    )
    """Formulation used by `primary_pressure` when none is given."""

    def __attrs_post_init__(self) -> None:
        expected = (self.phase_usage.num_phases,)
        if self.pressures.ndim != 2 or self.pressures.shape[:1] != expected:
            raise ValidationError(
                f"Pressures must have {expected[0]} phase row(s), got shape {self.pressures.shape}."
            )
        if self.saturations.shape != self.pressures.shape:
            raise ValidationError(
                f"Saturations shape {self.saturations.shape} does not match "
                f"pressures shape {self.pressures.shape}."
            )

    @property
    def num_cells(self) -> int:
        return int(self.pressures.shape[1])

    def pressure(self, phase: typing.Union[FluidPhase, str]) -> npt.NDArray:
        """Pressure of an active phase in every cell (Pa)."""
        return self.pressures[self.phase_usage.position(FluidPhase(phase))]

    def saturation(self, phase: typing.Union[FluidPhase, str]) -> npt.NDArray:
        """Saturation of an active phase in every cell."""
        return self.saturations[self.phase_usage.position(FluidPhase(phase))]

    def primary_pressure(
        self,
        formulation: typing.Optional[typing.Union[PressureFormulation, str]] = None,
    ) -> npt.NDArray:
        """
        Primary pressure of every cell under a pressure formulation.

        :param formulation: 'pw', 'pn' or 'pglobal'. Defaults to `pressure_formulation`.
        :return: Primary pressure (Pa).
        """
        return compute_primary_pressure(
            formulation if formulation is not None else self.pressure_formulation,
            self.pressures,
            self.saturations,
            self.phase_usage,
        )


def _validate_depths(depths: npt.ArrayLike, num_cells: int) -> npt.NDArray:
    depths = np.asarray(depths, dtype=np.float64)
    if depths.ndim != 1 or depths.size != num_cells:
        raise ValidationError(
            f"Cell depths must be a flat array with one entry per cell ({num_cells}), "
            f"got shape {depths.shape}."
        )
    if not np.all(np.isfinite(depths)):
        raise ValidationError("Cell depths must be finite.")
    return depths


class Equilibrator:
    """
    Computes equilibrium pressures and saturations for a fixed set of properties.

    Binds the property model, the active phases and the run configuration once, so
    that several equilibration record sets can be evaluated against the same grid.

    Example:
    ```python
    equilibrator = Equilibrator(properties, PhaseUsage(gas=False))
    result = equilibrator(depths, records=[(2000.0, 200e5, 2200.0, 0.0, 1900.0)])
    ```
    """

    def __init__(
        self,
        properties: EquilibrationProperties,
        phase_usage: PhaseUsage,
        config: typing.Optional[Config] = None,
    ) -> None:
        """
        :param properties: Saturation functions and density models of the grid.
        :param phase_usage: Active phases. The oil phase must be active.
        :param config: Run configuration. Defaults to `Config()`.
        :raises ConfigurationError: If the oil phase is not active.
        """
        if not phase_usage.oil:
            raise ConfigurationError(
                "Cannot initialise: equilibration requires an active oil phase "
                "(water-gas systems are not supported)."
            )
        self.properties = properties
        self.phase_usage = phase_usage
        self.config = config if config is not None else Config()

    @property
    def gravity(self) -> float:
        """Acceleration due to gravity of the run, from the config or its constants (m/s²)."""
        if self.config.gravity is not None:
            return self.config.gravity
        return self.config.constants.ACCELERATION_DUE_TO_GRAVITY

    def build_region(
        self,
        region_id: int,
        record: EquilibrationRecord,
        cells: CellRange,
        miscibility: typing.Optional[MiscibilityPolicies] = None,
    ) -> EquilibrationRegion:
        """
        Bind a region to the density model of its first cell.

        :param region_id: Region number.
        :param record: Equilibration record of the region.
        :param cells: Global indices of the region's cells. Must not be empty.
        :param miscibility: Optional `(dissolved gas, vaporised oil)` policies.
        :return: `EquilibrationRegion`.
        """
        dissolved_gas, vaporized_oil = miscibility or (None, None)
        return build_region(
            region_id,
            record,
            density=self.properties.density_model(int(cells[0])),
            phase_usage=self.phase_usage,
            dissolved_gas=dissolved_gas,
            vaporized_oil=vaporized_oil,
        )

    def equilibrate_region(
        self,
        region_id: int,
        record: EquilibrationRecord,
        cells: CellRange,
        depths: npt.NDArray,
        miscibility: typing.Optional[MiscibilityPolicies] = None,
    ) -> typing.Tuple[PhaseField, PhaseField]:
        """
        Compute the equilibrium state of one region.

        :param region_id: Region number.
        :param record: Equilibration record of the region.
        :param cells: Global indices of the region's cells.
        :param depths: Whole-grid cell-centre depths (m).
        :param miscibility: Optional `(dissolved gas, vaporised oil)` policies.
        :return: Region-local `(pressures, saturations)`, each of shape
            `(number of active phases, len(cells))`.
        """
        cells = np.asarray(cells, dtype=np.intp)
        num_phases = self.phase_usage.num_phases
        if cells.size == 0:
            logger.debug(f"Region {region_id} has no cells, skipping")
            empty = np.empty((num_phases, 0), dtype=get_dtype())
            return empty, empty.copy()

        region = self.build_region(region_id, record, cells, miscibility)
        pressures = compute_phase_pressures(region, depths[cells], gravity=self.gravity)
        saturations = compute_phase_saturations(
            region, cells, self.properties, pressures, config=self.config
        )
        logger.debug(
            f"Region {region_id}: equilibrated {cells.size} cell(s) "
            f"(datum {record.datum_depth} m, WOC {record.water_oil_contact_depth} m, "
            f"GOC {record.gas_oil_contact_depth} m)"
        )
        return pressures, saturations

    def __call__(
        self,
        depths: npt.ArrayLike,
        records: typing.Optional[RecordsInput],
        region_numbers: typing.Optional[typing.Sequence[int]] = None,
        miscibility: typing.Optional[typing.Mapping[int, MiscibilityPolicies]] = None,
    ) -> EquilibrationResult:
        """
        Compute the equilibrium state of the whole grid.

        :param depths: Cell-centre depth of every cell (m), positive downward.
        :param records: Equilibration records or EQUIL-style rows, one per region.
        :param region_numbers: Optional zero-based cell-to-region array.
            All cells belong to region 0 without it.
        :param miscibility: Optional mapping of region number to its
            `(dissolved gas, vaporised oil)` policies. Missing regions are immiscible.
        :return: `EquilibrationResult`.
        :raises ConfigurationError: If equilibration data is missing, malformed or
            does not cover every region.
        :raises ComputationError: If a pressure or saturation cannot be computed.
        """
        num_cells = self.properties.num_cells
        depths = _validate_depths(depths, num_cells)
        mapping = (
            RegionMapping(region_numbers)
            if region_numbers is not None
            else RegionMapping.uniform(num_cells)
        )
        if mapping.num_cells != num_cells:
            raise ValidationError(
                f"Region numbers cover {mapping.num_cells} cell(s) but the grid has {num_cells}."
            )
        records = build_equilibration_records(records, num_regions=mapping.num_regions)
        miscibility = miscibility or {}

        num_phases = self.phase_usage.num_phases
        pressures = np.zeros((num_phases, num_cells), dtype=get_dtype())
        saturations = np.zeros((num_phases, num_cells), dtype=get_dtype())
        logger.info(
            f"Equilibrating {num_cells} cell(s) in {mapping.num_regions} region(s), "
            f"phases: {', '.join(phase.value for phase in self.phase_usage.active_phases)}"
        )

        def _equilibrate(
            region_id: int, cells: CellRange
        ) -> typing.Tuple[CellRange, PhaseField, PhaseField]:
            region_pressures, region_saturations = self.equilibrate_region(
                region_id,
                records[region_id],
                cells,
                depths,
                miscibility=miscibility.get(region_id),
            )
            return cells, region_pressures, region_saturations

        with self.config.constants():
            if self.config.max_workers > 1 and mapping.num_regions > 1:
                # Worker threads do not inherit context variables (constants, precision)
                with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                    futures = [
                        executor.submit(
                            contextvars.copy_context().run, _equilibrate, region_id, cells
                        )
                        for region_id, cells in mapping
                    ]
                    results = [future.result() for future in futures]
            else:
                results = [_equilibrate(region_id, cells) for region_id, cells in mapping]

        for cells, region_pressures, region_saturations in results:
            if cells.size:
                scatter_phase_field(pressures, region_pressures, cells)
                scatter_phase_field(saturations, region_saturations, cells)

        logger.info(f"Equilibration complete for {num_cells} cell(s)")
        return EquilibrationResult(
            pressures=pressures,
            saturations=saturations,
            phase_usage=self.phase_usage,
            pressure_formulation=self.config.pressure_formulation,
        )


def equilibrate(
    depths: npt.ArrayLike,
    records: typing.Optional[RecordsInput],
    properties: EquilibrationProperties,
    phase_usage: PhaseUsage,
    region_numbers: typing.Optional[typing.Sequence[int]] = None,
    config: typing.Optional[Config] = None,
    miscibility: typing.Optional[typing.Mapping[int, MiscibilityPolicies]] = None,
) -> EquilibrationResult:
    """
    Compute hydrostatic equilibrium phase pressures and saturations of a grid.

    For every equilibration region the phase pressures are integrated from the datum
    and the contacts, and the saturations follow from inverting the capillary
    pressure curves at the resulting phase pressure differences.

    :param depths: Cell-centre depth of every cell (m), positive downward.
    :param records: Equilibration records or EQUIL-style rows
        `(datum_depth, datum_pressure, woc_depth, pcow_woc, goc_depth[, pcgo_goc])`,
        one per region.
    :param properties: Saturation functions and density models of the grid.
    :param phase_usage: Active phases. The oil phase must be active.
    :param region_numbers: Optional zero-based cell-to-region array.
    :param config: Run configuration. Defaults to `Config()`.
    :param miscibility: Optional mapping of region number to its
        `(dissolved gas, vaporised oil)` policies.
    :return: `EquilibrationResult`.
    """
    equilibrator = Equilibrator(properties, phase_usage, config=config)
    return equilibrator(
        depths,
        records,
        region_numbers=region_numbers,
        miscibility=miscibility,
    )
