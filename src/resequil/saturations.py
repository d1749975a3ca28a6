"""Phase saturations from equilibrium phase pressures."""

import logging
import typing
import warnings

import numpy as np

from resequil._precision import get_dtype
from resequil.config import Config
from resequil.errors import (
    ConfigurationError,
    EquilibrationError,
    SaturationClosureWarning,
    ValidationError,
)
from resequil.inversion import (
    saturation_from_capillary_pressure,
    saturation_from_sum_of_capillary_pressures,
)
from resequil.properties import EquilibrationProperties
from resequil.regions import EquilibrationRegion
from resequil.types import CellRange, FluidPhase, PhaseField, PhasePair
from resequil.utils import clip_scalar


logger = logging.getLogger(__name__)

__all__ = ["compute_phase_saturations", "close_oil_saturation"]


def close_oil_saturation(
    water_saturation: float,
    gas_saturation: float,
    tolerance: float,
    region_id: int = 0,
    cell: int = 0,
) -> float:
    """
    Oil saturation by closure, So = 1 - Sw - Sg, clamped to [0, 1].

    Clamping by more than `tolerance` issues a `SaturationClosureWarning`.

    :param water_saturation: Water saturation.
    :param gas_saturation: Gas saturation.
    :param tolerance: Clamping allowed without a warning.
    :param region_id: Region number, for the warning message.
    :param cell: Global cell index, for the warning message.
    :return: Oil saturation in [0, 1].
    """
    oil_saturation = 1.0 - water_saturation - gas_saturation
    clamped = clip_scalar(oil_saturation, 0.0, 1.0)
    if abs(clamped - oil_saturation) > tolerance:
        warnings.warn(
            f"Oil saturation {oil_saturation:.6e} in cell {cell} of equilibration "
            f"region {region_id} is outside [0, 1] and was clamped to {clamped}.",
            SaturationClosureWarning,
            stacklevel=2,
        )
        logger.warning(
            f"Region {region_id}, cell {cell}: oil saturation {oil_saturation:.6e} clamped to {clamped}"
        )
    return clamped


def compute_phase_saturations(
    region: EquilibrationRegion,
    cells: CellRange,
    properties: EquilibrationProperties,
    phase_pressures: PhaseField,
    config: typing.Optional[Config] = None,
) -> PhaseField:
    """
    Compute equilibrium phase saturations of a region's cells.

    For each cell:

    1. Water saturation inverts the oil-water capillary pressure Pcow = Po - Pw.
    2. Gas saturation inverts the gas-oil capillary pressure Pcgo = Pg - Po.
    3. Where Sw + Sg > 1 the gas-oil and oil-water transition zones overlap. Water
       saturation is then recomputed from the gas-water capillary pressure
       Pg - Pw = Pcow(Sw) + Pcgo(1 - Sw), with Sw bounded so that Sg = 1 - Sw
       stays within the gas saturation range.
    4. Oil saturation follows by closure, So = 1 - Sw - Sg.

    :param region: Equilibration region.
    :param cells: Global indices of the region's cells.
    :param properties: Saturation ranges and capillary pressure curves per cell.
    :param phase_pressures: Region-local pressures from `compute_phase_pressures`,
        shape `(number of active phases, len(cells))`.
    :param config: Run configuration. Defaults to `Config()`.
    :return: Array of shape `(number of active phases, len(cells))`, rows in
        phase-usage order.
    :raises ConfigurationError: If the oil phase is not active.
    :raises ValidationError: If a cell reports an inverted saturation range.
    :raises ConvergenceError: If a capillary pressure inversion fails to converge.
    :raises ComputationError: If pressures or capillary pressures are not finite.
    """
    config = config if config is not None else Config()
    usage = region.phase_usage
    if not usage.oil:
        raise ConfigurationError(
            "Cannot initialise: equilibration requires an active oil phase "
            "(water-gas systems are not supported)."
        )

    cells = np.asarray(cells)
    phase_pressures = np.asarray(phase_pressures)
    if phase_pressures.shape != (usage.num_phases, cells.size):
        raise ValidationError(
            f"Phase pressures must have shape {(usage.num_phases, cells.size)}, "
            f"got {phase_pressures.shape}."
        )

    oil_pressures = phase_pressures[usage.position(FluidPhase.OIL)]
    water_pressures = (
        phase_pressures[usage.position(FluidPhase.WATER)] if usage.water else None
    )
    gas_pressures = (
        phase_pressures[usage.position(FluidPhase.GAS)] if usage.gas else None
    )

    tolerance = config.root_finder_tolerance
    max_iterations = config.root_finder_max_iterations
    saturations = np.zeros((usage.num_phases, cells.size), dtype=get_dtype())
    num_overlapping = 0

    for i, cell in enumerate(cells):
        cell = int(cell)
        water_saturation = 0.0
        gas_saturation = 0.0
        try:
            if water_pressures is not None:
                water_range = properties.saturation_range(cell, FluidPhase.WATER)
                water_saturation = saturation_from_capillary_pressure(
                    properties.capillary_pressure_function(PhasePair.OIL_WATER, cell),
                    target_capillary_pressure=oil_pressures[i] - water_pressures[i],
                    minimum_saturation=water_range.min,
                    maximum_saturation=water_range.max,
                    increasing=False,
                    tolerance=tolerance,
                    max_iterations=max_iterations,
                )
            if gas_pressures is not None:
                gas_range = properties.saturation_range(cell, FluidPhase.GAS)
                gas_saturation = saturation_from_capillary_pressure(
                    properties.capillary_pressure_function(PhasePair.GAS_OIL, cell),
                    target_capillary_pressure=gas_pressures[i] - oil_pressures[i],
                    minimum_saturation=gas_range.min,
                    maximum_saturation=gas_range.max,
                    increasing=True,
                    tolerance=tolerance,
                    max_iterations=max_iterations,
                )
            if (
                water_pressures is not None
                and gas_pressures is not None
                and water_saturation + gas_saturation > 1.0
            ):
                # Sg = 1 - Sw must stay within the gas range as well
                water_saturation = saturation_from_sum_of_capillary_pressures(
                    properties.capillary_pressure_function(PhasePair.OIL_WATER, cell),
                    properties.capillary_pressure_function(PhasePair.GAS_OIL, cell),
                    target_capillary_pressure=gas_pressures[i] - water_pressures[i],
                    minimum_saturation=max(water_range.min, 1.0 - gas_range.max),
                    maximum_saturation=min(water_range.max, 1.0 - gas_range.min),
                    tolerance=tolerance,
                    max_iterations=max_iterations,
                )
                gas_saturation = 1.0 - water_saturation
                num_overlapping += 1
        except EquilibrationError as exc:
            raise type(exc)(
                f"Saturation computation failed in cell {cell} of equilibration "
                f"region {region.region_id}: {exc}"
            ) from exc

        oil_saturation = close_oil_saturation(
            water_saturation,
            gas_saturation,
            tolerance=config.saturation_closure_tolerance,
            region_id=region.region_id,
            cell=cell,
        )
        if usage.water:
            saturations[usage.position(FluidPhase.WATER), i] = water_saturation
        if usage.gas:
            saturations[usage.position(FluidPhase.GAS), i] = gas_saturation
        saturations[usage.position(FluidPhase.OIL), i] = oil_saturation

    if num_overlapping:
        logger.debug(
            f"Region {region.region_id}: {num_overlapping} cell(s) in overlapping "
            f"transition zones resolved from the gas-water capillary pressure"
        )
    return saturations
