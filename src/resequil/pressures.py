"""
Hydrostatic phase pressures of an equilibration region.

Integrates the phase pressure equation

    dp/dz = ρ(z, p) * g

from each phase's anchor depth to the cell centres, with depth z positive downward.
Oil is anchored at the datum, water at the water-oil contact and gas at the gas-oil
contact:

    Pw(WOC) = Po(WOC) - Pcow(WOC)
    Pg(GOC) = Po(GOC) + Pcgo(GOC)
"""

import logging
import math
import typing

import attrs
import numpy as np
import numpy.typing as npt
from scipy.integrate import solve_ivp

from resequil._precision import get_dtype
from resequil.constants import c
from resequil.errors import ComputationError, ConfigurationError
from resequil.regions import EquilibrationRegion
from resequil.types import FloatOrArray, FluidPhase, PhaseField
from resequil.utils import compute_linear_hydrostatic_pressure


logger = logging.getLogger(__name__)

__all__ = [
    "HydrostaticProfile",
    "build_phase_profile",
    "build_phase_profiles",
    "compute_phase_pressures",
]


@attrs.frozen
class _ProfileSegment:
    """Integrated pressure over one depth interval without contacts inside it."""

    top: float
    bottom: float
    solution: typing.Callable[[FloatOrArray], npt.NDArray]


@attrs.frozen
class HydrostaticProfile:
    """
    Pressure of one phase as a function of depth.

    A constant-density profile is evaluated in closed form. Otherwise the profile is
    a chain of integrated segments split at the contact depths, where the phase
    density may change abruptly.
    """

    phase: FluidPhase
    """Phase the profile belongs to."""
    anchor_depth: float
    """Depth where the pressure is known (m)."""
    anchor_pressure: float
    """Phase pressure at the anchor depth (Pa)."""
    pressure_gradient: typing.Optional[float] = None
    """Constant ρ·g (Pa/m) of an incompressible phase, None if integrated."""
    segments: typing.Tuple[_ProfileSegment, ...] = ()
    """Integrated segments ordered by depth, for compressible phases."""

    def __call__(self, depth: FloatOrArray) -> FloatOrArray:
        """
        Evaluate the phase pressure.

        :param depth: Depth(s) inside the integrated span (m).
        :return: Phase pressure(s) (Pa) - type matches input type.
        """
        is_scalar = np.isscalar(depth)
        depths = np.atleast_1d(np.asarray(depth, dtype=np.float64)).ravel()

        if self.pressure_gradient is not None:
            pressures = compute_linear_hydrostatic_pressure(
                depths, self.anchor_depth, self.anchor_pressure, self.pressure_gradient
            )
        elif not self.segments:
            pressures = np.full(depths.shape, self.anchor_pressure, dtype=np.float64)
        else:
            pressures = np.empty(depths.shape, dtype=np.float64)
            edges = np.array(
                [segment.top for segment in self.segments] + [self.segments[-1].bottom]
            )
            index = np.clip(
                np.searchsorted(edges, depths, side="right") - 1,
                0,
                len(self.segments) - 1,
            )
            for i, segment in enumerate(self.segments):
                mask = index == i
                if np.any(mask):
                    pressures[mask] = np.atleast_2d(segment.solution(depths[mask]))[0]

        return float(pressures[0]) if is_scalar else pressures


def _integrate_segment(
    region: EquilibrationRegion,
    phase: FluidPhase,
    start_depth: float,
    end_depth: float,
    start_pressure: float,
    gravity: float,
) -> _ProfileSegment:
    """Integrate a phase pressure from `start_depth` to `end_depth` with an explicit Runge-Kutta stepper."""

    def pressure_gradient(depth: float, pressure: npt.NDArray) -> npt.NDArray:
        density = region.phase_density(phase, depth, float(pressure[0]))
        if not math.isfinite(density):
            raise ComputationError(
                f"Non-finite {phase.value} density {density} at depth {depth} "
                f"and pressure {pressure[0]} in equilibration region {region.region_id}."
            )
        return np.array([density * gravity])

    result = solve_ivp(
        pressure_gradient,
        t_span=(start_depth, end_depth),
        y0=[start_pressure],
        method="RK45",
        rtol=c.HYDROSTATIC_RELATIVE_TOLERANCE,
        atol=c.HYDROSTATIC_ABSOLUTE_TOLERANCE,
        dense_output=True,
    )
    if not result.success or not np.all(np.isfinite(result.y)):
        raise ComputationError(
            f"Failed to integrate {phase.value} pressure from depth {start_depth} to "
            f"{end_depth} in equilibration region {region.region_id}: {result.message}"
        )

    logger.debug(
        f"Region {region.region_id}: integrated {phase.value} pressure over "
        f"[{start_depth}, {end_depth}] in {result.t.size - 1} steps"
    )
    return _ProfileSegment(
        top=min(start_depth, end_depth),
        bottom=max(start_depth, end_depth),
        solution=result.sol,
    )


def _breakpoints(start: float, end: float, contacts: typing.Iterable[float]) -> typing.List[float]:
    """Depths from `start` to `end` (inclusive) with the contacts strictly between them, in travel order."""
    lower, upper = min(start, end), max(start, end)
    inside = sorted(
        {depth for depth in contacts if lower < depth < upper},
        reverse=end < start,
    )
    return [start, *inside, end]


def build_phase_profile(
    region: EquilibrationRegion,
    phase: FluidPhase,
    anchor_depth: float,
    anchor_pressure: float,
    span: typing.Tuple[float, float],
    gravity: float,
) -> HydrostaticProfile:
    """
    Build the pressure profile of one phase over a depth span.

    :param region: Equilibration region.
    :param phase: Phase to build the profile for.
    :param anchor_depth: Depth where the phase pressure is known (m).
    :param anchor_pressure: Phase pressure at `anchor_depth` (Pa).
    :param span: `(top, bottom)` depths the profile must cover (m).
    :param gravity: Acceleration due to gravity (m/s²).
    :return: `HydrostaticProfile` of the phase.
    :raises ComputationError: If integration fails or produces non-finite pressures.
    """
    if not math.isfinite(anchor_pressure):
        raise ComputationError(
            f"Non-finite {phase.value} anchor pressure {anchor_pressure} "
            f"in equilibration region {region.region_id}."
        )

    if region.density.is_incompressible:
        density = region.phase_density(phase, anchor_depth, anchor_pressure)
        return HydrostaticProfile(
            phase=phase,
            anchor_depth=anchor_depth,
            anchor_pressure=anchor_pressure,
            pressure_gradient=density * gravity,
        )

    top, bottom = span
    contacts = (region.gas_oil_contact_depth, region.water_oil_contact_depth)
    segments = []
    for end in (top, bottom):
        depths = _breakpoints(anchor_depth, end, contacts)
        pressure = anchor_pressure
        for start_depth, end_depth in zip(depths[:-1], depths[1:]):
            if start_depth == end_depth:
                continue
            segment = _integrate_segment(
                region, phase, start_depth, end_depth, pressure, gravity
            )
            pressure = float(segment.solution(end_depth)[0])
            segments.append(segment)

    segments.sort(key=lambda segment: segment.top)
    return HydrostaticProfile(
        phase=phase,
        anchor_depth=anchor_depth,
        anchor_pressure=anchor_pressure,
        segments=tuple(segments),
    )


def _depth_span(
    region: EquilibrationRegion, depths: npt.NDArray
) -> typing.Tuple[float, float]:
    usage = region.phase_usage
    depths_of_interest = [region.datum_depth]
    if usage.water:
        depths_of_interest.append(region.water_oil_contact_depth)
    if usage.gas:
        depths_of_interest.append(region.gas_oil_contact_depth)
    if depths.size:
        depths_of_interest.extend((float(depths.min()), float(depths.max())))
    return min(depths_of_interest), max(depths_of_interest)


def build_phase_profiles(
    region: EquilibrationRegion,
    depths: npt.NDArray,
    gravity: typing.Optional[float] = None,
) -> typing.Dict[FluidPhase, HydrostaticProfile]:
    """
    Build pressure profiles of all active phases of a region.

    The profiles cover the datum, the contacts of the active phases and all `depths`.

    :param region: Equilibration region.
    :param depths: Cell-centre depths of the region's cells (m).
    :param gravity: Acceleration due to gravity (m/s²). Defaults to `c.ACCELERATION_DUE_TO_GRAVITY`.
    :return: Mapping of active phase to its `HydrostaticProfile`.
    :raises ConfigurationError: If the oil phase is not active.
    """
    usage = region.phase_usage
    if not usage.oil:
        raise ConfigurationError(
            "Cannot initialise: equilibration requires an active oil phase "
            "(water-gas systems are not supported)."
        )
    gravity = gravity if gravity is not None else c.ACCELERATION_DUE_TO_GRAVITY
    depths = np.asarray(depths, dtype=np.float64)
    span = _depth_span(region, depths)

    oil = build_phase_profile(
        region,
        FluidPhase.OIL,
        anchor_depth=region.datum_depth,
        anchor_pressure=region.datum_pressure,
        span=span,
        gravity=gravity,
    )
    profiles = {FluidPhase.OIL: oil}

    if usage.water:
        woc = region.water_oil_contact_depth
        profiles[FluidPhase.WATER] = build_phase_profile(
            region,
            FluidPhase.WATER,
            anchor_depth=woc,
            anchor_pressure=oil(woc) - region.record.water_oil_capillary_pressure,
            span=span,
            gravity=gravity,
        )
    if usage.gas:
        goc = region.gas_oil_contact_depth
        profiles[FluidPhase.GAS] = build_phase_profile(
            region,
            FluidPhase.GAS,
            anchor_depth=goc,
            anchor_pressure=oil(goc) + region.record.gas_oil_capillary_pressure,
            span=span,
            gravity=gravity,
        )
    return profiles


def compute_phase_pressures(
    region: EquilibrationRegion,
    depths: npt.NDArray,
    gravity: typing.Optional[float] = None,
) -> PhaseField:
    """
    Compute equilibrium phase pressures at the cell centres of a region.

    :param region: Equilibration region.
    :param depths: Cell-centre depth of every cell of the region, in cell range order (m).
    :param gravity: Acceleration due to gravity (m/s²).
    :return: Array of shape `(number of active phases, number of cells)`, rows in
        phase-usage order.
    :raises ConfigurationError: If the oil phase is not active.
    :raises ComputationError: If any pressure is not finite.
    """
    depths = np.asarray(depths, dtype=np.float64)
    profiles = build_phase_profiles(region, depths, gravity=gravity)

    usage = region.phase_usage
    pressures = np.empty((usage.num_phases, depths.size), dtype=get_dtype())
    for phase, profile in profiles.items():
        pressures[usage.position(phase)] = profile(depths)

    if not np.all(np.isfinite(pressures)):
        raise ComputationError(
            f"Non-finite phase pressures in equilibration region {region.region_id}."
        )
    return pressures
