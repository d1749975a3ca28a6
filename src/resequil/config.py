import typing

import attrs

from resequil.constants import Constants, c
from resequil.errors import ValidationError
from resequil.types import PressureFormulation

__all__ = ["Config"]


def _to_formulation(
    value: typing.Union[PressureFormulation, str],
) -> PressureFormulation:
    if isinstance(value, PressureFormulation):
        return value
    try:
        return PressureFormulation(value)
    except ValueError as exc:
        valid = ", ".join(repr(member.value) for member in PressureFormulation)
        raise ValidationError(
            f"Unknown pressure formulation {value!r}. Expected one of {valid}."
        ) from exc


@attrs.frozen
class Config:
    """Equilibration run configuration and parameters."""

    gravity: typing.Optional[float] = attrs.field(
        default=None,
        validator=attrs.validators.optional(attrs.validators.gt(0)),
    )
    """
    Acceleration due to gravity (m/s²), directed downward along increasing depth.

    None reads `ACCELERATION_DUE_TO_GRAVITY` from `constants` when the run starts.
    """
    root_finder_tolerance: float = attrs.field(
        factory=lambda: c.SATURATION_TOLERANCE,
        validator=attrs.validators.and_(
            attrs.validators.gt(0), attrs.validators.le(1e-4)
        ),
    )
    """Absolute saturation tolerance when inverting capillary pressure curves."""
    root_finder_max_iterations: int = attrs.field(
        default=100,
        validator=attrs.validators.and_(
            attrs.validators.ge(1), attrs.validators.le(500)
        ),
    )
    """
    Maximum number of bracketing iterations when inverting a capillary pressure curve.

    A bracketed solver on a monotone curve converges well within this cap. Hitting it
    means the curve is not monotone over the saturation range or contains non-finite
    values; the inversion then fails instead of returning an unconverged saturation.
    """
    saturation_closure_tolerance: float = attrs.field(
        default=1e-8, validator=attrs.validators.ge(0)
    )
    """
    Amount by which oil saturation derived by closure may fall outside [0, 1] before
    clamping it is flagged with a `SaturationClosureWarning`.
    """
    pressure_formulation: PressureFormulation = attrs.field(
        default=PressureFormulation.WETTING, converter=_to_formulation
    )
    """Which pressure is exposed as the primary pressure ('pw', 'pn', 'pglobal')."""
    max_workers: int = attrs.field(default=1, validator=attrs.validators.ge(1))
    """
    Number of worker threads used to equilibrate regions concurrently.

    Regions own disjoint cells, so each worker writes to its own slots of the output arrays.
    """
    constants: Constants = attrs.field(factory=Constants)
    """Physical and numerical constants used in the run."""
