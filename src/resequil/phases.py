"""Active phase bookkeeping."""

import typing

import attrs

from resequil.errors import ValidationError
from resequil.types import FluidPhase


__all__ = ["PhaseUsage", "CANONICAL_PHASE_ORDER"]

CANONICAL_PHASE_ORDER: typing.Tuple[FluidPhase, ...] = (
    FluidPhase.WATER,
    FluidPhase.OIL,
    FluidPhase.GAS,
)
"""Order in which active phases are packed into per-phase arrays."""


@attrs.frozen(slots=True)
class PhaseUsage:
    """
    Which fluid phases are active and where each active phase is stored.

    Active phases are packed in the order water, oil, gas, so a water-oil run
    stores water at position 0 and oil at position 1, while a gas-oil run stores
    oil at position 0 and gas at position 1.

    A single instance is shared by every equilibration region of a run.
    """

    water: bool = True
    """Whether the aqueous (Aqua) phase is active."""
    oil: bool = True
    """Whether the liquid (Liquid) phase is active."""
    gas: bool = True
    """Whether the vapour (Vapour) phase is active."""

    def __attrs_post_init__(self) -> None:
        if not (self.water or self.oil or self.gas):
            raise ValidationError("At least one fluid phase must be active.")

    @classmethod
    def from_phases(
        cls, phases: typing.Iterable[typing.Union[FluidPhase, str]]
    ) -> "PhaseUsage":
        """
        Build a `PhaseUsage` from the names of the active phases.

        :param phases: Active phases, as `FluidPhase` members or their string values.
        :return: `PhaseUsage` with exactly those phases active.
        """
        active = set()
        for phase in phases:
            try:
                active.add(FluidPhase(phase))
            except ValueError as exc:
                raise ValidationError(f"Unknown fluid phase {phase!r}.") from exc
        return cls(
            water=FluidPhase.WATER in active,
            oil=FluidPhase.OIL in active,
            gas=FluidPhase.GAS in active,
        )

    def is_active(self, phase: FluidPhase) -> bool:
        if phase is FluidPhase.WATER:
            return self.water
        if phase is FluidPhase.OIL:
            return self.oil
        if phase is FluidPhase.GAS:
            return self.gas
        raise ValidationError(f"Unknown fluid phase {phase!r}.")

    @property
    def active_phases(self) -> typing.Tuple[FluidPhase, ...]:
        """Active phases in storage order."""
        return tuple(
            phase for phase in CANONICAL_PHASE_ORDER if self.is_active(phase)
        )

    @property
    def num_phases(self) -> int:
        return len(self.active_phases)

    def position(self, phase: FluidPhase) -> int:
        """
        Compact storage position of an active phase.

        :param phase: Fluid phase.
        :return: Index of the phase in per-phase arrays.
        :raises ValidationError: If the phase is not active.
        """
        if not self.is_active(phase):
            raise ValidationError(f"Phase '{phase.value}' is not active.")
        return self.active_phases.index(phase)
