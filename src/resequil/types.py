import enum
import typing

import attrs
import numpy as np
import numpy.typing as npt
from typing_extensions import TypeAlias

from resequil.errors import ValidationError


__all__ = [
    "FluidPhase",
    "PhasePair",
    "PressureFormulation",
    "FloatOrArray",
    "CellRange",
    "PhaseField",
    "Range",
    "CapillaryPressureCurve",
    "DensityModel",
    "MiscibilityPolicy",
]

Numeric = typing.Union[int, float, np.floating, np.integer]
FloatOrArray = typing.Union[float, npt.NDArray[np.floating]]

CellRange: TypeAlias = npt.NDArray[np.intp]
"""Ordered, restartable sequence of cell indices belonging to one equilibration region."""
PhaseField: TypeAlias = npt.NDArray[np.floating]
"""Per-phase, per-cell values laid out as `(number of active phases, number of cells)`."""


class FluidPhase(enum.Enum):
    """Enum representing the phase of the fluid in the reservoir."""

    WATER = "water"
    """Aqueous phase (Aqua)."""
    OIL = "oil"
    """Liquid hydrocarbon phase (Liquid)."""
    GAS = "gas"
    """Vapour hydrocarbon phase (Vapour)."""


class PhasePair(enum.Enum):
    """
    Phase pairs that carry a capillary pressure relation.

    - `OIL_WATER`: Pcow = Po - Pw, a function of water saturation.
    - `GAS_OIL`: Pcgo = Pg - Po, a function of gas saturation.
    """

    OIL_WATER = "oil_water"
    GAS_OIL = "gas_oil"


class PressureFormulation(enum.Enum):
    """
    Which pressure seeds the primary pressure unknown of the flow simulator.

    - "pw": wetting phase pressure
    - "pn": non-wetting phase pressure
    - "pglobal": saturation-weighted global pressure
    """

    WETTING = "pw"
    NONWETTING = "pn"
    GLOBAL = "pglobal"


@attrs.frozen(slots=True)
class Range:
    """
    Class representing minimum and maximum values.
    """

    min: float
    """Minimum value."""
    max: float
    """Maximum value."""

    def __attrs_post_init__(self) -> None:
        if self.min > self.max:
            raise ValidationError("Minimum value cannot be greater than maximum value.")

    def __iter__(self) -> typing.Iterator[float]:
        yield self.min
        yield self.max


class CapillaryPressureCurve(typing.Protocol):
    """
    Protocol for a two-phase capillary pressure curve of a single saturation argument.
    """

    @property
    def saturation_range(self) -> Range:
        """Physical (irreducible) saturation range over which the curve is defined."""
        ...

    def __call__(self, saturation: FloatOrArray) -> FloatOrArray:
        """
        Evaluate capillary pressure at the given saturation(s).

        :param saturation: Saturation of the curve's saturation phase.
        :return: Capillary pressure (Pa).
        """
        ...


class DensityModel(typing.Protocol):
    """
    Protocol for a phase density evaluator bound to one PVT region.
    """

    @property
    def is_incompressible(self) -> bool:
        """Whether densities are independent of pressure and mixing ratios."""
        ...

    def density(
        self, phase: FluidPhase, pressure: float, mixing_ratio: float = 0.0
    ) -> float:
        """
        Evaluate the phase density.

        :param phase: Fluid phase.
        :param pressure: Phase pressure (Pa).
        :param mixing_ratio: Dissolved gas-oil ratio for oil, vaporised oil-gas ratio
            for gas (sm³/sm³). Ignored for water.
        :return: Phase density (kg/m³).
        """
        ...


class MiscibilityPolicy(typing.Protocol):
    """
    Protocol for a mixing policy giving a dissolved/vaporised ratio at a depth and pressure.
    """

    def __call__(self, depth: float, pressure: float) -> float: ...
