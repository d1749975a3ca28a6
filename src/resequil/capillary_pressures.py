"""Capillary pressure curves and per-region saturation functions."""

import typing

import attrs
import numba
import numpy as np
import numpy.typing as npt

from resequil.constants import c
from resequil.errors import ValidationError
from resequil.types import (
    CapillaryPressureCurve,
    FloatOrArray,
    FluidPhase,
    PhasePair,
    Range,
)


__all__ = [
    "TwoPhaseCapillaryPressureTable",
    "BrooksCoreyCapillaryPressureModel",
    "SaturationFunctions",
    "compute_brooks_corey_capillary_pressure",
]


@attrs.frozen
class TwoPhaseCapillaryPressureTable:
    """
    Two-phase capillary pressure lookup table.

    Interpolates capillary pressure of one phase pair against the saturation of the
    pair's saturation phase: water saturation for oil-water (Pcow = Po - Pw) and gas
    saturation for gas-oil (Pcgo = Pg - Po). Uses `np.interp` for fast vectorized
    interpolation, holding the end values constant outside the table.

    The first and last tabulated saturations are the irreducible saturation bounds.
    """

    pair: PhasePair
    """Phase pair the table describes."""
    saturation: npt.NDArray[np.floating] = attrs.field(converter=np.asarray)
    """Saturation of the pair's saturation phase, ranging from 0 to 1."""
    capillary_pressure: npt.NDArray[np.floating] = attrs.field(converter=np.asarray)
    """Capillary pressure values (Pa) corresponding to the saturations."""

    def __attrs_post_init__(self) -> None:
        if len(self.saturation) != len(self.capillary_pressure):
            raise ValidationError(
                f"Saturation and pressure arrays must have same length. "
                f"Got {len(self.saturation)} vs {len(self.capillary_pressure)}"
            )
        if len(self.saturation) < 2:
            raise ValidationError("At least 2 points required for interpolation")
        if np.any((self.saturation < 0) | (self.saturation > 1)):
            raise ValidationError("Table saturations must be within [0, 1]")
        if not np.all(np.diff(self.saturation) > 0):
            raise ValidationError("Table saturations must be strictly increasing")
        if not np.all(np.isfinite(self.capillary_pressure)):
            raise ValidationError("Table capillary pressures must be finite")

    @property
    def saturation_phase(self) -> FluidPhase:
        """Phase whose saturation the table is tabulated against."""
        if self.pair is PhasePair.OIL_WATER:
            return FluidPhase.WATER
        return FluidPhase.GAS

    @property
    def saturation_range(self) -> Range:
        return Range(min=float(self.saturation[0]), max=float(self.saturation[-1]))

    def get_capillary_pressure(self, saturation: FloatOrArray) -> FloatOrArray:
        """
        Get capillary pressure at given saturation(s).

        :param saturation: Saturation of the pair's saturation phase (scalar or array).
        :return: Capillary pressure value(s) - type matches input type.
        """
        is_scalar = np.isscalar(saturation)
        values = np.atleast_1d(saturation)
        original_shape = values.shape

        capillary_pressure = np.interp(
            x=values.ravel(order="C"),
            xp=self.saturation,  # type: ignore[arg-type]
            fp=self.capillary_pressure,  # type: ignore[arg-type]
            left=self.capillary_pressure[0],
            right=self.capillary_pressure[-1],
        ).reshape(original_shape)
        return float(capillary_pressure[0]) if is_scalar else capillary_pressure

    def __call__(self, saturation: FloatOrArray) -> FloatOrArray:
        return self.get_capillary_pressure(saturation)


@numba.vectorize(cache=True)
def compute_brooks_corey_capillary_pressure(
    effective_saturation, entry_pressure, pore_size_distribution_index
):
    """
    Brooks-Corey capillary pressure Pc = Pd * Se^(-1/λ).

    :param effective_saturation: Normalised wetting phase saturation, already kept away from 0.
    :param entry_pressure: Displacement/entry pressure Pd (Pa).
    :param pore_size_distribution_index: Pore size distribution index λ.
    """
    return entry_pressure * effective_saturation ** (-1.0 / pore_size_distribution_index)


@attrs.frozen
class BrooksCoreyCapillaryPressureModel:
    """
    Brooks-Corey capillary pressure curve for one phase pair.

    Pc = Pd * Se^(-1/λ), where Se is the normalised saturation of the wetting phase:

    - oil-water (water-wet): Se = (Sw - Sw,min) / (Sw,max - Sw,min), so Pcow decreases with Sw.
    - gas-oil (oil-wet): Se = (Sg,max - Sg) / (Sg,max - Sg,min), so Pcgo increases with Sg.

    Se is kept at or above `c.SATURATION_EPSILON` so the curve stays finite at the
    irreducible end point.
    """

    pair: PhasePair
    """Phase pair the curve describes."""
    entry_pressure: float = attrs.field(validator=attrs.validators.ge(0))
    """Displacement/entry pressure Pd (Pa)."""
    pore_size_distribution_index: float = attrs.field(
        default=2.0, validator=attrs.validators.gt(0)
    )
    """Pore size distribution index λ."""
    minimum_saturation: float = attrs.field(
        default=0.0,
        validator=attrs.validators.and_(attrs.validators.ge(0), attrs.validators.le(1)),
    )
    """Irreducible saturation of the pair's saturation phase."""
    maximum_saturation: float = attrs.field(
        default=1.0,
        validator=attrs.validators.and_(attrs.validators.ge(0), attrs.validators.le(1)),
    )
    """Maximum saturation of the pair's saturation phase."""

    def __attrs_post_init__(self) -> None:
        if self.minimum_saturation >= self.maximum_saturation:
            raise ValidationError(
                "Minimum saturation must be smaller than maximum saturation."
            )

    @property
    def saturation_range(self) -> Range:
        return Range(min=self.minimum_saturation, max=self.maximum_saturation)

    def get_capillary_pressure(self, saturation: FloatOrArray) -> FloatOrArray:
        """
        Get capillary pressure at given saturation(s).

        :param saturation: Water saturation for oil-water, gas saturation for gas-oil.
        :return: Capillary pressure value(s) (Pa) - type matches input type.
        """
        is_scalar = np.isscalar(saturation)
        values = np.clip(
            np.atleast_1d(np.asarray(saturation, dtype=np.float64)),
            self.minimum_saturation,
            self.maximum_saturation,
        )
        mobile_range = self.maximum_saturation - self.minimum_saturation
        if self.pair is PhasePair.OIL_WATER:
            effective_saturation = (values - self.minimum_saturation) / mobile_range
        else:
            effective_saturation = (self.maximum_saturation - values) / mobile_range
        effective_saturation = np.maximum(effective_saturation, c.SATURATION_EPSILON)

        capillary_pressure = compute_brooks_corey_capillary_pressure(
            effective_saturation,
            float(self.entry_pressure),
            float(self.pore_size_distribution_index),
        )
        return float(capillary_pressure[0]) if is_scalar else capillary_pressure

    def __call__(self, saturation: FloatOrArray) -> FloatOrArray:
        return self.get_capillary_pressure(saturation)


def _validate_curve_pair(
    curve: typing.Optional[CapillaryPressureCurve], expected: PhasePair, name: str
) -> None:
    if curve is None:
        return
    pair = getattr(curve, "pair", expected)
    if pair is not expected:
        raise ValidationError(f"`{name}` must describe the {expected.value} pair.")


@attrs.frozen
class SaturationFunctions:
    """
    Capillary pressure curves of one saturation-function region.

    Holds the oil-water curve (against water saturation) and the gas-oil curve
    (against gas saturation). A missing curve means the pair has no capillary
    pressure; its saturation phase then spans [0, 1].
    """

    oil_water: typing.Optional[CapillaryPressureCurve] = None
    """Oil-water capillary pressure curve, Pcow(Sw)."""
    gas_oil: typing.Optional[CapillaryPressureCurve] = None
    """Gas-oil capillary pressure curve, Pcgo(Sg)."""

    def __attrs_post_init__(self) -> None:
        _validate_curve_pair(self.oil_water, PhasePair.OIL_WATER, "oil_water")
        _validate_curve_pair(self.gas_oil, PhasePair.GAS_OIL, "gas_oil")

    def curve(self, pair: PhasePair) -> typing.Optional[CapillaryPressureCurve]:
        if pair is PhasePair.OIL_WATER:
            return self.oil_water
        if pair is PhasePair.GAS_OIL:
            return self.gas_oil
        raise ValidationError(f"Unknown phase pair {pair!r}.")

    def capillary_pressure(self, pair: PhasePair, saturation: float) -> float:
        """
        Evaluate the capillary pressure of a phase pair.

        :param pair: Phase pair.
        :param saturation: Water saturation for oil-water, gas saturation for gas-oil.
        :return: Capillary pressure (Pa), zero if the pair has no curve.
        """
        curve = self.curve(pair)
        if curve is None:
            return 0.0
        return float(curve(saturation))  # type: ignore[arg-type]

    def saturation_range(self, phase: FluidPhase) -> Range:
        """
        Irreducible saturation bounds of a phase.

        Water and gas bounds come from the end points of their curves. Oil bounds
        follow from the other two: So,max = 1 - Sw,min - Sg,min and
        So,min = max(0, 1 - Sw,max - Sg,max).
        """
        if phase is FluidPhase.WATER:
            return self._curve_range(self.oil_water)
        if phase is FluidPhase.GAS:
            return self._curve_range(self.gas_oil)
        if phase is FluidPhase.OIL:
            water = self._curve_range(self.oil_water)
            gas = self._curve_range(self.gas_oil)
            maximum = max(0.0, 1.0 - water.min - gas.min)
            minimum = min(maximum, max(0.0, 1.0 - water.max - gas.max))
            return Range(min=minimum, max=maximum)
        raise ValidationError(f"Unknown fluid phase {phase!r}.")

    @staticmethod
    def _curve_range(curve: typing.Optional[CapillaryPressureCurve]) -> Range:
        if curve is None:
            return Range(min=0.0, max=1.0)
        return curve.saturation_range
