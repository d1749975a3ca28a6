"""Mixing policies giving dissolved gas (Rs) and vaporised oil (Rv) ratios during equilibration."""

import typing

import attrs
import numpy as np
import numpy.typing as npt

from resequil.errors import ValidationError


__all__ = ["NoMixing", "DepthTabulatedRatio", "SaturatedRatioTable"]


@attrs.frozen(slots=True)
class NoMixing:
    """Immiscible phases: the mixing ratio is zero at every depth and pressure."""

    def __call__(self, depth: float, pressure: float) -> float:
        return 0.0


@attrs.frozen
class SaturatedRatioTable:
    """
    Saturated mixing ratio as a function of pressure, e.g. Rs at the bubble point.

    As a mixing policy the fluid is saturated at every depth. Uses `np.interp` with
    constant extrapolation.
    """

    pressure: npt.NDArray[np.floating] = attrs.field(converter=np.asarray)
    """Pressures (Pa), strictly increasing."""
    ratio: npt.NDArray[np.floating] = attrs.field(converter=np.asarray)
    """Saturated ratio at each pressure (sm³/sm³)."""

    def __attrs_post_init__(self) -> None:
        if len(self.pressure) != len(self.ratio) or len(self.pressure) < 1:
            raise ValidationError(
                "Saturated ratio table needs matching, non-empty pressure and ratio arrays."
            )
        if not np.all(np.diff(self.pressure) > 0):
            raise ValidationError("Table pressures must be strictly increasing")

    def ratio_at(self, pressure: float) -> float:
        """Saturated ratio at a pressure (Pa)."""
        return float(
            np.interp(x=pressure, xp=self.pressure, fp=self.ratio)  # type: ignore[arg-type]
        )

    def __call__(self, depth: float, pressure: float) -> float:
        return self.ratio_at(pressure)


@attrs.frozen
class DepthTabulatedRatio:
    """
    Mixing ratio tabulated against depth (RSVD/RVVD style), optionally capped at saturation.

    The ratio at a depth is interpolated linearly from the table and, if a
    saturated ratio table is given, limited to the saturated value at the
    local phase pressure.
    """

    depth: npt.NDArray[np.floating] = attrs.field(converter=np.asarray)
    """Depths (m), strictly increasing."""
    ratio: npt.NDArray[np.floating] = attrs.field(converter=np.asarray)
    """Ratio at each depth (sm³/sm³)."""
    saturated: typing.Optional[SaturatedRatioTable] = None
    """Optional pressure-dependent upper bound on the ratio."""

    def __attrs_post_init__(self) -> None:
        if len(self.depth) != len(self.ratio) or len(self.depth) < 1:
            raise ValidationError(
                "Depth table needs matching, non-empty depth and ratio arrays."
            )
        if not np.all(np.diff(self.depth) > 0):
            raise ValidationError("Table depths must be strictly increasing")
        if np.any(self.ratio < 0):
            raise ValidationError("Mixing ratios must be non-negative")

    def __call__(self, depth: float, pressure: float) -> float:
        ratio = float(
            np.interp(x=depth, xp=self.depth, fp=self.ratio)  # type: ignore[arg-type]
        )
        if self.saturated is not None:
            ratio = min(ratio, self.saturated.ratio_at(pressure))
        return ratio
