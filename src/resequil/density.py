"""Phase density models used to integrate the hydrostatic pressure equation."""

import typing

import attrs
import numpy as np
import numpy.typing as npt

from resequil.errors import ValidationError
from resequil.types import FluidPhase


__all__ = [
    "IncompressibleDensity",
    "CompressibleDensity",
    "FormationVolumeFactorTable",
    "BlackOilDensity",
]


def _unknown_phase(phase: typing.Any) -> ValidationError:
    return ValidationError(f"Unknown fluid phase {phase!r}.")


@attrs.frozen(slots=True)
class IncompressibleDensity:
    """
    Constant phase densities.

    Pressure and mixing ratios are ignored, so the hydrostatic pressure of each
    phase is a linear function of depth.
    """

    water: float = 1000.0
    """Water density (kg/m³)."""
    oil: float = 800.0
    """Oil density (kg/m³)."""
    gas: float = 100.0
    """Gas density (kg/m³)."""

    is_incompressible: typing.ClassVar[bool] = True

    def __attrs_post_init__(self) -> None:
        for phase in FluidPhase:
            if not getattr(self, phase.value) > 0:
                raise ValidationError(f"{phase.value.title()} density must be positive.")

    def density(
        self, phase: FluidPhase, pressure: float = 0.0, mixing_ratio: float = 0.0
    ) -> float:
        if not isinstance(phase, FluidPhase):
            raise _unknown_phase(phase)
        return getattr(self, phase.value)


@attrs.frozen(slots=True)
class CompressibleDensity:
    """
    Slightly compressible phase densities.

    ρ(p) = ρ_ref * exp(c * (p - p_ref))

    where c is the isothermal compressibility of the phase. Mixing ratios are ignored.
    """

    reference_densities: typing.Mapping[FluidPhase, float]
    """Phase densities at the reference pressure (kg/m³)."""
    compressibilities: typing.Mapping[FluidPhase, float]
    """Isothermal phase compressibilities (1/Pa)."""
    reference_pressure: float = 101325.0
    """Pressure at which the reference densities apply (Pa)."""

    is_incompressible: typing.ClassVar[bool] = False

    def __attrs_post_init__(self) -> None:
        for phase, density in self.reference_densities.items():
            if not isinstance(phase, FluidPhase):
                raise _unknown_phase(phase)
            if density <= 0:
                raise ValidationError(
                    f"Reference density of {phase.value} must be positive."
                )
        for phase, compressibility in self.compressibilities.items():
            if not isinstance(phase, FluidPhase):
                raise _unknown_phase(phase)
            if compressibility < 0:
                raise ValidationError(
                    f"Compressibility of {phase.value} must be non-negative."
                )

    def density(
        self, phase: FluidPhase, pressure: float, mixing_ratio: float = 0.0
    ) -> float:
        try:
            reference_density = self.reference_densities[phase]
        except KeyError:
            raise _unknown_phase(phase) from None
        compressibility = self.compressibilities.get(phase, 0.0)
        return float(
            reference_density
            * np.exp(compressibility * (pressure - self.reference_pressure))
        )


@attrs.frozen
class FormationVolumeFactorTable:
    """
    Formation volume factor lookup table.

    Uses `np.interp` for linear interpolation, with constant extrapolation
    beyond the tabulated pressures.
    """

    pressure: npt.NDArray[np.floating] = attrs.field(converter=np.asarray)
    """Pressures (Pa), strictly increasing."""
    formation_volume_factor: npt.NDArray[np.floating] = attrs.field(
        converter=np.asarray
    )
    """Reservoir volume per surface volume (rm³/sm³) at each pressure."""

    def __attrs_post_init__(self) -> None:
        if len(self.pressure) != len(self.formation_volume_factor):
            raise ValidationError(
                f"Pressure and formation volume factor arrays must have same length. "
                f"Got {len(self.pressure)} vs {len(self.formation_volume_factor)}"
            )
        if len(self.pressure) < 1:
            raise ValidationError("At least 1 point required for interpolation")
        if not np.all(np.diff(self.pressure) > 0):
            raise ValidationError("Table pressures must be strictly increasing")
        if np.any(self.formation_volume_factor <= 0):
            raise ValidationError("Formation volume factors must be positive")

    def __call__(self, pressure: float) -> float:
        return float(
            np.interp(
                x=pressure,
                xp=self.pressure,  # type: ignore[arg-type]
                fp=self.formation_volume_factor,  # type: ignore[arg-type]
            )
        )


@attrs.frozen
class BlackOilDensity:
    """
    Black-oil phase densities from surface densities and formation volume factors.

    - ρw = ρw,sc / Bw(p)
    - ρo = (ρo,sc + Rs * ρg,sc) / Bo(p)
    - ρg = (ρg,sc + Rv * ρo,sc) / Bg(p)

    Rs (dissolved gas-oil ratio) and Rv (vaporised oil-gas ratio) are supplied by
    the region's mixing policies through `mixing_ratio`.
    """

    surface_densities: typing.Mapping[FluidPhase, float]
    """Phase densities at surface conditions (kg/m³)."""
    formation_volume_factors: typing.Mapping[FluidPhase, FormationVolumeFactorTable]
    """Formation volume factor table of each phase."""

    is_incompressible: typing.ClassVar[bool] = False

    def __attrs_post_init__(self) -> None:
        for phase in self.formation_volume_factors:
            if not isinstance(phase, FluidPhase):
                raise _unknown_phase(phase)
            if phase not in self.surface_densities:
                raise ValidationError(
                    f"Missing surface density for phase '{phase.value}'."
                )

    def density(
        self, phase: FluidPhase, pressure: float, mixing_ratio: float = 0.0
    ) -> float:
        try:
            table = self.formation_volume_factors[phase]
        except KeyError:
            raise _unknown_phase(phase) from None

        surface_mass = self.surface_densities[phase]
        if phase is FluidPhase.OIL and mixing_ratio:
            surface_mass += mixing_ratio * self.surface_densities[FluidPhase.GAS]
        elif phase is FluidPhase.GAS and mixing_ratio:
            surface_mass += mixing_ratio * self.surface_densities[FluidPhase.OIL]
        return surface_mass / table(pressure)
