"""Property model consumed by the equilibration engine."""

import typing

from resequil.capillary_pressures import SaturationFunctions
from resequil.errors import ValidationError
from resequil.regions import default_region_numbers
from resequil.types import DensityModel, FluidPhase, PhasePair, Range


__all__ = ["EquilibrationProperties", "uniform_properties"]


class EquilibrationProperties:
    """
    Per-cell access to saturation ranges, capillary pressures and density models.

    Cells are assigned to saturation-function regions (SATNUM-like) and PVT regions
    (PVTNUM-like) through optional zero-based integer arrays. Without an array every
    cell belongs to region 0.

    Example:
    ```python
    properties = EquilibrationProperties(
        num_cells=100,
        saturation_functions=[SaturationFunctions(oil_water=table)],
        density_models=[IncompressibleDensity(water=1030.0, oil=780.0)],
    )
    properties.saturation_range(cell=5, phase=FluidPhase.WATER)
    ```
    """

    def __init__(
        self,
        num_cells: int,
        saturation_functions: typing.Sequence[SaturationFunctions],
        density_models: typing.Sequence[DensityModel],
        saturation_region_numbers: typing.Optional[typing.Sequence[int]] = None,
        pvt_region_numbers: typing.Optional[typing.Sequence[int]] = None,
    ) -> None:
        """
        :param num_cells: Number of cells in the grid.
        :param saturation_functions: Saturation functions, one per saturation region.
        :param density_models: Density models, one per PVT region.
        :param saturation_region_numbers: Optional cell-to-saturation-region array.
        :param pvt_region_numbers: Optional cell-to-PVT-region array.
        """
        if not saturation_functions:
            raise ValidationError("At least one set of saturation functions is required.")
        if not density_models:
            raise ValidationError("At least one density model is required.")

        self.num_cells = num_cells
        self.saturation_functions = tuple(saturation_functions)
        self.density_models = tuple(density_models)
        self.saturation_region_numbers = default_region_numbers(
            num_cells, saturation_region_numbers
        )
        self.pvt_region_numbers = default_region_numbers(num_cells, pvt_region_numbers)

        if num_cells and self.saturation_region_numbers.max() >= len(
            self.saturation_functions
        ):
            raise ValidationError(
                f"Saturation region numbers reference region "
                f"{int(self.saturation_region_numbers.max())} but only "
                f"{len(self.saturation_functions)} saturation function set(s) were given."
            )
        if num_cells and self.pvt_region_numbers.max() >= len(self.density_models):
            raise ValidationError(
                f"PVT region numbers reference region {int(self.pvt_region_numbers.max())} "
                f"but only {len(self.density_models)} density model(s) were given."
            )

    def saturation_functions_of(self, cell: int) -> SaturationFunctions:
        return self.saturation_functions[self.saturation_region_numbers[cell]]

    def saturation_range(self, cell: int, phase: FluidPhase) -> Range:
        """
        Irreducible saturation bounds of a phase in a cell.

        :param cell: Global cell index.
        :param phase: Fluid phase.
        :return: `Range` with `min` and `max` saturation.
        """
        return self.saturation_functions_of(cell).saturation_range(phase)

    def capillary_pressure(self, pair: PhasePair, saturation: float, cell: int) -> float:
        """
        Capillary pressure of a phase pair in a cell.

        :param pair: Phase pair.
        :param saturation: Water saturation for oil-water, gas saturation for gas-oil.
        :param cell: Global cell index.
        :return: Capillary pressure (Pa).
        """
        return self.saturation_functions_of(cell).capillary_pressure(pair, saturation)

    def capillary_pressure_function(
        self, pair: PhasePair, cell: int
    ) -> typing.Callable[[float], float]:
        """Capillary pressure of a phase pair in a cell as a function of saturation only."""
        functions = self.saturation_functions_of(cell)

        def capillary_pressure(saturation: float) -> float:
            return functions.capillary_pressure(pair, saturation)

        return capillary_pressure

    def density_model(self, cell: int) -> DensityModel:
        """Density model of the PVT region the cell belongs to."""
        return self.density_models[self.pvt_region_numbers[cell]]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(num_cells={self.num_cells}, "
            f"saturation_regions={len(self.saturation_functions)}, "
            f"pvt_regions={len(self.density_models)})"
        )


def uniform_properties(
    num_cells: int,
    saturation_functions: SaturationFunctions,
    density_model: DensityModel,
) -> EquilibrationProperties:
    """Properties with a single saturation region and a single PVT region."""
    return EquilibrationProperties(
        num_cells=num_cells,
        saturation_functions=[saturation_functions],
        density_models=[density_model],
    )

