import numba
import numpy as np
import numpy.typing as npt


__all__ = [
    "clip_scalar",
    "compute_linear_hydrostatic_pressure",
    "scatter_phase_field",
]


@numba.njit(cache=True)
def clip_scalar(value: float, min_val: float, max_val: float) -> float:
    if value < min_val:
        return min_val
    elif value > max_val:
        return max_val
    return value


@numba.njit(cache=True)
def compute_linear_hydrostatic_pressure(
    depths: npt.NDArray,
    reference_depth: float,
    reference_pressure: float,
    pressure_gradient: float,
) -> npt.NDArray:
    """
    Hydrostatic pressure of a constant-density column, p(z) = p0 + (ρ·g)·(z - z0).

    :param depths: Depths to evaluate at (m).
    :param reference_depth: Depth z0 where the pressure is known (m).
    :param reference_pressure: Pressure p0 at the reference depth (Pa).
    :param pressure_gradient: ρ·g (Pa/m).
    :return: Pressures at `depths` (Pa).
    """
    pressures = np.empty(depths.shape[0], dtype=np.float64)
    for i in range(depths.shape[0]):
        pressures[i] = reference_pressure + pressure_gradient * (
            depths[i] - reference_depth
        )
    return pressures


@numba.njit(cache=True)
def scatter_phase_field(
    target: npt.NDArray, local: npt.NDArray, cells: npt.NDArray
) -> None:
    """
    Write a region-local per-phase field into whole-grid storage (in-place).

    :param target: 2D array `(phases, grid cells)` to modify.
    :param local: 2D array `(phases, region cells)` of values to write.
    :param cells: Global cell index of each region-local column.
    """
    num_phases, num_local = local.shape
    for p in range(num_phases):
        for j in range(num_local):
            target[p, cells[j]] = local[p, j]
