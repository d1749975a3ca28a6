"""Primary pressure of the different pressure formulations."""

import typing

import numpy as np
import numpy.typing as npt

from resequil.config import _to_formulation
from resequil.phases import PhaseUsage
from resequil.types import FluidPhase, PhaseField, PressureFormulation


__all__ = ["compute_primary_pressure", "PRIMARY_PRESSURE_FUNCTIONS"]

PrimaryPressureFunc = typing.Callable[
    [PhaseField, PhaseField, PhaseUsage], npt.NDArray
]


def _wetting_phase_pressure(
    pressures: PhaseField, saturations: PhaseField, phase_usage: PhaseUsage
) -> npt.NDArray:
    phase = FluidPhase.WATER if phase_usage.water else FluidPhase.OIL
    return pressures[phase_usage.position(phase)].copy()


def _nonwetting_phase_pressure(
    pressures: PhaseField, saturations: PhaseField, phase_usage: PhaseUsage
) -> npt.NDArray:
    phase = FluidPhase.GAS if phase_usage.gas else FluidPhase.OIL
    return pressures[phase_usage.position(phase)].copy()


def _global_pressure(
    pressures: PhaseField, saturations: PhaseField, phase_usage: PhaseUsage
) -> npt.NDArray:
    # Saturations close to one, so the weighted sum is the weighted mean
    return np.sum(saturations * pressures, axis=0)


PRIMARY_PRESSURE_FUNCTIONS: typing.Dict[PressureFormulation, PrimaryPressureFunc] = {
    PressureFormulation.WETTING: _wetting_phase_pressure,
    PressureFormulation.NONWETTING: _nonwetting_phase_pressure,
    PressureFormulation.GLOBAL: _global_pressure,
}
"""Primary pressure function of each pressure formulation."""


def compute_primary_pressure(
    formulation: typing.Union[PressureFormulation, str],
    pressures: PhaseField,
    saturations: PhaseField,
    phase_usage: PhaseUsage,
) -> npt.NDArray:
    """
    Compute the pressure a simulator uses as its primary unknown.

    - 'pw': wetting phase pressure, water if active, otherwise oil.
    - 'pn': non-wetting phase pressure, gas if active, otherwise oil.
    - 'pglobal': saturation-weighted mean of the phase pressures, Σ Sα·Pα.

    :param formulation: Pressure formulation.
    :param pressures: Phase pressures, shape `(number of active phases, number of cells)`.
    :param saturations: Phase saturations, same shape as `pressures`.
    :param phase_usage: Active phases.
    :return: Primary pressure of every cell (Pa).
    :raises ValidationError: If the formulation is unknown.
    """
    formulation = _to_formulation(formulation)
    return PRIMARY_PRESSURE_FUNCTIONS[formulation](
        np.asarray(pressures), np.asarray(saturations), phase_usage
    )
