"""Inversion of monotone capillary pressure curves."""

import logging
import math
import typing

from scipy.optimize import brentq

from resequil.constants import c
from resequil.errors import ComputationError, ConvergenceError, ValidationError


logger = logging.getLogger(__name__)

__all__ = [
    "saturation_from_capillary_pressure",
    "saturation_from_sum_of_capillary_pressures",
]

CapillaryPressureFunc = typing.Callable[[float], float]

DEFAULT_MAX_ITERATIONS = 100


def _check_finite(value: float, what: str) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ComputationError(f"Non-finite {what}: {value}.")
    return value


def _solve_bracketed(
    residual: CapillaryPressureFunc,
    s0: float,
    s1: float,
    tolerance: float,
    max_iterations: int,
) -> float:
    """
    Find the root of a residual that is positive at `s0` and non-positive at `s1`.

    Uses Brent's method, which keeps the root bracketed and so converges on curves
    that are flat near the end points, where derivative-based iteration stalls.
    """
    lower, upper = min(s0, s1), max(s0, s1)
    root, result = brentq(
        residual,
        a=lower,
        b=upper,
        xtol=tolerance,
        maxiter=max_iterations,
        full_output=True,
        disp=False,
    )
    if not result.converged:
        raise ConvergenceError(
            f"Capillary pressure inversion did not converge within {max_iterations} "
            f"iterations on [{lower}, {upper}] (last iterate {root}, flag '{result.flag}')."
        )
    logger.debug(
        f"Capillary pressure inversion converged in {result.iterations} iterations"
    )
    return float(root)


def saturation_from_capillary_pressure(
    capillary_pressure: CapillaryPressureFunc,
    target_capillary_pressure: float,
    minimum_saturation: float,
    maximum_saturation: float,
    increasing: bool = False,
    tolerance: typing.Optional[float] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> float:
    """
    Find the saturation at which a monotone capillary pressure curve takes a target value.

    The curve must be monotone over `[minimum_saturation, maximum_saturation]`, either
    decreasing (the default, e.g. Pcow against water saturation) or increasing (e.g.
    Pcgo against gas saturation). Passing the wrong orientation gives silently wrong
    results.

    Targets beyond the curve's range clamp to the nearest saturation bound:

    - decreasing: target >= Pc(Smin) returns Smin, target < Pc(Smax) returns Smax.
    - increasing: target >= Pc(Smax) returns Smax, target < Pc(Smin) returns Smin.

    :param capillary_pressure: Capillary pressure as a function of saturation (Pa).
    :param target_capillary_pressure: Capillary pressure to match (Pa).
    :param minimum_saturation: Irreducible lower saturation bound.
    :param maximum_saturation: Upper saturation bound.
    :param increasing: Whether the curve increases with saturation.
    :param tolerance: Absolute saturation tolerance. Defaults to `c.SATURATION_TOLERANCE`.
    :param max_iterations: Iteration cap of the bracketed solver.
    :return: Saturation within `[minimum_saturation, maximum_saturation]`.
    :raises ValidationError: If the saturation bounds are inverted.
    :raises ComputationError: If the target or the curve is not finite at the bounds.
    :raises ConvergenceError: If the solver exceeds `max_iterations`.
    """
    if minimum_saturation > maximum_saturation:
        raise ValidationError(
            f"Invalid saturation range [{minimum_saturation}, {maximum_saturation}]."
        )
    target = _check_finite(target_capillary_pressure, "target capillary pressure")
    tolerance = tolerance if tolerance is not None else c.SATURATION_TOLERANCE

    s0 = maximum_saturation if increasing else minimum_saturation
    s1 = minimum_saturation if increasing else maximum_saturation

    def residual(saturation: float) -> float:
        return float(capillary_pressure(saturation)) - target

    f0 = _check_finite(residual(s0), f"capillary pressure at saturation {s0}")
    if f0 <= 0.0:
        return s0
    f1 = _check_finite(residual(s1), f"capillary pressure at saturation {s1}")
    if f1 > 0.0:
        return s1
    return _solve_bracketed(residual, s0, s1, tolerance, max_iterations)


def saturation_from_sum_of_capillary_pressures(
    oil_water_capillary_pressure: CapillaryPressureFunc,
    gas_oil_capillary_pressure: CapillaryPressureFunc,
    target_capillary_pressure: float,
    minimum_saturation: float,
    maximum_saturation: float,
    tolerance: typing.Optional[float] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> float:
    """
    Find the water saturation matching a gas-water capillary pressure.

    Used where gas-oil and oil-water transition zones overlap and oil is absent. With
    Sg = 1 - Sw, the gas-water capillary pressure is

        Pcgw(Sw) = Pcow(Sw) + Pcgo(1 - Sw)

    which decreases with water saturation. Targets beyond its range clamp to the
    water saturation bounds, as in `saturation_from_capillary_pressure`.

    :param oil_water_capillary_pressure: Pcow as a function of water saturation (Pa).
    :param gas_oil_capillary_pressure: Pcgo as a function of gas saturation (Pa).
    :param target_capillary_pressure: Gas-water pressure difference Pg - Pw to match (Pa).
    :param minimum_saturation: Lower water saturation bound.
    :param maximum_saturation: Upper water saturation bound.
    :param tolerance: Absolute saturation tolerance. Defaults to `c.SATURATION_TOLERANCE`.
    :param max_iterations: Iteration cap of the bracketed solver.
    :return: Water saturation within `[minimum_saturation, maximum_saturation]`.
    """

    def gas_water_capillary_pressure(water_saturation: float) -> float:
        return float(oil_water_capillary_pressure(water_saturation)) + float(
            gas_oil_capillary_pressure(1.0 - water_saturation)
        )

    return saturation_from_capillary_pressure(
        gas_water_capillary_pressure,
        target_capillary_pressure=target_capillary_pressure,
        minimum_saturation=minimum_saturation,
        maximum_saturation=maximum_saturation,
        increasing=False,
        tolerance=tolerance,
        max_iterations=max_iterations,
    )
