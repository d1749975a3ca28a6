__all__ = [
    "EquilibrationError",
    "ValidationError",
    "ConfigurationError",
    "ComputationError",
    "ConvergenceError",
    "SaturationClosureWarning",
]


class EquilibrationError(Exception):
    """Base class for all equilibration-related errors."""

    pass


class ValidationError(EquilibrationError, ValueError):
    """Raised when input data fails validation checks."""

    pass


class ConfigurationError(EquilibrationError):
    """
    Raised when the equilibration set-up cannot be used.

    Covers malformed or missing equilibration records, a datum depth outside
    the oil zone and unsupported phase combinations.
    """

    pass


class ComputationError(EquilibrationError):
    """Raised when there is an error during numerical computations."""

    pass


class ConvergenceError(ComputationError):
    """Raised when an iterative solver fails to converge within its iteration cap."""

    pass


class SaturationClosureWarning(UserWarning):
    """Issued when a derived saturation had to be clamped beyond tolerance."""

    pass
