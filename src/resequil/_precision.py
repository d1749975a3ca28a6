from contextlib import contextmanager
from contextvars import ContextVar

import numpy as np
import numpy.typing as npt


__all__ = ["get_dtype", "with_precision"]

_output_dtype: ContextVar[npt.DTypeLike] = ContextVar(
    "_output_dtype", default=np.float64
)


def get_dtype() -> npt.DTypeLike:
    """Floating point type of equilibrated pressure and saturation arrays in the current context."""
    return _output_dtype.get()


@contextmanager
def with_precision(dtype: npt.DTypeLike):
    """
    Store equilibration outputs with another floating point type inside a `with` block.

    Computation always runs in double precision. Only the stored result is cast,
    so single precision rounds pressures of order 1e7 Pa to about 1 Pa.

    :param dtype: Floating point type of the outputs.
    """
    token = _output_dtype.set(np.dtype(dtype).type)
    try:
        yield
    finally:
        _output_dtype.reset(token)
