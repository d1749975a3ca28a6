"""Physical and numerical constants of an equilibration run."""

from contextvars import ContextVar
import typing

import attrs


__all__ = ["Constant", "Constants", "c", "ConstantsContext", "get_constant"]


@attrs.frozen(slots=True)
class Constant:
    """
    A constant value with optional description and unit.
    """

    value: typing.Any
    """The actual value of the constant."""

    description: typing.Optional[str] = None
    """Optional description of what this constant represents."""

    unit: typing.Optional[str] = None
    """Optional unit of measurement for this constant."""

    def __str__(self) -> str:
        return f"{self.value}{self.unit or ''}"

    def __repr__(self) -> str:
        parts = [f"value={self.value}"]
        if self.description:
            parts.append(f"description='{self.description}'")
        if self.unit:
            parts.append(f"unit='{self.unit}'")
        return f"Constant({', '.join(parts)})"


DEFAULT_CONSTANTS: typing.Dict[str, typing.Union[typing.Any, Constant]] = {
    # Gravity
    "ACCELERATION_DUE_TO_GRAVITY": Constant(
        value=9.80665, description="Standard acceleration due to gravity", unit="m/s²"
    ),
    # Numerical
    "HYDROSTATIC_RELATIVE_TOLERANCE": Constant(
        value=1e-10,
        description="Relative local error tolerance when integrating the hydrostatic pressure ODE",
        unit="fraction",
    ),
    "HYDROSTATIC_ABSOLUTE_TOLERANCE": Constant(
        value=1e-6,
        description="Absolute local error tolerance when integrating the hydrostatic pressure ODE",
        unit="Pa",
    ),
    "SATURATION_TOLERANCE": Constant(
        value=1e-12,
        description="Saturation tolerance used when inverting capillary pressure curves",
        unit="fraction",
    ),
    "SATURATION_EPSILON": Constant(
        value=1e-6,
        description="Small epsilon value to prevent numerical issues with saturations at 0 or 1",
        unit="fraction",
    ),
}


class Constants:
    """
    Set of named constants used by an equilibration run.

    Values are read as attributes (`constants.ACCELERATION_DUE_TO_GRAVITY`) and the
    `Constant` records, with description and unit, by item access
    (`constants["ACCELERATION_DUE_TO_GRAVITY"]`). Keyword arguments override
    defaults:

    ```python
    constants = Constants(ACCELERATION_DUE_TO_GRAVITY=9.81)
    with constants():
        result = equilibrate(...)
    ```
    """

    __slots__ = ("_store",)

    def __init__(self, **overrides: typing.Union[typing.Any, Constant]) -> None:
        object.__setattr__(self, "_store", {})
        for name, value in {**DEFAULT_CONSTANTS, **overrides}.items():
            self[name] = value

    def __getattr__(self, name: str) -> typing.Any:
        """
        Value of a constant.

        :raises AttributeError: If the constant does not exist.
        """
        if name.startswith("_"):
            return object.__getattribute__(self, name)
        try:
            return self._store[name].value
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            ) from None

    def __getitem__(self, name: str) -> Constant:
        return self._store[name]

    def __setattr__(self, name: str, value: typing.Union[typing.Any, Constant]) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self._store[name] = value if isinstance(value, Constant) else Constant(value=value)

    __setitem__ = __setattr__

    def __contains__(self, name: str) -> bool:
        return name in self._store

    def get_constant(
        self, name: str, default: typing.Optional[Constant] = None
    ) -> typing.Optional[Constant]:
        return self._store.get(name, default)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(constants={len(self._store)})"

    def __call__(self) -> "ConstantsContext":
        """
        Make this instance the one seen through `resequil.c` inside a `with` block.

        :return: `ConstantsContext`
        """
        return ConstantsContext(self)


_constants_context: ContextVar[Constants] = ContextVar(
    "constants_context", default=Constants()
)


class ConstantsContext:
    """
    Context manager for temporary global `Constants` overrides.

    Upon exiting the context, the previous `Constants` instance is restored.
    """

    def __init__(self, constants: Constants) -> None:
        self._new_constants = constants
        self._token = None

    def __enter__(self) -> Constants:
        self._token = _constants_context.set(self._new_constants)
        return self._new_constants

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self._token is not None:
            _constants_context.reset(self._token)


class _ConstantsProxy:
    """Proxy to the current context's `Constants` instance."""

    @property
    def _constants(self) -> Constants:
        return _constants_context.get()

    def __getattr__(self, name: str) -> typing.Any:
        return getattr(self._constants, name)

    def __getitem__(self, name: str) -> Constant:
        return self._constants[name]


c = _ConstantsProxy()
"""Global proxy to access physical and numerical constants."""


def get_constant(name: str) -> typing.Optional[Constant]:
    """Get a `Constant` object by name from the global constants.

    :param name: Name of the constant
    :return: `Constant` object or None if not found
    """
    return c._constants.get_constant(name)
