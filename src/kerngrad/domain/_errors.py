"""
Exceptions raised by kerngrad.

Each exception type corresponds to one failure category of the
single-operation execution-and-differentiation contract:

- argument preconditions checked eagerly by an op before dispatch
  (:class:`InvalidArgumentError`, :class:`InvalidDTypeError`),
- conversion of user inputs into tensors (:class:`ConversionError`),
- strict elementwise combination (:class:`ShapeMismatchError`),
- device placement (:class:`DeviceMismatchError`,
  :class:`DeviceNotSupportedError`),
- backend selection (:class:`BackendNotFoundError`),
- backward-pass wiring (:class:`GradientError`),
- debug-mode numeric checks (:class:`NaNResultError`).

Every exception subclasses a builtin so callers that only know Python's
standard hierarchy (``ValueError``, ``TypeError``...) still catch them.
"""

from typing import Sequence


class InvalidArgumentError(ValueError):
    """
    Raised when an op receives a scalar argument that violates its contract.

    Attributes
    ----------
    op : str
        Name of the op that rejected the argument.
    """

    def __init__(self, op: str, message: str) -> None:
        super().__init__(f"Error in {op}: {message}")
        self.op = op


class InvalidDTypeError(TypeError):
    """
    Raised when an op is invoked on a tensor whose dtype it does not support.

    Attributes
    ----------
    op : str
        Name of the op.
    dtype : str
        The rejected dtype.
    allowed : tuple[str, ...]
        Dtypes the op accepts.
    """

    def __init__(self, op: str, dtype: str, allowed: Sequence[str]) -> None:
        allowed_s = " or ".join(f"`{a}`" for a in allowed)
        super().__init__(
            f"Error in {op}: input dtype must be {allowed_s}, got `{dtype}`."
        )
        self.op = op
        self.dtype = dtype
        self.allowed = tuple(allowed)


class ShapeMismatchError(ValueError):
    """
    Raised when two tensors combined by a strict elementwise op differ in shape.

    Attributes
    ----------
    op : str
        Name of the strict combinator (e.g. "mul_strict").
    expected : tuple[int, ...]
        Shape of the left operand.
    actual : tuple[int, ...]
        Shape of the right operand.
    """

    def __init__(
        self, op: str, expected: Sequence[int], actual: Sequence[int]
    ) -> None:
        super().__init__(
            f"Error in {op}: shapes {tuple(expected)} and {tuple(actual)} "
            "must match."
        )
        self.op = op
        self.expected = tuple(expected)
        self.actual = tuple(actual)


class ConversionError(TypeError):
    """
    Raised when a value cannot be interpreted as a tensor.

    Attributes
    ----------
    arg_name : str
        Name of the op parameter the value was passed to.
    op : str
        Name of the op.
    type_name : str
        Type name of the rejected value.
    """

    def __init__(self, arg_name: str, op: str, type_name: str) -> None:
        super().__init__(
            f"Argument '{arg_name}' passed to '{op}' must be a Tensor or "
            f"TensorLike, but got '{type_name}'"
        )
        self.arg_name = arg_name
        self.op = op
        self.type_name = type_name


class DeviceNotSupportedError(RuntimeError):
    """
    Raised when a backend is asked to work on a device it does not serve.

    Attributes
    ----------
    op : str
        The name of the operation that was attempted (e.g., "exp", "fill").
    device : str
        String representation of the device on which the operation
        was attempted.
    """

    def __init__(self, op: str, device: str) -> None:
        super().__init__(f"{op} is not implemented for device '{device}'.")
        self.op = op
        self.device = device


class DeviceMismatchError(RuntimeError):
    """
    Raised when a kernel input lives on a different device than the backend.

    This prevents undefined behavior when a tensor is handed to a backend
    that cannot read its storage without an explicit transfer step.
    """

    def __init__(self, device_a: str, device_b: str) -> None:
        super().__init__(f"Device mismatch: '{device_a}' vs '{device_b}'.")
        self.device_a = device_a
        self.device_b = device_b


class BackendNotFoundError(KeyError):
    """
    Raised when a backend name is not present in the backend registry.

    Attributes
    ----------
    name : str
        The requested backend name.
    available : tuple[str, ...]
        Registered backend names at the time of the lookup.
    """

    def __init__(self, name: str, available: Sequence[str]) -> None:
        super().__init__(
            f"Backend '{name}' is not registered. Available: {list(available)}"
        )
        self.name = name
        self.available = tuple(available)

    def __str__(self) -> str:
        # KeyError repr-quotes its message by default.
        return str(self.args[0])


class GradientError(RuntimeError):
    """Raised when a backward pass cannot be wired or completed."""


class NaNResultError(ArithmeticError):
    """
    Raised in debug mode when a kernel produced NaN values.

    Attributes
    ----------
    op : str
        Name of the op whose output contained NaN.
    """

    def __init__(self, op: str) -> None:
        super().__init__(f"The result of the '{op}' has NaNs.")
        self.op = op
