"""
Domain layer: interfaces, value types and errors.

Nothing in this package imports a numerical library; concrete tensors,
backends and the engine live in :mod:`kerngrad.infrastructure`.
"""

from ._backend import IBackend
from ._dtype import DType
from ._errors import (
    BackendNotFoundError,
    ConversionError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    GradientError,
    InvalidArgumentError,
    InvalidDTypeError,
    NaNResultError,
    ShapeMismatchError,
)
from ._function import Function, GradientThunk
from ._tensor import ITensor, Number
from .device import Device, DeviceType

__all__ = [
    "BackendNotFoundError",
    "ConversionError",
    "Device",
    "DeviceMismatchError",
    "DeviceNotSupportedError",
    "DeviceType",
    "DType",
    "Function",
    "GradientError",
    "GradientThunk",
    "IBackend",
    "ITensor",
    "InvalidArgumentError",
    "InvalidDTypeError",
    "NaNResultError",
    "Number",
    "ShapeMismatchError",
]
