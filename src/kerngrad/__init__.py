"""
kerngrad: elementwise tensor ops on a kernel-dispatch engine with a
gradient tape.

Typical use::

    import kerngrad as kg

    x = kg.tensor([0.0, 1.0, 2.0])
    y = kg.exp(x)
    dx = kg.grad(lambda t: kg.tanh(kg.square(t)))(x)

The default engine is owned by ``kg.ENV``; select a backend by name with
``kg.ENV.set_backend(...)`` or the ``KERNGRAD_BACKEND`` variable.
"""

import logging

from .domain import (
    BackendNotFoundError,
    ConversionError,
    Device,
    DeviceMismatchError,
    DeviceNotSupportedError,
    DeviceType,
    DType,
    Function,
    GradientError,
    GradientThunk,
    IBackend,
    ITensor,
    InvalidArgumentError,
    InvalidDTypeError,
    NaNResultError,
    ShapeMismatchError,
)
from .infrastructure.backends import BackendRegistry, NumpyBackend, backend_registry
from .infrastructure.engine import (
    ENV,
    Engine,
    Environment,
    Flags,
    KernelContext,
    Tape,
    TapeRecord,
    get_engine,
)
from .infrastructure.ops import *  # noqa: F401,F403
from .infrastructure.ops import __all__ as _ops_all
from .infrastructure.tensor import Tensor, TensorLike, convert_to_tensor, scalar, tensor

logging.getLogger(__name__).addHandler(logging.NullHandler())

float32 = DType.FLOAT32
int32 = DType.INT32
bool_ = DType.BOOL

__version__ = "0.1.0"

__all__ = [
    "BackendNotFoundError",
    "BackendRegistry",
    "ConversionError",
    "DType",
    "Device",
    "DeviceMismatchError",
    "DeviceNotSupportedError",
    "DeviceType",
    "ENV",
    "Engine",
    "Environment",
    "Flags",
    "Function",
    "GradientError",
    "GradientThunk",
    "IBackend",
    "ITensor",
    "InvalidArgumentError",
    "InvalidDTypeError",
    "KernelContext",
    "NaNResultError",
    "NumpyBackend",
    "ShapeMismatchError",
    "Tape",
    "TapeRecord",
    "Tensor",
    "TensorLike",
    "backend_registry",
    "bool_",
    "convert_to_tensor",
    "float32",
    "get_engine",
    "int32",
    "scalar",
    "tensor",
    *_ops_all,
]
