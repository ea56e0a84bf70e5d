"""
Argument normalization into Tensors.

Ops accept "tensor-like" arguments: a `Tensor`, a Python scalar, a nested
list/tuple of scalars, or a NumPy array. `convert_to_tensor` turns such an
argument into a `Tensor` or fails with a `ConversionError` that names the
op and the parameter, *before* any backend kernel runs.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import ConversionError
from ...domain.device._device import Device
from ._tensor import Tensor

TensorLike = Union[Tensor, int, float, bool, Sequence[Any], np.ndarray]

_SCALAR_TYPES = (bool, int, float, np.bool_, np.integer, np.floating)


def _is_tensor_like(x: Any) -> bool:
    if isinstance(x, (Tensor, np.ndarray) + _SCALAR_TYPES):
        return True
    return isinstance(x, (list, tuple))


def convert_to_tensor(
    x: Any,
    arg_name: str,
    op_name: str,
    *,
    dtype: Optional[Union[DType, str]] = None,
) -> Tensor:
    """
    Normalize an op argument into a `Tensor`.

    Parameters
    ----------
    x : TensorLike
        The argument value.
    arg_name : str
        Name of the op parameter (used in error messages).
    op_name : str
        Name of the op (used in error messages).
    dtype : DType or str, optional
        Dtype for values that are not already tensors. Tensors pass through
        unchanged regardless of this argument.

    Returns
    -------
    Tensor
        `x` itself if it is a Tensor, else a new tensor holding its values.

    Raises
    ------
    ConversionError
        If `x` is not tensor-like, or its values are not representable in
        the supported dtype set (strings, complex numbers, ragged lists...).
    """
    if isinstance(x, Tensor):
        return x
    if not _is_tensor_like(x):
        raise ConversionError(arg_name, op_name, type(x).__name__)
    try:
        return Tensor(x, dtype=dtype)
    except (TypeError, ValueError) as e:
        raise ConversionError(arg_name, op_name, type(x).__name__) from e


def tensor(
    values: Any,
    dtype: Optional[Union[DType, str]] = None,
    device: Union[Device, str] = "cpu",
) -> Tensor:
    """
    Create a tensor from tensor-like `values`.

    Raises
    ------
    ConversionError
        If `values` cannot be converted.
    """
    if isinstance(values, Tensor):
        return Tensor(values, dtype=dtype or values.dtype, device=device)
    if not _is_tensor_like(values):
        raise ConversionError("values", "tensor", type(values).__name__)
    try:
        return Tensor(values, dtype=dtype, device=device)
    except (TypeError, ValueError) as e:
        raise ConversionError("values", "tensor", type(values).__name__) from e


def scalar(value: Union[int, float, bool], dtype: Union[DType, str] = DType.FLOAT32) -> Tensor:
    """Create a rank-0 tensor."""
    if not isinstance(value, _SCALAR_TYPES):
        raise ConversionError("value", "scalar", type(value).__name__)
    return Tensor(value, dtype=dtype)
