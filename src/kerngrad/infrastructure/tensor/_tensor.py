"""
Concrete Tensor implementation (NumPy storage).

This module provides the concrete `Tensor` used throughout kerngrad. It
satisfies the domain-level `ITensor` protocol and stores its values in a
read-only NumPy ndarray.

Design notes
------------
- Tensors are immutable values. The backing ndarray has its ``writeable``
  flag cleared, and `to_numpy()` returns a copy, so neither kernels nor
  callers can mutate a tensor that a tape record still references.
- Storage dtype is always one of the closed `DType` set. Arrays of other
  NumPy dtypes are cast on construction (float64 -> float32, int64 ->
  int32, ...).
- Every tensor receives a process-unique, monotonically increasing `id`.
  The gradient tape keys gradients by this id.
- Autograd state is *not* stored on tensors. Which operations produced a
  tensor is recorded on the engine's tape instead.
"""

from __future__ import annotations

import itertools
from typing import Any, Optional, Union

import numpy as np

from ...domain._dtype import DType
from ...domain._tensor import ITensor
from ...domain.device._device import Device
from ._unary_mixin import TensorMixinUnary

_CPU = Device("cpu")
_tensor_ids = itertools.count()


class Tensor(TensorMixinUnary, ITensor):
    """
    Immutable n-dimensional array handle.

    Parameters
    ----------
    data : array_like
        Values of the tensor. Always copied.
    dtype : DType or str, optional
        Target dtype. If omitted, inferred from `data` via `DType.from_numpy`.
    device : Device or str, optional
        Device placement descriptor. Defaults to ``Device("cpu")``.

    Raises
    ------
    TypeError
        If the values have no counterpart in the supported dtype set.

    Notes
    -----
    Prefer `kerngrad.tensor(...)` or `convert_to_tensor(...)` in user code;
    they report conversion failures with the op and argument name.
    """

    __slots__ = ("_data", "_dtype", "_device", "_id")

    def __init__(
        self,
        data: Any,
        *,
        dtype: Optional[Union[DType, str]] = None,
        device: Union[Device, str] = _CPU,
    ) -> None:
        if isinstance(data, Tensor):
            data = data._data
        arr = np.array(data)
        dt = DType.from_numpy(arr.dtype) if dtype is None else DType.parse(dtype)
        arr = arr.astype(dt.to_numpy(), copy=False)
        self._init_storage(arr, dt, Device.parse(device))

    def _init_storage(self, arr: np.ndarray, dtype: DType, device: Device) -> None:
        arr.setflags(write=False)
        self._data = arr
        self._dtype = dtype
        self._device = device
        self._id = next(_tensor_ids)

    @classmethod
    def _from_owned_array(
        cls, arr: np.ndarray, *, device: Union[Device, str] = _CPU
    ) -> "Tensor":
        """
        Wrap a freshly computed ndarray without copying it.

        The caller hands over ownership: `arr` must not be referenced or
        mutated elsewhere afterwards. Backends use this for kernel outputs.
        """
        arr = np.asarray(arr)
        dt = DType.from_numpy(arr.dtype)
        if arr.dtype != np.dtype(dt.to_numpy()):
            arr = arr.astype(dt.to_numpy())
        out = cls.__new__(cls)
        out._init_storage(arr, dt, Device.parse(device))
        return out

    def __repr__(self) -> str:
        return (
            f"Tensor(shape={self.shape}, dtype={self._dtype}, device={self._device}, "
            f"id={self._id})"
        )

    def __str__(self) -> str:
        return f"Tensor({np.array2string(self._data, separator=', ')})"

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    @property
    def id(self) -> int:
        return self._id

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(int(d) for d in self._data.shape)

    @property
    def dtype(self) -> DType:
        return self._dtype

    @property
    def device(self) -> Device:
        return self._device

    @property
    def size(self) -> int:
        return int(self._data.size)

    @property
    def rank(self) -> int:
        return int(self._data.ndim)

    @property
    def data(self) -> np.ndarray:
        """
        Read-only view of the underlying storage.

        Backends read kernel inputs through this property. Attempting to
        write into the returned array raises ``ValueError``.
        """
        return self._data

    # ------------------------------------------------------------------
    # Host interop
    # ------------------------------------------------------------------
    def to_numpy(self) -> np.ndarray:
        """Return a writable copy of the tensor values."""
        return self._data.copy()

    def item(self) -> Union[float, int, bool]:
        """
        Return the single element of a size-1 tensor as a Python scalar.

        Raises
        ------
        ValueError
            If the tensor holds more than one element.
        """
        if self._data.size != 1:
            raise ValueError(
                f"item() requires a tensor with exactly one element, got shape {self.shape}"
            )
        return self._data.reshape(()).item()

    def tolist(self) -> Any:
        """Return the values as (nested) Python lists."""
        return self._data.tolist()

    @staticmethod
    def from_numpy(
        arr: Any,
        *,
        dtype: Optional[Union[DType, str]] = None,
        device: Union[Device, str] = _CPU,
    ) -> "Tensor":
        """Create a tensor holding a copy of `arr`."""
        return Tensor(arr, dtype=dtype, device=device)
