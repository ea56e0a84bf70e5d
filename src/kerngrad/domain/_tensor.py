"""
Tensor interface definitions.

This module defines the domain-level interface for tensor values using
structural typing. The interface captures the minimal, backend-agnostic
properties a tensor needs to flow through the kernel-dispatch engine and
the gradient tape:

- identity (`id`) so tape records can refer to tensors without relying on
  Python object identity,
- shape, dtype and device metadata,
- host interop (`to_numpy`) for tests and backends.

Tensors are immutable values. No member of this protocol mutates storage;
every operation produces a new tensor.
"""

from __future__ import annotations

from typing import Any, Protocol, Union, runtime_checkable

from ._dtype import DType
from .device._device import Device

Number = Union[int, float, bool]


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` is an immutable n-dimensional array handle with a fixed
    shape and dtype and a reference to its underlying storage.

    Notes
    -----
    - The protocol uses structural typing so that alternative tensor
      implementations (e.g. a mock tensor in tests, or a device-pointer
      backed tensor) can satisfy the same contract.
    - `id` is unique per process and increases monotonically with creation
      order. The tape uses it to key gradients.
    """

    @property
    def id(self) -> int:
        """Process-unique tensor identifier."""
        ...

    @property
    def shape(self) -> tuple[int, ...]:
        """Tensor shape (non-negative dimension sizes)."""
        ...

    @property
    def dtype(self) -> DType:
        """Element dtype, fixed at creation."""
        ...

    @property
    def device(self) -> Device:
        """Device on which the tensor storage resides."""
        ...

    @property
    def size(self) -> int:
        """Number of elements (product of `shape`)."""
        ...

    @property
    def rank(self) -> int:
        """Number of dimensions."""
        ...

    def to_numpy(self) -> Any:
        """
        Return a writable host copy of the tensor's values.

        Returns
        -------
        Any
            Backend-native host array (e.g., `np.ndarray`). Mutating it does
            not affect the tensor.
        """
        ...
