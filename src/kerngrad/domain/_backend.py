"""
Compute backend contract.

This module declares :class:`IBackend`, the interface every compute backend
(CPU, GPU, mock) must satisfy for the primitive elementwise kernels. The
kernel-dispatch engine only ever talks to a backend through this contract,
so backends can be swapped (for example a recording mock in tests) without
changing engine or op behavior.

Kernel semantics
----------------
Every elementwise kernel receives one input tensor (``clip`` and ``step``
additionally receive Python scalars) and returns a *new* tensor with the
same shape as its input. Inputs are never mutated.

Result dtypes:

- dtype-preserving kernels: ``neg``, ``abs``, ``square``, ``sign``, ``ceil``,
  ``floor``, ``round``, ``clip``. ``float32 -> float32``, ``int32 -> int32``,
  ``bool -> int32``.
- all other unary kernels return ``float32``; integer and boolean inputs
  are promoted before computation.

Numeric edge cases:

- NaN propagation: a NaN input element produces a NaN output element for
  every kernel, including ``sign``, ``clip`` and ``step``.
- Domain errors follow IEEE-754: ``log(0) == -inf``, ``log(-1)`` is NaN,
  ``sqrt(-1)`` is NaN, ``atanh(1) == inf``. Backends must not raise or warn
  for out-of-domain inputs.
- ``round`` is round-half-to-even (banker's rounding).
- ``step(x, alpha)`` is ``1`` where ``x > 0`` and ``alpha * x`` elsewhere.
- ``clip(x, lo, hi)`` is ``max(lo, min(x, hi))``. The backend may assume
  ``lo <= hi``; the op validates it before dispatch.
- ``softplus`` must be evaluated in a numerically stable form (no overflow
  to ``inf`` for large positive inputs).

Helper kernels
--------------
Gradient rules need a handful of non-unary kernels: broadcasting binary
arithmetic (``add``, ``sub``, ``mul``, ``div``, ``pow``), comparisons
(``greater_equal``, ``less_equal``), ``logical_and``, ``where``, ``cast`` and
tensor factories (``fill``, ``zeros_like``, ``ones_like``). Binary helpers
broadcast following NumPy rules; strict (non-broadcasting) combination is
layered on top of them by the op package.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ._dtype import DType
from ._tensor import ITensor, Number
from .device._device import Device


@runtime_checkable
class IBackend(Protocol):
    """
    Elementwise compute backend.

    Attributes
    ----------
    name : str
        Registry name of the backend (e.g. ``"numpy"``).
    device : Device
        Device whose storage this backend reads and writes.
    """

    name: str
    device: Device

    # ------------------------------------------------------------------
    # Basic math
    # ------------------------------------------------------------------
    def neg(self, x: ITensor) -> ITensor: ...
    def ceil(self, x: ITensor) -> ITensor: ...
    def floor(self, x: ITensor) -> ITensor: ...
    def sign(self, x: ITensor) -> ITensor: ...
    def round(self, x: ITensor) -> ITensor: ...
    def exp(self, x: ITensor) -> ITensor: ...
    def expm1(self, x: ITensor) -> ITensor: ...
    def log(self, x: ITensor) -> ITensor: ...
    def log1p(self, x: ITensor) -> ITensor: ...
    def sqrt(self, x: ITensor) -> ITensor: ...
    def rsqrt(self, x: ITensor) -> ITensor: ...
    def square(self, x: ITensor) -> ITensor: ...
    def reciprocal(self, x: ITensor) -> ITensor: ...
    def abs(self, x: ITensor) -> ITensor: ...
    def clip(self, x: ITensor, lo: float, hi: float) -> ITensor: ...
    def step(self, x: ITensor, alpha: float = 0.0) -> ITensor: ...
    def erf(self, x: ITensor) -> ITensor: ...

    # ------------------------------------------------------------------
    # Activations
    # ------------------------------------------------------------------
    def sigmoid(self, x: ITensor) -> ITensor: ...
    def softplus(self, x: ITensor) -> ITensor: ...

    # ------------------------------------------------------------------
    # Trigonometric / hyperbolic
    # ------------------------------------------------------------------
    def sin(self, x: ITensor) -> ITensor: ...
    def cos(self, x: ITensor) -> ITensor: ...
    def tan(self, x: ITensor) -> ITensor: ...
    def asin(self, x: ITensor) -> ITensor: ...
    def acos(self, x: ITensor) -> ITensor: ...
    def atan(self, x: ITensor) -> ITensor: ...
    def sinh(self, x: ITensor) -> ITensor: ...
    def cosh(self, x: ITensor) -> ITensor: ...
    def tanh(self, x: ITensor) -> ITensor: ...
    def asinh(self, x: ITensor) -> ITensor: ...
    def acosh(self, x: ITensor) -> ITensor: ...
    def atanh(self, x: ITensor) -> ITensor: ...

    # ------------------------------------------------------------------
    # Helpers used by gradient rules
    # ------------------------------------------------------------------
    def add(self, a: ITensor, b: ITensor) -> ITensor: ...
    def sub(self, a: ITensor, b: ITensor) -> ITensor: ...
    def mul(self, a: ITensor, b: ITensor) -> ITensor: ...
    def div(self, a: ITensor, b: ITensor) -> ITensor: ...
    def pow(self, a: ITensor, b: ITensor) -> ITensor: ...
    def greater_equal(self, a: ITensor, b: ITensor) -> ITensor: ...
    def less_equal(self, a: ITensor, b: ITensor) -> ITensor: ...
    def logical_and(self, a: ITensor, b: ITensor) -> ITensor: ...
    def where(self, cond: ITensor, a: ITensor, b: ITensor) -> ITensor: ...
    def cast(self, x: ITensor, dtype: DType) -> ITensor: ...
    def fill(
        self, shape: Sequence[int], value: Number, dtype: DType = DType.FLOAT32
    ) -> ITensor: ...
    def zeros_like(self, x: ITensor) -> ITensor: ...
    def ones_like(self, x: ITensor) -> ITensor: ...
    def has_nan(self, x: ITensor) -> bool: ...
