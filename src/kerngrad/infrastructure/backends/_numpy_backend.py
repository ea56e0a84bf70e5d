"""
CPU compute backend implemented with NumPy.

`NumpyBackend` is the reference implementation of the `IBackend` kernel
contract. Every kernel reads the read-only storage of its input tensor,
computes a new ndarray, and wraps it into a new `Tensor` without copying.

Numeric policy
--------------
- Floating-point warnings (overflow, invalid, divide-by-zero) are
  suppressed around every kernel: out-of-domain inputs produce IEEE results
  (``nan``/``inf``) silently, matching the contract.
- Transcendental kernels compute in float32 after promoting integer and
  boolean inputs.
- ``erf`` has no NumPy ufunc; it is evaluated with ``math.erf`` through
  ``np.vectorize`` in float64 and cast back to float32.
"""

from __future__ import annotations

import math
from typing import Callable, Sequence, Union

import numpy as np

from ...domain._dtype import DType
from ...domain._errors import DeviceNotSupportedError
from ...domain.device._device import Device
from ..tensor._tensor import Tensor

_F32 = np.float32
_I32 = np.int32

_erf_f64 = np.vectorize(math.erf, otypes=[np.float64])


def _as_float(a: np.ndarray) -> np.ndarray:
    """Promote integer/bool storage to float32 (no copy for float32)."""
    return a.astype(_F32, copy=False)


def _as_numeric(a: np.ndarray) -> np.ndarray:
    """Promote bool storage to int32; keep int32/float32 unchanged."""
    if a.dtype == np.bool_:
        return a.astype(_I32)
    return a


class NumpyBackend:
    """
    NumPy implementation of the elementwise kernel contract.

    Parameters
    ----------
    device : Device or str, optional
        Must be a CPU device. Defaults to ``"cpu"``.

    Raises
    ------
    DeviceNotSupportedError
        If `device` is not a CPU device.
    """

    name = "numpy"

    def __init__(self, device: Union[Device, str] = "cpu") -> None:
        device = Device.parse(device)
        if not device.is_cpu():
            raise DeviceNotSupportedError(op="NumpyBackend", device=str(device))
        self.device = device

    def __repr__(self) -> str:
        return f"NumpyBackend(device={self.device})"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _wrap(self, arr: np.ndarray) -> Tensor:
        return Tensor._from_owned_array(np.asarray(arr), device=self.device)

    def _float_unary(self, fn: Callable[[np.ndarray], np.ndarray], x: Tensor) -> Tensor:
        with np.errstate(all="ignore"):
            y = fn(_as_float(x.data))
        return self._wrap(np.asarray(y, dtype=_F32))

    def _preserving_unary(
        self, fn: Callable[[np.ndarray], np.ndarray], x: Tensor
    ) -> Tensor:
        a = _as_numeric(x.data)
        with np.errstate(all="ignore"):
            y = fn(a)
        return self._wrap(np.asarray(y, dtype=a.dtype))

    def _binary(self, fn: Callable[..., np.ndarray], a: Tensor, b: Tensor) -> Tensor:
        with np.errstate(all="ignore"):
            y = fn(_as_numeric(a.data), _as_numeric(b.data))
        y = np.asarray(y)
        if y.dtype.kind == "f":
            y = y.astype(_F32, copy=False)
        return self._wrap(y)

    # ------------------------------------------------------------------
    # Basic math
    # ------------------------------------------------------------------
    def neg(self, x: Tensor) -> Tensor:
        return self._preserving_unary(np.negative, x)

    def ceil(self, x: Tensor) -> Tensor:
        return self._preserving_unary(np.ceil, x)

    def floor(self, x: Tensor) -> Tensor:
        return self._preserving_unary(np.floor, x)

    def sign(self, x: Tensor) -> Tensor:
        # np.sign maps NaN to NaN.
        return self._preserving_unary(np.sign, x)

    def round(self, x: Tensor) -> Tensor:
        # np.round rounds half to even.
        return self._preserving_unary(np.round, x)

    def exp(self, x: Tensor) -> Tensor:
        return self._float_unary(np.exp, x)

    def expm1(self, x: Tensor) -> Tensor:
        return self._float_unary(np.expm1, x)

    def log(self, x: Tensor) -> Tensor:
        return self._float_unary(np.log, x)

    def log1p(self, x: Tensor) -> Tensor:
        return self._float_unary(np.log1p, x)

    def sqrt(self, x: Tensor) -> Tensor:
        return self._float_unary(np.sqrt, x)

    def rsqrt(self, x: Tensor) -> Tensor:
        return self._float_unary(lambda a: 1.0 / np.sqrt(a), x)

    def square(self, x: Tensor) -> Tensor:
        return self._preserving_unary(np.square, x)

    def reciprocal(self, x: Tensor) -> Tensor:
        return self._float_unary(np.reciprocal, x)

    def abs(self, x: Tensor) -> Tensor:
        return self._preserving_unary(np.abs, x)

    def clip(self, x: Tensor, lo: float, hi: float) -> Tensor:
        a = _as_numeric(x.data)
        if a.dtype == _I32 and not (float(lo).is_integer() and float(hi).is_integer()):
            a = a.astype(_F32)
        # np.clip propagates NaN.
        return self._wrap(np.clip(a, lo, hi).astype(a.dtype, copy=False))

    def step(self, x: Tensor, alpha: float = 0.0) -> Tensor:
        def _step(a: np.ndarray) -> np.ndarray:
            y = np.where(a > 0, _F32(1.0), _F32(alpha) * a)
            return np.where(np.isnan(a), a, y)

        return self._float_unary(_step, x)

    def erf(self, x: Tensor) -> Tensor:
        a = x.data.astype(np.float64)
        if a.size == 0:
            return self._wrap(np.zeros(a.shape, dtype=_F32))
        return self._wrap(_erf_f64(a).astype(_F32))

    # ------------------------------------------------------------------
    # Activations
    # ------------------------------------------------------------------
    def sigmoid(self, x: Tensor) -> Tensor:
        # Evaluated in float64 so the result stays strictly inside (0, 1)
        # over the float32 range where that is representable.
        def _sigmoid(a: np.ndarray) -> np.ndarray:
            a64 = a.astype(np.float64)
            return 1.0 / (1.0 + np.exp(-a64))

        return self._float_unary(_sigmoid, x)

    def softplus(self, x: Tensor) -> Tensor:
        # log(exp(x) + 1) == logaddexp(0, x); stable for large |x|.
        return self._float_unary(lambda a: np.logaddexp(_F32(0.0), a), x)

    # ------------------------------------------------------------------
    # Trigonometric / hyperbolic
    # ------------------------------------------------------------------
    def sin(self, x: Tensor) -> Tensor:
        return self._float_unary(np.sin, x)

    def cos(self, x: Tensor) -> Tensor:
        return self._float_unary(np.cos, x)

    def tan(self, x: Tensor) -> Tensor:
        return self._float_unary(np.tan, x)

    def asin(self, x: Tensor) -> Tensor:
        return self._float_unary(np.arcsin, x)

    def acos(self, x: Tensor) -> Tensor:
        return self._float_unary(np.arccos, x)

    def atan(self, x: Tensor) -> Tensor:
        return self._float_unary(np.arctan, x)

    def sinh(self, x: Tensor) -> Tensor:
        return self._float_unary(np.sinh, x)

    def cosh(self, x: Tensor) -> Tensor:
        return self._float_unary(np.cosh, x)

    def tanh(self, x: Tensor) -> Tensor:
        return self._float_unary(np.tanh, x)

    def asinh(self, x: Tensor) -> Tensor:
        return self._float_unary(np.arcsinh, x)

    def acosh(self, x: Tensor) -> Tensor:
        return self._float_unary(np.arccosh, x)

    def atanh(self, x: Tensor) -> Tensor:
        return self._float_unary(np.arctanh, x)

    # ------------------------------------------------------------------
    # Helpers used by gradient rules
    # ------------------------------------------------------------------
    def add(self, a: Tensor, b: Tensor) -> Tensor:
        return self._binary(np.add, a, b)

    def sub(self, a: Tensor, b: Tensor) -> Tensor:
        return self._binary(np.subtract, a, b)

    def mul(self, a: Tensor, b: Tensor) -> Tensor:
        return self._binary(np.multiply, a, b)

    def div(self, a: Tensor, b: Tensor) -> Tensor:
        with np.errstate(all="ignore"):
            y = np.true_divide(_as_float(a.data), _as_float(b.data))
        return self._wrap(y.astype(_F32, copy=False))

    def pow(self, a: Tensor, b: Tensor) -> Tensor:
        with np.errstate(all="ignore"):
            y = np.power(_as_float(a.data), _as_float(b.data))
        return self._wrap(y.astype(_F32, copy=False))

    def greater_equal(self, a: Tensor, b: Tensor) -> Tensor:
        return self._binary(np.greater_equal, a, b)

    def less_equal(self, a: Tensor, b: Tensor) -> Tensor:
        return self._binary(np.less_equal, a, b)

    def logical_and(self, a: Tensor, b: Tensor) -> Tensor:
        return self._wrap(np.logical_and(a.data, b.data))

    def where(self, cond: Tensor, a: Tensor, b: Tensor) -> Tensor:
        return self._binary(
            lambda x, y: np.where(cond.data.astype(np.bool_), x, y), a, b
        )

    def cast(self, x: Tensor, dtype: DType) -> Tensor:
        return self._wrap(x.data.astype(DType.parse(dtype).to_numpy()))

    def fill(
        self,
        shape: Sequence[int],
        value: Union[int, float, bool],
        dtype: DType = DType.FLOAT32,
    ) -> Tensor:
        dt = DType.parse(dtype)
        return self._wrap(np.full(tuple(shape), value, dtype=dt.to_numpy()))

    def zeros_like(self, x: Tensor) -> Tensor:
        return self._wrap(np.zeros(x.shape, dtype=x.dtype.to_numpy()))

    def ones_like(self, x: Tensor) -> Tensor:
        return self._wrap(np.ones(x.shape, dtype=x.dtype.to_numpy()))

    def has_nan(self, x: Tensor) -> bool:
        if not x.dtype.is_floating:
            return False
        return bool(np.isnan(x.data).any())
