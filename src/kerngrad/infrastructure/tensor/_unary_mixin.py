"""
Unary operation mixin exposing the op catalogue as Tensor methods.

This module declares :class:`TensorMixinUnary`, which lets callers write
``x.exp()`` instead of ``kerngrad.exp(x)``. Every method forwards to the
functional op of the same name, so method calls go through the same
conversion, eager checks, kernel dispatch and tape recording as the
functional API.

The op package imports `Tensor`, so the import here is deferred to call
time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._tensor import Tensor


def _ops():
    from ..ops import unary

    return unary


class TensorMixinUnary:
    """
    Mixin forwarding Tensor methods to :mod:`kerngrad.infrastructure.ops.unary`.

    Notes
    -----
    Methods use the default environment's engine. Pass tensors to the
    functional ops with an explicit ``engine=`` to run on another engine.
    """

    __slots__ = ()

    # ----------------------------
    # Unary operators
    # ----------------------------
    def __neg__(self) -> "Tensor":
        return _ops().neg(self)

    def __abs__(self) -> "Tensor":
        return _ops().abs(self)

    # ----------------------------
    # Basic math
    # ----------------------------
    def neg(self) -> "Tensor":
        return _ops().neg(self)

    def ceil(self) -> "Tensor":
        return _ops().ceil(self)

    def floor(self) -> "Tensor":
        return _ops().floor(self)

    def sign(self) -> "Tensor":
        return _ops().sign(self)

    def round(self) -> "Tensor":
        """Round half to even, elementwise."""
        return _ops().round(self)

    def exp(self) -> "Tensor":
        return _ops().exp(self)

    def expm1(self) -> "Tensor":
        return _ops().expm1(self)

    def log(self) -> "Tensor":
        return _ops().log(self)

    def log1p(self) -> "Tensor":
        return _ops().log1p(self)

    def sqrt(self) -> "Tensor":
        return _ops().sqrt(self)

    def rsqrt(self) -> "Tensor":
        return _ops().rsqrt(self)

    def square(self) -> "Tensor":
        return _ops().square(self)

    def reciprocal(self) -> "Tensor":
        return _ops().reciprocal(self)

    def abs(self) -> "Tensor":
        return _ops().abs(self)

    def clip_by_value(self, clip_value_min: float, clip_value_max: float) -> "Tensor":
        return _ops().clip_by_value(self, clip_value_min, clip_value_max)

    def erf(self) -> "Tensor":
        return _ops().erf(self)

    def step(self, alpha: float = 0.0) -> "Tensor":
        return _ops().step(self, alpha)

    # ----------------------------
    # Activations
    # ----------------------------
    def sigmoid(self) -> "Tensor":
        return _ops().sigmoid(self)

    def log_sigmoid(self) -> "Tensor":
        return _ops().log_sigmoid(self)

    def softplus(self) -> "Tensor":
        return _ops().softplus(self)

    # ----------------------------
    # Trigonometric / hyperbolic
    # ----------------------------
    def sin(self) -> "Tensor":
        return _ops().sin(self)

    def cos(self) -> "Tensor":
        return _ops().cos(self)

    def tan(self) -> "Tensor":
        return _ops().tan(self)

    def asin(self) -> "Tensor":
        return _ops().asin(self)

    def acos(self) -> "Tensor":
        return _ops().acos(self)

    def atan(self) -> "Tensor":
        return _ops().atan(self)

    def sinh(self) -> "Tensor":
        return _ops().sinh(self)

    def cosh(self) -> "Tensor":
        return _ops().cosh(self)

    def tanh(self) -> "Tensor":
        return _ops().tanh(self)

    def asinh(self) -> "Tensor":
        return _ops().asinh(self)

    def acosh(self) -> "Tensor":
        return _ops().acosh(self)

    def atanh(self) -> "Tensor":
        return _ops().atanh(self)
