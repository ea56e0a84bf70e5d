"""
Differentiable unary functions.

One `UnaryFunction` subclass per op. Each subclass supplies:

- `compute(backend, x, save)`: the forward pass, normally a single backend
  kernel call. Ops whose derivative is cheapest in terms of their own output
  (`exp`, `sigmoid`, `tanh`) pass that output through `save`.
- `grad(backend, x, dy, saved)`: the derivative with respect to ``x``
  multiplied into the incoming gradient ``dy``, built from backend kernels
  and strict combinators.

Instances are the captured context of one call: the engine records
`instance.backward` on the tape, and the backward pass later evaluates the
`GradientThunk` it returns.

Non-differentiable ops (`ceil`, `floor`, `round`, `sign`, `step`) return an
exact zero gradient instead of failing.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from typing import Any, Sequence

from ...domain._backend import IBackend
from ...domain._dtype import DType
from ...domain._function import Function, SaveFn
from ...domain._tensor import ITensor
from ._strict import div_strict, mul_strict

_TWO_OVER_SQRT_PI = 2.0 / math.sqrt(math.pi)


def _scalar(backend: IBackend, value: float) -> ITensor:
    return backend.fill((), value, DType.FLOAT32)


def _to_float(backend: IBackend, x: ITensor) -> ITensor:
    if x.dtype.is_floating:
        return x
    return backend.cast(x, DType.FLOAT32)


class UnaryFunction(Function):
    """
    Base class for functions of a single tensor named ``"x"``.

    Parameters
    ----------
    x : ITensor
        The input tensor.
    **attrs : Any
        Scalar attributes forwarded to `compute` through ``self.attrs``.
    """

    def __init__(self, x: ITensor, **attrs: Any) -> None:
        super().__init__({"x": x}, **attrs)

    @property
    def x(self) -> ITensor:
        return self.inputs["x"]

    def forward(self, backend: IBackend, save: SaveFn) -> ITensor:
        self.backend = backend
        return self.compute(backend, self.x, save)

    def gradient(
        self, input_name: str, grad_out: ITensor, saved: Sequence[ITensor]
    ) -> ITensor:
        if input_name != "x":
            raise KeyError(f"{type(self).__name__} has no input named {input_name!r}")
        if self.backend is None:
            raise RuntimeError(
                f"{type(self).__name__}.gradient called before forward."
            )
        return self.grad(self.backend, self.x, grad_out, saved)

    @abstractmethod
    def compute(self, backend: IBackend, x: ITensor, save: SaveFn) -> ITensor: ...

    @abstractmethod
    def grad(
        self, backend: IBackend, x: ITensor, dy: ITensor, saved: Sequence[ITensor]
    ) -> ITensor: ...


class _ZeroGradFunction(UnaryFunction):
    """Piecewise-constant function whose gradient is defined as zero."""

    def grad(self, backend, x, dy, saved):
        return backend.zeros_like(dy)


# ----------------------------------------------------------------------
# Basic math
# ----------------------------------------------------------------------
class NegFn(UnaryFunction):
    """``-x``; gradient ``-dy``."""

    name = "neg"

    def compute(self, backend, x, save):
        return backend.neg(x)

    def grad(self, backend, x, dy, saved):
        return backend.neg(dy)


class CeilFn(_ZeroGradFunction):
    name = "ceil"

    def compute(self, backend, x, save):
        return backend.ceil(x)


class FloorFn(_ZeroGradFunction):
    name = "floor"

    def compute(self, backend, x, save):
        return backend.floor(x)


class SignFn(_ZeroGradFunction):
    name = "sign"

    def compute(self, backend, x, save):
        return backend.sign(x)


class RoundFn(_ZeroGradFunction):
    """Round half to even; zero gradient."""

    name = "round"

    def compute(self, backend, x, save):
        return backend.round(x)


class ExpFn(UnaryFunction):
    """
    Elementwise exponential.

    Backward:

        d(exp(x))/dx = exp(x) = y

    The forward output is saved and reused instead of recomputing ``exp``.
    """

    name = "exp"

    def compute(self, backend, x, save):
        return save(backend.exp(x))

    def grad(self, backend, x, dy, saved):
        (y,) = saved
        return mul_strict(backend, dy, y)


class Expm1Fn(UnaryFunction):
    name = "expm1"

    def compute(self, backend, x, save):
        return backend.expm1(x)

    def grad(self, backend, x, dy, saved):
        return mul_strict(backend, dy, backend.exp(x))


class LogFn(UnaryFunction):
    name = "log"

    def compute(self, backend, x, save):
        return backend.log(x)

    def grad(self, backend, x, dy, saved):
        return div_strict(backend, dy, _to_float(backend, x))


class Log1pFn(UnaryFunction):
    name = "log1p"

    def compute(self, backend, x, save):
        return backend.log1p(x)

    def grad(self, backend, x, dy, saved):
        return div_strict(backend, dy, backend.add(x, _scalar(backend, 1.0)))


class SqrtFn(UnaryFunction):
    name = "sqrt"

    def compute(self, backend, x, save):
        return backend.sqrt(x)

    def grad(self, backend, x, dy, saved):
        denom = backend.mul(backend.sqrt(x), _scalar(backend, 2.0))
        return div_strict(backend, dy, denom)


class RsqrtFn(UnaryFunction):
    """``1/sqrt(x)``; gradient ``-dy / (2 * x^1.5)``."""

    name = "rsqrt"

    def compute(self, backend, x, save):
        return backend.rsqrt(x)

    def grad(self, backend, x, dy, saved):
        denom = backend.mul(
            backend.pow(x, _scalar(backend, 1.5)), _scalar(backend, 2.0)
        )
        return backend.neg(div_strict(backend, dy, denom))


class SquareFn(UnaryFunction):
    name = "square"

    def compute(self, backend, x, save):
        return backend.square(x)

    def grad(self, backend, x, dy, saved):
        two_x = backend.mul(_to_float(backend, x), _scalar(backend, 2.0))
        return mul_strict(backend, dy, two_x)


class ReciprocalFn(UnaryFunction):
    name = "reciprocal"

    def compute(self, backend, x, save):
        return backend.reciprocal(x)

    def grad(self, backend, x, dy, saved):
        neg_x2 = backend.neg(backend.square(_to_float(backend, x)))
        return div_strict(backend, dy, neg_x2)


class AbsFn(UnaryFunction):
    """
    ``|x|``.

    Backward uses the sign-like step ``1 if x > 0 else -1``, so the slope at
    zero is ``-1``.
    """

    name = "abs"

    def compute(self, backend, x, save):
        return backend.abs(x)

    def grad(self, backend, x, dy, saved):
        slope = backend.where(
            backend.less_equal(_to_float(backend, x), _scalar(backend, 0.0)),
            _scalar(backend, -1.0),
            _scalar(backend, 1.0),
        )
        return mul_strict(backend, dy, slope)


class ClipByValueFn(UnaryFunction):
    """
    ``max(lo, min(x, hi))``.

    Attributes ``lo`` and ``hi`` are validated by the op before the function
    is built. The gradient passes ``dy`` through where ``lo <= x <= hi`` and is
    zero elsewhere.
    """

    name = "clipByValue"

    def compute(self, backend, x, save):
        return backend.clip(x, self.attrs["lo"], self.attrs["hi"])

    def grad(self, backend, x, dy, saved):
        inside = backend.logical_and(
            backend.greater_equal(x, _scalar(backend, self.attrs["lo"])),
            backend.less_equal(x, _scalar(backend, self.attrs["hi"])),
        )
        return backend.where(inside, dy, backend.zeros_like(dy))


class ErfFn(UnaryFunction):
    """Gauss error function; integer input is promoted to float32 first."""

    name = "erf"

    def compute(self, backend, x, save):
        return backend.erf(_to_float(backend, x))

    def grad(self, backend, x, dy, saved):
        xf = _to_float(backend, x)
        bell = backend.exp(backend.neg(backend.square(xf)))
        return mul_strict(
            backend, dy, backend.mul(_scalar(backend, _TWO_OVER_SQRT_PI), bell)
        )


class StepFn(_ZeroGradFunction):
    """
    ``1 if x > 0 else alpha * x``.

    The gradient is zero everywhere, including the ``alpha * x`` branch.
    """

    name = "step"

    def compute(self, backend, x, save):
        return backend.step(x, self.attrs.get("alpha", 0.0))


# ----------------------------------------------------------------------
# Activations
# ----------------------------------------------------------------------
class SigmoidFn(UnaryFunction):
    """
    Logistic sigmoid.

    Backward:

        d(sigmoid)/dx = y * (1 - y)

    with ``y`` the saved forward output.
    """

    name = "sigmoid"

    def compute(self, backend, x, save):
        return save(backend.sigmoid(x))

    def grad(self, backend, x, dy, saved):
        (y,) = saved
        return mul_strict(
            backend, dy, backend.mul(y, backend.sub(_scalar(backend, 1.0), y))
        )


class LogSigmoidFn(UnaryFunction):
    """``log(sigmoid(x))`` evaluated as ``-softplus(-x)``."""

    name = "logSigmoid"

    def compute(self, backend, x, save):
        return backend.neg(backend.softplus(backend.neg(x)))

    def grad(self, backend, x, dy, saved):
        return mul_strict(backend, dy, backend.sigmoid(backend.neg(x)))


class SoftplusFn(UnaryFunction):
    name = "softplus"

    def compute(self, backend, x, save):
        return backend.softplus(x)

    def grad(self, backend, x, dy, saved):
        return mul_strict(backend, dy, backend.sigmoid(x))


# ----------------------------------------------------------------------
# Trigonometric
# ----------------------------------------------------------------------
class SinFn(UnaryFunction):
    name = "sin"

    def compute(self, backend, x, save):
        return backend.sin(x)

    def grad(self, backend, x, dy, saved):
        return mul_strict(backend, backend.cos(x), dy)


class CosFn(UnaryFunction):
    name = "cos"

    def compute(self, backend, x, save):
        return backend.cos(x)

    def grad(self, backend, x, dy, saved):
        return mul_strict(backend, backend.neg(backend.sin(x)), dy)


class TanFn(UnaryFunction):
    name = "tan"

    def compute(self, backend, x, save):
        return backend.tan(x)

    def grad(self, backend, x, dy, saved):
        return div_strict(backend, dy, backend.square(backend.cos(x)))


class AsinFn(UnaryFunction):
    name = "asin"

    def compute(self, backend, x, save):
        return backend.asin(x)

    def grad(self, backend, x, dy, saved):
        one_minus_x2 = backend.sub(
            _scalar(backend, 1.0), backend.square(_to_float(backend, x))
        )
        return div_strict(backend, dy, backend.sqrt(one_minus_x2))


class AcosFn(UnaryFunction):
    name = "acos"

    def compute(self, backend, x, save):
        return backend.acos(x)

    def grad(self, backend, x, dy, saved):
        one_minus_x2 = backend.sub(
            _scalar(backend, 1.0), backend.square(_to_float(backend, x))
        )
        return backend.neg(div_strict(backend, dy, backend.sqrt(one_minus_x2)))


class AtanFn(UnaryFunction):
    name = "atan"

    def compute(self, backend, x, save):
        return backend.atan(x)

    def grad(self, backend, x, dy, saved):
        one_plus_x2 = backend.add(
            _scalar(backend, 1.0), backend.square(_to_float(backend, x))
        )
        return div_strict(backend, dy, one_plus_x2)


# ----------------------------------------------------------------------
# Hyperbolic
# ----------------------------------------------------------------------
class SinhFn(UnaryFunction):
    name = "sinh"

    def compute(self, backend, x, save):
        return backend.sinh(x)

    def grad(self, backend, x, dy, saved):
        return mul_strict(backend, backend.cosh(x), dy)


class CoshFn(UnaryFunction):
    name = "cosh"

    def compute(self, backend, x, save):
        return backend.cosh(x)

    def grad(self, backend, x, dy, saved):
        return mul_strict(backend, backend.sinh(x), dy)


class TanhFn(UnaryFunction):
    """
    Hyperbolic tangent.

    Backward:

        d(tanh(x))/dx = 1 - y^2

    with ``y`` the saved forward output.
    """

    name = "tanh"

    def compute(self, backend, x, save):
        return save(backend.tanh(x))

    def grad(self, backend, x, dy, saved):
        (y,) = saved
        return mul_strict(
            backend, backend.sub(_scalar(backend, 1.0), backend.square(y)), dy
        )


class AsinhFn(UnaryFunction):
    name = "asinh"

    def compute(self, backend, x, save):
        return backend.asinh(x)

    def grad(self, backend, x, dy, saved):
        one_plus_x2 = backend.add(
            _scalar(backend, 1.0), backend.square(_to_float(backend, x))
        )
        return div_strict(backend, dy, backend.sqrt(one_plus_x2))


class AcoshFn(UnaryFunction):
    name = "acosh"

    def compute(self, backend, x, save):
        return backend.acosh(x)

    def grad(self, backend, x, dy, saved):
        x2_minus_one = backend.sub(
            backend.square(_to_float(backend, x)), _scalar(backend, 1.0)
        )
        return div_strict(backend, dy, backend.sqrt(x2_minus_one))


class AtanhFn(UnaryFunction):
    name = "atanh"

    def compute(self, backend, x, save):
        return backend.atanh(x)

    def grad(self, backend, x, dy, saved):
        one_minus_x2 = backend.sub(
            _scalar(backend, 1.0), backend.square(_to_float(backend, x))
        )
        return div_strict(backend, dy, one_minus_x2)
