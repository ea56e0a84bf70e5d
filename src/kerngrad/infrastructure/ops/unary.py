"""
Elementwise unary operations.

Every op follows the same calling convention:

1. convert the argument with `convert_to_tensor` (fails before any kernel
   runs if the value is not tensor-like),
2. check op-specific preconditions eagerly (`clip_by_value` bounds, `erf`
   dtype),
3. build the op's `Function` (the captured context of this call),
4. dispatch through `Engine.run_kernel`, which runs exactly one backend
   kernel and records the call when differentiation is active.

All ops accept an optional keyword-only ``engine``. Without it, the default
environment's engine is used.

Every op is registered in the op registry under its stable public name.
Names that are camelCase in that registry (``clipByValue``, ``logSigmoid``)
are exported both as snake_case functions and as camelCase aliases.
"""

from __future__ import annotations

import math
import numbers
from typing import Optional, Type

from ...domain._dtype import DType
from ...domain._errors import InvalidArgumentError, InvalidDTypeError
from ..engine._engine import Engine
from ..engine._environment import get_engine
from ..tensor._convert import TensorLike, convert_to_tensor
from ..tensor._tensor import Tensor
from . import _unary_functions as fns
from ._op_registry import op


def _apply(
    fn_cls: Type[fns.UnaryFunction], x: Tensor, engine: Optional[Engine], **attrs
) -> Tensor:
    fn = fn_cls(x, **attrs)
    return get_engine(engine).run_kernel(
        fn.forward, fn.inputs, fn.backward, name=fn.name
    )


def _run(
    fn_cls: Type[fns.UnaryFunction],
    x: TensorLike,
    engine: Optional[Engine],
    **attrs,
) -> Tensor:
    return _apply(fn_cls, convert_to_tensor(x, "x", fn_cls.name), engine, **attrs)


def _require_real(value: object, arg: str, op_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(
            op_name, f"{arg} must be a real number, got {type(value).__name__}."
        )
    value = float(value)
    if math.isnan(value):
        raise InvalidArgumentError(op_name, f"{arg} must not be NaN.")
    return value


# ----------------------------------------------------------------------
# Basic math
# ----------------------------------------------------------------------
def neg(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes ``-1 * x`` element-wise.

    Parameters
    ----------
    x : TensorLike
        The input tensor.
    engine : Engine, optional
        Engine to run on. Defaults to the default environment's engine.

    Returns
    -------
    Tensor
        ``-x`` with the dtype of `x` (bool is promoted to int32).
    """
    return _run(fns.NegFn, x, engine)


def ceil(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes the ceiling of `x` element-wise.

    The gradient is defined as zero everywhere.
    """
    return _run(fns.CeilFn, x, engine)


def floor(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes the floor of `x` element-wise.

    The gradient is defined as zero everywhere.
    """
    return _run(fns.FloorFn, x, engine)


def sign(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Returns an element-wise indication of the sign of a number.

    Output elements are -1, 0 or 1, and NaN for NaN inputs. The gradient is
    defined as zero everywhere.
    """
    return _run(fns.SignFn, x, engine)


def round(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes round of `x` element-wise, rounding half to even.

    ``round([0.5, 1.5, 2.5]) == [0, 2, 2]``. The gradient is defined as zero
    everywhere.
    """
    return _run(fns.RoundFn, x, engine)


def exp(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes the exponential of `x` element-wise: ``e ^ x``.

    The output is saved on the tape and reused by the gradient.
    """
    return _run(fns.ExpFn, x, engine)


def expm1(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes ``e ^ x - 1`` element-wise."""
    return _run(fns.Expm1Fn, x, engine)


def log(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes the natural logarithm of `x` element-wise.

    ``log(0) == -inf`` and negative inputs produce NaN.
    """
    return _run(fns.LogFn, x, engine)


def log1p(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes ``ln(1 + x)`` element-wise."""
    return _run(fns.Log1pFn, x, engine)


def sqrt(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes the square root of `x` element-wise."""
    return _run(fns.SqrtFn, x, engine)


def rsqrt(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes the reciprocal of the square root of `x` element-wise."""
    return _run(fns.RsqrtFn, x, engine)


def square(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes ``x * x`` element-wise."""
    return _run(fns.SquareFn, x, engine)


def reciprocal(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes ``1 / x`` element-wise."""
    return _run(fns.ReciprocalFn, x, engine)


def abs(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes the absolute value of `x` element-wise.

    The gradient uses slope -1 at zero.
    """
    return _run(fns.AbsFn, x, engine)


def clip_by_value(
    x: TensorLike,
    clip_value_min: float,
    clip_value_max: float,
    *,
    engine: Optional[Engine] = None,
) -> Tensor:
    """
    Clips values element-wise: ``max(min(x, clip_value_max), clip_value_min)``.

    Parameters
    ----------
    x : TensorLike
        The input tensor.
    clip_value_min : float
        Lower bound.
    clip_value_max : float
        Upper bound.
    engine : Engine, optional
        Engine to run on.

    Returns
    -------
    Tensor
        The clipped tensor. NaN elements stay NaN.

    Raises
    ------
    InvalidArgumentError
        If ``clip_value_min > clip_value_max`` or a bound is not a real
        number. Raised before any kernel runs.
    """
    x_ = convert_to_tensor(x, "x", fns.ClipByValueFn.name)
    lo = _require_real(clip_value_min, "clip_value_min", fns.ClipByValueFn.name)
    hi = _require_real(clip_value_max, "clip_value_max", fns.ClipByValueFn.name)
    if lo > hi:
        raise InvalidArgumentError(
            "clip",
            f"min ({clip_value_min}) must be less than or equal to "
            f"max ({clip_value_max}).",
        )
    return _apply(fns.ClipByValueFn, x_, engine, lo=lo, hi=hi)


def erf(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes the Gauss error function of `x` element-wise.

    Raises
    ------
    InvalidDTypeError
        If `x` is neither int32 nor float32. int32 input is promoted to
        float32 before the kernel runs.
    """
    x_ = convert_to_tensor(x, "x", fns.ErfFn.name)
    if x_.dtype not in (DType.INT32, DType.FLOAT32):
        raise InvalidDTypeError(
            fns.ErfFn.name,
            str(x_.dtype),
            (DType.INT32.value, DType.FLOAT32.value),
        )
    return _apply(fns.ErfFn, x_, engine)


def step(
    x: TensorLike, alpha: float = 0.0, *, engine: Optional[Engine] = None
) -> Tensor:
    """
    Computes ``1 if x > 0 else alpha * x`` element-wise.

    Parameters
    ----------
    x : TensorLike
        The input tensor.
    alpha : float, optional
        Slope applied to non-positive elements. Defaults to 0.

    Notes
    -----
    The gradient is zero everywhere, including the ``alpha * x`` branch.
    """
    x_ = convert_to_tensor(x, "x", fns.StepFn.name)
    a = _require_real(alpha, "alpha", fns.StepFn.name)
    return _apply(fns.StepFn, x_, engine, alpha=a)


# ----------------------------------------------------------------------
# Activations
# ----------------------------------------------------------------------
def sigmoid(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes ``1 / (1 + exp(-x))`` element-wise.

    The output is saved on the tape and reused by the gradient.
    """
    return _run(fns.SigmoidFn, x, engine)


def log_sigmoid(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes ``log(sigmoid(x))`` element-wise.

    Evaluated as ``-softplus(-x)`` for numerical stability.
    """
    return _run(fns.LogSigmoidFn, x, engine)


def softplus(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes ``log(exp(x) + 1)`` element-wise."""
    return _run(fns.SoftplusFn, x, engine)


# ----------------------------------------------------------------------
# Trigonometric
# ----------------------------------------------------------------------
def sin(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes sin of `x` element-wise."""
    return _run(fns.SinFn, x, engine)


def cos(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes cos of `x` element-wise."""
    return _run(fns.CosFn, x, engine)


def tan(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes tan of `x` element-wise."""
    return _run(fns.TanFn, x, engine)


def asin(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes asin of `x` element-wise; NaN outside ``[-1, 1]``."""
    return _run(fns.AsinFn, x, engine)


def acos(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes acos of `x` element-wise; NaN outside ``[-1, 1]``."""
    return _run(fns.AcosFn, x, engine)


def atan(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes atan of `x` element-wise."""
    return _run(fns.AtanFn, x, engine)


# ----------------------------------------------------------------------
# Hyperbolic
# ----------------------------------------------------------------------
def sinh(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes hyperbolic sin of `x` element-wise."""
    return _run(fns.SinhFn, x, engine)


def cosh(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes hyperbolic cos of `x` element-wise."""
    return _run(fns.CoshFn, x, engine)


def tanh(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """
    Computes hyperbolic tangent of `x` element-wise.

    The output is saved on the tape and reused by the gradient.
    """
    return _run(fns.TanhFn, x, engine)


def asinh(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes inverse hyperbolic sin of `x` element-wise."""
    return _run(fns.AsinhFn, x, engine)


def acosh(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes inverse hyperbolic cos of `x` element-wise; NaN below 1."""
    return _run(fns.AcoshFn, x, engine)


def atanh(x: TensorLike, *, engine: Optional[Engine] = None) -> Tensor:
    """Computes inverse hyperbolic tan of `x` element-wise."""
    return _run(fns.AtanhFn, x, engine)


# ----------------------------------------------------------------------
# Registration
# ----------------------------------------------------------------------
op("abs", abs)
op("acos", acos)
op("acosh", acosh)
op("asin", asin)
op("asinh", asinh)
op("atan", atan)
op("atanh", atanh)
op("ceil", ceil)
op("clipByValue", clip_by_value)
op("cos", cos)
op("cosh", cosh)
op("erf", erf)
op("exp", exp)
op("expm1", expm1)
op("floor", floor)
op("log", log)
op("log1p", log1p)
op("logSigmoid", log_sigmoid)
op("neg", neg)
op("reciprocal", reciprocal)
op("round", round)
op("rsqrt", rsqrt)
op("sigmoid", sigmoid)
op("sign", sign)
op("sin", sin)
op("sinh", sinh)
op("softplus", softplus)
op("sqrt", sqrt)
op("square", square)
op("step", step)
op("tan", tan)
op("tanh", tanh)

clipByValue = clip_by_value
logSigmoid = log_sigmoid
