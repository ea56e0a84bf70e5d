"""
Public tensor operations.

Public API
----------
- Elementwise unary ops (``neg``, ``exp``, ``sigmoid``, ``tanh``, ...)
- Gradient helpers (``grad``, ``grads``, ``value_and_grad``,
  ``value_and_grads``)
- ``op_registry``: public op names and documentation metadata
"""

from ._op_registry import OpRegistry, OpSpec, op, op_registry
from ._strict import add_strict, assert_shapes_match, div_strict, mul_strict, sub_strict
from .gradients import grad, grads, value_and_grad, value_and_grads
from .unary import (
    abs,
    acos,
    acosh,
    asin,
    asinh,
    atan,
    atanh,
    ceil,
    clip_by_value,
    clipByValue,
    cos,
    cosh,
    erf,
    exp,
    expm1,
    floor,
    log,
    log1p,
    log_sigmoid,
    logSigmoid,
    neg,
    reciprocal,
    round,
    rsqrt,
    sigmoid,
    sign,
    sin,
    sinh,
    softplus,
    sqrt,
    square,
    step,
    tan,
    tanh,
)

UNARY_OPS = (
    "abs",
    "acos",
    "acosh",
    "asin",
    "asinh",
    "atan",
    "atanh",
    "ceil",
    "clip_by_value",
    "cos",
    "cosh",
    "erf",
    "exp",
    "expm1",
    "floor",
    "log",
    "log1p",
    "log_sigmoid",
    "neg",
    "reciprocal",
    "round",
    "rsqrt",
    "sigmoid",
    "sign",
    "sin",
    "sinh",
    "softplus",
    "sqrt",
    "square",
    "step",
    "tan",
    "tanh",
)

__all__ = [
    *UNARY_OPS,
    "clipByValue",
    "logSigmoid",
    "OpRegistry",
    "OpSpec",
    "add_strict",
    "assert_shapes_match",
    "div_strict",
    "grad",
    "grads",
    "mul_strict",
    "op",
    "op_registry",
    "sub_strict",
    "value_and_grad",
    "value_and_grads",
]
