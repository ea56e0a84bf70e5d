"""
Strict (non-broadcasting) elementwise combinators.

Gradient rules combine the incoming gradient with values derived from the
forward inputs. Those operands always have the same shape, so the rules use
these strict variants: a shape difference indicates a wiring bug and fails
immediately with `ShapeMismatchError` instead of being silently broadcast.
"""

from ...domain._backend import IBackend
from ...domain._errors import ShapeMismatchError
from ...domain._tensor import ITensor


def assert_shapes_match(a: ITensor, b: ITensor, op: str) -> None:
    """
    Raise `ShapeMismatchError` unless `a` and `b` have identical shapes.
    """
    if tuple(a.shape) != tuple(b.shape):
        raise ShapeMismatchError(op, a.shape, b.shape)


def add_strict(backend: IBackend, a: ITensor, b: ITensor) -> ITensor:
    assert_shapes_match(a, b, "add_strict")
    return backend.add(a, b)


def sub_strict(backend: IBackend, a: ITensor, b: ITensor) -> ITensor:
    assert_shapes_match(a, b, "sub_strict")
    return backend.sub(a, b)


def mul_strict(backend: IBackend, a: ITensor, b: ITensor) -> ITensor:
    assert_shapes_match(a, b, "mul_strict")
    return backend.mul(a, b)


def div_strict(backend: IBackend, a: ITensor, b: ITensor) -> ITensor:
    assert_shapes_match(a, b, "div_strict")
    return backend.div(a, b)
