"""
Functional gradient helpers built on `Engine.gradients`.

- ``grad(f)(x, dy=None)`` returns ``df/dx``
- ``grads(f)(xs, dy=None)`` returns ``[df/dx for x in xs]``
- ``value_and_grad(f)(x, dy=None)`` returns ``(f(x), df/dx)``
- ``value_and_grads(f)(xs, dy=None)`` returns ``(f(*xs), [df/dx ...])``

Arguments are converted with `convert_to_tensor`, so Python scalars and
nested lists are accepted wherever a tensor is.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from ...domain._errors import InvalidArgumentError
from ..engine._engine import Engine
from ..engine._environment import get_engine
from ..tensor._convert import TensorLike, convert_to_tensor
from ..tensor._tensor import Tensor


def _check_f(f: object, name: str) -> None:
    if not callable(f):
        raise InvalidArgumentError(name, "The f passed in must be a function.")


def _convert_optional_dy(dy: Optional[TensorLike], name: str) -> Optional[Tensor]:
    return None if dy is None else convert_to_tensor(dy, "dy", name)


def _convert_xs(xs: Sequence[TensorLike], name: str) -> list[Tensor]:
    if isinstance(xs, (str, bytes)) or not isinstance(xs, (list, tuple)):
        raise InvalidArgumentError(
            name, "The args passed in must be a list or tuple of tensors."
        )
    return [convert_to_tensor(x, f"args[{i}]", name) for i, x in enumerate(xs)]


def value_and_grad(
    f: Callable[[Tensor], Tensor], *, engine: Optional[Engine] = None
) -> Callable[..., tuple[Tensor, Tensor]]:
    """
    Wrap `f(x)` into a function returning ``(f(x), df/dx)``.

    Parameters
    ----------
    f : Callable[[Tensor], Tensor]
        Function of a single tensor.
    engine : Engine, optional
        Engine used for recording. Defaults to the default engine.

    Returns
    -------
    Callable
        ``(x, dy=None) -> (y, dx)``. `dy` defaults to ones shaped like ``y``.
    """
    _check_f(f, "value_and_grad")

    def _wrapped(x: TensorLike, dy: Optional[TensorLike] = None):
        x_ = convert_to_tensor(x, "x", "value_and_grad")
        dy_ = _convert_optional_dy(dy, "value_and_grad")
        y, (dx,) = get_engine(engine).gradients(lambda: f(x_), [x_], dy_)
        return y, dx

    return _wrapped


def value_and_grads(
    f: Callable[..., Tensor], *, engine: Optional[Engine] = None
) -> Callable[..., tuple[Tensor, list[Tensor]]]:
    """
    Wrap `f(*xs)` into a function returning ``(f(*xs), [df/dx for x in xs])``.
    """
    _check_f(f, "value_and_grads")

    def _wrapped(xs: Sequence[TensorLike], dy: Optional[TensorLike] = None):
        xs_ = _convert_xs(xs, "value_and_grads")
        dy_ = _convert_optional_dy(dy, "value_and_grads")
        return get_engine(engine).gradients(lambda: f(*xs_), xs_, dy_)

    return _wrapped


def grad(
    f: Callable[[Tensor], Tensor], *, engine: Optional[Engine] = None
) -> Callable[..., Tensor]:
    """
    Wrap `f(x)` into a function returning ``df/dx``.

    Example
    -------
    >>> g = grad(lambda x: square(x))
    >>> g(tensor([1.0, 2.0])).tolist()
    [2.0, 4.0]
    """
    inner = value_and_grad(f, engine=engine)

    def _wrapped(x: TensorLike, dy: Optional[TensorLike] = None) -> Tensor:
        return inner(x, dy)[1]

    return _wrapped


def grads(
    f: Callable[..., Tensor], *, engine: Optional[Engine] = None
) -> Callable[..., list[Tensor]]:
    """Wrap `f(*xs)` into a function returning ``[df/dx for x in xs]``."""
    inner = value_and_grads(f, engine=engine)

    def _wrapped(xs: Sequence[TensorLike], dy: Optional[TensorLike] = None):
        return inner(xs, dy)[1]

    return _wrapped
