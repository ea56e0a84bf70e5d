"""
Autograd function interface definitions.

This module defines the abstract base class for differentiable operations
and the lazy gradient thunk they hand to the tape.

A `Function` instance is the captured context of one op invocation: it
holds the named input tensors and any scalar attributes (clip bounds, step
slope) the op was called with. The kernel-dispatch engine calls
`forward(backend, save)` exactly once and records `backward` as the
gradient rule. `backward` never computes anything itself; it returns one
:class:`GradientThunk` per input, and the backward pass decides which of
them to evaluate.

This design is inspired by function-level autograd systems (e.g., PyTorch's
`autograd.Function`) while replacing lexical closures with explicit,
inspectable objects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Mapping, Optional, Sequence

from ._backend import IBackend
from ._tensor import ITensor

SaveFn = Callable[[ITensor], ITensor]


@dataclass(frozen=True)
class GradientThunk:
    """
    Deferred gradient of one function input.

    Attributes
    ----------
    function : Function
        The captured context that knows the derivative.
    input_name : str
        Name of the input this thunk produces a gradient for.
    grad_out : ITensor
        Gradient of the loss with respect to the function output.
    saved : tuple[ITensor, ...]
        Values saved during the forward pass, in save order.
    """

    function: "Function"
    input_name: str
    grad_out: ITensor
    saved: tuple

    def evaluate(self) -> ITensor:
        """Compute and return the input gradient."""
        return self.function.gradient(self.input_name, self.grad_out, self.saved)

    def __call__(self) -> ITensor:
        return self.evaluate()


class Function(ABC):
    """
    Abstract base class for differentiable operations.

    Parameters
    ----------
    inputs : Mapping[str, ITensor]
        Named input tensors. The names are the keys the gradient rule
        reports gradients under.
    **attrs : Any
        Non-tensor attributes of the call (e.g. ``lo``/``hi`` for clipping).

    Attributes
    ----------
    name : ClassVar[str]
        Public op name recorded on the tape (e.g. ``"clipByValue"``).
    backend : Optional[IBackend]
        Backend the forward pass ran on. Gradient computations reuse it.
    """

    name: ClassVar[str] = ""

    def __init__(self, inputs: Mapping[str, ITensor], **attrs: Any) -> None:
        self.inputs: dict[str, ITensor] = dict(inputs)
        self.attrs: dict[str, Any] = attrs
        self.backend: Optional[IBackend] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(inputs={list(self.inputs)}, attrs={self.attrs})"

    @abstractmethod
    def forward(self, backend: IBackend, save: SaveFn) -> ITensor:
        """
        Perform the forward computation on `backend`.

        Parameters
        ----------
        backend : IBackend
            The active compute backend.
        save : Callable[[ITensor], ITensor]
            Registers a value for the backward pass and returns it unchanged.

        Returns
        -------
        ITensor
            The output tensor.
        """
        ...

    @abstractmethod
    def gradient(
        self, input_name: str, grad_out: ITensor, saved: Sequence[ITensor]
    ) -> ITensor:
        """
        Compute the gradient with respect to the input named `input_name`.

        Parameters
        ----------
        input_name : str
            Key of `inputs` to differentiate with respect to.
        grad_out : ITensor
            Gradient of the loss with respect to the output.
        saved : Sequence[ITensor]
            Values registered through `save` during `forward`.

        Returns
        -------
        ITensor
            Gradient with the shape of the input.
        """
        ...

    def backward(
        self, grad_out: ITensor, saved: Sequence[ITensor]
    ) -> dict[str, GradientThunk]:
        """
        Build the lazy gradient map for this invocation.

        Returns
        -------
        dict[str, GradientThunk]
            One thunk per input name. Nothing is evaluated here.
        """
        saved_t = tuple(saved)
        return {
            name: GradientThunk(self, name, grad_out, saved_t) for name in self.inputs
        }
