"""
Gradient tape: kernel invocation records and reverse-mode replay.

A `Tape` is an ordered log of `TapeRecord` entries, one per kernel executed
while recording was active. Each record keeps the named input tensors, the
output tensor, the values saved by the forward function, and the gradient
rule. Nothing is differentiated at record time; the rule is only called by
`backprop`.

Backward pass
-------------
`backprop` runs in two phases, mirroring how reverse-mode engines keep the
replay cheap:

1. `filter_records` keeps only records on a path from one of the requested
   inputs ``xs`` to the output ``y``, and prunes each kept record's inputs
   down to those that lie on such a path.
2. Records are visited newest first. For each one the gradient rule is
   called with the accumulated output gradient and the saved values, and
   every pruned input's thunk is evaluated and accumulated.

Lifetime
--------
Records keep their tensors alive until `Tape.dispose()` is called. A backward
pass never removes records, so an exception raised halfway through the
replay leaves every record intact until the tape is disposed.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Mapping, Optional, Sequence

from ...domain._backend import IBackend
from ...domain._errors import GradientError, ShapeMismatchError
from ...domain._tensor import ITensor

logger = logging.getLogger(__name__)

GradientRule = Callable[
    [ITensor, Sequence[ITensor]], Mapping[str, Callable[[], ITensor]]
]


@dataclass(frozen=True)
class TapeRecord:
    """
    One kernel invocation recorded under active differentiation.

    Attributes
    ----------
    id : int
        Position of the record on its tape (0-based, chronological).
    name : str
        Op name (e.g. ``"exp"``).
    inputs : Mapping[str, ITensor]
        Named input tensors consumed by the kernel.
    output : ITensor
        Tensor produced by the kernel.
    saved : tuple[ITensor, ...]
        Values saved by the forward function. Empty unless it called `save`.
    gradient : Optional[GradientRule]
        Factory ``(dy, saved) -> {input_name: thunk}``; None for kernels
        registered without a gradient.
    input_names : tuple[str, ...]
        Every input name the kernel was called with. Unlike `inputs`, this
        is not pruned by `filter_records`; empty means ``tuple(inputs)``.
    """

    id: int
    name: str
    inputs: Mapping[str, ITensor]
    output: ITensor
    saved: tuple = ()
    gradient: Optional[GradientRule] = None
    input_names: tuple = ()

    def known_input_names(self) -> tuple:
        return self.input_names or tuple(self.inputs)


class Tape:
    """
    Ordered, append-only log of `TapeRecord` entries.

    Notes
    -----
    A tape has a single writer: the engine appending records during the
    forward pass. Independent differentiation sessions use independent
    tapes.
    """

    def __init__(self) -> None:
        self._records: list[TapeRecord] = []
        self._disposed = False

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._records)} records"
        return f"Tape({state})"

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TapeRecord]:
        return iter(tuple(self._records))

    @property
    def records(self) -> tuple[TapeRecord, ...]:
        """Records in chronological order."""
        return tuple(self._records)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def reversed_records(self) -> Iterator[TapeRecord]:
        """Iterate records newest first."""
        return reversed(tuple(self._records))

    def next_record_id(self) -> int:
        return len(self._records)

    def append(self, record: TapeRecord) -> None:
        """
        Append a record.

        Raises
        ------
        RuntimeError
            If the tape has been disposed.
        """
        if self._disposed:
            raise RuntimeError("Cannot record on a disposed tape.")
        self._records.append(record)

    def dispose(self) -> None:
        """Drop every record (and the references they hold to tensors)."""
        if not self._disposed:
            logger.debug("Disposing tape with %d records", len(self._records))
        self._records.clear()
        self._disposed = True


def filter_records(
    records: Sequence[TapeRecord], xs: Sequence[ITensor], y: ITensor
) -> list[TapeRecord]:
    """
    Keep the records on a path from any of `xs` to `y`.

    Parameters
    ----------
    records : Sequence[TapeRecord]
        Records in chronological order.
    xs : Sequence[ITensor]
        Tensors to differentiate with respect to.
    y : ITensor
        The output being differentiated.

    Returns
    -------
    list[TapeRecord]
        Kept records in chronological order. Each has its `inputs` pruned to
        the inputs that both depend on `xs` and lead to `y`.
    """
    from_x: set[int] = {x.id for x in xs}
    records_from_x: set[int] = set()
    for rec in records:
        if any(t.id in from_x for t in rec.inputs.values()):
            from_x.add(rec.output.id)
            records_from_x.add(rec.id)

    to_y: set[int] = {y.id}
    records_to_y: set[int] = set()
    for rec in reversed(records):
        if rec.output.id in to_y:
            for t in rec.inputs.values():
                to_y.add(t.id)
            records_to_y.add(rec.id)

    kept: list[TapeRecord] = []
    for rec in records:
        if rec.id not in records_from_x or rec.id not in records_to_y:
            continue
        pruned = {
            name: t
            for name, t in rec.inputs.items()
            if t.id in from_x and t.id in to_y
        }
        kept.append(
            dataclasses.replace(
                rec, inputs=pruned, input_names=rec.known_input_names()
            )
        )
    return kept


def backprop(
    records: Sequence[TapeRecord],
    y: ITensor,
    dy: ITensor,
    backend: IBackend,
) -> dict[int, ITensor]:
    """
    Replay `records` in reverse, accumulating gradients keyed by tensor id.

    Parameters
    ----------
    records : Sequence[TapeRecord]
        Filtered records (see `filter_records`) in chronological order.
    y : ITensor
        Output tensor the replay starts from.
    dy : ITensor
        Gradient of the loss with respect to `y`.
    backend : IBackend
        Backend used to sum gradients flowing into the same tensor.

    Returns
    -------
    dict[int, ITensor]
        Accumulated gradient per tensor id (including `y`).

    Raises
    ------
    GradientError
        If a record has no gradient rule, or the rule omits a needed input.
    ShapeMismatchError
        If a gradient's shape differs from its input's shape.
    """
    grads: dict[int, ITensor] = {y.id: dy}

    for rec in reversed(records):
        grad_out = grads.get(rec.output.id)
        if grad_out is None:
            continue
        if rec.gradient is None:
            raise GradientError(
                f"Cannot compute gradient: gradient function not found for {rec.name}."
            )

        thunks = rec.gradient(grad_out, rec.saved)
        logger.debug("Backprop through %s (record %d)", rec.name, rec.id)

        unknown = set(thunks) - set(rec.known_input_names())
        if unknown:
            raise GradientError(
                f"Gradient function for {rec.name} returned gradients for "
                f"unknown inputs: {sorted(unknown)}."
            )

        for name, x in rec.inputs.items():
            if name not in thunks:
                raise GradientError(
                    f"Cannot backprop through input {name} of {rec.name}. "
                    f"Available gradients found: {sorted(thunks)}."
                )
            g = thunks[name]()
            if tuple(g.shape) != tuple(x.shape):
                raise ShapeMismatchError(f"{rec.name} gradient", x.shape, g.shape)
            prev = grads.get(x.id)
            grads[x.id] = g if prev is None else backend.add(prev, g)

    return grads
