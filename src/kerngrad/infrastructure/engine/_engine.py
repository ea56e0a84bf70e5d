"""
Kernel-dispatch engine.

The `Engine` is the single entry point every op goes through. It owns:

- the active compute backend (injected, replaceable),
- a stack of tapes (the innermost one receives records),
- a recording pause counter used by `no_grad()`.

`run_kernel` executes a forward function against the backend and, when
recording is active, appends exactly one `TapeRecord`. `gradients` drives a
full forward/backward session on a private tape.

An `Engine` is not thread-safe. Concurrent differentiation sessions must
use separate engines (or at least separate tapes created on the thread that
records into them).
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping, Optional, Sequence

from ...domain._backend import IBackend
from ...domain._errors import (
    DeviceMismatchError,
    GradientError,
    NaNResultError,
    ShapeMismatchError,
)
from ...domain._tensor import ITensor
from ._context import KernelContext
from ._flags import Flags
from ._tape import GradientRule, Tape, TapeRecord, backprop, filter_records

logger = logging.getLogger(__name__)

ForwardFn = Callable[[IBackend, Callable[[ITensor], ITensor]], ITensor]


class Engine:
    """
    Executes kernels on a backend and records them for differentiation.

    Parameters
    ----------
    backend : IBackend
        Compute backend kernels run on.
    flags : Flags, optional
        Engine configuration. Defaults to ``Flags()`` (not read from the
        environment; use :class:`Environment` for that).
    """

    def __init__(self, backend: IBackend, *, flags: Optional[Flags] = None) -> None:
        self._backend = backend
        self._flags = flags if flags is not None else Flags()
        self._tapes: list[Tape] = []
        self._paused = 0

    def __repr__(self) -> str:
        return (
            f"Engine(backend={getattr(self._backend, 'name', self._backend)!r}, "
            f"recording={self.is_recording})"
        )

    # ------------------------------------------------------------------
    # Backend / configuration
    # ------------------------------------------------------------------
    @property
    def backend(self) -> IBackend:
        return self._backend

    def set_backend(self, backend: IBackend) -> None:
        """Replace the active backend. Existing tapes are kept."""
        logger.debug("Switching backend to %r", backend)
        self._backend = backend

    @property
    def flags(self) -> Flags:
        return self._flags

    # ------------------------------------------------------------------
    # Recording state
    # ------------------------------------------------------------------
    @property
    def is_recording(self) -> bool:
        """True when a tape is active and recording is not paused."""
        return bool(self._tapes) and self._paused == 0

    @property
    def active_tape(self) -> Optional[Tape]:
        """The innermost tape, or None outside any `tape()` scope."""
        return self._tapes[-1] if self._tapes else None

    @contextmanager
    def tape(self) -> Iterator[Tape]:
        """
        Record kernels executed inside the block onto a new tape.

        The tape is yielded and remains usable (and its records alive) after
        the block exits. Call `Tape.dispose()` to release them.
        """
        tape = Tape()
        self._tapes.append(tape)
        try:
            yield tape
        finally:
            self._tapes.pop()

    @contextmanager
    def no_grad(self) -> Iterator[None]:
        """Pause recording inside the block."""
        self._paused += 1
        try:
            yield
        finally:
            self._paused -= 1

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def run_kernel(
        self,
        forward: ForwardFn,
        inputs: Mapping[str, ITensor],
        backward: Optional[GradientRule] = None,
        *,
        name: str,
    ) -> ITensor:
        """
        Execute `forward` on the active backend and record it if needed.

        Parameters
        ----------
        forward : Callable[[IBackend, save], ITensor]
            Compute function. `save(t)` registers `t` for the backward pass
            and returns it unchanged.
        inputs : Mapping[str, ITensor]
            Named input tensors. Names must match those the gradient rule
            reports.
        backward : Callable[[dy, saved], Mapping[str, thunk]], optional
            Gradient rule. Never called here.
        name : str
            Op name stored on the tape record.

        Returns
        -------
        ITensor
            The tensor returned by `forward`.

        Raises
        ------
        DeviceMismatchError
            If device checks are enabled and an input lives on another device.
        NaNResultError
            In debug mode, if the output has NaNs that no input had.
        TypeError
            If `forward` does not return a tensor.

        Notes
        -----
        Any exception raised by `forward` propagates unchanged. In every
        failure case no tape record is created.
        """
        backend = self._backend
        if self._flags.check_devices:
            for t in inputs.values():
                if t.device != backend.device:
                    raise DeviceMismatchError(str(t.device), str(backend.device))

        recording = self.is_recording
        ctx = KernelContext(recording=recording)
        out = forward(backend, ctx.save)
        if not isinstance(out, ITensor):
            raise TypeError(
                f"Kernel '{name}' must return a Tensor, got {type(out).__name__}"
            )

        if self._flags.debug and backend.has_nan(out):
            if not any(backend.has_nan(t) for t in inputs.values()):
                raise NaNResultError(name)

        if recording:
            tape = self._tapes[-1]
            tape.append(
                TapeRecord(
                    id=tape.next_record_id(),
                    name=name,
                    inputs=dict(inputs),
                    output=out,
                    saved=tuple(ctx.saved_tensors),
                    gradient=backward,
                    input_names=tuple(inputs),
                )
            )
            logger.debug(
                "Recorded %s (saved=%d) on tape of %d records",
                name,
                len(ctx.saved_tensors),
                len(tape),
            )
        return out

    # ------------------------------------------------------------------
    # Backward driver
    # ------------------------------------------------------------------
    def gradients(
        self,
        f: Callable[[], ITensor],
        xs: Sequence[ITensor],
        dy: Optional[ITensor] = None,
    ) -> tuple[ITensor, list[ITensor]]:
        """
        Run `f` on a fresh tape and differentiate its output w.r.t. `xs`.

        Parameters
        ----------
        f : Callable[[], ITensor]
            Zero-argument function computing the output ``y``.
        xs : Sequence[ITensor]
            Tensors to differentiate with respect to.
        dy : ITensor, optional
            Gradient of the loss w.r.t. ``y``. Defaults to ones shaped like
            ``y``.

        Returns
        -------
        tuple[ITensor, list[ITensor]]
            ``(y, [dy/dx for x in xs])``. Inputs that `y` does not depend on
            (while another input does) get zero gradients.

        Raises
        ------
        GradientError
            If `xs` is empty, or no input in `xs` reaches ``y``.
        ShapeMismatchError
            If `dy` does not have the shape of ``y``.
        """
        if not xs:
            raise GradientError("gradients() received an empty list of xs.")

        tape = Tape()
        self._tapes.append(tape)
        try:
            try:
                y = f()
            finally:
                self._tapes.pop()
            if not isinstance(y, ITensor):
                raise TypeError(
                    "The result y returned by f() must be a Tensor, got "
                    f"{type(y).__name__}"
                )
            records = filter_records(tape.records, xs, y)
            if not records and not any(x.id == y.id for x in xs):
                raise GradientError(
                    "Cannot compute gradient of y=f(x) with respect to x. Make "
                    "sure that the f you passed encloses all operations that "
                    "lead from x to y."
                )

            backend = self._backend
            if dy is None:
                dy = backend.fill(y.shape, 1.0)
            elif tuple(dy.shape) != tuple(y.shape):
                raise ShapeMismatchError("gradients dy", y.shape, dy.shape)

            with self.no_grad():
                accumulated = backprop(records, y, dy, backend)
                grads = []
                for x in xs:
                    g = accumulated.get(x.id)
                    grads.append(g if g is not None else backend.fill(x.shape, 0.0))
            return y, grads
        finally:
            tape.dispose()
