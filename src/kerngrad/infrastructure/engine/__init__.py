"""
Kernel-dispatch engine and gradient tape.

Public API
----------
- ``Engine``: runs kernels, records tapes, drives backward passes
- ``Tape`` / ``TapeRecord``: recorded kernel invocations
- ``KernelContext``: per-invocation ``save`` hook
- ``Flags``: configuration read from ``KERNGRAD_*`` variables
- ``Environment`` / ``ENV`` / ``get_engine``: default engine ownership
"""

from ._context import KernelContext
from ._engine import Engine, ForwardFn
from ._environment import ENV, Environment, get_engine
from ._flags import Flags
from ._tape import GradientRule, Tape, TapeRecord, backprop, filter_records

__all__ = [
    "ENV",
    Engine.__name__,
    Environment.__name__,
    Flags.__name__,
    "ForwardFn",
    "GradientRule",
    KernelContext.__name__,
    Tape.__name__,
    TapeRecord.__name__,
    backprop.__name__,
    filter_records.__name__,
    get_engine.__name__,
]
