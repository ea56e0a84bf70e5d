"""
Op registration side-table.

Every public op is registered once, at import time, with an explicit
`op(...)` call. The registry stores the stable public name (the name other
code and tape records refer to), the Python callable, and documentation
metadata (heading / subheading and the docstring). It has no effect on how
the op runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from typing_extensions import TypeVar

F = TypeVar("F", bound=Callable[..., object])


@dataclass(frozen=True)
class OpSpec:
    """
    Registered op metadata.

    Attributes
    ----------
    name : str
        Stable public op name (e.g. ``"clipByValue"``).
    fn : Callable
        The Python function implementing the op.
    heading : str
        Documentation section.
    subheading : str
        Documentation subsection.
    doc : str
        First paragraph of the function docstring.
    """

    name: str
    fn: Callable[..., object]
    heading: str
    subheading: str
    doc: str


class OpRegistry:
    """Mapping of public op names to `OpSpec` entries."""

    def __init__(self) -> None:
        self._ops: Dict[str, OpSpec] = {}

    def register(
        self,
        name: str,
        fn: Callable[..., object],
        *,
        heading: str = "Operations",
        subheading: str = "Basic math",
    ) -> OpSpec:
        """
        Register `fn` under `name`.

        Raises
        ------
        ValueError
            If `name` is already registered to a different function.
        """
        existing = self._ops.get(name)
        if existing is not None and existing.fn is not fn:
            raise ValueError(f"Op '{name}' is already registered.")
        doc = (fn.__doc__ or "").strip().split("\n\n", 1)[0]
        spec = OpSpec(name, fn, heading, subheading, " ".join(doc.split()))
        self._ops[name] = spec
        return spec

    def get(self, name: str) -> Optional[OpSpec]:
        return self._ops.get(name)

    def names(self) -> list[str]:
        return sorted(self._ops)

    def __contains__(self, name: object) -> bool:
        return name in self._ops

    def __len__(self) -> int:
        return len(self._ops)


op_registry = OpRegistry()


def op(
    name: str,
    fn: F,
    *,
    heading: str = "Operations",
    subheading: str = "Basic math",
    registry: Optional[OpRegistry] = None,
) -> F:
    """
    Register `fn` as the public op `name` and return it unchanged.

    Parameters
    ----------
    name : str
        Stable public name.
    fn : Callable
        Op implementation.
    heading, subheading : str
        Documentation placement.
    registry : OpRegistry, optional
        Target registry. Defaults to the process-wide `op_registry`.
    """
    (registry if registry is not None else op_registry).register(
        name, fn, heading=heading, subheading=subheading
    )
    return fn
