"""
Environment: owner of the default engine.

Ops need an engine. Callers can always pass one explicitly (``engine=`` on
every op), and tests typically do. For interactive use an `Environment`
provides a default engine with an explicit lifecycle:

- the engine is constructed lazily on first use, from `Flags` and the
  backend registry,
- it can be replaced (`set_engine`, `set_backend`) or temporarily swapped
  (`use_engine`), which is how tests install a mock backend,
- `reset()` drops it so the next access rebuilds it from configuration.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Mapping, Optional

from ..backends._registry import BackendRegistry, backend_registry
from ._engine import Engine
from ._flags import Flags

logger = logging.getLogger(__name__)


class Environment:
    """
    Holder of the default `Engine`.

    Parameters
    ----------
    registry : BackendRegistry, optional
        Registry the default backend is resolved from. Defaults to the
        process-wide `backend_registry`.
    environ : Mapping[str, str], optional
        Source of configuration variables. Defaults to ``os.environ``, read
        when the engine is first built.
    """

    def __init__(
        self,
        registry: Optional[BackendRegistry] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._registry = registry if registry is not None else backend_registry
        self._environ = environ
        self._flags: Optional[Flags] = None
        self._engine: Optional[Engine] = None

    @property
    def registry(self) -> BackendRegistry:
        return self._registry

    @property
    def flags(self) -> Flags:
        if self._flags is None:
            self._flags = Flags.from_env(self._environ)
        return self._flags

    @property
    def engine(self) -> Engine:
        """The default engine, built on first access."""
        if self._engine is None:
            flags = self.flags
            backend = self._registry.best(flags.backend)
            self._engine = Engine(backend, flags=flags)
            logger.debug("Created default engine: %r", self._engine)
        return self._engine

    def set_engine(self, engine: Engine) -> None:
        """Install `engine` as the default engine."""
        self._engine = engine

    def set_backend(self, name: str) -> None:
        """Switch the default engine to the registered backend `name`."""
        self.engine.set_backend(self._registry.get(name))

    @property
    def backend_name(self) -> str:
        return getattr(self.engine.backend, "name", type(self.engine.backend).__name__)

    def reset(self) -> None:
        """Forget the engine and flags; the next access rebuilds both."""
        self._engine = None
        self._flags = None

    @contextmanager
    def use_engine(self, engine: Engine) -> Iterator[Engine]:
        """Temporarily install `engine` as the default engine."""
        previous = self._engine
        self._engine = engine
        try:
            yield engine
        finally:
            self._engine = previous


ENV = Environment()
"""Process-wide default environment used when an op gets no ``engine=``."""


def get_engine(engine: Optional[Engine] = None) -> Engine:
    """Return `engine` if given, else the default environment's engine."""
    return engine if engine is not None else ENV.engine
