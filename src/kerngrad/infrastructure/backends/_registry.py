"""
Backend registry.

Backends are registered under a name together with a zero-argument factory
and an integer priority. The registry creates backend instances lazily and
caches them, so registering a backend that needs expensive setup (a native
library, a device context) costs nothing until it is first selected.

Selection order
---------------
1. An explicit name passed to `get(name)`.
2. The name in the ``KERNGRAD_BACKEND`` environment variable (resolved by
   :class:`~kerngrad.infrastructure.engine.Environment`).
3. `best()`: the registered backend with the highest priority whose factory
   succeeds. A factory that raises is skipped with a ``RuntimeWarning``.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ...domain._backend import IBackend
from ...domain._errors import BackendNotFoundError
from ._numpy_backend import NumpyBackend

logger = logging.getLogger(__name__)

BackendFactory = Callable[[], IBackend]


@dataclass(frozen=True)
class _Registration:
    name: str
    factory: BackendFactory
    priority: int


class BackendRegistry:
    """
    Name -> backend factory mapping with priority-based default selection.

    Notes
    -----
    Instances created by a factory are cached per name. Re-registering a
    name replaces the factory and drops the cached instance.
    """

    def __init__(self) -> None:
        self._registrations: Dict[str, _Registration] = {}
        self._instances: Dict[str, IBackend] = {}

    def register(
        self, name: str, factory: BackendFactory, priority: int = 1
    ) -> None:
        """
        Register (or replace) a backend factory.

        Parameters
        ----------
        name : str
            Registry key, e.g. ``"numpy"``.
        factory : Callable[[], IBackend]
            Zero-argument callable creating the backend.
        priority : int, optional
            Higher priorities win in `best()`. Defaults to 1.

        Raises
        ------
        ValueError
            If `name` is empty.
        """
        if not name:
            raise ValueError("Backend name must be a non-empty string.")
        if name in self._registrations:
            logger.debug("Replacing backend registration %r", name)
        self._registrations[name] = _Registration(name, factory, int(priority))
        self._instances.pop(name, None)

    def remove(self, name: str) -> None:
        """Remove a registration and its cached instance."""
        if name not in self._registrations:
            raise BackendNotFoundError(name, self.names())
        del self._registrations[name]
        self._instances.pop(name, None)

    def names(self) -> list[str]:
        """Registered names, highest priority first."""
        regs = sorted(
            self._registrations.values(), key=lambda r: r.priority, reverse=True
        )
        return [r.name for r in regs]

    def __contains__(self, name: object) -> bool:
        return name in self._registrations

    def get(self, name: str) -> IBackend:
        """
        Return the backend instance registered under `name`.

        Raises
        ------
        BackendNotFoundError
            If `name` is not registered.
        """
        reg = self._registrations.get(name)
        if reg is None:
            raise BackendNotFoundError(name, self.names())
        backend = self._instances.get(name)
        if backend is None:
            backend = reg.factory()
            self._instances[name] = backend
            logger.debug("Initialized backend %r: %r", name, backend)
        return backend

    def best(self, preferred: Optional[str] = None) -> IBackend:
        """
        Return the preferred backend, or the best one that initializes.

        Parameters
        ----------
        preferred : str, optional
            Name to try first. Unknown names raise; a factory failure for the
            preferred name falls back to priority order with a warning.

        Raises
        ------
        BackendNotFoundError
            If `preferred` is not registered.
        RuntimeError
            If no registered backend could be initialized.
        """
        candidates = self.names()
        if preferred is not None:
            if preferred not in self._registrations:
                raise BackendNotFoundError(preferred, candidates)
            candidates.remove(preferred)
            candidates.insert(0, preferred)

        for name in candidates:
            try:
                return self.get(name)
            except Exception as e:
                warnings.warn(
                    f"kerngrad backend '{name}' failed to initialize; "
                    f"trying the next registered backend. Reason: {e}",
                    RuntimeWarning,
                    stacklevel=2,
                )
        raise RuntimeError(
            f"No backend could be initialized. Registered: {self.names()}"
        )


backend_registry = BackendRegistry()
"""Process-wide default registry. `NumpyBackend` is registered as ``"numpy"``."""

backend_registry.register("numpy", NumpyBackend, priority=1)
