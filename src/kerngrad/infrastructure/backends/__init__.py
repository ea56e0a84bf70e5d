"""
Compute backends.

Public API
----------
- ``NumpyBackend``: CPU reference backend
- ``BackendRegistry`` / ``backend_registry``: name-based backend lookup
"""

from ._numpy_backend import NumpyBackend
from ._registry import BackendFactory, BackendRegistry, backend_registry

__all__ = [
    "BackendFactory",
    BackendRegistry.__name__,
    NumpyBackend.__name__,
    "backend_registry",
]
