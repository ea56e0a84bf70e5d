"""
Engine configuration flags.

Flags are read from environment variables, in the same way native-library
settings are read elsewhere in the codebase:

- ``KERNGRAD_BACKEND``: preferred backend name (unset: best registered).
- ``KERNGRAD_DEBUG``: ``1/true/yes/on`` enables the post-kernel NaN check.
- ``KERNGRAD_CHECK_DEVICES``: ``0/false/no/off`` disables the input device
  check performed before each kernel.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from typing_extensions import Self

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _env_bool(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = environ.get(key, "").strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return default


@dataclass(frozen=True)
class Flags:
    """
    Immutable engine configuration.

    Attributes
    ----------
    backend : Optional[str]
        Preferred backend registry name, or None for the best available.
    debug : bool
        If True, the engine raises `NaNResultError` when a kernel introduces
        NaN values into its output.
    check_devices : bool
        If True, the engine rejects kernel inputs that live on a device other
        than the active backend's device.
    """

    backend: Optional[str] = None
    debug: bool = False
    check_devices: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Build flags from `environ` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ
        backend = env.get("KERNGRAD_BACKEND", "").strip() or None
        return cls(
            backend=backend,
            debug=_env_bool(env, "KERNGRAD_DEBUG", False),
            check_devices=_env_bool(env, "KERNGRAD_CHECK_DEVICES", True),
        )
