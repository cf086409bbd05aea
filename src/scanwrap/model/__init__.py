"""Types shared across the router, runner and supervisor."""

from __future__ import annotations

from enum import Enum


class BuiltinHandler(str, Enum):
    """Handlers executed in-process, never delegated to a child process."""

    VERSION = "version"
