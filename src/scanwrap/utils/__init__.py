"""Shared utilities for scanwrap."""

from scanwrap.utils.exit_codes import ExitCode
from scanwrap.utils.json_norm import stable_json_dumps

__all__ = [
    "ExitCode",
    "stable_json_dumps",
]
