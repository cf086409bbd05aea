"""Exit-code policy — the one place dispatch failures become integers.

Philosophy:
  - Every ``DispatchError`` kind maps to a documented exit code
  - A child's own exit status never passes through here
  - Unknown exception types are fail-safe (generic error)
"""

from __future__ import annotations

import sys
from typing import TextIO

from scanwrap.model.errors import (
    ConfigurationError,
    DispatchError,
    IntegrityError,
    ProcessLaunchError,
)
from scanwrap.utils.exit_codes import ExitCode


_EXIT_BY_ERROR: dict[type[DispatchError], int] = {
    ConfigurationError: ExitCode.ERROR,
    IntegrityError: ExitCode.ERROR,
    ProcessLaunchError: ExitCode.ERROR,
}


def exit_code_for_error(err: BaseException) -> int:
    """Map a fatal error to the process exit code.

    Unknown types (including a bare ``DispatchError``) are treated as the
    generic error.
    """
    return int(_EXIT_BY_ERROR.get(type(err), ExitCode.ERROR))


def report_error(err: BaseException, *, stream: TextIO | None = None) -> int:
    """Print a one-line diagnostic for *err* and return its exit code."""
    out = stream if stream is not None else sys.stderr
    message = err.message if isinstance(err, DispatchError) else f"unexpected failure: {err}"
    print(f"error: {message}", file=out)
    return exit_code_for_error(err)
