"""Error taxonomy for the dispatch layer.

Every fatal condition is one of the ``DispatchError`` subclasses below and is
converted to ``ExitCode.ERROR`` at the dispatch boundary (see
``scanwrap.policy.exit_codes``).  A child's own exit status is *not* an
error of this layer and never appears here.
"""

from __future__ import annotations

from dataclasses import dataclass


class DispatchError(Exception):
    """Base class for fatal dispatch failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(DispatchError):
    """Unsupported flag combination, unresolvable command path, bad settings."""


class IntegrityError(DispatchError):
    """Legacy binary still fails checksum verification after a fresh extraction."""


class ProcessLaunchError(DispatchError):
    """The executable is missing or the OS refused to start it."""


@dataclass(frozen=True)
class EnvironmentWarning:
    """Non-fatal finding produced while building a child environment."""

    message: str

    def __str__(self) -> str:
        return self.message
