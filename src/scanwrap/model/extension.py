"""Extension data model — registered plugins and their per-run input."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class CommandSpec:
    """A command declared by an extension, with optional nested subcommands."""

    name: str
    description: str = ""
    subcommands: tuple["CommandSpec", ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommandSpec":
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            subcommands=tuple(cls.from_dict(s) for s in data.get("subcommands", [])),
        )


@dataclass(frozen=True)
class Extension:
    """An installed plugin.

    ``metadata`` is opaque to the dispatcher apart from ``command.name``; it is
    echoed back to the extension verbatim in its input document.
    """

    metadata: dict[str, Any]
    binary_path: Path

    @property
    def name(self) -> str:
        return str(self.metadata.get("name", self.command_name))

    @property
    def command_name(self) -> str:
        return str(self.metadata["command"]["name"])

    @property
    def command(self) -> CommandSpec:
        return CommandSpec.from_dict(self.metadata["command"])


@dataclass(frozen=True)
class ExtensionInput:
    """Document written to an extension's stdin.  Built fresh per invocation."""

    metadata: dict[str, Any]
    matched_command_path: tuple[str, ...]
    args: tuple[str, ...]
    debug: bool = False
    proxy_port: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": self.metadata,
            "matchedCommandPath": list(self.matched_command_path),
            "args": list(self.args),
            "debug": self.debug,
            "proxyPort": self.proxy_port,
        }
