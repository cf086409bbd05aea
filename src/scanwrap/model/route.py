"""Routing outcomes — exactly one is produced per invocation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from scanwrap.model import BuiltinHandler
from scanwrap.model.extension import Extension


@dataclass(frozen=True)
class BuiltinRoute:
    handler: BuiltinHandler


@dataclass(frozen=True)
class ExtensionRoute:
    extension: Extension
    matched_command_path: tuple[str, ...]


@dataclass(frozen=True)
class LegacyFallbackRoute:
    pass


Route = Union[BuiltinRoute, ExtensionRoute, LegacyFallbackRoute]
