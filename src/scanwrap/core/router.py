"""Command routing — pick the one execution path for an invocation.

Precedence:
  1. built-in version flags, anywhere in the arguments
  2. an extension whose command name equals the first positional token
     (first registered wins; its command path must resolve in the tree)
  3. the legacy CLI, unconditionally
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from scanwrap.model import BuiltinHandler
from scanwrap.model.errors import ConfigurationError
from scanwrap.model.extension import CommandSpec, Extension
from scanwrap.model.route import BuiltinRoute, ExtensionRoute, LegacyFallbackRoute, Route

logger = logging.getLogger(__name__)

VERSION_FLAGS = frozenset({"--version", "-v", "version"})


def _positionals(args: Iterable[str]) -> list[str]:
    return [a for a in args if not a.startswith("-")]


class CommandTree:
    """Nested command names declared by the registered extensions."""

    def __init__(self, commands: Iterable[CommandSpec] = ()) -> None:
        self._roots: dict[str, CommandSpec] = {}
        for cmd in commands:
            self._roots.setdefault(cmd.name, cmd)

    @classmethod
    def from_extensions(cls, extensions: Iterable[Extension]) -> "CommandTree":
        return cls(ext.command for ext in extensions)

    def find(self, args: Sequence[str]) -> tuple[str, ...]:
        """Resolve the longest command path named by the positional *args*.

        Raises ``ConfigurationError`` if the first positional token is not a
        known top-level command.
        """
        tokens = _positionals(args)
        children = self._roots
        path: list[str] = []
        for token in tokens:
            node = children.get(token)
            if node is None:
                break
            path.append(node.name)
            children = {sub.name: sub for sub in node.subcommands}

        if not path:
            first = tokens[0] if tokens else ""
            raise ConfigurationError(f"unable to resolve command path for {first!r}")
        return tuple(path)


class CommandRouter:
    """Decides between built-in, extension and legacy execution."""

    def __init__(
        self,
        extensions: Sequence[Extension] = (),
        tree: CommandTree | None = None,
    ) -> None:
        self.extensions = tuple(extensions)
        self.tree = tree if tree is not None else CommandTree.from_extensions(self.extensions)

    def match_builtin(self, args: Sequence[str]) -> BuiltinHandler | None:
        if any(a in VERSION_FLAGS for a in args):
            return BuiltinHandler.VERSION
        return None

    def match_extension(self, args: Sequence[str]) -> Extension | None:
        tokens = _positionals(args)
        if not tokens:
            return None
        for ext in self.extensions:
            if ext.command_name == tokens[0]:
                return ext
        return None

    def route(self, args: Sequence[str]) -> Route:
        """Return the route for *args*.

        Raises ``ConfigurationError`` when an extension matches but its command
        path cannot be resolved; no other path is attempted in that case.
        """
        handler = self.match_builtin(args)
        if handler is not None:
            logger.debug("matched built-in handler %s for %s", handler.value, list(args))
            return BuiltinRoute(handler)

        ext = self.match_extension(args)
        if ext is not None:
            logger.debug("matched extension %s", ext.name)
            return ExtensionRoute(ext, self.tree.find(args))

        logger.debug("no matching built-in handler or extension, falling back on legacy CLI")
        return LegacyFallbackRoute()
