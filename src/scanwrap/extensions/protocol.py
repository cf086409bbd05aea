"""Extension input protocol.

An extension receives exactly one JSON document on stdin, followed by a blank
line, after which stdin is closed::

    {"args":[...],"debug":false,"matchedCommandPath":[...],"metadata":{...},"proxyPort":8080}
    <empty line>

Keys are sorted and separators compact, so the bytes are a pure function of
the input (golden fixtures depend on this).
"""

from __future__ import annotations

from typing import Any, Sequence

import jsonschema

from scanwrap.contracts.load import validate_instance
from scanwrap.model.errors import ConfigurationError
from scanwrap.model.extension import ExtensionInput
from scanwrap.utils.json_norm import stable_json_dumps, to_builtin

INPUT_SCHEMA = "extension_input.schema.json"

# The document already ends with one newline; this one makes the blank line.
TERMINATOR = b"\n"


def make_extension_input(
    metadata: dict[str, Any],
    matched_command_path: Sequence[str],
    args: Sequence[str],
    *,
    debug: bool,
    proxy_port: int,
) -> ExtensionInput:
    return ExtensionInput(
        metadata=metadata,
        matched_command_path=tuple(matched_command_path),
        args=tuple(args),
        debug=debug,
        proxy_port=proxy_port,
    )


def encode_input(extension_input: ExtensionInput) -> bytes:
    """Serialize *extension_input* to the bytes written to the extension's stdin.

    Raises ``ConfigurationError`` if the document does not satisfy the input
    schema (e.g. non-JSON metadata or an out-of-range port).
    """
    doc = to_builtin(extension_input.to_dict())
    try:
        validate_instance(doc, INPUT_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise ConfigurationError(f"invalid extension input: {exc.message}") from exc
    return stable_json_dumps(doc, indent=None).encode("utf-8") + TERMINATOR


def encode(
    metadata: dict[str, Any],
    matched_command_path: Sequence[str],
    args: Sequence[str],
    debug: bool,
    proxy_port: int,
) -> bytes:
    """Build and serialize an extension input in one step."""
    return encode_input(
        make_extension_input(
            metadata, matched_command_path, args, debug=debug, proxy_port=proxy_port
        )
    )
