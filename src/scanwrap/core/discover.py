"""Extension discovery — find installed plugins under an extensions directory.

Layout::

    <extensions_dir>/
        <extension>/
            extension.json      # metadata, see extension_metadata.schema.json
            bin/<name>          # executable (or the "binary" field, relative)

Subdirectories are visited in sorted order; that order is the registration
order the router uses for first-match-wins.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import jsonschema

from scanwrap.contracts.load import validate_file
from scanwrap.model.errors import ConfigurationError
from scanwrap.model.extension import Extension

logger = logging.getLogger(__name__)

METADATA_FILE = "extension.json"
METADATA_SCHEMA = "extension_metadata.schema.json"


def _binary_path(ext_dir: Path, metadata: dict) -> Path:
    rel = metadata.get("binary")
    if rel:
        return ext_dir / rel
    suffix = ".exe" if os.name == "nt" else ""
    return ext_dir / "bin" / f"{metadata['name']}{suffix}"


def load_extension(ext_dir: Path) -> Extension:
    """Load one extension directory.

    Raises ``ConfigurationError`` if its metadata is unreadable or invalid.
    """
    meta_path = ext_dir / METADATA_FILE
    try:
        metadata = validate_file(meta_path, METADATA_SCHEMA)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"cannot read extension metadata {meta_path}: {exc}") from exc
    except jsonschema.ValidationError as exc:
        raise ConfigurationError(f"invalid extension metadata {meta_path}: {exc.message}") from exc
    return Extension(metadata=metadata, binary_path=_binary_path(ext_dir, metadata))


def discover_extensions(root: Path | None) -> list[Extension]:
    """Return the extensions installed under *root*, in registration order."""
    if root is None or not root.is_dir():
        return []

    try:
        ext_dirs = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError as exc:
        raise ConfigurationError(f"cannot list extensions directory {root}: {exc}") from exc

    extensions: list[Extension] = []
    for ext_dir in ext_dirs:
        if not (ext_dir / METADATA_FILE).is_file():
            continue
        ext = load_extension(ext_dir)
        logger.debug("registered extension %s (command %r) from %s", ext.name, ext.command_name, ext_dir)
        extensions.append(ext)
    return extensions
