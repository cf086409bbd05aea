"""Checksum verification of the cached legacy binary.

``ensure_valid`` runs before *every* legacy launch.  A matching file is left
untouched; a missing or mismatching one is re-extracted exactly once and
verified again.  A mismatch after a fresh extraction means the distribution
itself is corrupt, so it is fatal and never retried.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
import stat
from pathlib import Path
from typing import Callable

from scanwrap.model.errors import IntegrityError

logger = logging.getLogger(__name__)

_CHUNK = 1024 * 1024

_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def file_sha256(path: Path) -> str | None:
    """Hex SHA-256 of *path*, or ``None`` if it cannot be read as a file."""
    h = hashlib.sha256()
    try:
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK), b""):
                h.update(chunk)
    except (FileNotFoundError, IsADirectoryError, PermissionError):
        return None
    return h.hexdigest()


def verify(path: Path, expected_checksum: str) -> bool:
    """Return True when *path* exists and its SHA-256 equals *expected_checksum*."""
    actual = file_sha256(path)
    if actual is None:
        logger.debug("integrity: %s does not exist or is unreadable", path)
        return False
    ok = hmac.compare_digest(actual, expected_checksum.strip().lower())
    if not ok:
        logger.debug("integrity: %s has sha256 %s, expected %s", path, actual, expected_checksum)
    return ok


def _make_executable(path: Path) -> None:
    if os.name == "nt":
        return
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IRUSR | _EXEC_BITS)


def ensure_valid(
    path: Path,
    expected_checksum: str,
    extract: Callable[[Path], None],
) -> None:
    """Make sure *path* holds the expected binary, extracting it if needed.

    Raises
    ------
    IntegrityError
        If extraction fails or the extracted file still does not match.
    """
    if verify(path, expected_checksum):
        logger.debug("legacy binary already valid at %s", path)
        return

    logger.debug("legacy binary missing or invalid, extracting to %s", path)
    try:
        extract(path)
        _make_executable(path)
    except OSError as exc:
        raise IntegrityError(f"could not extract legacy binary to {path}: {exc}") from exc

    if not verify(path, expected_checksum):
        raise IntegrityError(
            f"legacy binary at {path} failed sha256 verification after extraction"
        )
    logger.debug("legacy binary valid after extraction at %s", path)
