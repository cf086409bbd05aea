"""Release constants and the bundled legacy binary.

The legacy CLI ships inside the distribution (``data/legacy/``) and is copied
into a per-version cache directory on first use.  Its SHA-256 is fixed for the
release; it is not configurable.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import sys
import tempfile
from pathlib import Path

from scanwrap.model.release import IntegrityRecord, Versions

logger = logging.getLogger(__name__)

V1_VERSION = "1.1064.0"
V2_VERSION = "2.0.0"  # keep in step with scanwrap.__version__

# sha256 of data/legacy/legacy-cli for this release.
LEGACY_SHA256 = "311f24f4f707d79224eb64ffc84cc6a72ae1d9a32a4a2e9d40ead2a27ab9d670"

BUNDLE_DIR = Path(__file__).resolve().parents[1] / "data" / "legacy"
BUNDLE_NAME = "legacy-cli"


def _platform_tag() -> str:
    system = {"darwin": "macos", "win32": "win"}.get(sys.platform, "linux")
    machine = platform.machine().lower()
    arch = {"aarch64": "arm64", "arm64": "arm64", "x86_64": "amd64", "amd64": "amd64"}.get(
        machine, machine or "amd64"
    )
    return f"{system}-{arch}"


def legacy_binary_name(v1_version: str) -> str:
    """File name of the cached legacy binary, e.g. ``legacy-cli-linux-amd64-1.2.3``."""
    suffix = ".exe" if os.name == "nt" else ""
    return f"legacy-cli-{_platform_tag()}-{v1_version}{suffix}"


def legacy_cache_path(cache_dir: Path, versions: Versions) -> Path:
    """Deterministic cache location: ``<cache_dir>/<v2>/<binary name>``."""
    return cache_dir / versions.v2_version / legacy_binary_name(versions.v1_version)


def default_bundle_path() -> Path:
    """The legacy binary shipped inside this distribution."""
    return BUNDLE_DIR / BUNDLE_NAME


def integrity_record(cache_dir: Path, versions: Versions, expected: str = LEGACY_SHA256) -> IntegrityRecord:
    return IntegrityRecord(path=legacy_cache_path(cache_dir, versions), expected_checksum=expected)


def extract_bundled_binary(source: Path, target: Path) -> None:
    """Copy the bundled binary at *source* to *target*.

    The copy lands in a temporary file next to *target* and is renamed over
    it, so readers see either the old file or the complete new one.

    Raises ``FileNotFoundError`` when the bundle is missing.
    """
    if not source.is_file():
        raise FileNotFoundError(f"bundled legacy binary not found: {source}")

    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as dst, source.open("rb") as src:
            shutil.copyfileobj(src, dst)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("extracted %s -> %s", source, target)
