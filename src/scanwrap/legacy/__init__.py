"""Legacy CLI artifact: bundled source, version-derived cache path, integrity."""

from scanwrap.legacy.bundle import (
    LEGACY_SHA256,
    V1_VERSION,
    V2_VERSION,
    extract_bundled_binary,
    legacy_binary_name,
    legacy_cache_path,
)
from scanwrap.legacy.integrity import ensure_valid, file_sha256, verify

__all__ = [
    "LEGACY_SHA256",
    "V1_VERSION",
    "V2_VERSION",
    "ensure_valid",
    "extract_bundled_binary",
    "file_sha256",
    "legacy_binary_name",
    "legacy_cache_path",
    "verify",
]
