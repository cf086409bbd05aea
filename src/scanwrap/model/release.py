"""Release identity: version pair and legacy binary integrity record."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Versions:
    v1_version: str
    v2_version: str

    @property
    def full(self) -> str:
        """Displayed version string, ``<v2Version>.<v1Version>``."""
        return f"{self.v2_version}.{self.v1_version}"


@dataclass(frozen=True)
class IntegrityRecord:
    """Where the legacy binary is cached and the SHA-256 it must match."""

    path: Path
    expected_checksum: str
