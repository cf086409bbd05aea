"""Dispatcher configuration.

``load_config`` runs once at startup and is the only code that reads the
process environment or the config file.  Everything downstream receives the
resulting ``DispatchConfig``.

Precedence (lowest → highest): defaults, YAML file, ``SCANWRAP_*`` variables.

Example ``scanwrap.yaml``::

    proxy_port: 8080
    ca_cert: /run/scanwrap/proxy-ca.pem
    cache_dir: ~/.cache/scanwrap
    extensions_dir: ~/.local/share/scanwrap/extensions
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from scanwrap.core.discover import discover_extensions
from scanwrap.legacy.bundle import (
    LEGACY_SHA256,
    V1_VERSION,
    V2_VERSION,
    default_bundle_path,
    integrity_record,
)
from scanwrap.model.errors import ConfigurationError
from scanwrap.model.extension import Extension
from scanwrap.model.release import IntegrityRecord, Versions
from scanwrap.policy.proxy_env import interception_proxy_address

INTEGRATION_NAME = "CLI_V1_PLUGIN"

DEBUG_FLAGS = frozenset({"--debug", "-d"})

_TRUTHY = ("1", "true", "yes", "on")

# YAML key → environment variable
_ENV_KEYS = {
    "proxy_port": "SCANWRAP_PROXY_PORT",
    "ca_cert": "SCANWRAP_CA_CERT",
    "cache_dir": "SCANWRAP_CACHE_DIR",
    "extensions_dir": "SCANWRAP_EXTENSIONS_DIR",
    "legacy_bundle": "SCANWRAP_LEGACY_BUNDLE",
    "debug": "SCANWRAP_DEBUG",
}


@dataclass(frozen=True)
class DispatchConfig:
    """Immutable per-process dispatch context."""

    cache_dir: Path
    proxy_port: int | None = None
    ca_cert_path: Path | None = None
    versions: Versions = Versions(V1_VERSION, V2_VERSION)
    legacy_checksum: str = LEGACY_SHA256
    legacy_bundle: Path | None = None
    extensions: tuple[Extension, ...] = ()
    parent_env: tuple[str, ...] = field(default=(), repr=False)
    debug: bool = False
    integration_name: str = INTEGRATION_NAME

    @property
    def integration_version(self) -> str:
        return self.versions.full

    @property
    def integrity(self) -> IntegrityRecord:
        return integrity_record(self.cache_dir, self.versions, self.legacy_checksum)

    @property
    def bundle_path(self) -> Path:
        if self.legacy_bundle is not None:
            return self.legacy_bundle
        return default_bundle_path()

    def require_proxy(self) -> tuple[str, Path]:
        """Return ``(proxy_address, ca_cert_path)`` or raise ``ConfigurationError``."""
        if self.proxy_port is None or self.ca_cert_path is None:
            raise ConfigurationError(
                "interception proxy is not configured "
                "(set SCANWRAP_PROXY_PORT and SCANWRAP_CA_CERT)"
            )
        return interception_proxy_address(self.proxy_port), self.ca_cert_path


def debug_requested(argv: Sequence[str], environ: Mapping[str, str]) -> bool:
    if any(a in DEBUG_FLAGS for a in argv):
        return True
    return environ.get(_ENV_KEYS["debug"], "").strip().lower() in _TRUTHY


def _home(environ: Mapping[str, str]) -> Path:
    home = environ.get("HOME")
    return Path(home) if home else Path.home()


def default_cache_dir(environ: Mapping[str, str]) -> Path:
    base = environ.get("XDG_CACHE_HOME")
    return (Path(base) if base else _home(environ) / ".cache") / "scanwrap"


def default_config_file(environ: Mapping[str, str]) -> Path:
    explicit = environ.get("SCANWRAP_CONFIG")
    if explicit:
        return Path(explicit).expanduser()
    base = environ.get("XDG_CONFIG_HOME")
    return (Path(base) if base else _home(environ) / ".config") / "scanwrap" / "scanwrap.yaml"


def load_config_file(path: Path) -> dict[str, Any]:
    """Load the YAML config file.  A missing file yields ``{}``."""
    if not path.exists():
        return {}
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"cannot load config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")
    unknown = sorted(set(data) - set(_ENV_KEYS))
    if unknown:
        raise ConfigurationError(f"unknown keys in config file {path}: {', '.join(unknown)}")
    return data


def _parse_port(value: Any) -> int:
    try:
        port = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"proxy port must be an integer, got {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"proxy port out of range: {port}")
    return port


def _path(value: Any) -> Path | None:
    if value is None or str(value).strip() == "":
        return None
    return Path(str(value)).expanduser()


def load_config(
    argv: Sequence[str],
    environ: Mapping[str, str] | None = None,
    *,
    config_file: Path | None = None,
) -> DispatchConfig:
    """Build the dispatch context from *argv*, *environ* and the config file.

    Raises ``ConfigurationError`` on invalid settings.
    """
    env = os.environ if environ is None else environ
    settings = load_config_file(config_file or default_config_file(env))
    for key, var in _ENV_KEYS.items():
        if env.get(var):
            settings[key] = env[var]

    port = settings.get("proxy_port")
    extensions_dir = _path(settings.get("extensions_dir"))

    return DispatchConfig(
        cache_dir=_path(settings.get("cache_dir")) or default_cache_dir(env),
        proxy_port=_parse_port(port) if port not in (None, "") else None,
        ca_cert_path=_path(settings.get("ca_cert")),
        legacy_bundle=_path(settings.get("legacy_bundle")),
        extensions=tuple(discover_extensions(extensions_dir)),
        parent_env=tuple(f"{k}={v}" for k, v in env.items()),
        debug=debug_requested(argv, env) or settings.get("debug") is True,
    )
