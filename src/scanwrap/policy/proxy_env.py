"""Child-process environment policy.

Every delegated process (extension or legacy binary) must send its traffic
through the local interception proxy and trust its CA certificate.  The
environment handed to such a process is therefore rebuilt from the parent's:

  1. parse ``K=V`` entries (last duplicate wins)
  2. fill in the integration identity when neither key is present;
     warn, and leave both alone, when only one is present
  3. drop every proxy / certificate key inherited from the parent
  4. force the proxy and CA certificate keys to the wrapper's values

Steps 3 and 4 run unconditionally, whatever step 2 decided.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from scanwrap.model.errors import EnvironmentWarning

logger = logging.getLogger(__name__)

INTEGRATION_NAME_ENV = "SNYK_INTEGRATION_NAME"
INTEGRATION_VERSION_ENV = "SNYK_INTEGRATION_VERSION"

HTTPS_PROXY_ENV = "HTTPS_PROXY"
HTTP_PROXY_ENV = "HTTP_PROXY"
NO_PROXY_ENV = "NO_PROXY"
ALL_PROXY_ENV = "ALL_PROXY"
CA_CERTIFICATE_LOCATION_ENV = "NODE_EXTRA_CA_CERTS"
NPM_PROXY_ENV = "NPM_CONFIG_PROXY"
NPM_HTTPS_PROXY_ENV = "NPM_CONFIG_HTTPS_PROXY"
NPM_HTTP_PROXY_ENV = "NPM_CONFIG_HTTP_PROXY"
NPM_NO_PROXY_ENV = "NPM_CONFIG_NO_PROXY"

# Keys never forwarded from the parent.  Lowercase spellings are honoured by
# curl, git, pip and friends on POSIX, so they are stripped as well.
BLACKLISTED_KEYS: tuple[str, ...] = (
    HTTPS_PROXY_ENV,
    HTTP_PROXY_ENV,
    CA_CERTIFICATE_LOCATION_ENV,
    NO_PROXY_ENV,
    ALL_PROXY_ENV,
    NPM_NO_PROXY_ENV,
    NPM_HTTPS_PROXY_ENV,
    NPM_HTTP_PROXY_ENV,
    NPM_PROXY_ENV,
    "https_proxy",
    "http_proxy",
    "no_proxy",
    "all_proxy",
)

# Keys always present in the result, with the wrapper's values.
FORCED_KEYS: tuple[str, ...] = (
    HTTPS_PROXY_ENV,
    HTTP_PROXY_ENV,
    CA_CERTIFICATE_LOCATION_ENV,
)


def interception_proxy_address(port: int) -> str:
    """Address of the local interception proxy listening on *port*."""
    return f"http://127.0.0.1:{port}"


def parse_env_list(entries: Iterable[str]) -> dict[str, str]:
    """Parse ``K=V`` strings into a mapping.  Later duplicates win.

    Entries without ``=`` are kept as keys with an empty value; the value may
    itself contain ``=``.
    """
    result: dict[str, str] = {}
    for entry in entries:
        key, _, value = entry.partition("=")
        if not key:
            continue
        result[key] = value
    return result


def to_env_list(env: Mapping[str, str]) -> list[str]:
    """Serialize *env* back to ``K=V`` strings, sorted by key."""
    return [f"{k}={env[k]}" for k in sorted(env)]


def build_child_environment(
    parent_env: Iterable[str],
    *,
    proxy_address: str,
    ca_cert_path: str,
    integration_name: str,
    integration_version: str,
) -> tuple[dict[str, str], EnvironmentWarning | None]:
    """Build the environment for a delegated child process.

    Returns ``(env, warning)``.  *warning* is set when the parent defines
    exactly one of the integration identifiers; it is informational and
    never stops the launch.
    """
    env = parse_env_list(parent_env)
    warning: EnvironmentWarning | None = None

    has_name = INTEGRATION_NAME_ENV in env
    has_version = INTEGRATION_VERSION_ENV in env
    if not has_name and not has_version:
        env[INTEGRATION_NAME_ENV] = integration_name
        env[INTEGRATION_VERSION_ENV] = integration_version
    elif has_name != has_version:
        warning = EnvironmentWarning(
            "Partially defined environment, please ensure to provide both "
            f"{INTEGRATION_NAME_ENV} and {INTEGRATION_VERSION_ENV} together!"
        )

    for key in BLACKLISTED_KEYS:
        if env.pop(key, None) is not None:
            logger.debug("dropped inherited %s from child environment", key)

    env[HTTPS_PROXY_ENV] = proxy_address
    env[HTTP_PROXY_ENV] = proxy_address
    env[CA_CERTIFICATE_LOCATION_ENV] = ca_cert_path

    return env, warning
