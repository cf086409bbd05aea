"""Runner — the dispatch state machine.

    INIT → ROUTING → BUILTIN | EXTENSION | LEGACY → TERMINATED(exit code)

Exactly one path runs.  Built-ins never spawn a process; the extension and
legacy paths end in ``process.supervisor.launch``.  Every failure is turned
into an exit code here, nothing escapes ``dispatch``.
"""

from __future__ import annotations

import logging
import sys
from typing import Sequence

from scanwrap.core.config import DispatchConfig
from scanwrap.core.router import CommandRouter
from scanwrap.extensions.protocol import encode
from scanwrap.handlers.version import run_version
from scanwrap.legacy.bundle import extract_bundled_binary
from scanwrap.legacy.integrity import ensure_valid
from scanwrap.model import BuiltinHandler
from scanwrap.model.errors import DispatchError
from scanwrap.model.route import BuiltinRoute, ExtensionRoute, LegacyFallbackRoute
from scanwrap.policy.exit_codes import report_error
from scanwrap.policy.proxy_env import build_child_environment
from scanwrap.process.supervisor import launch
from scanwrap.utils.json_norm import stable_json_dumps

_logger = logging.getLogger(__name__)


def _child_env(config: DispatchConfig) -> dict[str, str]:
    proxy_address, ca_cert_path = config.require_proxy()
    env, warning = build_child_environment(
        config.parent_env,
        proxy_address=proxy_address,
        ca_cert_path=str(ca_cert_path),
        integration_name=config.integration_name,
        integration_version=config.integration_version,
    )
    if warning is not None:
        print(f"warning: {warning}", file=sys.stderr)
    return env


def _run_builtin(config: DispatchConfig, route: BuiltinRoute, args: list[str]) -> int:
    if route.handler is BuiltinHandler.VERSION:
        return run_version(args, config.versions)
    raise DispatchError(f"no implementation for built-in handler {route.handler.value!r}")


def _run_extension(config: DispatchConfig, route: ExtensionRoute, args: list[str]) -> int:
    ext = route.extension
    _logger.debug("launching extension %s", ext.name)
    payload = encode(
        ext.metadata,
        route.matched_command_path,
        args,
        config.debug,
        config.proxy_port if config.proxy_port is not None else 0,
    )
    _logger.debug("extension input:\n%s", payload.decode("utf-8"))
    env = _child_env(config)
    _logger.debug("extension binary path: %s", ext.binary_path)
    return launch(ext.binary_path, [], env, stdin_payload=payload)


def _run_legacy(config: DispatchConfig, args: list[str]) -> int:
    record = config.integrity
    bundle = config.bundle_path
    ensure_valid(
        record.path,
        record.expected_checksum,
        lambda target: extract_bundled_binary(bundle, target),
    )
    env = _child_env(config)
    _logger.debug("launching legacy CLI with path: %s", record.path)
    _logger.debug("ca certificate: %s", config.ca_cert_path)
    return launch(record.path, args, env)


def _dispatch(config: DispatchConfig, args: list[str]) -> int:
    _logger.debug("passthrough args: %s", stable_json_dumps(args, indent=None).strip())
    route = CommandRouter(config.extensions).route(args)

    if isinstance(route, BuiltinRoute):
        return _run_builtin(config, route, args)
    if isinstance(route, ExtensionRoute):
        return _run_extension(config, route, args)
    if isinstance(route, LegacyFallbackRoute):
        return _run_legacy(config, args)
    raise DispatchError(f"unhandled route {route!r}")


def dispatch(config: DispatchConfig, args: Sequence[str]) -> int:
    """Run one invocation and return its exit code.

    Parameters
    ----------
    config:
        Startup context from ``load_config``.
    args:
        Full argument list, forwarded verbatim to whichever path runs.
    """
    try:
        return int(_dispatch(config, list(args)))
    except DispatchError as exc:
        return report_error(exc)
    except Exception as exc:  # noqa: BLE001
        _logger.debug("unexpected failure during dispatch", exc_info=True)
        return report_error(exc)
