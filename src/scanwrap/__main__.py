"""CLI entry-point for scanwrap.

Usage:
    python -m scanwrap --version
    python -m scanwrap <extension command> [args...]
    python -m scanwrap <legacy CLI args...>

Every argument is forwarded verbatim to the selected path.  The interception
proxy is configured through ``SCANWRAP_PROXY_PORT`` and ``SCANWRAP_CA_CERT``
(or the YAML config file, see ``scanwrap.core.config``).
"""

from __future__ import annotations

import logging
import os
import sys

from scanwrap.core.config import debug_requested, load_config
from scanwrap.core.runner import dispatch
from scanwrap.model.errors import ConfigurationError
from scanwrap.policy.exit_codes import report_error

_logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def main(argv: list[str] | None = None) -> int:
    """Entry-point — returns the dispatch exit code."""
    effective_argv = list(argv) if argv is not None else sys.argv[1:]
    _configure_logging(debug_requested(effective_argv, os.environ))

    try:
        config = load_config(effective_argv)
    except ConfigurationError as exc:
        return report_error(exc)
    except Exception as exc:  # noqa: BLE001
        _logger.debug("unexpected failure loading configuration", exc_info=True)
        return report_error(exc)

    return dispatch(config, effective_argv)


def main_entry() -> None:
    """Console-script wrapper."""
    try:
        rc = main()
    except KeyboardInterrupt:
        rc = 130
    raise SystemExit(rc)


if __name__ == "__main__":
    main_entry()
