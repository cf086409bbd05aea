"""``--version`` / ``-v`` / ``version``."""

from __future__ import annotations

import sys
from typing import Sequence, TextIO

from scanwrap.model.errors import ConfigurationError
from scanwrap.model.release import Versions
from scanwrap.utils.exit_codes import ExitCode

JSON_FILE_OUTPUT_FLAG = "--json-file-output"


def _wants_json_file_output(args: Sequence[str]) -> bool:
    return any(a == JSON_FILE_OUTPUT_FLAG or a.startswith(JSON_FILE_OUTPUT_FLAG + "=") for a in args)


def run_version(args: Sequence[str], versions: Versions, *, stdout: TextIO | None = None) -> int:
    """Print ``<v2Version>.<v1Version>`` and return 0.

    Raises ``ConfigurationError`` when combined with ``--json-file-output``.
    """
    if _wants_json_file_output(args):
        raise ConfigurationError(
            "The following option combination is not currently supported: "
            "version + json-file-output"
        )
    print(versions.full, file=stdout if stdout is not None else sys.stdout)
    return ExitCode.SUCCESS
