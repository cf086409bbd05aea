"""Launch a delegated process and wait for it.

stdout / stderr are inherited, never captured.  stdin is either inherited
(legacy CLI) or fed a single prepared payload and closed (extensions).  The
call blocks until the child exits; there is no timeout here.  The child stays
in our process group, so a terminal interrupt reaches it directly.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Mapping, Sequence

from scanwrap.model.errors import ProcessLaunchError
from scanwrap.policy.exit_codes import report_error

logger = logging.getLogger(__name__)


def _start(
    executable: Path,
    args: Sequence[str],
    env: Mapping[str, str],
    *,
    feed_stdin: bool,
) -> subprocess.Popen[bytes]:
    if not executable.exists():
        raise ProcessLaunchError(f"executable does not exist: {executable}")

    argv = [str(executable), *args]
    logger.debug("launching %s", argv)
    # Anything we printed must appear before the child's output.
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        return subprocess.Popen(
            argv,
            env=dict(env),
            stdin=subprocess.PIPE if feed_stdin else None,
            stdout=None,
            stderr=None,
        )
    except OSError as exc:
        raise ProcessLaunchError(f"could not start {executable}: {exc}") from exc


def _write_payload(proc: subprocess.Popen[bytes], payload: bytes) -> None:
    if proc.stdin is None:
        raise ProcessLaunchError(f"child {proc.pid} was started without a stdin pipe")
    try:
        proc.stdin.write(payload)
        proc.stdin.flush()
    except BrokenPipeError:
        logger.debug("child %s closed stdin before reading its input", proc.pid)
    except KeyboardInterrupt:
        # Same as in _wait: the child got the SIGINT too and reports its own status.
        logger.debug("interrupted while writing input to child %s", proc.pid)
    finally:
        try:
            proc.stdin.close()
        except BrokenPipeError:
            logger.debug("child %s closed stdin before it was flushed", proc.pid)


def _wait(proc: subprocess.Popen[bytes]) -> int | None:
    while True:
        try:
            return proc.wait()
        except KeyboardInterrupt:
            # SIGINT was delivered to the whole process group; let the child
            # decide how to exit and report its own status.
            logger.debug("interrupted, waiting for child %s to exit", proc.pid)


def exit_code_from_returncode(returncode: int | None) -> int:
    """Translate a ``Popen.returncode`` into the dispatcher's exit code.

    ``0..255`` pass through; death by signal N (negative on POSIX) becomes
    ``128 + N`` like a shell would report it.  ``None`` means the status could
    not be determined.
    """
    if returncode is None:
        raise ProcessLaunchError("child process ended without a determinable exit status")
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


def _run(
    executable: Path,
    args: Sequence[str],
    env: Mapping[str, str],
    *,
    stdin_payload: bytes | None = None,
) -> int:
    """Start the child, wait for it and return its exit code.

    Raises ``ProcessLaunchError`` if the child cannot be started or its exit
    status cannot be determined.
    """
    proc = _start(executable, args, env, feed_stdin=stdin_payload is not None)
    try:
        if stdin_payload is not None:
            _write_payload(proc, stdin_payload)
    finally:
        returncode = _wait(proc)
    logger.debug("child %s exited with %s", proc.pid, returncode)
    return exit_code_from_returncode(returncode)


def launch(
    executable: Path,
    args: Sequence[str],
    env: Mapping[str, str],
    *,
    stdin_payload: bytes | None = None,
) -> int:
    """Like ``run`` but never raises: launch failures become a diagnostic
    plus the generic error exit code.
    """
    try:
        return _run(executable, args, env, stdin_payload=stdin_payload)
    except ProcessLaunchError as exc:
        return report_error(exc)
