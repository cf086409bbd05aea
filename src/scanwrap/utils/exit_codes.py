"""Centralized exit-code contract for the dispatcher.

Code  Meaning
----  -------
  0   Success
  2   Error — unsupported flag combination, unresolvable command path,
      legacy binary integrity failure, process launch failure

Any other value is the delegated process's own exit status, passed through
unchanged.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 2
