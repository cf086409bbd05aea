"""Shared fixtures: hermetic child scripts and dispatch configs."""

from __future__ import annotations

import hashlib
import json
import os
import stat
import sys
from pathlib import Path

import pytest

from scanwrap.core.config import DispatchConfig
from scanwrap.model.extension import Extension
from scanwrap.model.release import Versions

FIXTURES = Path(__file__).resolve().parent / "fixtures"

# Child that records argv, stdin and environment into $RECORD_PATH, then
# exits with $CHILD_EXIT (default 0).
RECORDER = """\
import json, os, sys
data = sys.stdin.read() if os.environ.get("READ_STDIN") == "1" else None
with open(os.environ["RECORD_PATH"], "w", encoding="utf-8") as f:
    json.dump({"argv": sys.argv[1:], "stdin": data, "env": dict(os.environ)}, f)
sys.exit(int(os.environ.get("CHILD_EXIT", "0")))
"""

posix_only = pytest.mark.skipif(os.name == "nt", reason="needs shebang executables")


def write_script(path: Path, body: str) -> Path:
    """Write an executable Python script at *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def sha256_of(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def read_record(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def record_path(tmp_path: Path) -> Path:
    return tmp_path / "record.json"


@pytest.fixture
def recorder_script(tmp_path: Path) -> Path:
    return write_script(tmp_path / "bundle" / "legacy-cli", RECORDER)


@pytest.fixture
def make_config(tmp_path: Path, record_path: Path, recorder_script: Path):
    """Factory for a ``DispatchConfig`` whose legacy bundle is the recorder."""

    def _make(**overrides) -> DispatchConfig:
        parent_env = [f"{k}={v}" for k, v in os.environ.items()]
        parent_env.append(f"RECORD_PATH={record_path}")
        parent_env.extend(overrides.pop("extra_env", []))
        kwargs = dict(
            cache_dir=tmp_path / "cache",
            proxy_port=8080,
            ca_cert_path=tmp_path / "proxy-ca.pem",
            versions=Versions(v1_version="1.1064.0", v2_version="2.0.0"),
            legacy_checksum=sha256_of(recorder_script),
            legacy_bundle=recorder_script,
            parent_env=tuple(parent_env),
        )
        kwargs.update(overrides)
        return DispatchConfig(**kwargs)

    return _make


def foo_extension(binary: Path, *, command: str = "foo") -> Extension:
    return Extension(
        metadata={
            "name": f"{command}-ext",
            "version": "1.0.0",
            "command": {"name": command, "subcommands": [{"name": "bar"}]},
        },
        binary_path=binary,
    )
