"""Exit code contract tests — enforce stable CLI exit semantics.

Code  Meaning
----  -------
  0   Success
  2   Error — configuration, integrity or launch failure in the dispatcher
  *   Anything else is the delegated process's own exit status
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from conftest import RECORDER, posix_only, read_record, sha256_of, write_script
from scanwrap.legacy.bundle import LEGACY_SHA256

REPO_ROOT = Path(__file__).resolve().parents[1]


def _run(*args: str, extra_env: dict[str, str] | None = None, home: Path) -> subprocess.CompletedProcess[str]:
    env = {
        k: v for k, v in os.environ.items() if not k.startswith("SCANWRAP_")
    }
    env["PYTHONPATH"] = str(REPO_ROOT / "src") + (
        os.pathsep + env["PYTHONPATH"] if env.get("PYTHONPATH") else ""
    )
    env["HOME"] = str(home)
    env.pop("XDG_CONFIG_HOME", None)
    env.pop("XDG_CACHE_HOME", None)
    env.update(extra_env or {})
    return subprocess.run(
        [sys.executable, "-m", "scanwrap", *args],
        capture_output=True,
        text=True,
        env=env,
    )


class TestVersion:
    def test_version_returns_0(self, tmp_path: Path) -> None:
        from scanwrap.legacy.bundle import V1_VERSION, V2_VERSION

        r = _run("version", home=tmp_path)
        assert r.returncode == 0, r.stderr
        assert r.stdout == f"{V2_VERSION}.{V1_VERSION}\n"

    def test_version_with_json_file_output_returns_2(self, tmp_path: Path) -> None:
        r = _run("--json-file-output=x.json", "--version", home=tmp_path)
        assert r.returncode == 2
        assert r.stdout == ""
        assert r.stderr.strip() == (
            "error: The following option combination is not currently supported: "
            "version + json-file-output"
        )


class TestConfiguration:
    def test_bad_proxy_port_returns_2(self, tmp_path: Path) -> None:
        r = _run("test", extra_env={"SCANWRAP_PROXY_PORT": "nope"}, home=tmp_path)
        assert r.returncode == 2
        assert r.stderr.startswith("error: proxy port must be an integer")

    def test_debug_logging_goes_to_stderr(self, tmp_path: Path) -> None:
        r = _run("-v", "--debug", home=tmp_path)
        assert r.returncode == 0
        assert "matched built-in handler" in r.stderr


@posix_only
class TestLegacyPassthrough:
    def _legacy_env(self, tmp_path: Path) -> dict[str, str]:
        bundle = write_script(tmp_path / "bundle" / "legacy-cli", RECORDER)
        assert sha256_of(bundle) != LEGACY_SHA256
        return {
            "SCANWRAP_PROXY_PORT": "8080",
            "SCANWRAP_CA_CERT": str(tmp_path / "ca.pem"),
            "SCANWRAP_CACHE_DIR": str(tmp_path / "cache"),
            "SCANWRAP_LEGACY_BUNDLE": str(bundle),
            "RECORD_PATH": str(tmp_path / "record.json"),
        }

    def test_checksum_mismatch_returns_2(self, tmp_path: Path) -> None:
        # The release checksum never matches the test bundle.
        r = _run("test", extra_env=self._legacy_env(tmp_path), home=tmp_path)
        assert r.returncode == 2
        assert "failed sha256 verification" in r.stderr
        assert not (tmp_path / "record.json").exists()


@posix_only
def test_child_exit_code_passthrough(tmp_path: Path, monkeypatch) -> None:
    """Drive main() in-process so the test bundle's checksum can be injected."""
    import dataclasses

    from scanwrap import __main__ as cli

    bundle = write_script(tmp_path / "bundle" / "legacy-cli", RECORDER)
    real_load = cli.load_config
    monkeypatch.setattr(
        cli,
        "load_config",
        lambda argv: dataclasses.replace(real_load(argv), legacy_checksum=sha256_of(bundle)),
    )
    monkeypatch.setenv("HOME", str(tmp_path))
    for var in ("SCANWRAP_CONFIG", "SCANWRAP_EXTENSIONS_DIR", "XDG_CONFIG_HOME"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("SCANWRAP_PROXY_PORT", "8080")
    monkeypatch.setenv("SCANWRAP_CA_CERT", str(tmp_path / "ca.pem"))
    monkeypatch.setenv("SCANWRAP_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("SCANWRAP_LEGACY_BUNDLE", str(bundle))
    monkeypatch.setenv("RECORD_PATH", str(tmp_path / "record.json"))
    monkeypatch.setenv("CHILD_EXIT", "1")

    assert cli.main(["test", "--json"]) == 1
    assert read_record(tmp_path / "record.json")["argv"] == ["test", "--json"]


class TestStartupFailures:
    def test_undecodable_extension_metadata_returns_2(self, tmp_path: Path) -> None:
        ext = tmp_path / "extensions" / "broken"
        ext.mkdir(parents=True)
        (ext / "extension.json").write_bytes(b'{"name": "\xff"}')
        r = _run("--version", extra_env={"SCANWRAP_EXTENSIONS_DIR": str(tmp_path / "extensions")}, home=tmp_path)
        assert r.returncode == 2
        assert r.stderr.startswith("error: cannot read extension metadata")
        assert "Traceback" not in r.stderr

    def test_undecodable_config_file_returns_2(self, tmp_path: Path) -> None:
        cfg = tmp_path / "scanwrap.yaml"
        cfg.write_bytes(b"proxy_port: \xff\xfe\n")
        r = _run("version", extra_env={"SCANWRAP_CONFIG": str(cfg)}, home=tmp_path)
        assert r.returncode == 2
        assert r.stderr.startswith("error: cannot load config file")
        assert "Traceback" not in r.stderr

    def test_unexpected_startup_failure_returns_2(self, monkeypatch, capsys) -> None:
        from scanwrap import __main__ as cli

        def boom(argv):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(cli, "load_config", boom)
        assert cli.main(["version"]) == 2
        assert capsys.readouterr().err == "error: unexpected failure: disk on fire\n"


@posix_only
def test_shipped_legacy_bundle_runs(tmp_path: Path) -> None:
    r = _run(
        "test",
        "--all-projects",
        extra_env={
            "SCANWRAP_PROXY_PORT": "8080",
            "SCANWRAP_CA_CERT": str(tmp_path / "ca.pem"),
            "SCANWRAP_CACHE_DIR": str(tmp_path / "cache"),
        },
        home=tmp_path,
    )
    assert r.returncode == 0, r.stderr
    assert "legacy scanner is not bundled in this build; arguments: test --all-projects" in r.stderr
