from pathlib import Path

import pytest
from typer.testing import CliRunner

from hostinit.cli import app as cli
from hostinit.execution.privileged import PrivilegedExecutor
from hostinit.probe.capabilities import HostCapabilities, PackageManagerKind
from hostinit.utils.execution import build_context
from hostinit.utils.identity import TargetIdentity

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch) -> Path:
    for var in ("INIT_USERNAME", "USERNAME", "HOSTINIT_CONFIG", "ROCKY_REPO_MIRROR", "SKIP_ROCKY_REPO_MIRROR"):
        monkeypatch.delenv(var, raising=False)
    f = tmp_path / "host.yaml"
    f.write_text(f"paths:\n  log_dir: {tmp_path / 'logs'}\n")
    return f


@pytest.fixture
def bare_host(monkeypatch, tmp_path):
    """A root shell on a host without dnf/yum; identity and probe are faked."""
    caps = HostCapabilities(PackageManagerKind.NONE, True, lookup=lambda n: n == "systemctl")
    monkeypatch.setattr(cli, "probe", lambda: caps)
    monkeypatch.setattr(
        cli,
        "build_context",
        lambda c, ident, cfg: build_context(c, ident, cfg, executor=PrivilegedExecutor(c, euid=lambda: 0)),
    )
    monkeypatch.setattr(
        cli, "resolve_invoking_identity", lambda: TargetIdentity(name="alice", home=tmp_path / "home" / "alice")
    )
    return caps


def test_unknown_user_exits_nonzero_before_any_step(config_file, spy, tmp_path):
    result = runner.invoke(cli.app, ["init", "no-such-user-hostinit", "--config", str(config_file)])
    assert result.exit_code == 1
    assert spy.calls == []
    log = next((tmp_path / "logs").glob("init-*.log")).read_text()
    assert "user does not exist: no-such-user-hostinit" in log


def test_bad_config_exits_nonzero(tmp_path, spy, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    bad = tmp_path / "bad.yaml"
    bad.write_text("mirrors:\n  pip_index_url: nope\n")
    result = runner.invoke(cli.app, ["docker", "--config", str(bad)])
    assert result.exit_code == 1
    assert spy.calls == []


def test_docker_without_package_manager_aborts(config_file, bare_host, spy, tmp_path):
    result = runner.invoke(cli.app, ["docker", "--config", str(config_file)])

    assert result.exit_code == 1
    assert spy.calls == []
    log = next((tmp_path / "logs").glob("docker-*.log")).read_text()
    assert "no dnf/yum found" in log
    assert "OK=1 WARNED=0 FAILED=1" in log


def test_help_lists_installers():
    result = runner.invoke(cli.app, ["--help"])
    assert result.exit_code == 0
    for name in ("init", "docker", "codeserver"):
        assert name in result.output
