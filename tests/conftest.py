import subprocess
import types
from pathlib import Path

import pytest

from hostinit.config.loader import load_config
from hostinit.config.models import PathsConfig
from hostinit.execution.privileged import PrivilegedExecutor
from hostinit.execution.runner import CommandRunner
from hostinit.probe.capabilities import HostCapabilities, PackageManagerKind
from hostinit.utils.execution import build_context
from hostinit.utils.identity import TargetIdentity


class SpyRun:
    """
    Stands in for subprocess.run. ``rules`` maps an argv prefix (tuple) to
    (returncode, stdout); the longest matching prefix wins, default rc=0.
    """

    def __init__(self, rules=None):
        self.calls = []
        self.rules = dict(rules or {})

    def __call__(self, argv, check=False, text=False, capture_output=False, env=None, input=None):
        argv = list(argv)
        self.calls.append(argv)
        rc, out = 0, ""
        best = -1
        for prefix, result in self.rules.items():
            if tuple(argv[: len(prefix)]) == tuple(prefix) and len(prefix) > best:
                best = len(prefix)
                rc, out = result
        if check and rc != 0:
            raise subprocess.CalledProcessError(rc, argv, output=out)
        return types.SimpleNamespace(returncode=rc, stdout=out, stderr="")

    def ran(self, *prefix):
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]


@pytest.fixture
def spy(monkeypatch):
    s = SpyRun()
    monkeypatch.setattr(subprocess, "run", s)
    return s


@pytest.fixture
def host_paths(tmp_path: Path) -> PathsConfig:
    etc = tmp_path / "etc"
    return PathsConfig(
        sudoers_dir=etc / "sudoers.d",
        repo_dir=etc / "yum.repos.d",
        updatedb_conf=etc / "updatedb.conf",
        pip_conf=etc / "pip.conf",
        profile_dir=etc / "profile.d",
        sshd_config=etc / "ssh" / "sshd_config",
        docker_daemon_json=etc / "docker" / "daemon.json",
        docker_repo_file=etc / "yum.repos.d" / "docker-ce.repo",
        systemd_dir=etc / "systemd" / "system",
        venv_dir=tmp_path / "opt" / "hostinit-venv",
        tools_dir=tmp_path / "assets" / "tools",
        bin_dir=tmp_path / "usr" / "local" / "bin",
        os_release=etc / "os-release",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def make_ctx(spy, host_paths, tmp_path):
    """
    Build a real ExecutionContext (root, no sudo needed) whose commands all
    go through the spy. ``commands`` is the set of executables that "exist".
    """

    def _make(commands=("dnf", "systemctl"), pm=PackageManagerKind.DNF, systemd=True, euid=0):
        available = commands if isinstance(commands, set) else set(commands)
        caps = HostCapabilities(package_manager=pm, has_systemd=systemd, lookup=lambda n: n in available)
        cfg = load_config(env={}).model_copy(update={"paths": host_paths})
        home = tmp_path / "home" / "alice"
        home.mkdir(parents=True, exist_ok=True)
        identity = TargetIdentity(name="alice", home=home)
        executor = PrivilegedExecutor(caps, runner=CommandRunner(label="test"), euid=lambda: euid)
        ctx = build_context(caps, identity, cfg, executor=executor)
        return ctx

    return _make


@pytest.fixture(autouse=True)
def _hostinit_logger_propagates():
    # init_logging() detaches the logger from root; caplog needs it attached
    import logging

    logger = logging.getLogger("hostinit")
    yield
    logger.handlers.clear()
    logger.propagate = True
