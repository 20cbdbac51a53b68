import json

import pytest

from hostinit.deploy.models import Status
from hostinit.deploy.orchestrator import run_steps
from hostinit.errors import ChainExhaustedError
from hostinit.installers import docker
from hostinit.probe.capabilities import PackageManagerKind

INSTALL = ("dnf", "-y", "-q", "install")


def test_first_installable_alternative_wins(make_ctx, spy):
    spy.rules[INSTALL + ("docker", "docker-compose-plugin")] = (1, "")
    res = docker.install_docker(make_ctx())

    assert res.is_ok
    assert spy.ran(*INSTALL, "docker", "docker-compose")
    assert not spy.ran(*INSTALL, "docker-engine")
    assert not spy.ran(*INSTALL, "docker-ce")


def test_docker_ce_repo_is_last_resort_on_rhel_like(make_ctx, spy):
    ctx = make_ctx(commands={"dnf", "systemctl"})
    ctx.config.paths.os_release.parent.mkdir(parents=True)
    ctx.config.paths.os_release.write_text('ID="rocky"\nID_LIKE="rhel centos fedora"\n')
    for alt in ctx.config.policy.docker.package_alternatives:
        spy.rules[INSTALL + tuple(alt)] = (1, "")

    res = docker.install_docker(ctx)

    assert res.is_ok
    assert spy.ran(*INSTALL, "dnf-plugins-core")
    assert spy.ran("dnf", "config-manager", "--add-repo")
    assert spy.ran(*INSTALL, "docker-ce", "docker-ce-cli")


def test_unknown_distribution_fails_without_ce_repo(make_ctx, spy):
    ctx = make_ctx()
    ctx.config.paths.os_release.parent.mkdir(parents=True)
    ctx.config.paths.os_release.write_text("ID=ubuntu\nID_LIKE=debian\n")
    spy.rules[INSTALL] = (1, "")

    res = docker.install_docker(ctx)

    assert res.status is Status.FAILED
    assert "dnf search docker" in res.message
    assert not spy.ran("dnf", "config-manager")


def test_already_installed_is_left_alone(make_ctx, spy):
    spy.rules[("docker", "--version")] = (0, "Docker version 26.1.3\n")
    res = docker.install_docker(make_ctx(commands={"dnf", "docker"}))
    assert res.is_ok and "26.1.3" in res.message
    assert not spy.ran("dnf")


def test_daemon_json_written(make_ctx, spy):
    ctx = make_ctx()
    assert docker.configure_docker(ctx).is_ok
    daemon = json.loads(ctx.config.paths.docker_daemon_json.read_text())
    assert daemon["insecure-registries"] == ["127.0.0.1:5000", "core.yuhuans.cn:5000"]
    assert daemon["log-opts"] == {"max-size": "10m", "max-file": "3"}


def test_group_membership_needs_relogin(make_ctx, spy, monkeypatch):
    monkeypatch.setattr(docker, "group_exists", lambda g: False)
    monkeypatch.setattr(docker, "is_member", lambda u, g: False)
    res = docker.add_user_to_docker_group(make_ctx())

    assert spy.ran("groupadd", "-r", "docker")
    assert spy.ran("usermod", "-aG", "docker", "alice")
    assert res.status is Status.WARNED and "newgrp docker" in res.message


def test_verify_falls_back_to_standalone_compose(make_ctx, spy):
    spy.rules[("docker", "--version")] = (0, "Docker version 26.1.3")
    spy.rules[("docker-compose", "version")] = (0, "Docker Compose version v2.27.0")
    res = docker.verify_docker(make_ctx())
    assert res.is_ok
    assert spy.ran("docker", "compose", "version")


def test_no_package_manager_aborts_docker_run(make_ctx, spy):
    report = run_steps(docker.build_steps(), make_ctx(commands=set(), pm=PackageManagerKind.NONE), installer="docker")
    assert report.aborted_at == "install-docker"
    assert [o.name for o in report.outcomes] == ["preflight", "install-docker"]
    assert spy.calls == []


def test_unaddable_ce_repo_aborts_docker_run(make_ctx, spy):
    ctx = make_ctx(commands={"dnf", "systemctl"})
    ctx.config.paths.os_release.parent.mkdir(parents=True)
    ctx.config.paths.os_release.write_text("ID=rocky\nID_LIKE=rhel\n")
    spy.rules[INSTALL] = (1, "")
    spy.rules[("dnf", "config-manager", "--add-repo")] = (1, "")

    with pytest.raises(ChainExhaustedError):
        docker.add_docker_ce_repo(ctx)

    report = run_steps(docker.build_steps(), ctx, installer="docker")
    assert report.aborted_at == "install-docker"
    assert "docker-ce repository: all 1 alternatives failed" in report.abort_reason
    assert not spy.ran(*INSTALL, "docker-ce")
