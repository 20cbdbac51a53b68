# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/installers/docker.py

from __future__ import annotations

import json
import logging
from typing import List

from ..deploy.models import Step, StepResult, worst
from ..probe.os_release import is_rhel_like, read_os_release
from ..resolve.chain import resolve
from ..utils.identity import group_exists, is_member
from .common import command_output, require_elevation, systemctl

log = logging.getLogger("hostinit")


def add_docker_ce_repo(ctx) -> None:
    """Raises ChainExhaustedError when no config-manager tool could add the repo."""
    repo_file = ctx.config.paths.docker_repo_file
    if repo_file.exists():
        log.info("%s already present", repo_file)
        return

    pkgs = ctx.packages
    pkgs.refresh_cache()
    resolve("config-manager plugin", [[t] for t in ctx.config.policy.docker.repo_tools], pkgs.install)

    url = str(ctx.config.mirrors.docker_ce_repo_url)
    strategies = []
    if ctx.capabilities.has_command("dnf") and ctx.executor.runner.ok(["dnf", "config-manager", "--help"], capture_output=True):
        strategies.append(["dnf", "config-manager", "--add-repo", url])
    if ctx.capabilities.has_command("yum-config-manager"):
        strategies.append(["yum-config-manager", "--add-repo", url])

    resolve(
        "docker-ce repository", strategies, lambda argv: ctx.executor.ok(argv, capture_output=True)
    ).raise_for_status()

    pkgs.refresh_cache()
    log.info("Docker CE repository added")


def install_docker(ctx) -> StepResult:
    if ctx.capabilities.has_command("docker"):
        return StepResult.ok(f"Docker already installed: {command_output(ctx, ['docker', '--version'])}")

    pkgs = ctx.packages
    pkgs.ensure()
    pkgs.refresh_cache()

    log.info("trying distribution packages before the Docker CE repository...")
    docker = ctx.config.policy.docker
    found = resolve("docker packages", docker.package_alternatives, pkgs.install)
    if found.succeeded:
        return StepResult.ok(found.message)

    if not is_rhel_like(read_os_release(ctx.config.paths.os_release)):
        return StepResult.failed(
            f"no Docker packages in the enabled repositories and the Docker CE repository "
            f"cannot be added on this distribution; try: {pkgs.kind.value} search docker"
        )
    add_docker_ce_repo(ctx)

    log.info("installing docker-ce from the Docker CE repository...")
    if not pkgs.install(docker.ce_packages):
        return StepResult.failed(f"Docker CE install failed; try: {pkgs.kind.value} search docker-ce")
    return StepResult.ok("installed " + " ".join(docker.ce_packages))


def configure_docker(ctx) -> StepResult:
    path = ctx.config.paths.docker_daemon_json
    content = json.dumps(ctx.config.policy.docker.daemon, indent=2) + "\n"
    ctx.files.write(path, content, 0o644)
    return StepResult.ok(f"{path} updated")


def add_user_to_docker_group(ctx) -> StepResult:
    user = ctx.identity.name
    if not group_exists("docker"):
        log.info("creating docker group...")
        ctx.executor.ok(["groupadd", "-r", "docker"], capture_output=True)

    if is_member(user, "docker"):
        return StepResult.ok(f"{user} already in docker group")

    if not ctx.executor.ok(["usermod", "-aG", "docker", user]):
        return StepResult.failed(f"could not add {user} to docker group")
    return StepResult.warned(f"{user} added to docker group; log in again or run 'newgrp docker'")


def start_docker_service(ctx) -> StepResult:
    if not ctx.capabilities.has_systemd:
        return StepResult.warned("systemctl not found; start dockerd manually")
    systemctl(ctx, "daemon-reload")
    results = []
    if not systemctl(ctx, "restart", "docker", quiet=False):
        results.append(StepResult.warned("docker restart failed"))
    if not systemctl(ctx, "enable", "docker", quiet=False):
        results.append(StepResult.warned("docker enable failed"))
    return worst(results, "docker service restarted and enabled")


def verify_docker(ctx) -> StepResult:
    version = command_output(ctx, ["docker", "--version"])
    if not version:
        return StepResult.failed("docker --version failed")
    log.info("%s", version)

    compose = resolve(
        "docker compose",
        [["docker", "compose", "version"], ["docker-compose", "version"]],
        lambda argv: bool(command_output(ctx, argv)),
    )
    if not compose.succeeded:
        return StepResult.warned("neither 'docker compose' nor docker-compose found")
    log.info("%s", command_output(ctx, compose.winner))
    return StepResult.ok(version)


def build_steps() -> List[Step]:
    return [
        Step("preflight", require_elevation, fatal_on_error=True, title="Preflight checks"),
        Step("install-docker", install_docker, fatal_on_error=True, title="Install Docker"),
        Step("configure-docker", configure_docker, title="Configure Docker"),
        Step("docker-group", add_user_to_docker_group, title="Add user to docker group"),
        Step("docker-service", start_docker_service, title="Start Docker service"),
        Step("verify-docker", verify_docker, title="Verify Docker installation"),
    ]
