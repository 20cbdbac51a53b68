# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/installers/codeserver.py

from __future__ import annotations

import logging
from typing import List

from ..deploy.models import Step, StepResult
from ..files.render import render
from .common import command_output, require_elevation, systemctl

log = logging.getLogger("hostinit")


def unit_name(user: str) -> str:
    return f"code-server@{user}.service"


def ensure_curl(ctx) -> bool:
    if ctx.capabilities.has_command("curl"):
        return True
    log.info("installing curl ca-certificates")
    return ctx.packages.install(["curl", "ca-certificates"])


def install_codeserver(ctx) -> StepResult:
    if ctx.capabilities.has_command("code-server"):
        return StepResult.ok(f"code-server already installed: {command_output(ctx, ['code-server', '--version'])}")

    if not ensure_curl(ctx):
        return StepResult.failed("curl install failed")
    url = str(ctx.config.mirrors.code_server_install_url)
    log.info("running the code-server install script from %s", url)
    script = ctx.runner.run(["curl", "-fsSL", url], capture_output=True)
    if script.returncode != 0 or not script.stdout:
        return StepResult.failed(f"could not download {url}")
    if not ctx.runner.ok(["sh"], input=script.stdout):
        return StepResult.failed("code-server install script failed")
    return StepResult.ok("code-server installed")


def configure_service(ctx) -> StepResult:
    user = ctx.identity.name
    unit = unit_name(user)
    content = render("code-server.service.j2", user=user, home=str(ctx.identity.home))
    ctx.files.write(ctx.config.paths.systemd_dir / unit, content, 0o644)

    if not ctx.capabilities.has_systemd:
        return StepResult.failed("systemctl not found; cannot enable code-server")
    systemctl(ctx, "daemon-reload")
    if not systemctl(ctx, "enable", "--now", unit, quiet=False):
        return StepResult.failed(f"could not enable {unit}")

    config_file = ctx.identity.home / ".config" / "code-server" / "config.yaml"
    if not config_file.exists():
        return StepResult.warned(
            f"{unit} running; {config_file} not generated yet (run 'code-server' once or check the service)"
        )
    log.info("config (password inside): %s", config_file)
    return StepResult.ok(f"{unit} enabled; status: systemctl status {unit}")


def build_steps() -> List[Step]:
    return [
        Step("preflight", require_elevation, fatal_on_error=True, title="Preflight checks"),
        Step("install-code-server", install_codeserver, fatal_on_error=True, title="Install code-server"),
        Step("code-server-service", configure_service, fatal_on_error=True, title="Configure code-server service"),
    ]
