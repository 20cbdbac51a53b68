# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/installers/init.py

"""
Base host initialisation: privileges, update units, package repositories,
toolchain, Python, bundled tools, SSH and firewall.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Optional

from ..deploy.models import Step, StepResult, worst
from ..files.directive import patch_directive_file
from ..files.options import set_options
from ..files.render import render
from ..files.repos import point_at_mirror, references_rocky
from ..resolve.chain import resolve
from ..utils.identity import group_exists, is_member
from .common import command_output, file_mode, require_root, systemctl

log = logging.getLogger("hostinit")

EXTERNALLY_MANAGED_PROBE = (
    "import os, sysconfig; "
    "print(os.path.join(sysconfig.get_paths()['purelib'], 'EXTERNALLY-MANAGED'))"
)


# ------------------ privileges ------------------

def configure_user_privileges(ctx) -> StepResult:
    user = ctx.identity.name
    results: List[StepResult] = []

    for group in ctx.config.policy.user_groups:
        if not group_exists(group) or is_member(user, group):
            continue
        log.info("adding %s to group %s", user, group)
        if not ctx.executor.ok(["usermod", "-aG", group, user]):
            results.append(StepResult.warned(f"could not add {user} to {group}"))

    sudoers = ctx.config.paths.sudoers_dir / user
    log.info("passwordless sudo for %s: %s", user, sudoers)
    ctx.files.write(sudoers, render("sudoers.j2", user=user), 0o440)

    if ctx.capabilities.has_command("visudo") and ctx.executor.ok(["visudo", "-c"], capture_output=True):
        results.append(StepResult.ok("sudoers validated"))
    else:
        results.append(StepResult.warned(f"visudo check failed or unavailable; review {sudoers}"))

    return worst(results, f"{user} has passwordless sudo")


# ------------------ automatic updates ------------------

def disable_automatic_updates(ctx) -> StepResult:
    if not ctx.capabilities.has_systemd:
        return StepResult.warned("systemctl not found; automatic update units left alone")

    listing = command_output(ctx, ["systemctl", "list-unit-files", "--no-legend"])
    installed = {line.split()[0] for line in listing.splitlines() if line.strip()}

    disabled = []
    for unit in ctx.config.policy.auto_update_units:
        if unit not in installed:
            continue
        systemctl(ctx, "stop", unit)
        systemctl(ctx, "disable", unit)
        if unit.endswith(".service"):
            systemctl(ctx, "mask", unit)
        disabled.append(unit)

    systemctl(ctx, "daemon-reload")
    systemctl(ctx, "reset-failed")

    if not disabled:
        return StepResult.ok("no automatic update units installed")
    return StepResult.ok("disabled " + ", ".join(disabled))


# ------------------ repositories ------------------

def setup_repositories(ctx) -> StepResult:
    mirrors = ctx.config.mirrors
    repo_dir = ctx.config.paths.repo_dir

    if mirrors.skip_repo_mirror:
        log.info("SKIP_ROCKY_REPO_MIRROR=1, repository files left unchanged")
        return worst([ctx.packages.refresh_cache()], "repository rewrite skipped")

    if not repo_dir.is_dir():
        refresh = ctx.packages.refresh_cache()
        return worst([refresh, StepResult.warned(f"{repo_dir} not found; repositories unchanged")])

    rewritten = []
    for repo in sorted(repo_dir.glob("*.repo")):
        if not repo.is_file():
            continue
        ctx.files.backup_once(repo, ".backup")
        text = repo.read_text()
        if not references_rocky(text):
            continue
        new = point_at_mirror(text, mirrors.repo_mirror)
        if new != text:
            ctx.files.write(repo, new, file_mode(repo), backup_suffix=None)
            rewritten.append(repo.name)

    refresh = ctx.packages.refresh_cache()
    if rewritten:
        done = StepResult.ok(f"switched {', '.join(rewritten)} to {mirrors.repo_mirror}")
    else:
        done = StepResult.ok("no Rocky Linux repositories to switch")
    return worst([refresh, done], done.message)


# ------------------ packages ------------------

def install_basic_packages(ctx) -> StepResult:
    policy = ctx.config.policy
    pkgs = ctx.packages
    pkgs.ensure()

    results: List[StepResult] = [pkgs.refresh_cache()]

    log.info("installing core tools...")
    if not pkgs.install(policy.base_packages):
        results.append(StepResult.warned("some base packages failed to install"))

    log.info("installing group '%s'...", policy.dev_group)
    if not pkgs.group_install(policy.dev_group):
        results.append(StepResult.warned(f"group '{policy.dev_group}' failed; install gcc/make manually if needed"))

    if not pkgs.install(policy.build_packages):
        results.append(StepResult.warned("some build dependencies failed to install"))

    if not ctx.capabilities.has_command("updatedb"):
        results.append(resolve("locate provider", policy.locate_alternatives, pkgs.install).to_result())

    results.append(configure_prune_paths(ctx))

    if not ctx.executor.ok(["updatedb"]):
        results.append(StepResult.warned("updatedb failed"))

    return worst(results, "base packages installed")


def configure_prune_paths(ctx) -> StepResult:
    conf = ctx.config.paths.updatedb_conf
    paths = ctx.config.policy.prune_paths
    try:
        patch_directive_file(conf, "PRUNEPATHS", paths)
    except OSError as e:
        return StepResult.warned(f"could not update PRUNEPATHS in {conf}: {e}")
    return StepResult.ok(f"updatedb ignores {' '.join(paths)}")


# ------------------ python ------------------

def _externally_managed_marker(ctx) -> Optional[Path]:
    out = command_output(ctx, ["python3", "-c", EXTERNALLY_MANAGED_PROBE])
    return Path(out) if out else None


def _pip_args(ctx) -> List[str]:
    m = ctx.config.mirrors
    return ["install", "-U", "-i", str(m.pip_index_url), "--trusted-host", m.pip_trusted_host, "--no-input"]


def _system_pip_alternatives(ctx, pip: List[str]) -> Iterator[List[str]]:
    yield []
    # only offered when this pip knows the flag (pip >= 23)
    if "--break-system-packages" in command_output(ctx, [*pip, "help", "install"]):
        yield ["--break-system-packages"]


def _write_pip_conf(ctx) -> None:
    m = ctx.config.mirrors
    content = render("pip.conf.j2", index_url=str(m.pip_index_url), trusted_host=m.pip_trusted_host)
    ctx.files.write(ctx.config.paths.pip_conf, content, 0o644)

    home = ctx.identity.home
    if home.is_dir():
        user_dir = home / ".pip"
        ctx.files.write(user_dir / "pip.conf", content, 0o644, backup_suffix=None)
        ctx.executor.ok(["chown", "-R", ctx.identity.owner, str(user_dir)], capture_output=True)


def setup_python(ctx) -> StepResult:
    policy = ctx.config.policy
    results: List[StepResult] = []

    version = command_output(ctx, ["python3", "--version"])
    if version:
        log.info("current %s", version)

    if not ctx.packages.install(policy.python_packages):
        results.append(StepResult.warned("python3 install failed; using the system default"))

    _write_pip_conf(ctx)

    base = _pip_args(ctx)
    marker = _externally_managed_marker(ctx)

    if marker is not None and marker.exists():
        venv = ctx.config.paths.venv_dir
        log.info("externally managed interpreter (PEP 668); using venv %s", venv)
        if not venv.is_dir() and not ctx.executor.ok(["python3", "-m", "venv", str(venv)]):
            return StepResult.failed(f"could not create virtualenv {venv}")
        pip = [str(venv / "bin" / "pip")]
        if not ctx.executor.ok([*pip, *base, *policy.pip_bootstrap]):
            results.append(StepResult.warned("venv pip/setuptools/wheel upgrade failed"))
        profile = ctx.config.paths.profile_dir / "hostinit_python.sh"
        ctx.files.write(profile, render("python_profile.sh.j2", venv_dir=str(venv)), 0o644)
        if not ctx.executor.ok([*pip, *base, *policy.pip_packages]):
            results.append(StepResult.warned("some Python packages failed to install in the venv"))
    else:
        pip = ["python3", "-m", "pip"]
        for label, packages in (("pip bootstrap", policy.pip_bootstrap), ("python packages", policy.pip_packages)):
            res = resolve(
                label,
                _system_pip_alternatives(ctx, pip),
                lambda extra, packages=packages: ctx.executor.ok([*pip, *base, *extra, *packages]),
            )
            results.append(res.to_result())

    return worst(results, "python environment configured")


# ------------------ bundled tools ------------------

def install_yq(ctx) -> StepResult:
    if ctx.capabilities.has_command("yq"):
        return StepResult.ok("yq already installed")

    src = ctx.config.paths.tools_dir / ctx.config.policy.yq_binary
    if not src.is_file():
        return StepResult.warned(f"yq binary not found: {src}")

    dest = ctx.config.paths.bin_dir / "yq"
    if not ctx.executor.ok(["install", "-m", "0755", str(src), str(dest)]):
        return StepResult.warned("yq install command failed")
    if not ctx.capabilities.has_command("yq"):
        return StepResult.failed(f"yq installed to {dest} but not found on PATH")
    return StepResult.ok(f"yq installed to {dest}")


def install_gum(ctx) -> StepResult:
    if ctx.capabilities.has_command("gum"):
        return StepResult.ok(f"gum already installed: {command_output(ctx, ['gum', '--version']) or 'unknown'}")

    rpm = ctx.config.paths.tools_dir / ctx.config.policy.gum_rpm
    if not rpm.is_file():
        return StepResult.warned(f"gum package not found: {rpm}")

    if not ctx.packages.install([str(rpm)]):
        return StepResult.warned("gum install command failed")
    if not ctx.capabilities.has_command("gum"):
        return StepResult.warned("gum still unavailable after install")
    return StepResult.ok("gum installed")


# ------------------ ssh & firewall ------------------

def setup_ssh(ctx) -> StepResult:
    if ctx.packages.is_installed("openssh-server"):
        log.info("openssh-server already installed")
    elif not ctx.packages.install(["openssh-server"]):
        return StepResult.failed("openssh-server install failed")

    conf = ctx.config.paths.sshd_config
    if not conf.is_file():
        return StepResult.failed(f"{conf} not found")

    ctx.files.backup_once(conf, ".bak")
    text = conf.read_text()
    new = set_options(text, ctx.config.policy.sshd_options)
    if new != text:
        ctx.files.write(conf, new, file_mode(conf, 0o600), backup_suffix=None)

    if not ctx.capabilities.has_systemd:
        return StepResult.warned("sshd configured but systemctl not found; restart it manually")

    systemctl(ctx, "enable", "sshd")
    systemctl(ctx, "restart", "sshd")
    if not systemctl(ctx, "is-active", "--quiet", "sshd"):
        return StepResult.failed("sshd is not active after restart")
    return StepResult.ok("sshd running")


def setup_firewall(ctx) -> StepResult:
    results: List[StepResult] = []
    if not ctx.capabilities.has_command("firewall-cmd"):
        log.info("installing firewalld...")
        if not ctx.packages.install(["firewalld"]):
            results.append(StepResult.warned("firewalld install failed"))

    if not ctx.capabilities.has_command("firewall-cmd"):
        return worst(results + [StepResult.warned("firewalld unavailable; firewall not configured")])

    systemctl(ctx, "enable", "--now", "firewalld")
    allowed = resolve(
        "allow ssh",
        ctx.config.policy.firewall_alternatives,
        lambda alt: ctx.executor.ok(["firewall-cmd", *alt], capture_output=True),
    )
    results.append(allowed.to_result())
    ctx.executor.ok(["firewall-cmd", "--reload"], capture_output=True)
    log.debug("%s", command_output(ctx, ["firewall-cmd", "--list-all"]))

    return worst(results, "firewalld configured")


def build_steps() -> List[Step]:
    # disabling update timers early keeps them from holding the dnf lock
    return [
        Step("preflight", require_root, fatal_on_error=True, title="Preflight checks"),
        Step("user-privileges", configure_user_privileges, title="Configure groups and sudo"),
        Step("disable-auto-updates", disable_automatic_updates, title="Disable automatic updates (DNF/YUM)"),
        Step("repositories", setup_repositories, title="Configure package repositories"),
        Step("base-packages", install_basic_packages, title="Install base packages"),
        Step("python", setup_python, title="Configure Python environment"),
        Step("yq", install_yq, title="Install yq"),
        Step("gum", install_gum, title="Install gum"),
        Step("ssh", setup_ssh, title="Configure SSH service"),
        Step("firewall", setup_firewall, title="Configure firewall"),
    ]
