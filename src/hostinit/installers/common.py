# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/installers/common.py

from __future__ import annotations

import logging
import stat
from pathlib import Path

from ..deploy.models import StepResult
from ..errors import ElevationUnavailableError

log = logging.getLogger("hostinit")


def require_root(ctx) -> StepResult:
    if not ctx.executor.is_privileged:
        raise ElevationUnavailableError(
            f"run as root (e.g. sudo INIT_USERNAME={ctx.identity.name} hostinit init)"
        )
    return StepResult.ok(f"running as root for user {ctx.identity.name}")


def require_elevation(ctx) -> StepResult:
    ctx.executor.require()
    how = "root" if ctx.executor.is_privileged else "sudo"
    return StepResult.ok(f"privileged commands via {how}, target user {ctx.identity.name}")


def systemctl(ctx, *args: str, quiet: bool = True) -> bool:
    return ctx.executor.ok(["systemctl", *args], capture_output=quiet)


def file_mode(path: Path, default: int = 0o644) -> int:
    try:
        return stat.S_IMODE(Path(path).stat().st_mode)
    except OSError:
        return default


def command_output(ctx, argv) -> str:
    cp = ctx.runner.run(argv, capture_output=True)
    if cp.returncode != 0:
        return ""
    return (cp.stdout or "").strip()
