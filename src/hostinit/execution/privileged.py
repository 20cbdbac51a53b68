# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/execution/privileged.py

from __future__ import annotations

import os
import subprocess
from typing import Callable, Optional, Sequence

from ..errors import ElevationUnavailableError
from ..probe.capabilities import HostCapabilities
from .runner import CommandRunner


class PrivilegedExecutor:
    """
    Runs commands as root: directly when already root, through sudo otherwise.

    Never falls back to running unprivileged. Stateless, so repeating a
    command is as safe as the command itself.
    """

    def __init__(
        self,
        capabilities: HostCapabilities,
        *,
        runner: Optional[CommandRunner] = None,
        euid: Callable[[], int] = os.geteuid,
    ):
        self.capabilities = capabilities
        self.runner = runner or CommandRunner(label="sudo")
        self._euid = euid

    @property
    def is_privileged(self) -> bool:
        return self._euid() == 0

    def can_elevate(self) -> bool:
        return self.is_privileged or self.capabilities.has_command("sudo")

    def require(self) -> None:
        if not self.can_elevate():
            raise ElevationUnavailableError(
                "root privileges are required but sudo was not found"
            )

    def wrap(self, argv: Sequence[str]) -> list[str]:
        argv = [str(a) for a in argv]
        if self.is_privileged:
            return argv
        self.require()
        return ["sudo", *argv]

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = False,
        capture_output: bool = False,
        env: Optional[dict] = None,
        input: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        return self.runner.run(
            self.wrap(argv),
            check=check,
            capture_output=capture_output,
            env=env,
            input=input,
        )

    def ok(self, argv: Sequence[str], **kwargs) -> bool:
        return self.run(argv, **kwargs).returncode == 0
