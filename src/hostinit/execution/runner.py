# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/execution/runner.py

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Optional, Sequence


class CommandRunner:
    """
    Thin wrapper around subprocess.run that traces every command to the run
    log (set -x style). Output is captured only when asked for.
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        label: str = "cmd",
    ):
        self.log = logger or logging.getLogger("hostinit")
        self.label = label

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = False,
        capture_output: bool = False,
        env: Optional[dict] = None,
        input: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        argv = [str(a) for a in argv]
        self.log.debug("[%s] + %s", self.label, shlex.join(argv))
        try:
            cp = subprocess.run(
                argv,
                check=check,
                text=True,
                capture_output=capture_output,
                env=env,
                input=input,
            )
        except FileNotFoundError:
            self.log.debug("[%s] command not found: %s", self.label, argv[0])
            if check:
                raise
            return subprocess.CompletedProcess(argv, 127, stdout="", stderr=f"{argv[0]}: not found")
        self.log.debug("[%s] exit=%s", self.label, cp.returncode)
        return cp

    def ok(self, argv: Sequence[str], **kwargs) -> bool:
        return self.run(argv, **kwargs).returncode == 0
