# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/packages/manager.py

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..deploy.models import StepResult
from ..errors import NoPackageManagerError
from ..execution.privileged import PrivilegedExecutor
from ..probe.capabilities import PackageManagerKind

log = logging.getLogger("hostinit")


# Backend-specific spellings, normalised to: assume-yes, quiet.
_COMMON_FLAGS: List[str] = ["-y", "-q"]

_GROUP_INSTALL: Dict[PackageManagerKind, List[str]] = {
    PackageManagerKind.DNF: ["group", "install"],
    PackageManagerKind.YUM: ["groupinstall"],
}


class PackageManager:
    """
    install / refresh_cache / group_install over whichever of dnf or yum the
    probe found. Every call fails fast with NoPackageManagerError when there
    is neither, instead of attempting the install and failing later.
    """

    def __init__(self, kind: PackageManagerKind, executor: PrivilegedExecutor):
        self.kind = kind
        self.executor = executor

    @property
    def binary(self) -> str:
        self.ensure()
        return self.kind.value

    def ensure(self) -> None:
        if self.kind is PackageManagerKind.NONE:
            raise NoPackageManagerError(
                "no dnf/yum found; a RHEL-family distribution (e.g. Rocky Linux 9) is required"
            )

    def _argv(self, *args: str) -> List[str]:
        return [self.binary, *_COMMON_FLAGS, *args]

    def refresh_cache(self) -> StepResult:
        """A stale cache never blocks installs, so failure only warns."""
        if self.executor.ok(self._argv("makecache"), capture_output=True):
            return StepResult.ok(f"{self.kind.value} cache refreshed")
        log.warning("%s makecache may have failed", self.kind.value)
        return StepResult.warned(f"{self.kind.value} makecache failed")

    def install(self, packages: Sequence[str]) -> bool:
        packages = list(packages)
        if not packages:
            return True
        log.debug("installing: %s", " ".join(packages))
        return self.executor.ok(self._argv("install", *packages))

    def group_install(self, group: str) -> bool:
        self.ensure()
        return self.executor.ok(self._argv(*_GROUP_INSTALL[self.kind], group))

    def is_installed(self, package: str) -> bool:
        return self.executor.runner.ok(["rpm", "-q", package], capture_output=True)
