# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/probe/capabilities.py

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class PackageManagerKind(str, Enum):
    DNF = "dnf"
    YUM = "yum"
    NONE = "none"


# Preference order matters: dnf wins when both are installed.
PACKAGE_MANAGER_PREFERENCE = (PackageManagerKind.DNF, PackageManagerKind.YUM)


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def detect_package_manager(
    lookup: Callable[[str], bool] = command_exists,
) -> PackageManagerKind:
    for kind in PACKAGE_MANAGER_PREFERENCE:
        if lookup(kind.value):
            return kind
    return PackageManagerKind.NONE


@dataclass(frozen=True)
class HostCapabilities:
    """
    What the host offers, probed once at run start.

    package_manager and has_systemd are fixed for the run. has_command stays
    live because steps install tools (yq, docker, ...) that later steps check.
    """

    package_manager: PackageManagerKind
    has_systemd: bool
    lookup: Callable[[str], bool] = field(default=command_exists, compare=False, repr=False)

    def has_command(self, name: str) -> bool:
        return self.lookup(name)


def probe(lookup: Optional[Callable[[str], bool]] = None) -> HostCapabilities:
    """Detect package manager and init system. No side effects."""
    lookup = lookup or command_exists
    return HostCapabilities(
        package_manager=detect_package_manager(lookup),
        has_systemd=lookup("systemctl"),
        lookup=lookup,
    )
