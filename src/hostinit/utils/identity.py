# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/utils/identity.py

from __future__ import annotations

import getpass
import grp
import os
import pwd
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from ..errors import MissingIdentityError


@dataclass(frozen=True)
class TargetIdentity:
    """The user the host is being prepared for."""

    name: str
    home: Path

    @property
    def owner(self) -> str:
        return f"{self.name}:{self.name}"


def _home_of(name: str) -> Path:
    try:
        return Path(pwd.getpwnam(name).pw_dir)
    except KeyError:
        return Path("/root") if name == "root" else Path("/home") / name


def user_exists(name: str) -> bool:
    try:
        pwd.getpwnam(name)
        return True
    except KeyError:
        return False


def group_exists(name: str) -> bool:
    try:
        grp.getgrnam(name)
        return True
    except KeyError:
        return False


def is_member(user: str, group: str) -> bool:
    try:
        g = grp.getgrnam(group)
    except KeyError:
        return False
    if user in g.gr_mem:
        return True
    try:
        return pwd.getpwnam(user).pw_gid == g.gr_gid
    except KeyError:
        return False


def resolve_target_identity(
    argument: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> TargetIdentity:
    """
    INIT_USERNAME, then USERNAME, then the positional argument.
    The user must already exist on the host.
    """
    env = os.environ if env is None else env
    name = env.get("INIT_USERNAME") or env.get("USERNAME") or argument
    if not name:
        raise MissingIdentityError("no target user given (INIT_USERNAME/USERNAME/argument)")
    if not user_exists(name):
        raise MissingIdentityError(f"user does not exist: {name}")
    return TargetIdentity(name=name, home=_home_of(name))


def resolve_invoking_identity(env: Optional[Mapping[str, str]] = None) -> TargetIdentity:
    """The user behind sudo, or the current user."""
    env = os.environ if env is None else env
    name = env.get("SUDO_USER") or getpass.getuser()
    return TargetIdentity(name=name, home=_home_of(name))
