# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Dict

RHEL_IDS = {"rocky", "rhel", "centos", "almalinux", "ol"}


def read_os_release(path: Path = Path("/etc/os-release")) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    try:
        text = Path(path).read_text()
    except OSError:
        return fields
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if not sep or key.strip().startswith("#"):
            continue
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip('"')]
        fields[key.strip()] = parts[0] if parts else ""
    return fields


def is_rhel_like(fields: Dict[str, str]) -> bool:
    if fields.get("ID", "") in RHEL_IDS:
        return True
    return "rhel" in fields.get("ID_LIKE", "").split()
