# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/files/options.py

from __future__ import annotations

import re
from typing import Dict


def set_option(text: str, key: str, value: str) -> str:
    """
    Set a whitespace-separated ``Key value`` option (sshd_config style).

    Active lines for the key are rewritten; if there are none, commented
    ones (``#Key ...``) are uncommented and rewritten; otherwise the option
    is appended.
    """
    k = re.escape(key)
    active = re.compile(rf"^[ \t]*{k}(?:[ \t].*)?$", re.MULTILINE)
    commented = re.compile(rf"^[ \t]*#[ \t]*{k}(?:[ \t].*)?$", re.MULTILINE)
    line = f"{key} {value}"

    if active.search(text):
        return active.sub(lambda _m: line, text)
    if commented.search(text):
        return commented.sub(lambda _m: line, text)
    if text and not text.endswith("\n"):
        text += "\n"
    return text + line + "\n"


def set_options(text: str, options: Dict[str, str]) -> str:
    for key, value in options.items():
        text = set_option(text, key, value)
    return text
