# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/files/repos.py

from __future__ import annotations

import re

ROCKY_HOSTS = re.compile(
    r"rockylinux|dl\.rockylinux\.org|mirrors\.rockylinux\.org|download\.rockylinux\.org"
)

_METALINK = re.compile(r"^[ \t]*metalink=", re.MULTILINE)
_MIRRORLIST = re.compile(r"^[ \t]*mirrorlist=", re.MULTILINE)
_BASEURL = re.compile(r"^[ \t]*#baseurl=", re.MULTILINE)
_CONTENTDIR = re.compile(r"https?://(?:dl|download)\.rockylinux\.org/\$contentdir")


def references_rocky(text: str) -> bool:
    return ROCKY_HOSTS.search(text) is not None


def point_at_mirror(text: str, mirror: str) -> str:
    """
    Switch a Rocky .repo descriptor from mirror discovery to a fixed mirror:
    metalink/mirrorlist are commented out, baseurl is enabled and the
    upstream content host is replaced by ``mirror``.
    Already-rewritten text comes back unchanged.
    """
    mirror = mirror.rstrip("/")
    text = _METALINK.sub("#metalink=", text)
    text = _MIRRORLIST.sub("#mirrorlist=", text)
    text = _BASEURL.sub("baseurl=", text)
    return _CONTENTDIR.sub(lambda _m: mirror, text)
