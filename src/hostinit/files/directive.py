# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/files/directive.py

"""
Merge tokens into a single ``KEY="tok1 tok2"`` directive inside a free-form
text file (updatedb.conf's PRUNEPATHS is the motivating case).

Only the first well-formed, uncommented directive is rewritten. Every other
line, including comments, malformed or duplicate directives, goes out
byte-for-byte. When no well-formed directive exists a fresh one is appended,
so a second run always finds and keeps it.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

log = logging.getLogger("hostinit")

# undecodable bytes survive the round trip as surrogates
ENCODING = "utf-8"


@dataclass
class DirectiveList:
    """Ordered token set: first occurrence wins, later duplicates dropped."""

    tokens: List[str] = field(default_factory=list)

    @classmethod
    def parse(cls, value: str) -> "DirectiveList":
        dl = cls()
        dl.extend(value.split())
        return dl

    def __contains__(self, token: str) -> bool:
        return token in self.tokens

    def extend(self, tokens: Iterable[str]) -> None:
        for tok in tokens:
            if tok not in self.tokens:
                self.tokens.append(tok)

    def render(self) -> str:
        return " ".join(self.tokens)


def _patterns(key: str):
    k = re.escape(key)
    candidate = re.compile(rf"^\s*{k}=")
    well_formed = re.compile(rf'^\s*{k}="([^"]*)"\s*$')
    return candidate, well_formed


def _split_eol(line: str):
    body = line.rstrip("\r\n")
    return body, line[len(body):]


def merge_directive(text: str, key: str, required: Sequence[str]) -> str:
    candidate, well_formed = _patterns(key)
    out: List[str] = []
    patched = False

    for line in text.splitlines(keepends=True):
        body, eol = _split_eol(line)
        if patched or not candidate.match(body):
            out.append(line)
            continue
        m = well_formed.match(body)
        if m is None:
            log.debug("leaving malformed %s directive untouched: %r", key, body)
            out.append(line)
            continue
        tokens = DirectiveList.parse(m.group(1))
        tokens.extend(required)
        out.append(f'{key}="{tokens.render()}"{eol}')
        patched = True

    if not patched:
        if out and not out[-1].endswith(("\n", "\r")):
            out.append("\n")
        fresh = DirectiveList()
        fresh.extend(required)
        out.append(f'{key}="{fresh.render()}"\n')

    return "".join(out)


def patch_directive_file(
    path: Path,
    key: str,
    required: Sequence[str],
    *,
    default_mode: int = 0o644,
) -> bool:
    """
    Patch ``path`` in place. A missing file is treated as empty. The result is
    written to a sibling temp file and renamed over the original only when
    the content changed; the original permission bits are kept. Line endings
    and non-UTF-8 bytes are written back as they were read.

    Returns True when the file was rewritten.
    """
    path = Path(path)
    original: Optional[str] = None
    if path.exists():
        original = path.read_bytes().decode(ENCODING, errors="surrogateescape")
    merged = merge_directive(original or "", key, required)
    if merged == original:
        log.debug("%s already contains %s=%s", path, key, " ".join(required))
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding=ENCODING, errors="surrogateescape", newline="") as f:
            f.write(merged)
        if original is not None:
            shutil.copymode(path, tmp)
        else:
            os.chmod(tmp, default_mode)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise

    log.info("updated %s in %s", key, path)
    return True
