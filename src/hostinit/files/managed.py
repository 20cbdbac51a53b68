# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/files/managed.py

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import BackupError, FileWriteError
from ..execution.privileged import PrivilegedExecutor

log = logging.getLogger("hostinit")


@dataclass(frozen=True)
class ManagedFile:
    path: Path
    backup_suffix: str = ".backup"

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + self.backup_suffix)

    @property
    def absent_marker(self) -> Path:
        """Left instead of a backup when the file did not exist before its first write."""
        return self.path.with_name(self.path.name + self.backup_suffix + ".absent")


class ManagedFileWriter:
    """
    Writes root-owned files.

    - backup: the first time a file is touched its current content is copied
      to ``<path><suffix>``. An existing backup is never overwritten, so the
      backup keeps the host's pre-provisioning state across runs. A file this
      writer created gets an empty ``<path><suffix>.absent`` marker instead,
      and is never backed up afterwards.
    - write: temp file in the target directory, permission bits applied,
      then renamed over the target.

    When the process is root the work is done in-process; otherwise the
    content is staged in /tmp and moved into place through the privileged
    executor.
    """

    def __init__(self, executor: PrivilegedExecutor):
        self.executor = executor

    # ------------------ backup ------------------

    def backup_once(self, path: Path, suffix: str = ".backup") -> Optional[Path]:
        """Returns the backup path, or None when there was nothing to back up
        or the copy failed (logged, never raised)."""
        mf = ManagedFile(Path(path), suffix)
        if mf.absent_marker.exists() or not mf.path.exists():
            return None
        if mf.backup_path.exists():
            return mf.backup_path
        try:
            self._copy(mf.path, mf.backup_path)
        except BackupError as e:
            log.warning("%s", e)
            return None
        log.info("backed up %s to %s", mf.path, mf.backup_path)
        return mf.backup_path

    def _copy(self, src: Path, dst: Path) -> None:
        if self.executor.is_privileged:
            try:
                shutil.copy2(src, dst)
            except OSError as e:
                raise BackupError(f"backup of {src} failed: {e}") from e
            return
        if not self.executor.ok(["cp", "-p", str(src), str(dst)]):
            raise BackupError(f"backup of {src} failed")

    # ------------------ write ------------------

    def write(
        self,
        path: Path,
        content: str,
        mode: int = 0o644,
        *,
        backup_suffix: Optional[str] = ".backup",
        owner: Optional[str] = None,
    ) -> bool:
        """
        Write ``content`` to ``path``. Returns False when the file already had
        exactly this content (permissions are still enforced).
        Raises FileWriteError when the write itself fails.
        """
        path = Path(path)
        existed = path.exists()
        if backup_suffix and existed:
            self.backup_once(path, backup_suffix)

        unchanged = existed and self._read(path) == content
        if self.executor.is_privileged:
            self._write_local(path, content, mode, owner, unchanged)
        else:
            self._write_escalated(path, content, mode, owner, unchanged)

        if backup_suffix and not existed:
            self._mark_absent(ManagedFile(path, backup_suffix))

        if unchanged:
            log.debug("%s unchanged", path)
            return False
        log.info("wrote %s (mode %s)", path, oct(mode))
        return True

    def _mark_absent(self, mf: ManagedFile) -> None:
        if self.executor.is_privileged:
            try:
                mf.absent_marker.touch()
            except OSError as e:
                log.warning("could not create %s: %s", mf.absent_marker, e)
            return
        if not self.executor.ok(["touch", str(mf.absent_marker)]):
            log.warning("could not create %s", mf.absent_marker)

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text()
        except OSError:
            return None

    def _write_local(self, path: Path, content: str, mode: int, owner: Optional[str], unchanged: bool) -> None:
        try:
            if not unchanged:
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
                try:
                    with os.fdopen(fd, "w") as f:
                        f.write(content)
                    os.chmod(tmp, mode)
                    os.replace(tmp, path)
                except BaseException:
                    if os.path.exists(tmp):
                        os.unlink(tmp)
                    raise
            os.chmod(path, mode)
            if owner:
                user, _, group = owner.partition(":")
                shutil.chown(path, user=user, group=group or None)
        except (OSError, LookupError) as e:
            raise FileWriteError(f"failed to write {path}: {e}") from e

    def _write_escalated(self, path: Path, content: str, mode: int, owner: Optional[str], unchanged: bool) -> None:
        perm = format(mode, "o")
        if unchanged:
            ok = self.executor.ok(["chmod", perm, str(path)])
        else:
            fd, staged = tempfile.mkstemp(prefix=".hostinit_")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(content)
                sibling = path.with_name(f".{path.name}.hostinit")
                ok = (
                    self.executor.ok(["install", "-D", "-m", perm, staged, str(sibling)])
                    and self.executor.ok(["mv", "-f", str(sibling), str(path)])
                )
            finally:
                os.unlink(staged)
        if ok and owner:
            ok = self.executor.ok(["chown", owner, str(path)])
        if not ok:
            raise FileWriteError(f"failed to write {path}")
