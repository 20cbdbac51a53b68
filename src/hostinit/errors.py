# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/errors.py


class HostInitError(RuntimeError):
    """Base class for provisioning failures."""


class FatalError(HostInitError):
    """Aborts the whole run, whatever the failing step's own policy says."""


class NoPackageManagerError(FatalError):
    """Raised when an operation needs dnf/yum and neither is installed."""


class ElevationUnavailableError(FatalError):
    """Raised when a privileged command cannot be elevated (not root, no sudo)."""


class MissingIdentityError(FatalError):
    """Raised when the target user is not supplied or does not exist."""


class ConfigError(FatalError):
    """Raised when settings cannot be loaded or validated."""


class FileWriteError(HostInitError):
    """Raised when a managed file cannot be written."""


class BackupError(HostInitError):
    """Raised when a one-time backup copy cannot be made."""


class ChainExhaustedError(HostInitError):
    """Raised when every alternative of a fallback chain failed."""

    def __init__(self, label: str, attempted: int):
        self.label = label
        self.attempted = attempted
        super().__init__(f"{label}: all {attempted} alternatives failed")
