# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass

from ..config.models import HostInitConfig
from ..execution.privileged import PrivilegedExecutor
from ..execution.runner import CommandRunner
from ..files.managed import ManagedFileWriter
from ..packages.manager import PackageManager
from ..probe.capabilities import HostCapabilities
from .identity import TargetIdentity


@dataclass(frozen=True)
class ExecutionContext:
    """
    Everything a step may use, built once per run and passed explicitly.
    Steps share nothing else; whatever one step leaves behind is on the host.
    """

    capabilities: HostCapabilities
    identity: TargetIdentity
    config: HostInitConfig
    runner: CommandRunner
    executor: PrivilegedExecutor
    packages: PackageManager
    files: ManagedFileWriter


def build_context(
    capabilities: HostCapabilities,
    identity: TargetIdentity,
    config: HostInitConfig,
    *,
    executor: PrivilegedExecutor | None = None,
) -> ExecutionContext:
    runner = CommandRunner(label="run")
    executor = executor or PrivilegedExecutor(capabilities, runner=CommandRunner(label="priv"))
    return ExecutionContext(
        capabilities=capabilities,
        identity=identity,
        config=config,
        runner=runner,
        executor=executor,
        packages=PackageManager(capabilities.package_manager, executor),
        files=ManagedFileWriter(executor),
    )
