# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/observers/logger.py

from __future__ import annotations

import logging

from .events import (
    BaseEvent,
    RunAborted,
    RunSummary,
    StepFailed,
    StepStarted,
    StepSucceeded,
    StepWarned,
)


class LoggerObserver:
    """Turns step lifecycle events into severity-tagged log lines."""

    def __init__(self, logger: logging.Logger):
        self.log = logger

    def notify(self, event: BaseEvent) -> None:
        if isinstance(event, StepStarted):
            self.log.info("")
            self.log.info("==> %s", event.title)
        elif isinstance(event, StepSucceeded):
            self.log.info("[OK] %s%s", event.name, f": {event.message}" if event.message else "")
        elif isinstance(event, StepWarned):
            self.log.warning("%s: %s", event.name, event.message)
        elif isinstance(event, StepFailed):
            level = logging.ERROR if event.fatal else logging.WARNING
            self.log.log(level, "%s failed: %s", event.name, event.error)
        elif isinstance(event, RunAborted):
            self.log.error("run aborted at %s: %s", event.step, event.reason)
            if event.skipped:
                self.log.error("not executed: %s", ", ".join(event.skipped))
        elif isinstance(event, RunSummary):
            self.log.info(
                "%s finished: OK=%d WARNED=%d FAILED=%d%s",
                event.installer,
                event.ok,
                event.warned,
                event.failed,
                " (aborted)" if event.aborted else "",
            )
