# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/deploy/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:
    from ..utils.execution import ExecutionContext


class Status(str, Enum):
    OK = "ok"
    WARNED = "warned"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Tri-state outcome returned by steps and components: success, soft
    failure (warned) or hard failure (failed). Whether a failure ends the
    run is decided by the orchestrator, never here.
    """

    status: Status
    message: str = ""

    @classmethod
    def ok(cls, message: str = "") -> "StepResult":
        return cls(Status.OK, message)

    @classmethod
    def warned(cls, message: str) -> "StepResult":
        return cls(Status.WARNED, message)

    @classmethod
    def failed(cls, message: str) -> "StepResult":
        return cls(Status.FAILED, message)

    @property
    def is_ok(self) -> bool:
        return self.status is Status.OK

    @property
    def is_failed(self) -> bool:
        return self.status is Status.FAILED


def worst(results: List[StepResult], ok_message: str = "") -> StepResult:
    """Fold sub-results into one: first failure, else warnings joined, else ok."""
    for r in results:
        if r.is_failed:
            return r
    warnings = [r.message for r in results if r.status is Status.WARNED]
    if warnings:
        return StepResult.warned("; ".join(warnings))
    return StepResult.ok(ok_message)


@dataclass(frozen=True)
class Step:
    name: str
    action: Callable[["ExecutionContext"], StepResult]
    fatal_on_error: bool = False
    title: Optional[str] = None

    @property
    def banner(self) -> str:
        return self.title or self.name


@dataclass
class StepOutcome:
    name: str
    status: Status
    message: str = ""
    duration_ms: int = 0


@dataclass
class RunReport:
    outcomes: List[StepOutcome] = field(default_factory=list)
    aborted_at: Optional[str] = None
    abort_reason: Optional[str] = None

    def add(self, outcome: StepOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def aborted(self) -> bool:
        return self.aborted_at is not None

    @property
    def exit_code(self) -> int:
        return 1 if self.aborted else 0

    def count(self, status: Status) -> int:
        return sum(1 for o in self.outcomes if o.status is status)
