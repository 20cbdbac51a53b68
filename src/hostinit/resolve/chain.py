# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/resolve/chain.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, TypeVar

from ..deploy.models import StepResult
from ..errors import ChainExhaustedError

log = logging.getLogger("hostinit")

T = TypeVar("T")


@dataclass(frozen=True)
class Resolution(Generic[T]):
    label: str
    attempted: int
    winner: Optional[T] = None
    succeeded: bool = False

    @property
    def message(self) -> str:
        if self.succeeded:
            return f"{self.label}: resolved by alternative {self.attempted} ({_describe(self.winner)})"
        return f"{self.label}: all {self.attempted} alternatives failed"

    def to_result(self, *, hard: bool = False) -> StepResult:
        """Exhaustion is a warning unless the caller declares it hard."""
        if self.succeeded:
            return StepResult.ok(self.message)
        return StepResult.failed(self.message) if hard else StepResult.warned(self.message)

    def raise_for_status(self) -> T:
        if not self.succeeded:
            raise ChainExhaustedError(self.label, self.attempted)
        return self.winner  # type: ignore[return-value]


def _describe(alt) -> str:
    if isinstance(alt, (list, tuple)):
        return " ".join(str(a) for a in alt)
    return str(alt)


def resolve(
    label: str,
    alternatives: Iterable[T],
    action: Callable[[T], bool],
) -> Resolution[T]:
    """
    Try each alternative in declared order and stop at the first whose action
    returns True. Alternatives are all-or-nothing units; nothing is scored
    or reordered.

    Exceptions raised by the action propagate unchanged (a missing package
    manager must not be mistaken for "this alternative failed").
    """
    attempted = 0
    for alt in alternatives:
        attempted += 1
        log.debug("%s: trying alternative %d (%s)", label, attempted, _describe(alt))
        if action(alt):
            return Resolution(label=label, attempted=attempted, winner=alt, succeeded=True)
        log.debug("%s: alternative %d failed", label, attempted)

    log.warning("%s: all %d alternatives failed", label, attempted)
    return Resolution(label=label, attempted=attempted)
