# src/hostinit/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str                  # ISO timestamp (UTC)
    run_id: str              # correlates all events of one installer run
    installer: str           # init/docker/codeserver
    identity: Optional[str]  # target user

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(installer: str, identity: Optional[str], run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "installer": installer,
        "identity": identity,
    }


# ---------------------------------------------------------------------
# Step lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class StepStarted(BaseEvent):
    name: str
    title: str
    fatal_on_error: bool

@dataclass(frozen=True)
class StepSucceeded(BaseEvent):
    name: str
    message: str
    duration_ms: int

@dataclass(frozen=True)
class StepWarned(BaseEvent):
    name: str
    message: str
    duration_ms: int

@dataclass(frozen=True)
class StepFailed(BaseEvent):
    name: str
    error: str
    fatal: bool
    duration_ms: int


# ---------------------------------------------------------------------
# Run lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class RunAborted(BaseEvent):
    step: str
    reason: str
    skipped: List[str]

@dataclass(frozen=True)
class RunSummary(BaseEvent):
    ok: int
    warned: int
    failed: int
    aborted: bool
