# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence

from ..errors import FatalError
from ..observers.dispatcher import EventBus
from ..observers.events import (
    new_ctx,
    RunAborted,
    RunSummary,
    StepFailed,
    StepStarted,
    StepSucceeded,
    StepWarned,
)
from .models import RunReport, Status, Step, StepOutcome, StepResult

log = logging.getLogger("hostinit")


def _invoke(step: Step, ctx) -> tuple[StepResult, bool]:
    """
    Run one step action. Returns (result, forced_fatal): a FatalError
    (no package manager, no elevation, ...) aborts whatever the step's own
    policy, any other exception is an ordinary step failure.
    """
    try:
        result = step.action(ctx)
    except FatalError as e:
        return StepResult.failed(str(e)), True
    except Exception as e:
        log.debug("step %s raised", step.name, exc_info=True)
        return StepResult.failed(f"{type(e).__name__}: {e}"), False
    if not isinstance(result, StepResult):
        result = StepResult.ok()
    return result, False


def run_steps(
    steps: Sequence[Step],
    ctx,
    *,
    installer: str = "hostinit",
    observers: Optional[List] = None,
    run_id: Optional[str] = None,
) -> RunReport:
    """
    Execute ``steps`` strictly in order, once each, no retries.

    A failed step with fatal_on_error (or any step raising FatalError) stops
    the run; every other outcome is logged and the next step runs.
    The caller turns ``report.exit_code`` into the process status.
    """
    report = RunReport()
    bus = EventBus(observers or [])
    identity = getattr(getattr(ctx, "identity", None), "name", None)
    run_ctx = new_ctx(installer=installer, identity=identity, run_id=run_id)

    for idx, step in enumerate(steps):
        bus.emit(StepStarted(name=step.name, title=step.banner, fatal_on_error=step.fatal_on_error, **run_ctx))

        t0 = time.monotonic()
        result, forced_fatal = _invoke(step, ctx)
        duration_ms = int((time.monotonic() - t0) * 1000)

        report.add(StepOutcome(name=step.name, status=result.status, message=result.message, duration_ms=duration_ms))

        if result.status is Status.OK:
            bus.emit(StepSucceeded(name=step.name, message=result.message, duration_ms=duration_ms, **run_ctx))
            continue
        if result.status is Status.WARNED:
            bus.emit(StepWarned(name=step.name, message=result.message, duration_ms=duration_ms, **run_ctx))
            continue

        fatal = forced_fatal or step.fatal_on_error
        bus.emit(StepFailed(name=step.name, error=result.message, fatal=fatal, duration_ms=duration_ms, **run_ctx))
        if fatal:
            report.aborted_at = step.name
            report.abort_reason = result.message
            skipped = [s.name for s in steps[idx + 1:]]
            bus.emit(RunAborted(step=step.name, reason=result.message, skipped=skipped, **run_ctx))
            break

    bus.emit(
        RunSummary(
            ok=report.count(Status.OK),
            warned=report.count(Status.WARNED),
            failed=report.count(Status.FAILED),
            aborted=report.aborted,
            **run_ctx,
        )
    )
    return report
