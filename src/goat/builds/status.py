"""Build status summaries derived from GitHub Actions runs and jobs."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

from goat.core.types import WorkflowRun

ACTIVE_STATUSES = frozenset({"in_progress", "queued"})


def is_building(run: WorkflowRun | None) -> bool:
    return run is not None and run.status in ACTIVE_STATUSES


def build_status_payload(run: WorkflowRun | None) -> dict[str, Any]:
    return {
        "isBuilding": is_building(run),
        "status": run.status if run else None,
        "conclusion": run.conclusion if run else None,
    }


def elapsed_seconds(run: WorkflowRun, now: datetime | None = None) -> int:
    """Whole seconds since the run was created; 0 when the timestamp is missing or unparsable."""
    if not run.created_at:
        return 0
    try:
        started = datetime.fromisoformat(run.created_at.replace("Z", "+00:00"))
    except ValueError:
        return 0
    if started.tzinfo is None:
        started = started.replace(tzinfo=UTC)
    current = now or datetime.now(UTC)
    return math.floor((current - started).total_seconds())


def job_steps(jobs: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Step summaries of the first job of a run."""
    if not jobs:
        return []
    steps = jobs[0].get("steps")
    if not isinstance(steps, list):
        return []
    return [
        {
            "name": step.get("name"),
            "status": step.get("status"),
            "conclusion": step.get("conclusion"),
            "startedAt": step.get("started_at"),
        }
        for step in steps
        if isinstance(step, dict)
    ]


def build_logs_payload(
    run: WorkflowRun,
    jobs: list[dict[str, Any]],
    now: datetime | None = None,
) -> dict[str, Any]:
    return {
        "isBuilding": is_building(run),
        "status": run.status,
        "conclusion": run.conclusion,
        "runId": run.id,
        "startedAt": run.created_at,
        "elapsedSeconds": elapsed_seconds(run, now),
        "steps": job_steps(jobs),
    }
