"""Debug build history persisted as a JSON array, newest first."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MAX_BUILD_LOGS = 50


@dataclass(slots=True)
class BuildAttempt:
    attempt_number: int
    build_errors: list[str] = field(default_factory=list)
    runtime_errors: list[str] = field(default_factory=list)
    fixed: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {
            "attemptNumber": self.attempt_number,
            "buildErrors": list(self.build_errors),
            "runtimeErrors": list(self.runtime_errors),
            "fixed": self.fixed,
        }


@dataclass(slots=True)
class BuildRecord:
    """One autonomous build run: the idea, every fix attempt, and the outcome."""

    day: int
    id: str = field(default_factory=lambda: f"build-{int(datetime.now(UTC).timestamp() * 1000)}")
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    slug: str = ""
    idea: dict[str, Any] | None = None
    success: bool = False
    attempts: list[BuildAttempt] = field(default_factory=list)
    final_error: str | None = None

    def log_attempt(self, attempt: BuildAttempt) -> None:
        self.attempts.append(attempt)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "day": self.day,
            "idea": self.idea,
            "slug": self.slug,
            "success": self.success,
            "attempts": [attempt.to_payload() for attempt in self.attempts],
        }
        if self.final_error is not None:
            payload["finalError"] = self.final_error
        return payload


def load_build_history(path: str | Path) -> tuple[list[dict[str, Any]], str | None]:
    """Return ``(logs, error)``; a missing file is an empty history, not an error."""
    history_path = Path(path)
    if not history_path.exists():
        return [], None
    try:
        data = json.loads(history_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("build_history_unreadable path=%s", history_path)
        return [], "Failed to parse logs"
    if not isinstance(data, list):
        logger.warning("build_history_not_a_list path=%s", history_path)
        return [], "Failed to parse logs"
    return [entry for entry in data if isinstance(entry, dict)], None


def save_build_record(path: str | Path, record: BuildRecord, *, keep: int = MAX_BUILD_LOGS) -> list[dict[str, Any]]:
    """Prepend ``record`` to the history file, keeping only the newest ``keep`` entries."""
    history_path = Path(path)
    logs, error = load_build_history(history_path)
    if error:
        logs = []
    logs.insert(0, record.to_payload())
    logs = logs[:keep]
    history_path.parent.mkdir(parents=True, exist_ok=True)
    history_path.write_text(json.dumps(logs, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("build_record_saved id=%s path=%s", record.id, history_path)
    return logs
