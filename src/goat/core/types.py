"""Canonical domain types shared across the showcase modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

Coordinate = tuple[int, int]


@dataclass(slots=True, frozen=True)
class Feature:
    """One shipped (or scheduled) mini-app in the showcase."""

    id: str
    day: int
    title: str
    emoji: str
    description: str
    released: bool = True
    released_at: datetime | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "day": self.day,
            "title": self.title,
            "emoji": self.emoji,
            "description": self.description,
            "released": self.released,
            "releasedAt": self.released_at.isoformat() if self.released_at else None,
            "href": f"/feature/{self.id}",
        }


@dataclass(slots=True, frozen=True)
class LogEntry:
    """Single line of the late-night build log shown on the homepage."""

    time: str
    message: str
    highlight: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {"time": self.time, "message": self.message, "highlight": self.highlight}


@dataclass(slots=True)
class WorkflowRun:
    """Subset of a GitHub Actions workflow run used by build monitoring."""

    id: int
    status: str | None
    conclusion: str | None
    created_at: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> WorkflowRun:
        return cls(
            id=int(payload.get("id", 0)),
            status=payload.get("status"),
            conclusion=payload.get("conclusion"),
            created_at=payload.get("created_at"),
            raw=dict(payload),
        )
