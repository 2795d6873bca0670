"""Release schedule: one feature per day, shipped at local midnight."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

DEFAULT_LAUNCH_DATE = date(2024, 12, 1)


@dataclass(slots=True, frozen=True)
class TimeLeft:
    """Countdown split into total hours, minutes and seconds."""

    hours: int
    minutes: int
    seconds: int

    def format(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"

    def to_payload(self) -> dict[str, object]:
        return {
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds": self.seconds,
            "display": self.format(),
        }


def next_release_time(now: datetime | None = None) -> datetime:
    """Midnight at the start of the day after ``now`` (keeps ``now``'s tzinfo)."""
    current = now or datetime.now()
    tomorrow = current.date() + timedelta(days=1)
    return datetime.combine(tomorrow, time.min, tzinfo=current.tzinfo)


def current_day(now: datetime | None = None, launch: date = DEFAULT_LAUNCH_DATE) -> int:
    """Day number of the project; the launch date is Day 1."""
    current = now or datetime.now()
    start = datetime.combine(launch, time.min, tzinfo=current.tzinfo)
    days = (current - start) // timedelta(days=1)
    return max(1, days + 1)


def time_left(target: datetime, now: datetime | None = None) -> TimeLeft:
    current = now or datetime.now(target.tzinfo)
    remaining = int((target - current).total_seconds())
    if remaining <= 0:
        return TimeLeft(0, 0, 0)
    hours, rest = divmod(remaining, 3600)
    minutes, seconds = divmod(rest, 60)
    return TimeLeft(hours, minutes, seconds)
