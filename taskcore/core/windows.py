"""
Calendar-relative date windows.

Every function takes the reference instant `now` explicitly; nothing here
reads the clock. Boundaries are computed on the wall clock of `now`'s own
timezone (a naive `now` is taken as UTC), then compared to due dates as
instants.

Weeks start on Sunday.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import List

from taskcore.domain.models import Task, TaskCollection
from taskcore.utils.time import ensure_aware

_END_OF_DAY = time(23, 59, 59, 999_999)


@dataclass(frozen=True)
class Window:
    """Closed instant range [start, end]."""

    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


def start_of_day(now: datetime) -> datetime:
    now = ensure_aware(now)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(now: datetime) -> datetime:
    now = ensure_aware(now)
    return datetime.combine(now.date(), _END_OF_DAY, tzinfo=now.tzinfo)


def day_of_week(now: datetime) -> int:
    """Sunday = 0 ... Saturday = 6."""
    return (now.weekday() + 1) % 7


def start_of_week(now: datetime) -> datetime:
    return start_of_day(now) - timedelta(days=day_of_week(now))


def end_of_week(now: datetime) -> datetime:
    return end_of_day(start_of_week(now) + timedelta(days=6))


def day_window(now: datetime) -> Window:
    return Window(start_of_day(now), end_of_day(now))


def week_window(now: datetime) -> Window:
    return Window(start_of_week(now), end_of_week(now))


def _by_due_date(tasks: List[Task]) -> List[Task]:
    # sorted() is stable, so equal due dates keep collection order
    return sorted(tasks, key=lambda t: t.due_date)  # type: ignore[arg-type,return-value]


def due_within(collection: TaskCollection, window: Window) -> List[Task]:
    """Tasks whose due date lies inside `window`, earliest first."""
    return _by_due_date(
        [t for t in collection.tasks if t.due_date is not None and window.contains(t.due_date)]
    )


def due_today(collection: TaskCollection, now: datetime) -> List[Task]:
    return due_within(collection, day_window(now))


def due_this_week(collection: TaskCollection, now: datetime) -> List[Task]:
    return due_within(collection, week_window(now))


def is_overdue(task: Task, now: datetime) -> bool:
    """A task due exactly at `now` is not overdue yet; completed tasks never are."""
    return not task.completed and task.due_date is not None and task.due_date < ensure_aware(now)


def overdue(collection: TaskCollection, now: datetime) -> List[Task]:
    """Open tasks past their due date, most overdue first."""
    return _by_due_date([t for t in collection.tasks if is_overdue(t, now)])


__all__ = [
    "Window",
    "day_of_week",
    "day_window",
    "due_this_week",
    "due_today",
    "due_within",
    "end_of_day",
    "end_of_week",
    "is_overdue",
    "overdue",
    "start_of_day",
    "start_of_week",
    "week_window",
]
