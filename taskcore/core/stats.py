"""Aggregate counts over a collection."""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from taskcore.core.windows import is_overdue
from taskcore.domain.models import Priority, TaskCollection


class PriorityBreakdown(BaseModel):
    low: int = 0
    medium: int = 0
    high: int = 0


class TaskStats(BaseModel):
    """
    Status and priority partitions.

    Invariants: total == completed + pending, and the priority counts sum to
    total. `overdue` is only computed when a reference instant is supplied.
    """

    total: int
    completed: int
    pending: int
    by_priority: PriorityBreakdown = Field(..., serialization_alias="byPriority")
    overdue: Optional[int] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def compute_stats(collection: TaskCollection, now: Optional[datetime] = None) -> TaskStats:
    completed = sum(1 for t in collection.tasks if t.completed)
    priorities = Counter(t.priority for t in collection.tasks)
    overdue = sum(1 for t in collection.tasks if is_overdue(t, now)) if now is not None else None
    return TaskStats(
        total=len(collection.tasks),
        completed=completed,
        pending=len(collection.tasks) - completed,
        by_priority=PriorityBreakdown(
            low=priorities[Priority.LOW],
            medium=priorities[Priority.MEDIUM],
            high=priorities[Priority.HIGH],
        ),
        overdue=overdue,
    )


__all__ = ["PriorityBreakdown", "TaskStats", "compute_stats"]
