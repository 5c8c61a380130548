"""
Task lifecycle: create, look up, complete/reopen, edit and delete.

Each operation takes the current snapshot and returns a MutationResult with
the new snapshot (or the unchanged one on error). Callers persist
`result.collection` when `result.changed` is true.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel

from taskcore.domain.errors import CoreError, ErrorCode, task_not_found, validation_error
from taskcore.domain.models import Priority, Task, TaskCollection, normalize_title
from taskcore.utils.time import ensure_aware

# Sentinel for "leave the due date alone" in update_task; None clears it.
KEEP = object()


class MutationResult(BaseModel):
    collection: TaskCollection
    task: Optional[Task] = None
    changed: bool = False
    error: Optional[CoreError] = None

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.error is None


def _failed(collection: TaskCollection, error: CoreError) -> MutationResult:
    return MutationResult(collection=collection, error=error)


def _replace(collection: TaskCollection, task: Task) -> TaskCollection:
    return collection.replace_tasks(tuple(task if t.id == task.id else t for t in collection.tasks))


def create_task(
    collection: TaskCollection,
    title: Any,
    priority: Any = None,
    *,
    now: datetime,
    due_date: Optional[datetime] = None,
) -> MutationResult:
    """Append a new open task under the collection's next id."""
    try:
        clean_title = normalize_title(title)
    except ValueError as exc:
        return _failed(collection, validation_error(ErrorCode.VALIDATION_ERROR, str(exc)))

    task = Task(
        id=collection.next_id,
        title=clean_title,
        priority=Priority.normalize(priority),
        completed=False,
        created_at=ensure_aware(now),
        due_date=due_date,
    )
    updated = collection.replace_tasks(collection.tasks + (task,), next_id=collection.next_id + 1)
    return MutationResult(collection=updated, task=task, changed=True)


def get_task(collection: TaskCollection, task_id: int) -> MutationResult:
    task = collection.find(task_id)
    if task is None:
        return _failed(collection, task_not_found(task_id))
    return MutationResult(collection=collection, task=task)


def set_completed(collection: TaskCollection, task_id: int, done: bool, *, now: datetime) -> MutationResult:
    """
    Mark a task completed or reopen it.

    `completed_at` is stamped only on the open -> completed transition and
    cleared when a task is reopened. Repeating the current state is a no-op.
    """
    task = collection.find(task_id)
    if task is None:
        return _failed(collection, task_not_found(task_id))
    if task.completed == done:
        return MutationResult(collection=collection, task=task)

    updated = task.model_copy(
        update={"completed": done, "completed_at": ensure_aware(now) if done else None}
    )
    return MutationResult(collection=_replace(collection, updated), task=updated, changed=True)


def update_task(
    collection: TaskCollection,
    task_id: int,
    *,
    now: datetime,
    title: Any = None,
    priority: Any = None,
    due_date: Any = KEEP,
) -> MutationResult:
    """Edit title, priority and/or due date; stamps `updated_at` when anything changes."""
    task = collection.find(task_id)
    if task is None:
        return _failed(collection, task_not_found(task_id))

    changes: Dict[str, Any] = {}
    if title is not None:
        try:
            changes["title"] = normalize_title(title)
        except ValueError as exc:
            return _failed(collection, validation_error(ErrorCode.VALIDATION_ERROR, str(exc)))
    if priority is not None:
        changes["priority"] = Priority.normalize(priority)
    if due_date is not KEEP:
        changes["due_date"] = ensure_aware(due_date) if due_date is not None else None

    changes = {k: v for k, v in changes.items() if getattr(task, k) != v}
    if not changes:
        return MutationResult(collection=collection, task=task)

    changes["updated_at"] = ensure_aware(now)
    updated = task.model_copy(update=changes)
    return MutationResult(collection=_replace(collection, updated), task=updated, changed=True)


def delete_task(collection: TaskCollection, task_id: int) -> MutationResult:
    task = collection.find(task_id)
    if task is None:
        return _failed(collection, task_not_found(task_id))
    remaining = tuple(t for t in collection.tasks if t.id != task_id)
    return MutationResult(collection=collection.replace_tasks(remaining), task=task, changed=True)


__all__ = [
    "KEEP",
    "MutationResult",
    "create_task",
    "delete_task",
    "get_task",
    "set_completed",
    "update_task",
]
