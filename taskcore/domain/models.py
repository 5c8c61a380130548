"""
Domain models for the task query engine.

`Task` is the record every core operation works on; `TaskCollection` is the
ordered snapshot a store loads and saves. Both are frozen: operations return
new values instead of mutating the snapshot they were given.

Wire names are camelCase (`createdAt`, `dueDate`, ...). Legacy exports that
used `task`/`done` or snake_case keys are accepted on input.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from taskcore.utils.time import ensure_aware

TITLE_MAX_LENGTH = 200


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def normalize(cls, value: Any) -> "Priority":
        """Map any input onto a priority; unknown or missing values become MEDIUM."""
        if isinstance(value, Priority):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.MEDIUM

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK: Dict[Priority, int] = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def normalize_title(value: Any) -> str:
    """
    Trim a title and enforce its length bounds.

    Raises ValueError with a user-facing message when the title is missing,
    blank or longer than TITLE_MAX_LENGTH after trimming.
    """
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValueError("Task is required")
    title = value.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise ValueError(f"Task must be less than {TITLE_MAX_LENGTH} characters")
    return title


class Task(BaseModel):
    """
    A single task/to-do entry.
    """

    id: int = Field(..., gt=0, description="Unique, never reused within a collection.")
    title: str = Field(..., validation_alias=AliasChoices("title", "task"))
    priority: Priority = Field(Priority.MEDIUM)
    completed: bool = Field(False, validation_alias=AliasChoices("completed", "done"))
    created_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )
    completed_at: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("completedAt", "completed_at"),
        serialization_alias="completedAt",
    )
    due_date: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("dueDate", "due_date"),
        serialization_alias="dueDate",
    )
    updated_at: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("updatedAt", "updated_at"),
        serialization_alias="updatedAt",
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("title", mode="before")
    @classmethod
    def _trim_title(cls, value: Any) -> str:
        return normalize_title(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> Priority:
        return Priority.normalize(value)

    @field_validator("created_at", "completed_at", "due_date", "updated_at", mode="after")
    @classmethod
    def _attach_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(value) if value is not None else None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _raw_id(entry: Any) -> Optional[int]:
    raw = entry.id if isinstance(entry, Task) else entry.get("id") if isinstance(entry, dict) else None
    return raw if isinstance(raw, int) and not isinstance(raw, bool) else None


class TaskCollection(BaseModel):
    """
    Ordered snapshot of tasks plus the next id to hand out.

    `next_id` is a high-water mark: deleting the newest task does not make its
    id available again.
    """

    tasks: Tuple[Task, ...] = ()
    next_id: int = Field(
        1,
        ge=1,
        validation_alias=AliasChoices("nextId", "next_id"),
        serialization_alias="nextId",
    )

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_list(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            data = {"tasks": list(data)}
        if isinstance(data, dict) and "nextId" not in data and "next_id" not in data:
            ids = [i for i in (_raw_id(t) for t in data.get("tasks") or ()) if i is not None]
            data = {**data, "next_id": max(ids, default=0) + 1}
        return data

    @model_validator(mode="after")
    def _check_ids(self) -> "TaskCollection":
        seen: set[int] = set()
        for task in self.tasks:
            if task.id in seen:
                raise ValueError(f"Duplicate task id {task.id}")
            seen.add(task.id)
        if self.tasks and self.next_id <= self.max_id():
            raise ValueError(f"next_id {self.next_id} must exceed max id {self.max_id()}")
        return self

    @classmethod
    def empty(cls) -> "TaskCollection":
        return cls()

    def max_id(self) -> int:
        return max((t.id for t in self.tasks), default=0)

    def find(self, task_id: int) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def replace_tasks(self, tasks: List[Task] | Tuple[Task, ...], next_id: Optional[int] = None) -> "TaskCollection":
        """Build a new collection; ids are re-validated."""
        return TaskCollection(tasks=tuple(tasks), next_id=next_id or self.next_id)

    def to_wire(self) -> Dict[str, Any]:
        return {"nextId": self.next_id, "tasks": [t.to_wire() for t in self.tasks]}


__all__ = ["Priority", "Task", "TaskCollection", "TITLE_MAX_LENGTH", "normalize_title"]
