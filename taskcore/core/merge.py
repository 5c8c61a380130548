"""
Merge allocator for imported batches.

Incoming ids are never trusted: each incoming task is renumbered from the
collection's high-water mark, in batch order, and appended after the
existing tasks. With ids 1..M and no deletions the new ids are M+1..M+k;
when the newest ids were deleted earlier, numbering continues above them so
retired ids stay retired.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from taskcore.domain.errors import CoreError, ErrorCode, validation_error
from taskcore.domain.models import Task, TaskCollection
from taskcore.utils.logging import get_logger

log = get_logger(__name__)

IncomingTask = Union[Task, Mapping[str, Any]]


class MergeResult(BaseModel):
    collection: TaskCollection
    merged: int = 0
    next_id: int
    error: Optional[CoreError] = None

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.error is None


def allocation_base(collection: TaskCollection) -> int:
    return max(collection.max_id(), collection.next_id - 1)


def _prepare(entry: IncomingTask, task_id: int, now: datetime) -> Task:
    data: Dict[str, Any] = entry.model_dump() if isinstance(entry, Task) else dict(entry)
    data["id"] = task_id
    if not any(data.get(key) for key in ("createdAt", "created_at")):
        data["created_at"] = now
    return Task.model_validate(data)


def merge_tasks(
    collection: TaskCollection,
    incoming: Optional[Iterable[IncomingTask]],
    now: datetime,
) -> MergeResult:
    """
    Append `incoming` to `collection` under fresh ids.

    An empty or missing batch is a no-op. If any record cannot be turned
    into a valid task the whole batch is rejected and nothing is merged.

    New ids start above `allocation_base`, which equals the current max id
    for any collection without retired ids.
    """
    batch = list(incoming or ())
    base = allocation_base(collection)
    if not batch:
        return MergeResult(collection=collection, merged=0, next_id=collection.next_id)

    renumbered: List[Task] = []
    problems: List[Dict[str, Any]] = []
    for position, entry in enumerate(batch):
        if not isinstance(entry, (Task, Mapping)):
            problems.append({"index": position, "error": "record must be an object"})
            continue
        try:
            renumbered.append(_prepare(entry, base + position + 1, now))
        except ValidationError as exc:
            problems.append(
                {"index": position, "error": "; ".join(e["msg"] for e in exc.errors())}
            )

    if problems:
        log.warning("Import batch rejected", extra={"rejected": len(problems), "batch": len(batch)})
        return MergeResult(
            collection=collection,
            merged=0,
            next_id=collection.next_id,
            error=validation_error(
                ErrorCode.VALIDATION_ERROR,
                f"{len(problems)} of {len(batch)} imported record(s) are invalid",
                invalid=problems,
            ),
        )

    next_id = base + len(renumbered) + 1
    merged = collection.replace_tasks(collection.tasks + tuple(renumbered), next_id=next_id)
    return MergeResult(collection=merged, merged=len(renumbered), next_id=next_id)


__all__ = ["IncomingTask", "MergeResult", "allocation_base", "merge_tasks"]
