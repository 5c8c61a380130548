"""
Query engine: filter, count, validate the page, order, slice.

Pure over the snapshot it is given. `total` is always the number of tasks
matching the filters before pagination, which is what page metadata needs.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from taskcore.core.filters import FilterOptions, build_predicate
from taskcore.core.pagination import PageWindow, PaginationMeta, PaginationOptions, validate_pagination
from taskcore.domain.errors import CoreError
from taskcore.domain.models import Task, TaskCollection


class Ordering(str, Enum):
    NEWEST_FIRST = "newest"
    OLDEST_FIRST = "oldest"
    INSERTION = "insertion"
    DUE_DATE = "due"
    PRIORITY = "priority"


def _newest_first(tasks: List[Task]) -> List[Task]:
    # ids break creation-time ties; later ids were created later
    return sorted(tasks, key=lambda t: (t.created_at, t.id), reverse=True)


def _oldest_first(tasks: List[Task]) -> List[Task]:
    return sorted(tasks, key=lambda t: (t.created_at, t.id))


def _due_date_first(tasks: List[Task]) -> List[Task]:
    # undated tasks go last
    return sorted(
        tasks,
        key=lambda t: (t.due_date is None, t.due_date.timestamp() if t.due_date else 0.0, t.id),
    )


def _priority_first(tasks: List[Task]) -> List[Task]:
    return sorted(_newest_first(tasks), key=lambda t: t.priority.rank)


_ORDERINGS: Dict[Ordering, Callable[[List[Task]], List[Task]]] = {
    Ordering.NEWEST_FIRST: _newest_first,
    Ordering.OLDEST_FIRST: _oldest_first,
    Ordering.INSERTION: list,
    Ordering.DUE_DATE: _due_date_first,
    Ordering.PRIORITY: _priority_first,
}


class QueryResult(BaseModel):
    records: List[Task] = []
    total: int = 0
    pagination: Optional[PaginationMeta] = None
    error: Optional[CoreError] = None

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return self.error is None


def count_matching(collection: TaskCollection, filters: Optional[FilterOptions] = None) -> int:
    predicate = build_predicate(filters)
    return sum(1 for task in collection.tasks if predicate(task))


def query(
    collection: TaskCollection,
    filters: Optional[FilterOptions] = None,
    pagination: Optional[PaginationOptions] = None,
    order: Ordering = Ordering.NEWEST_FIRST,
) -> QueryResult:
    """
    Run a filtered, ordered and optionally paginated read over `collection`.

    A pagination rejection is returned before any ordering or slicing work,
    with `total` still populated.
    """
    predicate = build_predicate(filters)
    matching = [task for task in collection.tasks if predicate(task)]
    total = len(matching)

    window: Optional[PageWindow] = None
    if pagination is not None and pagination.requested:
        checked = validate_pagination(total, page=pagination.page, limit=pagination.limit)
        if isinstance(checked, CoreError):
            return QueryResult(total=total, error=checked)
        window = checked

    ordered = _ORDERINGS[order](matching)
    if window is None:
        return QueryResult(records=ordered, total=total)

    return QueryResult(
        records=ordered[window.offset : window.offset + window.limit],
        total=total,
        pagination=window.meta,
    )


__all__ = ["Ordering", "QueryResult", "count_matching", "query"]
