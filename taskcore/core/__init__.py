"""
Core package for the task query engine.

Pure operations over a TaskCollection snapshot: date windows, filtering,
pagination, querying, aggregation, import merging and the task lifecycle.
Nothing in this package performs I/O or reads the clock.
"""

from taskcore.core.filters import FilterOptions, build_predicate
from taskcore.core.lifecycle import (
    MutationResult,
    create_task,
    delete_task,
    get_task,
    set_completed,
    update_task,
)
from taskcore.core.merge import MergeResult, merge_tasks
from taskcore.core.pagination import PaginationMeta, PaginationOptions, validate_pagination
from taskcore.core.query import Ordering, QueryResult, query
from taskcore.core.stats import TaskStats, compute_stats
from taskcore.core.windows import due_this_week, due_today, overdue

__all__ = [
    # Filtering / querying
    "FilterOptions",
    "Ordering",
    "PaginationMeta",
    "PaginationOptions",
    "QueryResult",
    "build_predicate",
    "query",
    "validate_pagination",
    # Date windows
    "due_this_week",
    "due_today",
    "overdue",
    # Aggregation / merge
    "MergeResult",
    "TaskStats",
    "compute_stats",
    "merge_tasks",
    # Lifecycle
    "MutationResult",
    "create_task",
    "delete_task",
    "get_task",
    "set_completed",
    "update_task",
]
