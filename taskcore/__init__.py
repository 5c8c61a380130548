"""
taskcore - query and aggregation engine for task/to-do collections.

This package provides:

- Predicate filtering with strictly validated pagination
- Calendar-relative windows (due today, due this week, overdue)
- Status and priority statistics
- Collision-free merging of imported tasks
- JSON file and PostgreSQL stores behind a common interface
- A service layer producing response envelopes, and a CLI on top of it

The core operates on explicit TaskCollection snapshots and an injected
reference instant; it performs no I/O of its own.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from taskcore.config import Settings, get_settings
from taskcore.core import (
    FilterOptions,
    Ordering,
    PaginationOptions,
    compute_stats,
    due_this_week,
    due_today,
    merge_tasks,
    overdue,
    query,
)
from taskcore.domain import CoreError, ErrorCode, Priority, StoreError, Task, TaskCollection
from taskcore.infrastructure import JsonFileStore, PostgresStore, TaskStore, build_store
from taskcore.service import TaskService
from taskcore.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "CoreError",
    "ErrorCode",
    "Priority",
    "StoreError",
    "Task",
    "TaskCollection",
    # Core
    "FilterOptions",
    "Ordering",
    "PaginationOptions",
    "compute_stats",
    "due_this_week",
    "due_today",
    "merge_tasks",
    "overdue",
    "query",
    # Stores / service
    "JsonFileStore",
    "PostgresStore",
    "TaskService",
    "TaskStore",
    "build_store",
    # Logging
    "configure_logging",
    "get_logger",
]
