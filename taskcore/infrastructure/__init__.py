"""
Infrastructure package for the task query engine.

Centralizes persistence concerns (JSON file and PostgreSQL stores, connection
pooling). Keep this layer focused on I/O and resource management, decoupled
from the pure core.
"""

from taskcore.infrastructure.store import (
    JsonFileStore,
    PostgresStore,
    TaskStore,
    build_store,
    export_tasks,
    read_import_file,
)

__all__ = [
    "JsonFileStore",
    "PostgresStore",
    "TaskStore",
    "build_store",
    "export_tasks",
    "read_import_file",
]
