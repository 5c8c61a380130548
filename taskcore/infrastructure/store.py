"""
Task stores: durable homes for a TaskCollection.

A store only loads and saves whole snapshots. Every failure is raised as
StoreError with the underlying exception chained; nothing here falls back to
an empty collection when data exists but cannot be read.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Protocol, runtime_checkable

import psycopg
from pydantic import ValidationError

from taskcore.config import Settings, get_settings
from taskcore.domain.errors import StoreError
from taskcore.domain.models import Task, TaskCollection
from taskcore.infrastructure.db_factory import PoolManager, build_dsn, get_sync_connection
from taskcore.utils.logging import get_logger

log = get_logger(__name__)


@runtime_checkable
class TaskStore(Protocol):
    """
    Common interface all stores implement.

    Attributes
    ----------
    name : str
        A short machine-friendly backend identifier used in logs and errors.
    """

    name: str

    def load_all(self) -> TaskCollection:
        """Return the full stored collection (empty when nothing is stored yet)."""
        ...

    def save_all(self, collection: TaskCollection) -> None:
        """Replace the stored collection with `collection`."""
        ...


def _write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonFileStore:
    """
    Pretty-printed JSON file holding `{"nextId": ..., "tasks": [...]}`.

    A bare JSON array of tasks (the older export layout) is read as well.
    """

    name: str = "json"

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load_all(self) -> TaskCollection:
        if not self.path.exists():
            log.debug("No data file yet, starting empty", extra={"path": str(self.path)})
            return TaskCollection.empty()
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return TaskCollection.model_validate(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            raise StoreError(
                f"Failed to read data from {self.path}: {exc}", operation="load", backend=self.name
            ) from exc

    def save_all(self, collection: TaskCollection) -> None:
        try:
            _write_json_atomic(self.path, collection.to_wire())
        except OSError as exc:
            raise StoreError(
                f"Failed to write data to {self.path}: {exc}", operation="save", backend=self.name
            ) from exc
        log.debug("Data saved", extra={"path": str(self.path), "tasks": len(collection.tasks)})


def export_tasks(path: Path | str, collection: TaskCollection) -> int:
    """Write the tasks as a plain JSON array; returns the number written."""
    target = Path(path)
    try:
        _write_json_atomic(target, [t.to_wire() for t in collection.tasks])
    except OSError as exc:
        raise StoreError(f"Failed to export to {target}: {exc}", operation="export", backend="json") from exc
    return len(collection.tasks)


def read_import_file(path: Path | str) -> List[Any]:
    """
    Read raw task records from an export file.

    Accepts a JSON array or an object with a `tasks` array. Records are
    returned as-is; the merge allocator validates and renumbers them.
    """
    source = Path(path)
    try:
        with source.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StoreError(f"Failed to import from {source}: {exc}", operation="import", backend="json") from exc
    if isinstance(data, dict):
        data = data.get("tasks")
    if data is None:
        return []
    if not isinstance(data, list):
        raise StoreError(
            f"Failed to import from {source}: expected a list of tasks", operation="import", backend="json"
        )
    return data


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS public.tasks (
    id           BIGINT PRIMARY KEY,
    position     INTEGER NOT NULL,
    title        VARCHAR(200) NOT NULL,
    priority     TEXT NOT NULL DEFAULT 'medium' CHECK (priority IN ('low', 'medium', 'high')),
    completed    BOOLEAN NOT NULL DEFAULT FALSE,
    created_at   TIMESTAMPTZ NOT NULL,
    completed_at TIMESTAMPTZ,
    due_date     TIMESTAMPTZ,
    updated_at   TIMESTAMPTZ
);
CREATE TABLE IF NOT EXISTS public.task_counter (
    singleton BOOLEAN PRIMARY KEY DEFAULT TRUE CHECK (singleton),
    next_id   BIGINT NOT NULL
);
"""

_COLUMNS = ("id", "title", "priority", "completed", "created_at", "completed_at", "due_date", "updated_at")
_SELECT_SQL = f"SELECT {', '.join(_COLUMNS)} FROM public.tasks ORDER BY position;"
_INSERT_SQL = (
    "INSERT INTO public.tasks (position, "
    + ", ".join(_COLUMNS)
    + ") VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s);"
)
_UPSERT_COUNTER_SQL = (
    "INSERT INTO public.task_counter (singleton, next_id) VALUES (TRUE, %s) "
    "ON CONFLICT (singleton) DO UPDATE SET next_id = EXCLUDED.next_id;"
)


class PostgresStore:
    """
    Collection persisted in two tables: `tasks` (ordered by `position`) and a
    single-row `task_counter` holding the id high-water mark.

    `save_all` replaces the table contents inside one transaction. The tables
    are created on first use, so a fresh database works without a setup step.
    """

    name: str = "postgres"

    def __init__(self, dsn: Optional[str] = None, pool_max_size: int = 4) -> None:
        self._dsn = dsn or build_dsn()
        self._pool_max_size = pool_max_size
        self._schema_ready = False

    def ensure_schema(self) -> None:
        try:
            with get_sync_connection(self._dsn) as conn:
                conn.execute(SCHEMA_SQL)
        except psycopg.Error as exc:
            raise StoreError(f"Failed to create schema: {exc}", operation="schema", backend=self.name) from exc
        self._schema_ready = True

    def _ensure_schema_once(self) -> None:
        if not self._schema_ready:
            self.ensure_schema()
            log.debug("Schema ensured", extra={"backend": self.name})

    def load_all(self) -> TaskCollection:
        self._ensure_schema_once()
        try:
            with PoolManager().connection(self._dsn, max_size=self._pool_max_size) as conn:
                with conn.cursor() as cur:
                    cur.execute(_SELECT_SQL)
                    rows = cur.fetchall()
                    cur.execute("SELECT next_id FROM public.task_counter;")
                    counter = cur.fetchone()
            tasks = [Task.model_validate(dict(zip(_COLUMNS, row))) for row in rows]
            if counter is None:
                return TaskCollection(tasks=tuple(tasks))
            return TaskCollection(tasks=tuple(tasks), next_id=counter[0])
        except (psycopg.Error, ValidationError) as exc:
            raise StoreError(f"Failed to load tasks: {exc}", operation="load", backend=self.name) from exc

    def save_all(self, collection: TaskCollection) -> None:
        self._ensure_schema_once()
        params = [
            (
                position,
                t.id,
                t.title,
                t.priority.value,
                t.completed,
                t.created_at,
                t.completed_at,
                t.due_date,
                t.updated_at,
            )
            for position, t in enumerate(collection.tasks)
        ]
        try:
            with PoolManager().connection(self._dsn, max_size=self._pool_max_size) as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        cur.execute("DELETE FROM public.tasks;")
                        if params:
                            cur.executemany(_INSERT_SQL, params)
                        cur.execute(_UPSERT_COUNTER_SQL, (collection.next_id,))
        except psycopg.Error as exc:
            raise StoreError(f"Failed to save tasks: {exc}", operation="save", backend=self.name) from exc
        log.debug("Data saved", extra={"backend": self.name, "tasks": len(params)})


def build_store(settings: Optional[Settings] = None) -> TaskStore:
    """Instantiate the store selected by STORE_BACKEND."""
    settings = settings or get_settings()
    if settings.store_backend == "postgres":
        return PostgresStore(build_dsn(settings), pool_max_size=settings.db_pool_max_size)
    return JsonFileStore(settings.data_file)


__all__ = [
    "JsonFileStore",
    "PostgresStore",
    "SCHEMA_SQL",
    "TaskStore",
    "build_store",
    "export_tasks",
    "read_import_file",
]
