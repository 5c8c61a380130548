"""
Pytest configuration for the task query engine.

Provides fixtures for:
- A fixed reference instant and task factories for the pure core
- JSON-file stores and services bound to a temporary directory
- Settings and connection checks for PostgreSQL integration tests
"""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import psycopg
import pytest

from taskcore.config import Settings
from taskcore.domain.models import Task, TaskCollection
from taskcore.infrastructure.store import JsonFileStore, PostgresStore
from taskcore.service import TaskService

# Wednesday of a leap-year week that runs Sun 2024-02-25 .. Sat 2024-03-02.
WEDNESDAY_NOON = datetime(2024, 2, 28, 12, 0, tzinfo=UTC)

TaskFactory = Callable[..., Task]


@pytest.fixture
def now() -> datetime:
    return WEDNESDAY_NOON


@pytest.fixture
def make_task() -> TaskFactory:
    """
    Build a Task with sensible defaults; `created_at` follows the id so that
    newer ids are newer tasks unless a test says otherwise.
    """

    def _make(
        task_id: int,
        title: Optional[str] = None,
        *,
        completed: bool = False,
        priority: str = "medium",
        due_date: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        **extra: Any,
    ) -> Task:
        return Task(
            id=task_id,
            title=title or f"Task {task_id}",
            priority=priority,
            completed=completed,
            created_at=created_at or WEDNESDAY_NOON - timedelta(days=30) + timedelta(hours=task_id),
            due_date=due_date,
            **extra,
        )

    return _make


@pytest.fixture
def five_tasks(make_task: TaskFactory) -> TaskCollection:
    """Ids 1-5, ids 2 and 4 completed."""
    return TaskCollection(
        tasks=tuple(make_task(i, completed=i in (2, 4)) for i in range(1, 6)),
    )


@pytest.fixture
def json_store(tmp_path: Path) -> JsonFileStore:
    return JsonFileStore(tmp_path / "data" / "tasks.json")


@pytest.fixture
def service(json_store: JsonFileStore, now: datetime) -> TaskService:
    return TaskService(json_store, clock=lambda: now)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        store_backend="postgres",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "taskcore"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture
def postgres_store(test_dsn: str, db_connection_available: bool) -> Generator[PostgresStore, None, None]:
    """
    A PostgresStore over freshly emptied tables.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    store = PostgresStore(test_dsn)
    store.ensure_schema()
    with psycopg.connect(test_dsn) as conn:
        conn.execute("TRUNCATE TABLE public.tasks, public.task_counter;")
    yield store
    with psycopg.connect(test_dsn) as conn:
        conn.execute("TRUNCATE TABLE public.tasks, public.task_counter;")
