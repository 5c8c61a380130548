from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from taskcore.domain.errors import CoreError, ErrorCode, StoreError, task_not_found
from taskcore.domain.models import Priority, Task, TaskCollection


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("high", Priority.HIGH),
        (" LOW ", Priority.LOW),
        ("Medium", Priority.MEDIUM),
        ("urgent", Priority.MEDIUM),
        (None, Priority.MEDIUM),
        (3, Priority.MEDIUM),
        (Priority.HIGH, Priority.HIGH),
    ],
)
def test_priority_normalize(raw, expected):
    assert Priority.normalize(raw) is expected


def test_priority_rank_orders_high_first():
    assert sorted(Priority, key=lambda p: p.rank) == [Priority.HIGH, Priority.MEDIUM, Priority.LOW]


def test_task_accepts_wire_and_legacy_names():
    task = Task.model_validate(
        {
            "id": 3,
            "task": "  Legacy  ",
            "done": True,
            "priority": "HIGH",
            "createdAt": "2024-02-01T08:00:00Z",
            "completedAt": "2024-02-02T08:00:00",
        }
    )
    assert task.title == "Legacy"
    assert task.completed is True
    assert task.priority is Priority.HIGH
    assert task.created_at == datetime(2024, 2, 1, 8, 0, tzinfo=UTC)
    # naive timestamps are read as UTC
    assert task.completed_at == datetime(2024, 2, 2, 8, 0, tzinfo=UTC)


def test_task_wire_format():
    task = Task(id=1, title="Ship it", created_at=datetime(2024, 2, 29, 9, 30, tzinfo=UTC))
    wire = task.to_wire()
    assert wire["createdAt"] == "2024-02-29T09:30:00Z"
    assert wire["priority"] == "medium"
    assert wire["completed"] is False
    assert wire["completedAt"] is None
    assert wire["dueDate"] is None
    assert "created_at" not in wire


@pytest.mark.parametrize("title", ["", "   ", "x" * 201])
def test_task_rejects_invalid_title(title: str):
    with pytest.raises(ValidationError):
        Task(id=1, title=title, created_at=datetime(2024, 1, 1, tzinfo=UTC))


def test_task_rejects_non_positive_id():
    with pytest.raises(ValidationError):
        Task(id=0, title="x", created_at=datetime(2024, 1, 1, tzinfo=UTC))


def test_task_is_frozen(make_task):
    task = make_task(1)
    with pytest.raises(ValidationError):
        task.title = "changed"


class TestCollection:
    def test_legacy_list_derives_next_id(self):
        collection = TaskCollection.model_validate(
            [
                {"id": 4, "title": "a", "createdAt": "2024-01-01T00:00:00Z"},
                {"id": 2, "title": "b", "createdAt": "2024-01-02T00:00:00Z"},
            ]
        )
        assert [t.id for t in collection.tasks] == [4, 2]
        assert collection.next_id == 5

    def test_stored_next_id_is_kept(self, make_task):
        collection = TaskCollection(tasks=(make_task(1),), next_id=9)
        assert collection.next_id == 9
        assert collection.to_wire()["nextId"] == 9

    def test_empty(self):
        collection = TaskCollection.empty()
        assert collection.tasks == ()
        assert collection.next_id == 1
        assert collection.max_id() == 0

    def test_duplicate_ids_rejected(self, make_task):
        with pytest.raises(ValidationError, match="Duplicate task id 2"):
            TaskCollection(tasks=(make_task(2), make_task(2)))

    def test_next_id_must_exceed_max_id(self, make_task):
        with pytest.raises(ValidationError):
            TaskCollection(tasks=(make_task(1), make_task(5)), next_id=5)

    def test_find(self, five_tasks: TaskCollection):
        assert five_tasks.find(3).id == 3
        assert five_tasks.find(30) is None


def test_core_error_envelope():
    error = task_not_found(7)
    assert isinstance(error, CoreError)
    assert error.status_code == 404
    assert error.to_envelope() == {
        "success": False,
        "error": {"message": "Todo not found", "code": "TODO_NOT_FOUND", "details": {"id": 7}},
    }


def test_store_error_maps_to_internal_error():
    core = StoreError("disk on fire", operation="save", backend="json").to_core_error()
    assert core.code is ErrorCode.STORE_ERROR
    assert core.status_code == 500
    assert core.details == {"operation": "save", "backend": "json"}
