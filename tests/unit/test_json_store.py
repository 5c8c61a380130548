from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskcore.config import Settings
from taskcore.domain.errors import StoreError
from taskcore.domain.models import TaskCollection
from taskcore.infrastructure.store import (
    JsonFileStore,
    PostgresStore,
    TaskStore,
    build_store,
    export_tasks,
    read_import_file,
)


def test_missing_file_loads_empty(json_store: JsonFileStore):
    assert not json_store.path.exists()
    assert json_store.load_all() == TaskCollection.empty()


def test_save_then_load_preserves_order_and_counter(json_store: JsonFileStore, make_task):
    collection = TaskCollection(tasks=(make_task(3), make_task(1)), next_id=10)
    json_store.save_all(collection)

    assert json_store.load_all() == collection
    on_disk = json.loads(json_store.path.read_text(encoding="utf-8"))
    assert on_disk["nextId"] == 10
    assert [t["id"] for t in on_disk["tasks"]] == [3, 1]
    assert "createdAt" in on_disk["tasks"][0]


def test_save_leaves_no_temp_files(json_store: JsonFileStore, five_tasks):
    json_store.save_all(five_tasks)
    json_store.save_all(five_tasks)
    assert [p.name for p in json_store.path.parent.iterdir()] == ["tasks.json"]


def test_legacy_array_file_is_read(tmp_path: Path):
    path = tmp_path / "legacy.json"
    path.write_text(
        json.dumps([{"id": 2, "task": "old style", "done": False, "createdAt": "2024-01-01T00:00:00Z"}]),
        encoding="utf-8",
    )
    collection = JsonFileStore(path).load_all()
    assert collection.tasks[0].title == "old style"
    assert collection.next_id == 3


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"tasks": [{"id": 1}]}),
        json.dumps({"tasks": [{"id": 1, "title": "a", "createdAt": "2024-01-01T00:00:00Z"}] * 2}),
    ],
)
def test_unreadable_file_raises_instead_of_resetting(tmp_path: Path, content: str):
    path = tmp_path / "tasks.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(StoreError) as excinfo:
        JsonFileStore(path).load_all()

    assert excinfo.value.operation == "load"
    assert excinfo.value.backend == "json"
    assert excinfo.value.__cause__ is not None
    # the damaged file is left for inspection
    assert path.read_text(encoding="utf-8") == content


def test_save_failure_raises_store_error(tmp_path: Path, five_tasks):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileStore(blocker / "tasks.json")
    with pytest.raises(StoreError) as excinfo:
        store.save_all(five_tasks)
    assert excinfo.value.operation == "save"


def test_export_writes_plain_array(tmp_path: Path, five_tasks):
    target = tmp_path / "out" / "export.json"
    assert export_tasks(target, five_tasks) == 5
    data = json.loads(target.read_text(encoding="utf-8"))
    assert isinstance(data, list)
    assert [t["id"] for t in data] == [1, 2, 3, 4, 5]


def test_export_output_is_importable(tmp_path: Path, five_tasks):
    target = tmp_path / "export.json"
    export_tasks(target, five_tasks)
    records = read_import_file(target)
    assert len(records) == 5
    assert records[1]["completed"] is True


@pytest.mark.parametrize(
    "payload, expected",
    [
        ([{"title": "a"}], 1),
        ({"tasks": [{"title": "a"}, {"title": "b"}]}, 2),
        ({"nextId": 3}, 0),
    ],
)
def test_read_import_file_shapes(tmp_path: Path, payload, expected: int):
    path = tmp_path / "import.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    assert len(read_import_file(path)) == expected


def test_read_import_file_rejects_non_list(tmp_path: Path):
    path = tmp_path / "import.json"
    path.write_text(json.dumps({"tasks": "nope"}), encoding="utf-8")
    with pytest.raises(StoreError):
        read_import_file(path)


def test_read_import_file_missing(tmp_path: Path):
    with pytest.raises(StoreError) as excinfo:
        read_import_file(tmp_path / "absent.json")
    assert excinfo.value.operation == "import"


def test_build_store_selects_backend(tmp_path: Path):
    json_store = build_store(Settings(store_backend="json", data_file=tmp_path / "t.json"))
    assert isinstance(json_store, JsonFileStore)
    assert isinstance(json_store, TaskStore)
    assert json_store.path == tmp_path / "t.json"

    pg_store = build_store(Settings(store_backend="postgres", db_host="db.internal", db_name="tasks"))
    assert isinstance(pg_store, PostgresStore)
    assert pg_store.name == "postgres"


def test_undecodable_data_file_raises_store_error(tmp_path: Path):
    path = tmp_path / "tasks.json"
    path.write_bytes(b'\xff\xfe{"tasks": []}')

    with pytest.raises(StoreError) as excinfo:
        JsonFileStore(path).load_all()

    assert excinfo.value.operation == "load"
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


def test_undecodable_import_file_raises_store_error(tmp_path: Path):
    path = tmp_path / "import.json"
    path.write_bytes(b'[{"title": "\xff"}]')

    with pytest.raises(StoreError) as excinfo:
        read_import_file(path)

    assert excinfo.value.operation == "import"
