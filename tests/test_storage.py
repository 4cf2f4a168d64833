"""Tests for the JSON file task store."""

import json
import threading

import pytest

from app.errors import StorageError
from app.models import Task
from app.storage import TaskStore


def _task(task_id: str, order: int) -> Task:
    return Task(
        id=task_id,
        text=f"Task {task_id}",
        created_at="2024-05-01T12:00:00.000Z",
        updated_at="2024-05-01T12:00:00.000Z",
        order=order,
    )


class TestLoad:
    def test_missing_file_is_empty_collection(self, store, tasks_path):
        assert store.load() == []
        assert not tasks_path.exists()

    def test_reads_camel_case_records(self, store, tasks_path):
        tasks_path.parent.mkdir(parents=True)
        tasks_path.write_text(json.dumps([{
            "id": "a",
            "text": "Buy milk",
            "createdAt": "2024-05-01T12:00:00.000Z",
            "updatedAt": "2024-05-01T12:00:00.000Z",
            "completedAt": None,
        }]))

        [task] = store.load()

        assert task.id == "a"
        assert task.created_at == "2024-05-01T12:00:00.000Z"
        assert task.priority == "medium"
        assert task.tags == []

    def test_invalid_json_raises_storage_error(self, store, tasks_path):
        tasks_path.parent.mkdir(parents=True)
        tasks_path.write_text("{not json")

        with pytest.raises(StorageError):
            store.load()

    def test_non_array_document_raises_storage_error(self, store, tasks_path):
        tasks_path.parent.mkdir(parents=True)
        tasks_path.write_text('{"tasks": []}')

        with pytest.raises(StorageError, match="JSON array"):
            store.load()

    def test_record_missing_required_fields_raises_storage_error(self, store, tasks_path):
        tasks_path.parent.mkdir(parents=True)
        tasks_path.write_text('[{"id": "a"}]')

        with pytest.raises(StorageError):
            store.load()


class TestSave:
    def test_creates_missing_directory(self, store, tasks_path):
        store.save([_task("a", 0)])

        assert tasks_path.exists()
        data = json.loads(tasks_path.read_text())
        assert data[0]["id"] == "a"
        assert data[0]["createdAt"] == "2024-05-01T12:00:00.000Z"
        assert "created_at" not in data[0]

    def test_overwrites_previous_contents(self, store):
        store.save([_task("a", 0), _task("b", 1)])
        store.save([_task("c", 0)])

        assert [t.id for t in store.load()] == ["c"]

    def test_leaves_no_temp_files(self, store, tasks_path):
        store.save([_task("a", 0)])
        store.save([_task("b", 0)])

        assert [p.name for p in tasks_path.parent.iterdir()] == ["tasks.json"]

    def test_save_of_load_is_byte_identical(self, store, tasks_path):
        store.save([_task("a", 0), _task("b", 1)])
        before = tasks_path.read_bytes()

        store.save(store.load())

        assert tasks_path.read_bytes() == before

    def test_unknown_keys_survive_round_trip(self, store, tasks_path):
        tasks_path.parent.mkdir(parents=True)
        record = _task("a", 0).to_json()
        record["color"] = "blue"
        tasks_path.write_text(json.dumps([record]))

        store.save(store.load())

        assert json.loads(tasks_path.read_text())[0]["color"] == "blue"


class TestLocked:
    def test_lock_serializes_holders(self, tmp_path):
        store = TaskStore(tmp_path / "tasks.json")
        entered = []

        def worker(name):
            with store.locked():
                entered.append(name)
                entered.append(name)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Each holder appends twice in a row when access is exclusive.
        assert all(entered[i] == entered[i + 1] for i in range(0, len(entered), 2))
