"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.schemas.task import TaskCreate
from app.services.task_service import TaskService, get_task_service
from app.storage import TaskStore

START = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock returning a settable instant, advanced explicitly by tests."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture
def tasks_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "tasks.json"


@pytest.fixture
def store(tasks_path: Path) -> TaskStore:
    return TaskStore(tasks_path)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def service(store: TaskStore, clock: FixedClock) -> TaskService:
    return TaskService(store, clock=clock)


@pytest.fixture
def make_task(service: TaskService):
    """Create a task through the service with sensible defaults."""

    def _make(text: str = "Write report", **fields):
        return service.create_task(TaskCreate(text=text, **fields))

    return _make


@pytest.fixture
def client(service: TaskService):
    """Test client whose routes use the tmp_path backed service."""
    app.dependency_overrides[get_task_service] = lambda: service
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
