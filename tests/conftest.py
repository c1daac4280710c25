"""Shared test fixtures for the task board tests."""

import sys
from pathlib import Path

import pytest

# Ensure the repo root (pkg/, taskboard_server.py) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from pkg.taskboard.client import TaskApiError
from pkg.taskboard.config import Config
from pkg.taskboard.schema import NewTask, TaskStatus, TaskUpdate
from pkg.taskboard.store import MemoryTaskStore, SQLiteTaskStore
from taskboard_server import create_app


class FakeClient:
    """Stands in for TaskApiClient; same async verbs, served from a MemoryTaskStore."""

    def __init__(self):
        self.store = MemoryTaskStore(seed=True)
        self.fail = {}   # verb -> error message
        self.gates = {}  # task_id -> asyncio.Event the update waits on
        self.calls = []

    def _check(self, verb):
        if verb in self.fail:
            raise TaskApiError(self.fail[verb], 500)

    async def list_tasks(self):
        self.calls.append(("list",))
        self._check("list")
        return self.store.select_all()

    async def create_task(self, title, status=TaskStatus.TODO, description=None):
        self.calls.append(("create", title))
        self._check("create")
        return self.store.insert(NewTask(title=title.strip(), status=status, description=description))

    async def update_task(self, task_id, update: TaskUpdate):
        self.calls.append(("update", task_id, update.to_payload()))
        gate = self.gates.get(task_id)
        if gate is not None:
            await gate.wait()
        self._check("update")
        task = self.store.update_partial(task_id, update)
        if task is None:
            raise TaskApiError(f"Task with id {task_id} not found", 404)
        return task

    async def delete_task(self, task_id):
        self.calls.append(("delete", task_id))
        self._check("delete")
        task = self.store.delete_by_id(task_id)
        if task is None:
            raise TaskApiError(f"Task with id {task_id} not found", 404)
        return task

    def close(self):
        pass


@pytest.fixture
def sqlite_store(tmp_path):
    return SQLiteTaskStore(str(tmp_path / "tasks.db"))


@pytest.fixture
def memory_store():
    return MemoryTaskStore()


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteTaskStore(str(tmp_path / "tasks.db"))
    return MemoryTaskStore()


@pytest.fixture
def config(tmp_path):
    cfg = Config(db_path=str(tmp_path / "tasks.db"))
    cfg.resolve()
    return cfg


@pytest.fixture
def app(sqlite_store, config):
    return create_app(sqlite_store, config)


@pytest.fixture
def http(app):
    return app.test_client()


@pytest.fixture
def client():
    """Seeded fake API client for controller and view tests."""
    return FakeClient()
