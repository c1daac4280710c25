"""
Task storage backends.

SQLiteTaskStore is the durable store the server runs on. MemoryTaskStore keeps
tasks in a process-local list and exists for tests and demos; it can be seeded
with the fixed sample board. Both satisfy the TaskStore protocol and are passed
into the API layer explicitly.
"""
import logging
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator, List, Optional, Protocol

from .schema import NewTask, Task, TaskUpdate, StoreError, SAMPLE_TASKS, utc_now

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tasks (
    id          TEXT PRIMARY KEY,
    title       TEXT NOT NULL,
    description TEXT,
    status      TEXT NOT NULL DEFAULT 'todo'
                CHECK (status IN ('todo', 'in-progress', 'done')),
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at);
"""


class TaskStore(Protocol):
    """Interface consumed by the repository API. None means "not found"."""

    location: str

    def insert(self, new_task: NewTask) -> Task:
        """Persist a new task; the store assigns id and timestamps."""
        ...

    def select_all(self) -> List[Task]:
        """All tasks, newest created_at first."""
        ...

    def update_partial(self, task_id: str, update: TaskUpdate) -> Optional[Task]:
        """Apply supplied fields only and refresh updated_at."""
        ...

    def delete_by_id(self, task_id: str) -> Optional[Task]:
        """Remove a task and return its last state."""
        ...


def _next_updated_at(previous: datetime) -> datetime:
    """updated_at must strictly increase even when the clock has not moved."""
    now = utc_now()
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SQLite
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@contextmanager
def _connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """Open a connection in WAL mode; commit on success, always close."""
    try:
        conn = sqlite3.connect(db_path, timeout=10)
    except sqlite3.Error as e:
        raise StoreError(f"cannot open {db_path}: {e}") from e
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode = WAL")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise StoreError(str(e)) from e
    finally:
        conn.close()


class SQLiteTaskStore:
    """SQLite-backed store for board tasks."""

    def __init__(self, db_path: str):
        """Initialize store and create tables if needed."""
        self.db_path = str(db_path)
        self.location = f"sqlite:{self.db_path}"
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with _connect(self.db_path) as conn:
            conn.executescript(SCHEMA_SQL)

    def insert(self, new_task: NewTask) -> Task:
        now = utc_now()
        task = Task(
            id=str(uuid.uuid4()),
            title=new_task.title,
            description=new_task.description,
            status=new_task.status,
            created_at=now,
            updated_at=now,
        )
        with _connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO tasks (id, title, description, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (task.id, task.title, task.description, task.status.value,
                 _ts(task.created_at), _ts(task.updated_at)),
            )
        return task

    def select_all(self) -> List[Task]:
        with _connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM tasks ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
        return [self._row_to_task(r) for r in rows]

    def update_partial(self, task_id: str, update: TaskUpdate) -> Optional[Task]:
        with _connect(self.db_path) as conn:
            # Take the write lock before reading so the row cannot change underneath us
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
            if not row:
                return None
            current = self._row_to_task(row)
            updated = update.apply_to(current, _next_updated_at(current.updated_at))
            conn.execute(
                """
                UPDATE tasks SET title = ?, description = ?, status = ?, updated_at = ?
                WHERE id = ?
                """,
                (updated.title, updated.description, updated.status.value,
                 _ts(updated.updated_at), task_id),
            )
        return updated

    def delete_by_id(self, task_id: str) -> Optional[Task]:
        with _connect(self.db_path) as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
            if not row:
                return None
            conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        return self._row_to_task(row)

    def seed(self, tasks: List[Task]) -> int:
        """Insert fixed tasks (keeping their ids and timestamps). Returns rows added."""
        with _connect(self.db_path) as conn:
            before = conn.total_changes
            conn.executemany(
                """
                INSERT OR IGNORE INTO tasks (id, title, description, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [(t.id, t.title, t.description, t.status.value,
                  _ts(t.created_at), _ts(t.updated_at)) for t in tasks],
            )
            added = conn.total_changes - before
        logger.info(f"Seeded {added} sample tasks into {self.db_path}")
        return added

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        """Convert a database row to a Task."""
        return Task.from_dict(dict(row))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# In-memory
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class MemoryTaskStore:
    """Process-local store. Flask serves threaded, so access is locked."""

    location = "memory"

    def __init__(self, seed: bool = False):
        self._tasks: List[Task] = list(SAMPLE_TASKS) if seed else []
        self._lock = threading.Lock()

    def insert(self, new_task: NewTask) -> Task:
        now = utc_now()
        task = Task(
            id=str(uuid.uuid4()),
            title=new_task.title,
            description=new_task.description,
            status=new_task.status,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._tasks.append(task)
        return task

    def select_all(self) -> List[Task]:
        with self._lock:
            indexed = list(enumerate(self._tasks))
        indexed.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [task for _, task in indexed]

    def update_partial(self, task_id: str, update: TaskUpdate) -> Optional[Task]:
        with self._lock:
            for i, task in enumerate(self._tasks):
                if task.id == task_id:
                    updated = update.apply_to(task, _next_updated_at(task.updated_at))
                    self._tasks[i] = updated
                    return updated
        return None

    def delete_by_id(self, task_id: str) -> Optional[Task]:
        with self._lock:
            for i, task in enumerate(self._tasks):
                if task.id == task_id:
                    return self._tasks.pop(i)
        return None

