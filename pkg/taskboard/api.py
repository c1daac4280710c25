"""
Task repository API: validates request payloads, drives the store, and wraps
every outcome in an Envelope with its HTTP status.

Nothing escapes unstructured: validation problems map to 400, unknown ids to
404, and store faults or anything unexpected to 500 with a generic message
(the detail goes to the server log only).
"""
import logging
from typing import Any, Callable, Tuple

from .schema import (
    Envelope,
    NewTask,
    NotFoundError,
    TaskUpdate,
    ValidationError,
    validate_task_id,
)
from .store import TaskStore

logger = logging.getLogger(__name__)

Result = Tuple[Envelope, int]


class TaskRepositoryAPI:
    """Stateless CRUD operations over an injected TaskStore."""

    def __init__(self, store: TaskStore):
        self.store = store

    def _guard(self, action: str, fallback: str, fn: Callable[[], Result]) -> Result:
        """Run one operation and map its failure to the right envelope."""
        try:
            return fn()
        except ValidationError as e:
            logger.info(f"{action} rejected: {e}")
            return Envelope.fail(str(e)), 400
        except NotFoundError as e:
            return Envelope.fail(str(e)), 404
        except Exception:
            logger.exception(f"{action} failed (store={self.store.location})")
            return Envelope.fail(fallback), 500

    # ── Collection ───────────────────────────────────────────────────────────

    def list_tasks(self) -> Result:
        def run():
            tasks = self.store.select_all()
            return Envelope.ok(
                [t.to_dict() for t in tasks],
                f"Retrieved {len(tasks)} tasks successfully",
            ), 200

        return self._guard("list tasks", "Failed to fetch tasks", run)

    def create_task(self, payload: Any) -> Result:
        def run():
            new_task = NewTask.from_payload(payload)
            task = self.store.insert(new_task)
            logger.info(f"Created task {task.id} ({task.status.value}): {task.title}")
            return Envelope.ok(task.to_dict(), "Task created successfully"), 201

        return self._guard("create task", "Failed to create task", run)

    # ── Item ─────────────────────────────────────────────────────────────────

    def update_task(self, task_id: str, payload: Any) -> Result:
        def run():
            validate_task_id(task_id)
            update = TaskUpdate.from_payload(payload)
            task = self.store.update_partial(task_id, update)
            if task is None:
                raise NotFoundError(f"Task with id {task_id} not found")
            logger.info(f"Updated task {task_id}: {sorted(update.to_payload())}")
            return Envelope.ok(task.to_dict(), "Task updated successfully"), 200

        return self._guard("update task", "Failed to update task", run)

    def delete_task(self, task_id: str) -> Result:
        def run():
            validate_task_id(task_id)
            task = self.store.delete_by_id(task_id)
            if task is None:
                raise NotFoundError(f"Task with id {task_id} not found")
            logger.info(f"Deleted task {task_id}")
            return Envelope.ok(task.to_dict(), "Task deleted successfully"), 200

        return self._guard("delete task", "Failed to delete task", run)
