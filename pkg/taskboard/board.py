"""
Board controller: the client-side task collection and its sync with the API.

Intents and their local-state policy:
  create  → wait for the server, then prepend the returned task
  delete  → wait for the server, then remove by id
  move    → apply locally first, then commit or compensate
  edit    → wait for the server, then apply the returned task

Only move is optimistic. Its lifecycle is apply → await → {commit | compensate};
compensation restores the source status instead of refetching the board.

Subscribers are notified with "changed" after every local state change and
with "error" (message=...) whenever an intent fails.
"""
import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from .client import TaskApiClient, TaskApiError
from .schema import Task, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description")


@dataclass(frozen=True)
class PendingMove:
    """An optimistic status change awaiting server confirmation."""
    task_id: str
    from_status: TaskStatus
    to_status: TaskStatus


class BoardController:
    """Holds the board's tasks (newest first) and mediates user intents."""

    def __init__(self, client: TaskApiClient,
                 on_error: Optional[Callable[[str], None]] = None):
        self.client = client
        self._tasks: List[Task] = []
        self._pending_moves: Dict[str, PendingMove] = {}
        self.subscribers: Dict[str, list] = {}  # event -> list of callbacks
        self.loading = False
        self.creating = False
        if on_error:
            self.subscribe("error", lambda message: on_error(message))

    # ── Events ───────────────────────────────────────────────────────────────

    def subscribe(self, event: str, callback: Callable) -> None:
        """Register a callback for "changed" or "error"."""
        self.subscribers.setdefault(event, []).append(callback)

    def _emit(self, event: str, **kwargs) -> None:
        for callback in self.subscribers.get(event, []):
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error(f"Error in {event} callback: {e}")

    def report(self, message: str) -> None:
        """Log a failed intent and notify "error" subscribers."""
        logger.warning(message)
        self._emit("error", message=message)

    # ── Read side ────────────────────────────────────────────────────────────

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks)

    def tasks_in(self, status: TaskStatus) -> List[Task]:
        return [t for t in self._tasks if t.status == status]

    def get(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def counts(self) -> Dict[TaskStatus, int]:
        return {status: len(self.tasks_in(status)) for status in TaskStatus}

    def is_moving(self, task_id: str) -> bool:
        return task_id in self._pending_moves

    def _put(self, task: Task) -> bool:
        """Replace the local copy with the same id. False if it is gone."""
        for i, current in enumerate(self._tasks):
            if current.id == task.id:
                self._tasks[i] = task
                return True
        return False

    # ── Intents ──────────────────────────────────────────────────────────────

    async def load(self) -> bool:
        """Fetch the whole board once, replacing local state."""
        self.loading = True
        try:
            tasks = await self.client.list_tasks()
        except TaskApiError as e:
            self.report(e.message)
            return False
        finally:
            self.loading = False
        self._tasks = list(tasks)
        self._emit("changed")
        return True

    async def create(self, title: str, description: Optional[str] = None,
                     status: TaskStatus = TaskStatus.TODO) -> Optional[Task]:
        # Same check the server makes; saves a round trip for the common mistake
        if not title or not title.strip():
            self.report("Title cannot be empty")
            return None
        if description is not None and not description.strip():
            description = None

        self.creating = True
        try:
            task = await self.client.create_task(title, status, description)
        except TaskApiError as e:
            self.report(e.message)
            return None
        finally:
            self.creating = False

        self._tasks.insert(0, task)
        self._emit("changed")
        return task

    async def delete(self, task_id: str) -> bool:
        try:
            await self.client.delete_task(task_id)
        except TaskApiError as e:
            self.report(e.message)
            return False
        self._tasks = [t for t in self._tasks if t.id != task_id]
        self._emit("changed")
        return True

    async def move(self, task_id: str, new_status: TaskStatus) -> bool:
        """Drag a task to another column. Returns True once the server agrees."""
        new_status = TaskStatus.parse(new_status)
        task = self.get(task_id)
        if task is None or task.status == new_status:
            return False

        pending = self._apply_move(task, new_status)
        try:
            confirmed = await self.client.update_task(task_id, TaskUpdate(status=new_status))
        except TaskApiError as e:
            self._compensate_move(pending)
            self.report(e.message)
            return False
        except BaseException:
            self._compensate_move(pending)
            raise
        self._commit_move(pending, confirmed)
        return True

    def _apply_move(self, task: Task, new_status: TaskStatus) -> PendingMove:
        pending = PendingMove(task.id, task.status, new_status)
        self._pending_moves[task.id] = pending
        self._put(replace(task, status=new_status))
        self._emit("changed")
        return pending

    def _settle(self, pending: PendingMove) -> Optional[Task]:
        """
        Drop the pending record. Returns the local task only when this is still
        the latest move for it and the task has not been removed meanwhile.
        """
        if self._pending_moves.get(pending.task_id) is not pending:
            return None
        del self._pending_moves[pending.task_id]
        return self.get(pending.task_id)

    def _commit_move(self, pending: PendingMove, confirmed: Task) -> None:
        if self._settle(pending) is not None:
            self._put(confirmed)
            self._emit("changed")

    def _compensate_move(self, pending: PendingMove) -> None:
        current = self._settle(pending)
        if current is not None:
            self._put(replace(current, status=pending.from_status))
            self._emit("changed")

    async def edit(self, task_id: str, field: str, value: Optional[str]) -> bool:
        """
        Commit an inline edit of title or description.

        Blank or unchanged values are dropped without a request. The local copy
        changes only after the server confirms.
        """
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field {field!r} is not editable")
        task = self.get(task_id)
        if task is None:
            return False
        value = (value or "").strip()
        if not value or value == getattr(task, field):
            return False
        return await self._update(task_id, TaskUpdate(**{field: value}))

    async def clear_description(self, task_id: str) -> bool:
        task = self.get(task_id)
        if task is None or task.description is None:
            return False
        return await self._update(task_id, TaskUpdate(clear_description=True))

    async def _update(self, task_id: str, update: TaskUpdate) -> bool:
        try:
            updated = await self.client.update_task(task_id, update)
        except TaskApiError as e:
            self.report(e.message)
            return False
        pending = self._pending_moves.get(task_id)
        if pending is not None:
            # The server has not seen the drag yet; keep the card in its target column
            updated = replace(updated, status=pending.to_status)
        if self._put(updated):
            self._emit("changed")
        return True
