"""
Board view: renders the controller's tasks as three text columns and turns
user input (form submits, delete clicks, inline edits, drops) into intents.
"""
from dataclasses import dataclass
from typing import List, Optional

from .board import BoardController
from .schema import Task, TaskStatus, ValidationError

COLUMNS = [
    (TaskStatus.TODO, "To Do"),
    (TaskStatus.IN_PROGRESS, "In Progress"),
    (TaskStatus.DONE, "Done"),
]

STATUS_EMOJI = {
    TaskStatus.TODO: "📋",
    TaskStatus.IN_PROGRESS: "🚀",
    TaskStatus.DONE: "✅",
}

SHORT_ID = 8


@dataclass(frozen=True)
class DropResult:
    """What the drag-and-drop layer reports when a card is released."""
    draggable_id: str
    source: str                        # column id the card left
    destination: Optional[str] = None  # None when dropped outside any column


class BoardView:
    """Text rendering of the board plus intent dispatch."""

    def __init__(self, controller: BoardController):
        self.controller = controller
        self.errors: List[str] = []
        controller.subscribe("error", self._on_error)

    def _on_error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def last_error(self) -> Optional[str]:
        return self.errors[-1] if self.errors else None

    # ── Rendering ────────────────────────────────────────────────────────────

    def render_card(self, task: Task) -> List[str]:
        marker = "…" if self.controller.is_moving(task.id) else "•"
        lines = [f"  {marker} {task.id[:SHORT_ID]}  {task.title}"]
        if task.description:
            lines.append(f"      {task.description}")
        return lines

    def render_column(self, status: TaskStatus, title: str) -> List[str]:
        tasks = self.controller.tasks_in(status)
        lines = [f"{STATUS_EMOJI[status]} {title} ({len(tasks)} tasks)"]
        if not tasks:
            lines.append(f"  No tasks in {title.lower()}")
        for task in tasks:
            lines.extend(self.render_card(task))
        return lines

    def render_stats(self) -> str:
        counts = self.controller.counts()
        return (
            f"To do: {counts[TaskStatus.TODO]} | "
            f"In progress: {counts[TaskStatus.IN_PROGRESS]} | "
            f"Completed: {counts[TaskStatus.DONE]}"
        )

    def render(self) -> str:
        if self.controller.loading:
            return "Loading tasks…"

        lines = []
        if self.controller.creating:
            lines.append("Creating task…")
        for status, title in COLUMNS:
            lines.extend(self.render_column(status, title))
            lines.append("")
        lines.append("─" * 40)
        lines.append(self.render_stats())
        return "\n".join(lines)

    # ── Intents ──────────────────────────────────────────────────────────────

    def resolve(self, prefix: str) -> Optional[str]:
        """Map the short id shown on a card back to a full task id."""
        matches = [t.id for t in self.controller.tasks if t.id.startswith(prefix)]
        return matches[0] if len(matches) == 1 else None

    def _column(self, column_id: str) -> Optional[TaskStatus]:
        """Column id → status; unknown ids are reported like any failed intent."""
        try:
            return TaskStatus.parse(column_id)
        except ValidationError as e:
            self.controller.report(str(e))
            return None

    async def on_drag_end(self, drop: DropResult) -> bool:
        if drop.destination is None or drop.destination == drop.source:
            return False
        status = self._column(drop.destination)
        if status is None:
            return False
        return await self.controller.move(drop.draggable_id, status)

    async def submit_new_task(self, title: str, description: str = "",
                              status: str = TaskStatus.TODO.value) -> Optional[Task]:
        column = self._column(status)
        if column is None:
            return None
        return await self.controller.create(title, description or None, column)

    async def click_delete(self, task_id: str) -> bool:
        return await self.controller.delete(task_id)

    async def commit_edit(self, task_id: str, field: str, text: str) -> bool:
        """Called on blur or Enter from an inline editor."""
        return await self.controller.edit(task_id, field, text)
