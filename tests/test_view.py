"""
Tests for the text board view and its intent dispatch.
"""
import asyncio

import pytest

from pkg.taskboard.board import BoardController
from pkg.taskboard.schema import SAMPLE_TASKS, TaskStatus
from pkg.taskboard.view import BoardView, DropResult

TODO_ID = SAMPLE_TASKS[0].id


@pytest.fixture
def view(client):
    v = BoardView(BoardController(client))
    asyncio.run(v.controller.load())
    client.calls.clear()
    return v


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Rendering
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_render_three_columns_and_stats(view):
    out = view.render()
    assert "📋 To Do (1 tasks)" in out
    assert "🚀 In Progress (1 tasks)" in out
    assert "✅ Done (1 tasks)" in out
    assert "Design Homepage" in out
    assert out.splitlines()[-1] == "To do: 1 | In progress: 1 | Completed: 1"


def test_card_shows_short_id_and_description(view):
    lines = view.render_card(SAMPLE_TASKS[0])
    assert lines[0] == "  • 3f1c2a9e  Design Homepage"
    assert "wireframes" in lines[1]


def test_empty_column_placeholder(view):
    asyncio.run(view.click_delete(TODO_ID))
    assert view.render_column(TaskStatus.TODO, "To Do") == [
        "📋 To Do (0 tasks)",
        "  No tasks in to do",
    ]


def test_loading_and_creating_indicators(view):
    view.controller.loading = True
    assert view.render() == "Loading tasks…"
    view.controller.loading = False
    view.controller.creating = True
    assert view.render().startswith("Creating task…")


def test_pending_move_marker(view, client):
    async def scenario():
        client.gates[TODO_ID] = asyncio.Event()
        pending = asyncio.create_task(
            view.on_drag_end(DropResult(TODO_ID, "todo", "done"))
        )
        await asyncio.sleep(0)
        # Card already shows in Done, flagged as in flight
        done = view.render_column(TaskStatus.DONE, "Done")
        assert "  … 3f1c2a9e  Design Homepage" in done
        client.gates[TODO_ID].set()
        return await pending

    assert asyncio.run(scenario())
    assert "  • 3f1c2a9e  Design Homepage" in view.render_column(TaskStatus.DONE, "Done")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Intents
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_drop_outside_columns_is_ignored(view, client):
    assert not asyncio.run(view.on_drag_end(DropResult(TODO_ID, "todo", None)))
    assert client.calls == []


def test_drop_on_same_column_is_ignored(view, client):
    assert not asyncio.run(view.on_drag_end(DropResult(TODO_ID, "todo", "todo")))
    assert client.calls == []


def test_failed_drop_snaps_back_and_shows_error(view, client):
    client.fail["update"] = "Failed to update task"
    assert not asyncio.run(view.on_drag_end(DropResult(TODO_ID, "todo", "done")))
    assert view.controller.get(TODO_ID).status == TaskStatus.TODO
    assert view.last_error == "Failed to update task"


def test_drop_on_unknown_column_is_reported(view, client):
    assert not asyncio.run(view.on_drag_end(DropResult(TODO_ID, "todo", "archive")))
    assert view.last_error.startswith("Invalid status")
    assert view.controller.get(TODO_ID).status == TaskStatus.TODO
    assert client.calls == []


def test_submit_to_unknown_column_is_reported(view, client):
    assert asyncio.run(view.submit_new_task("Write report", status="backlog")) is None
    assert view.last_error.startswith("Invalid status")
    assert client.calls == []


def test_submit_new_task(view):
    task = asyncio.run(view.submit_new_task("Write report", "", "in-progress"))
    assert task.description is None
    assert task.status == TaskStatus.IN_PROGRESS
    assert "🚀 In Progress (2 tasks)" in view.render()


def test_submit_blank_title_shows_error(view, client):
    assert asyncio.run(view.submit_new_task("  ")) is None
    assert view.last_error == "Title cannot be empty"
    assert client.calls == []


def test_commit_edit(view):
    assert asyncio.run(view.commit_edit(TODO_ID, "description", "Wireframes only"))
    assert view.controller.get(TODO_ID).description == "Wireframes only"


def test_resolve_prefix(view):
    assert view.resolve("3f1c") == TODO_ID
    assert view.resolve("zzzz") is None
    # Empty prefix matches every task
    assert view.resolve("") is None
