#!/usr/bin/env python3
"""
Task Board CLI
--------------
Drives the board against a running taskboard_server.

Usage:
    python taskboard_cli.py show
    python taskboard_cli.py add "Write report" --description "Q3 numbers" --status todo
    python taskboard_cli.py move 3f1c2a9e done
    python taskboard_cli.py edit 3f1c2a9e --title "Write the report"
    python taskboard_cli.py edit 3f1c2a9e --clear-description
    python taskboard_cli.py rm 3f1c2a9e

Task ids may be given as any unique prefix (the short id shown on cards).
"""

import argparse
import asyncio
import logging
import sys

from pkg.taskboard.board import BoardController
from pkg.taskboard.client import TaskApiClient
from pkg.taskboard.config import Config
from pkg.taskboard.schema import TaskStatus
from pkg.taskboard.view import BoardView, DropResult

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Task Board CLI")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--url", help="API base URL (overrides TASKBOARD_API_URL)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Render the board")

    p = sub.add_parser("add", help="Create a task")
    p.add_argument("title")
    p.add_argument("--description", default="")
    p.add_argument("--status", default=TaskStatus.TODO.value, choices=TaskStatus.values())

    p = sub.add_parser("move", help="Move a task to another column")
    p.add_argument("task_id")
    p.add_argument("status", choices=TaskStatus.values())

    p = sub.add_parser("rm", help="Delete a task")
    p.add_argument("task_id")

    p = sub.add_parser("edit", help="Edit a task's title or description")
    p.add_argument("task_id")
    p.add_argument("--title")
    p.add_argument("--description")
    p.add_argument("--clear-description", action="store_true")

    return parser


async def run(args: argparse.Namespace, view: BoardView) -> bool:
    """Load the board and perform one intent. Returns False on failure."""
    controller = view.controller
    if not await controller.load():
        return False
    if args.command == "show":
        return True
    if args.command == "add":
        return await view.submit_new_task(args.title, args.description, args.status) is not None

    task_id = view.resolve(args.task_id)
    if task_id is None:
        view.errors.append(f"No single task matches id '{args.task_id}'")
        return False
    task = controller.get(task_id)

    if args.command == "move":
        if task.status.value == args.status:
            return True
        return await view.on_drag_end(DropResult(task_id, task.status.value, args.status))
    if args.command == "rm":
        return await view.click_delete(task_id)

    # edit: blank or unchanged values are skipped, like an inline editor on blur
    if args.title is not None:
        await view.commit_edit(task_id, "title", args.title)
    if args.clear_description:
        await controller.clear_description(task_id)
    elif args.description is not None:
        await view.commit_edit(task_id, "description", args.description)
    return not view.errors


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = Config.load(args.config)
    if args.url:
        config.api_url = args.url.rstrip("/")

    logging.basicConfig(
        level=logging.ERROR,
        format="%(asctime)s [taskboard] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    client = TaskApiClient(config.api_url, timeout=config.request_timeout)
    view = BoardView(BoardController(client))
    try:
        ok = asyncio.run(run(args, view))
    finally:
        client.close()

    if not ok:
        print(f"❌ {view.last_error or 'Request failed'}", file=sys.stderr)
        return 1
    print(view.render())
    return 0


if __name__ == "__main__":
    sys.exit(main())
