#!/usr/bin/env python3
"""
Task Board Server
-----------------
Serves the task board JSON API backed by a SQLite store (or an in-memory
store for demos).

Usage:
    python taskboard_server.py
    python taskboard_server.py --db /tmp/tasks.db --port 3000
    python taskboard_server.py --memory --seed

API (prefix configurable, default /api):
    GET    /api/tasks        → { success, data: [Task], message }
    POST   /api/tasks        → body { title, description?, status }  201
    PUT    /api/tasks/<id>   → body { title?, description?, status? }
                               description: null clears the description
    DELETE /api/tasks/<id>   → { success, data: Task (deleted) }
    GET    /health           → { status, store }

Every /api response uses the envelope { success, data?, error?, message? }.
"""

import argparse
import logging
import sys

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from pkg.taskboard.api import TaskRepositoryAPI
from pkg.taskboard.config import Config
from pkg.taskboard.schema import Envelope, SAMPLE_TASKS
from pkg.taskboard.store import MemoryTaskStore, SQLiteTaskStore, TaskStore

logger = logging.getLogger(__name__)


def build_store(config: Config, memory: bool = False) -> TaskStore:
    """Pick the store for this process from config/flags."""
    if memory:
        return MemoryTaskStore(seed=config.seed_sample_data)
    store = SQLiteTaskStore(config.db_path)
    if config.seed_sample_data:
        store.seed(SAMPLE_TASKS)
    return store


def create_app(store: TaskStore = None, config: Config = None) -> Flask:
    """
    Build the Flask app around an explicit store.

    The store is owned by the app instance; nothing is kept at module level,
    so tests can build as many independent apps as they like.
    """
    config = config or Config.load()
    if store is None:
        store = build_store(config)

    app = Flask(__name__)
    api = TaskRepositoryAPI(store)
    app.extensions["taskboard_api"] = api
    prefix = config.api_prefix

    def respond(result):
        envelope, status = result
        return jsonify(envelope.to_dict()), status

    def body():
        # An empty body is an empty object; unparseable JSON is passed on as None
        data = request.get_json(force=True, silent=True)
        if data is None and not request.get_data():
            return {}
        return data

    # ── Routes ───────────────────────────────────────────────────────────────

    @app.route(f"{prefix}/tasks", methods=["GET"])
    def list_tasks():
        return respond(api.list_tasks())

    @app.route(f"{prefix}/tasks", methods=["POST"])
    def create_task():
        return respond(api.create_task(body()))

    @app.route(f"{prefix}/tasks/<task_id>", methods=["PUT"])
    def update_task(task_id):
        return respond(api.update_task(task_id, body()))

    @app.route(f"{prefix}/tasks/<task_id>", methods=["DELETE"])
    def delete_task(task_id):
        return respond(api.delete_task(task_id))

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "store": store.location})

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(Envelope.fail(e.description or e.name).to_dict()), e.code

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Task Board Server")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to tasks.db (overrides TASKBOARD_DB env var)")
    parser.add_argument("--memory", action="store_true",
                        help="Keep tasks in memory only (lost on exit)")
    parser.add_argument("--seed", action="store_true",
                        help="Add the sample tasks on startup")
    args = parser.parse_args(argv)

    config = Config.load(args.config)
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.db:
        config.db_path = args.db
    if args.seed:
        config.seed_sample_data = True

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [taskboard] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    store = build_store(config, memory=args.memory)
    app = create_app(store, config)

    print(f"""
╔═══════════════════════════════════════╗
║  Task Board Server                    ║
╠═══════════════════════════════════════╣
║  URL:   http://{config.host}:{config.port:<19}║
║  API:   {config.api_prefix + '/tasks':<30}║
║  Store: {store.location[:30]:<30}║
╚═══════════════════════════════════════╝
""")

    app.run(host=config.host, port=config.port, debug=False, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
