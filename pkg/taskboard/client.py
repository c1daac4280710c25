# Task board — HTTP client
#
# One coroutine per API verb. Each call is a single round trip: the envelope
# is unwrapped and success=false becomes a TaskApiError. No retries, no cache.

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from .schema import Task, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)


class TaskApiError(Exception):
    """Raised when the server reports failure or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TaskApiClient:
    """HTTP client for the task board API."""

    def __init__(self, base_url: str = "http://127.0.0.1:3000/api",
                 session: Optional[requests.Session] = None,
                 timeout: float = 5):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, fallback: str,
                 json: Optional[Dict[str, Any]] = None) -> Any:
        """Blocking round trip; returns the envelope's data."""
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TaskApiError(fallback) from e

        try:
            result = r.json()
        except ValueError as e:
            raise TaskApiError(fallback, r.status_code) from e

        if not isinstance(result, dict) or not result.get("success"):
            error = result.get("error") if isinstance(result, dict) else None
            raise TaskApiError(error or fallback, r.status_code)
        return result.get("data")

    async def _call(self, method: str, path: str, fallback: str,
                    json: Optional[Dict[str, Any]] = None) -> Any:
        return await asyncio.to_thread(self._request, method, path, fallback, json)

    @staticmethod
    def _task(data: Any, fallback: str) -> Task:
        try:
            return Task.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise TaskApiError(fallback) from e

    # ── Verbs ────────────────────────────────────────────────────────────────

    async def list_tasks(self) -> List[Task]:
        data = await self._call("GET", "/tasks", "Failed to fetch tasks")
        return [self._task(d, "Failed to fetch tasks") for d in (data or [])]

    async def create_task(self, title: str, status: TaskStatus = TaskStatus.TODO,
                          description: Optional[str] = None) -> Task:
        body: Dict[str, Any] = {"title": title, "status": TaskStatus.parse(status).value}
        if description is not None:
            body["description"] = description
        data = await self._call("POST", "/tasks", "Failed to create task", json=body)
        return self._task(data, "Failed to create task")

    async def update_task(self, task_id: str, update: TaskUpdate) -> Task:
        data = await self._call(
            "PUT", f"/tasks/{task_id}", "Failed to update task", json=update.to_payload()
        )
        return self._task(data, "Failed to update task")

    async def delete_task(self, task_id: str) -> Task:
        data = await self._call("DELETE", f"/tasks/{task_id}", "Failed to delete task")
        return self._task(data, "Failed to delete task")

    def close(self):
        self.session.close()
