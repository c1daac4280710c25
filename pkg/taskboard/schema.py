"""
Task board schema: the Task record, partial updates, and the response envelope.

Task lifecycle:
  POST creates (store assigns id + timestamps)
  PUT mutates only the supplied fields
  DELETE removes the row for good

Every API response, success or failure, is wrapped in an Envelope.
"""
import re
from enum import Enum
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any


# Lowercase hex UUID, version 1-5, RFC 4122 variant
TASK_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Exceptions
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class ValidationError(Exception):
    """Raised when a request payload or identifier is rejected (400)."""
    pass


class NotFoundError(Exception):
    """Raised when a well-formed task id matches no record (404)."""
    pass


class StoreError(Exception):
    """Raised when the underlying persistence operation fails (500)."""
    pass


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Model
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TaskStatus(Enum):
    """Board columns, in display order."""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @classmethod
    def values(cls) -> List[str]:
        return [s.value for s in cls]

    @classmethod
    def parse(cls, value: Any) -> "TaskStatus":
        """Strict lookup by wire value. Raises ValidationError on anything else."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"Invalid status. Must be one of: {', '.join(cls.values())}"
            )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value: Any) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def is_valid_task_id(task_id: Any) -> bool:
    return isinstance(task_id, str) and bool(TASK_ID_PATTERN.match(task_id))


def validate_task_id(task_id: Any) -> str:
    """Reject malformed ids before any store access."""
    if not is_valid_task_id(task_id):
        raise ValidationError("Invalid task id format")
    return task_id


def clean_text(value: Any, field_name: str) -> str:
    """Trim a text field, rejecting non-strings and empty-after-trim values."""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name.capitalize()} must be a string")
    value = value.strip()
    if not value:
        raise ValidationError(f"{field_name.capitalize()} cannot be empty")
    return value


@dataclass(frozen=True)
class Task:
    """One card on the board, as persisted by the store."""

    id: str
    title: str
    status: TaskStatus = TaskStatus.TODO
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(timespec="microseconds"),
            "updated_at": self.updated_at.isoformat(timespec="microseconds"),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize a wire/row dict. Timestamps may be ISO strings or datetimes."""
        created_at = _parse_ts(data["created_at"])
        updated_at = _parse_ts(data.get("updated_at") or created_at)
        return cls(
            id=str(data["id"]),
            title=data["title"],
            description=data.get("description"),
            status=TaskStatus(data["status"]),
            created_at=created_at,
            updated_at=updated_at,
        )


@dataclass(frozen=True)
class NewTask:
    """Validated create payload."""
    title: str
    status: TaskStatus
    description: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "NewTask":
        """
        Validate a POST body.

        Order: missing title/status (absent or ""), then blank title, then
        invalid status.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

        title = payload.get("title")
        status = payload.get("status")
        if title in (None, "") or status in (None, ""):
            raise ValidationError(
                "Missing required fields: title and status are required"
            )

        title = clean_text(title, "title")
        status = TaskStatus.parse(status)

        description = payload.get("description")
        if description is not None:
            if not isinstance(description, str):
                raise ValidationError("Description must be a string")
            description = description.strip() or None

        return cls(title=title, status=status, description=description)


@dataclass(frozen=True)
class TaskUpdate:
    """
    Partial update. None means "leave unchanged".

    Descriptions are cleared with clear_description=True (JSON null on the
    wire); an empty string is rejected instead of being taken as a clear.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    clear_description: bool = False

    def __post_init__(self):
        if self.clear_description and self.description is not None:
            raise ValueError("description and clear_description are exclusive")

    @property
    def is_empty(self) -> bool:
        return (
            self.title is None
            and self.description is None
            and self.status is None
            and not self.clear_description
        )

    def apply_to(self, task: Task, now: datetime) -> Task:
        """Return a copy of task with supplied fields changed and updated_at set."""
        changes: Dict[str, Any] = {"updated_at": now}
        if self.title is not None:
            changes["title"] = self.title
        if self.description is not None:
            changes["description"] = self.description
        elif self.clear_description:
            changes["description"] = None
        if self.status is not None:
            changes["status"] = self.status
        return replace(task, **changes)

    def to_payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.title is not None:
            body["title"] = self.title
        if self.description is not None:
            body["description"] = self.description
        elif self.clear_description:
            body["description"] = None
        if self.status is not None:
            body["status"] = self.status.value
        return body

    @classmethod
    def from_payload(cls, payload: Any) -> "TaskUpdate":
        """Validate a PUT body. Unknown keys are ignored."""
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

        title = None
        if "title" in payload:
            title = clean_text(payload["title"], "title")

        description = None
        clear_description = False
        if "description" in payload:
            if payload["description"] is None:
                clear_description = True
            else:
                description = clean_text(payload["description"], "description")

        status = None
        if "status" in payload:
            status = TaskStatus.parse(payload["status"])

        return cls(
            title=title,
            description=description,
            status=status,
            clear_description=clear_description,
        )


@dataclass
class Envelope:
    """Uniform response wrapper: {success, data?, error?, message?}."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any, message: Optional[str] = None) -> "Envelope":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str) -> "Envelope":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success}
        if self.success and self.data is not None:
            out["data"] = self.data
        if self.error is not None:
            out["error"] = self.error
        if self.message is not None:
            out["message"] = self.message
        return out


# Fixed demo board, used to seed the in-memory store
SAMPLE_TASKS = [
    Task(
        id="3f1c2a9e-7b4d-4c8a-9e21-5d6f7a8b9c01",
        title="Design Homepage",
        description="Create wireframes and mockups for the new homepage layout",
        status=TaskStatus.TODO,
        created_at=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc),
    ),
    Task(
        id="8a2b4c6d-1e3f-4a5b-8c7d-9e0f1a2b3c02",
        title="Setup Database",
        description="Configure PostgreSQL database and create initial schema",
        status=TaskStatus.IN_PROGRESS,
        created_at=datetime(2024, 1, 14, 14, 30, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 14, 14, 30, tzinfo=timezone.utc),
    ),
    Task(
        id="c5d6e7f8-9a0b-4c1d-a2e3-f4a5b6c7d803",
        title="User Authentication",
        description="Implement login and registration functionality",
        status=TaskStatus.DONE,
        created_at=datetime(2024, 1, 13, 9, 15, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 13, 9, 15, tzinfo=timezone.utc),
    ),
]
