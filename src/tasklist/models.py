"""Data model for the task list.

Tasks are frozen: every mutation in TaskStore builds a new Task with
dataclasses.replace, so a snapshot handed out to a listener can never
change underneath it.

Persisted record shape (one entry of the stored array)::

    {"id": 1714550400000, "text": "Buy milk", "completed": false,
     "tags": ["errand"], "startDate": "2024-05-01T00:00:00", "endDate": null}
"""

import time
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable


class TaskRecordError(ValueError):
    """Raised when a persisted task record cannot be turned into a Task."""


def date_to_text(value: date | None) -> str | None:
    """Serialize a calendar date as an ISO-8601 date-time at midnight.

    None stays None so absent dates persist as an explicit null.
    """
    if value is None:
        return None
    return datetime(value.year, value.month, value.day).isoformat()


def text_to_date(value: Any) -> date | None:
    """Revive a persisted date field.

    Accepts bare dates and full date-times. Naive date-times (what save
    writes) keep their calendar date as written. Date-times carrying a
    ``Z`` or an offset are instants; they are read in local time, so a
    date picked at local midnight comes back as the same local day.
    Empty and null values mean "no date".
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise TaskRecordError(f"date field must be a string, got {type(value).__name__}")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        if "T" in raw:
            parsed = datetime.fromisoformat(raw)
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone()
            return parsed.date()
        return date.fromisoformat(raw)
    except ValueError as e:
        raise TaskRecordError(f"invalid date value {value!r}") from e


@dataclass(frozen=True)
class Task:
    """A single to-do item."""

    id: int
    text: str
    completed: bool = False
    tags: tuple[str, ...] = ()
    start_date: date | None = None
    end_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "tags": list(self.tags),
            "startDate": date_to_text(self.start_date),
            "endDate": date_to_text(self.end_date),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Task":
        """Build a Task from a persisted record.

        Raises:
            TaskRecordError: If the record is not a mapping or a field has
                the wrong shape.
        """
        if not isinstance(data, dict):
            raise TaskRecordError("task record must be an object")

        task_id = data.get("id")
        # bool is an int subclass; a boolean id is still malformed
        if not isinstance(task_id, int) or isinstance(task_id, bool):
            raise TaskRecordError(f"task id must be an integer, got {task_id!r}")

        text = data.get("text")
        if not isinstance(text, str):
            raise TaskRecordError(f"task {task_id}: text must be a string")

        completed = data.get("completed", False)
        if not isinstance(completed, bool):
            raise TaskRecordError(f"task {task_id}: completed must be a boolean")

        tags = data.get("tags", [])
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise TaskRecordError(f"task {task_id}: tags must be a list of strings")

        return cls(
            id=task_id,
            text=text,
            completed=completed,
            tags=tuple(tags),
            start_date=text_to_date(data.get("startDate")),
            end_date=text_to_date(data.get("endDate")),
        )


class EditTransition(str, Enum):
    """Edges of the edit-session state machine.

    idle --STARTED--> editing --COMMITTED/CANCELLED--> idle
    editing --ABANDONED--> idle (only ever followed by STARTED for a new edit)
    """

    STARTED = "started"
    ABANDONED = "abandoned"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class EditSession:
    """Scratch copy of the task currently being edited."""

    task_id: int
    text: str
    start_date: date | None = None
    end_date: date | None = None


def _clock_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class TaskIdGenerator:
    """Issues integer task ids that never repeat.

    Ids track the creation time in milliseconds, but each id is at least
    one greater than the previous one, so rapid creation inside a single
    clock tick (or a clock stepping backwards) cannot produce a duplicate.
    """

    clock: Callable[[], int] = _clock_ms
    _last: int = field(default=0, init=False)

    def next_id(self) -> int:
        self._last = max(self.clock(), self._last + 1)
        return self._last

    def observe(self, task_id: int) -> None:
        """Make sure future ids are greater than an id already in use."""
        if task_id > self._last:
            self._last = task_id

    @property
    def last_issued(self) -> int:
        return self._last
