"""Task collection persistence.

The whole collection lives under one key of a KeyValueStore as a single
JSON text blob, rewritten after every mutation. The blob is a versioned
envelope::

    {"version": 1, "tasks": [{"id": ..., "text": ..., "completed": ...,
                              "tags": [...], "startDate": ..., "endDate": ...}]}

A bare JSON array of task records is the older, unversioned layout
(version 0); it is migrated on load and rewritten in the current layout
on the next save. Anything unreadable loads as an empty collection.
"""

import json
from collections.abc import Callable, Iterable
from typing import Any

from tasklist.logging import Loggers
from tasklist.models import Task, TaskRecordError
from tasklist.persistence.kv import KeyValueStore

logger = Loggers.persistence()

SCHEMA_VERSION = 1
DEFAULT_STORAGE_KEY = "todos"


class PersistedSchemaError(ValueError):
    """Raised when a stored record's envelope has an unexpected shape."""


def _migrate_v0(records: list[Any]) -> list[Any]:
    # v0 omitted absent dates entirely; v1 always writes them as null
    migrated = []
    for record in records:
        if isinstance(record, dict):
            record = {"startDate": None, "endDate": None, **record}
        migrated.append(record)
    return migrated


# version -> function upgrading that version's task records to version + 1
_MIGRATIONS: dict[int, Callable[[list[Any]], list[Any]]] = {
    0: _migrate_v0,
}


def dump_record(tasks: Iterable[Task]) -> str:
    """Serialize a task collection into the stored text blob."""
    return json.dumps(
        {"version": SCHEMA_VERSION, "tasks": [task.to_dict() for task in tasks]},
        ensure_ascii=False,
    )


def _unwrap(data: Any) -> tuple[int, list[Any]]:
    if isinstance(data, list):
        return 0, data
    if not isinstance(data, dict):
        raise PersistedSchemaError("stored record must be an object or an array")
    version = data.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise PersistedSchemaError(f"missing or invalid version: {version!r}")
    if version not in _MIGRATIONS and version != SCHEMA_VERSION:
        raise PersistedSchemaError(f"unsupported version {version}")
    records = data.get("tasks")
    if not isinstance(records, list):
        raise PersistedSchemaError("'tasks' must be an array")
    return version, records


def parse_record(text: str) -> tuple[Task, ...]:
    """Parse the stored text blob into a task collection.

    Raises:
        json.JSONDecodeError: If text is not JSON.
        RecursionError: If the JSON nests too deeply to decode.
        PersistedSchemaError: If the envelope is not recognised.
        TaskRecordError: If a task record is malformed or ids repeat.
    """
    version, records = _unwrap(json.loads(text))
    while version < SCHEMA_VERSION:
        records = _MIGRATIONS[version](records)
        version += 1

    tasks = tuple(Task.from_dict(record) for record in records)
    ids = [task.id for task in tasks]
    if len(set(ids)) != len(ids):
        raise TaskRecordError("duplicate task ids in stored record")
    return tasks


class TaskPersistence:
    """Loads and saves the task collection under a fixed key.

    Example:
        >>> persistence = TaskPersistence(MemoryKeyValueStore())
        >>> persistence.save(store.tasks)
        >>> persistence.load() == store.tasks
        True
    """

    def __init__(self, kv: KeyValueStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.kv = kv
        self.key = key

    def load(self) -> tuple[Task, ...]:
        """Read the stored collection.

        Returns:
            The stored tasks, or an empty tuple if nothing is stored or the
            stored record cannot be parsed.
        """
        raw = self.kv.get(self.key)
        if raw is None:
            logger.debug("tasks_not_found", key=self.key)
            return ()
        try:
            tasks = parse_record(raw)
        except (
            json.JSONDecodeError,
            RecursionError,
            PersistedSchemaError,
            TaskRecordError,
        ) as e:
            logger.warning("tasks_load_failed", key=self.key, error=str(e))
            return ()
        logger.info("tasks_loaded", key=self.key, count=len(tasks))
        return tasks

    def save(self, tasks: Iterable[Task]) -> None:
        """Write the full collection, replacing whatever was stored."""
        tasks = tuple(tasks)
        self.kv.set(self.key, dump_record(tasks))
        logger.debug("tasks_saved", key=self.key, count=len(tasks))
