"""Key-value storage backends.

The task list only needs ``get``/``set`` of string values by string key,
the same contract a browser's localStorage offers. Two backends:

- MemoryKeyValueStore: a plain dict, for tests and throwaway sessions
- JsonFileKeyValueStore: one JSON object on disk mapping keys to strings

File layout:
    {workspace_dir}/
    └── storage.json     {"todos": "<serialized task collection>", ...}
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tasklist.logging import Loggers
from tasklist.persistence._utils import atomic_write_json

if TYPE_CHECKING:
    from tasklist.config import TaskListSettings

logger = Loggers.persistence()


@runtime_checkable
class KeyValueStore(Protocol):
    """Opaque durable store of string values."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """Dict-backed store; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """Store backed by a single JSON object file.

    The whole file is re-read on every get and rewritten atomically on
    every set, so separate instances pointed at the same path see each
    other's writes.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, RecursionError, UnicodeDecodeError):
            logger.warning("kv_file_unreadable", path=str(self.path))
            return {}
        if not isinstance(data, dict):
            logger.warning("kv_file_unreadable", path=str(self.path))
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        atomic_write_json(self.path, data)
        logger.debug("kv_written", path=str(self.path), key=key, size=len(value))


def create_key_value_store(settings: "TaskListSettings") -> KeyValueStore:
    """Build the backend selected by settings.storage_backend."""
    if settings.storage_backend == "memory":
        return MemoryKeyValueStore()
    return JsonFileKeyValueStore(settings.storage_file)
