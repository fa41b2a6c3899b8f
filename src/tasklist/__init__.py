"""Tasklist - a tagged, scheduled to-do list core.

This package provides everything below the rendering layer of a task
list application:

- Task model with optional start/end dates and tags
- TaskStore holding the ordered collection and all mutations
- Tag filtering (OR semantics) and the index of tags in use
- Write-through persistence to a key-value store (JSON file or memory)
- TaskListSession tying these together for a UI to drive
"""

from tasklist.app import TaskListSession
from tasklist.config import (
    SettingsContext,
    SettingsValidationError,
    TaskListSettings,
    get_context_settings,
    get_settings,
    reload_settings,
    set_context_settings,
    set_settings,
    validate_settings,
)
from tasklist.filters import remove_filter, toggle_filter, visible
from tasklist.models import (
    EditSession,
    EditTransition,
    Task,
    TaskIdGenerator,
    TaskRecordError,
)
from tasklist.persistence import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    TaskPersistence,
)
from tasklist.store import TaskStore
from tasklist.tags import distinct_tags

__all__ = [
    # Session
    "TaskListSession",
    # Core
    "Task",
    "TaskStore",
    "TaskIdGenerator",
    "TaskRecordError",
    "EditSession",
    "EditTransition",
    # Derived views
    "visible",
    "toggle_filter",
    "remove_filter",
    "distinct_tags",
    # Persistence
    "TaskPersistence",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    # Settings
    "TaskListSettings",
    "SettingsContext",
    "SettingsValidationError",
    "get_settings",
    "set_settings",
    "set_context_settings",
    "get_context_settings",
    "validate_settings",
    "reload_settings",
]

__version__ = "0.1.0"
