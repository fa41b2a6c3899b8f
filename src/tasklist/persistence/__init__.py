"""Persistence module for the task list."""

from tasklist.persistence.adapter import (
    SCHEMA_VERSION,
    PersistedSchemaError,
    TaskPersistence,
    dump_record,
    parse_record,
)
from tasklist.persistence.kv import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    create_key_value_store,
)

__all__ = [
    "SCHEMA_VERSION",
    "PersistedSchemaError",
    "TaskPersistence",
    "dump_record",
    "parse_record",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "create_key_value_store",
]
