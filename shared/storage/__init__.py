from .base import KeyValueStore, VersionedValue, VersionConflictError, Write
from .memory_store import InMemoryKeyValueStore
from .sql_store import SqlKeyValueStore
from .dependencies import get_store, memory_store

__all__ = [
    "KeyValueStore",
    "VersionedValue",
    "VersionConflictError",
    "Write",
    "InMemoryKeyValueStore",
    "SqlKeyValueStore",
    "get_store",
    "memory_store",
]
