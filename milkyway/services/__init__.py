"""Services package."""

from milkyway.services.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    LedgerStore,
    MalformedRecordError,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    # Storage services
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "LedgerStore",
    "MalformedRecordError",
    "StorageError",
    "StorageUnavailableError",
]
