"""
Storage Services Package

Provides the key-value store abstraction, its local implementations and
the Ledger Store built on top of them.
"""

from milkyway.services.storage.interface import (
    KeyValueStore,
    MalformedRecordError,
    StorageError,
    StorageUnavailableError,
)
from milkyway.services.storage.local import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
)
from milkyway.services.storage.ledger_store import (
    DEFAULT_RECORDS_KEY,
    DEFAULT_SETTINGS_KEY,
    LedgerStore,
    migrate_legacy_record,
)

__all__ = [
    # Interfaces
    "KeyValueStore",
    # Exceptions
    "MalformedRecordError",
    "StorageError",
    "StorageUnavailableError",
    # Local implementations
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    # Ledger store
    "DEFAULT_RECORDS_KEY",
    "DEFAULT_SETTINGS_KEY",
    "LedgerStore",
    "migrate_legacy_record",
]
