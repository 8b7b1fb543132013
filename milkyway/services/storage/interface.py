"""
Abstract Storage Interface

DESIGN DECISION: The ledger persists two blobs (records and settings)
in a local key-value byte store. We define that store as an interface so:
1. Tests run on an in-memory store with no filesystem
2. The file backend can be swapped without touching ledger rules
3. Ledger logic never touches global state directly

The interface is intentionally tiny - get and put of whole blobs.
Each put replaces one blob atomically; there are no partial writes.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for a local key-value byte store.
    
    Any backend (files, memory, browser-like storage) must implement these.
    """
    
    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """
        Read the blob stored under key.
        
        Args:
            key: Storage key
            
        Returns:
            The stored bytes, or None if nothing was ever stored
            
        Raises:
            StorageUnavailableError: If the backing medium cannot be read
        """
        pass
    
    @abstractmethod
    def put(self, key: str, value: bytes) -> None:
        """
        Replace the blob stored under key in one atomic step.
        
        Args:
            key: Storage key
            value: Full new contents
            
        Raises:
            StorageError: If the write fails (previous blob is kept)
        """
        pass
    
    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove the blob stored under key.
        
        Returns:
            True if something was removed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailableError(StorageError):
    """The backing medium could not be read."""
    pass


class MalformedRecordError(StorageError):
    """A stored record could not be decoded."""
    
    def __init__(self, message: str, raw: object = None):
        super().__init__(message)
        self.raw = raw
