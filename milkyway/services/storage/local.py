"""
Local Key-Value Store Implementations

FileKeyValueStore keeps one file per key inside a data directory.
Writes go to a temporary file in the same directory and are moved into
place with os.replace, so a crash mid-write leaves the previous blob intact.

InMemoryKeyValueStore is used by tests and by the host when no data
directory is writable.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from milkyway.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageUnavailableError,
)


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not _KEY_PATTERN.match(key) or key in {".", ".."}:
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class FileKeyValueStore(KeyValueStore):
    """One JSON file per key in data_dir."""
    
    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir).expanduser()
    
    @property
    def data_dir(self) -> Path:
        return self._data_dir
    
    def _path_for(self, key: str) -> Path:
        return self._data_dir / f"{_check_key(key)}.json"
    
    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageUnavailableError(f"Failed to read {path}: {e}")
    
    def put(self, key: str, value: bytes) -> None:
        path = self._path_for(key)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(value)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")
    
    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}")


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Values are copied in and out as bytes."""
    
    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        self._blobs: dict[str, bytes] = dict(initial or {})
    
    def get(self, key: str) -> Optional[bytes]:
        return self._blobs.get(_check_key(key))
    
    def put(self, key: str, value: bytes) -> None:
        self._blobs[_check_key(key)] = bytes(value)
    
    def delete(self, key: str) -> bool:
        return self._blobs.pop(_check_key(key), None) is not None
    
    def keys(self) -> list[str]:
        return sorted(self._blobs)
