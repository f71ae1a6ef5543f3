#!/usr/bin/env python3
"""
Key/Value Storage Medium

Synchronous string key/value stores standing in for browser local storage.
Stores are owned and injected by the caller; there is no shared global medium.
"""

import contextlib
import os
import re
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

class StorageError(Exception):
    """Raised when the storage medium rejects a read or write."""

class StorageQuotaExceeded(StorageError):
    """Raised when a write would exceed the medium's quota."""

class KeyValueStorage(ABC):
    """Interface of a local key/value storage medium."""

    def __init__(self, max_bytes: Optional[int] = None):
        self.max_bytes = max_bytes

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""

    @abstractmethod
    def keys(self) -> List[str]:
        """List stored keys."""

    def _check_quota(self, key: str, value: str) -> None:
        """Reject a write that would push the whole medium over its quota."""
        if self.max_bytes is None:
            return
        size = len(value.encode('utf-8'))
        total = self._used_bytes(exclude_key=key) + size
        if total > self.max_bytes:
            raise StorageQuotaExceeded(
                f"Writing {size} bytes to '{key}' brings storage to {total} bytes, "
                f"over the quota of {self.max_bytes} bytes"
            )

    @abstractmethod
    def _used_bytes(self, exclude_key: Optional[str] = None) -> int:
        """Bytes held by all stored values except ``exclude_key``."""

class MemoryStorage(KeyValueStorage):
    """In-memory storage medium."""

    def __init__(self, max_bytes: Optional[int] = None):
        super().__init__(max_bytes)
        self._items: Dict[str, str] = {}
        self._lock = threading.RLock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._check_quota(key, value)
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items)

    def _used_bytes(self, exclude_key: Optional[str] = None) -> int:
        with self._lock:
            return sum(
                len(value.encode('utf-8'))
                for key, value in self._items.items() if key != exclude_key
            )

class FileStorage(KeyValueStorage):
    """File-backed storage medium: one file per key inside a directory."""

    def __init__(self, storage_dir: str = "data", max_bytes: Optional[int] = None):
        super().__init__(max_bytes)
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def _key_path(self, key: str) -> Path:
        safe_key = re.sub(r'[^A-Za-z0-9_.-]', '_', key)
        return self.storage_dir / f"{safe_key}.json"

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            file_path = self._key_path(key)
            if not file_path.exists():
                return None
            try:
                return file_path.read_text(encoding='utf-8')
            except OSError as e:
                raise StorageError(f"Error reading {file_path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._check_quota(key, value)
            file_path = self._key_path(key)
            tmp_path = file_path.with_suffix('.json.tmp')
            try:
                tmp_path.write_text(value, encoding='utf-8')
                os.replace(tmp_path, file_path)
            except OSError as e:
                with contextlib.suppress(OSError):
                    tmp_path.unlink(missing_ok=True)
                raise StorageError(f"Error writing {file_path}: {e}") from e

    def remove_item(self, key: str) -> None:
        with self._lock:
            file_path = self._key_path(key)
            try:
                file_path.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Error removing {file_path}: {e}") from e

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(path.stem for path in self.storage_dir.glob("*.json"))

    def _used_bytes(self, exclude_key: Optional[str] = None) -> int:
        excluded = self._key_path(exclude_key) if exclude_key is not None else None
        with self._lock:
            try:
                return sum(
                    path.stat().st_size
                    for path in self.storage_dir.glob("*.json") if path != excluded
                )
            except OSError as e:
                raise StorageError(f"Error measuring {self.storage_dir}: {e}") from e
