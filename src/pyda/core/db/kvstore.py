"""
Key-value persistence handles given to DA clients at init.

Clients only rely on basic get/put/delete semantics, so any store with
this shape can be passed in.
"""
import os
import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union


class KVStore(ABC):
    """Minimal key-value store interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    def put(self, key: str, value: bytes) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Deleting a missing key is a no-op."""

    def has(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryKVStore(KVStore):
    """Thread-safe in-process store. Contents are lost on exit."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SQLiteKVStore(KVStore):
    """Key-value store backed by a single SQLite table.

    A new connection is opened per operation so the store can be shared
    between server threads.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        os.makedirs(self.path.parent, exist_ok=True)

        conn = self._connect()
        try:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS kv ("
                "key TEXT PRIMARY KEY, "
                "value BLOB"
                ")"
            )
            conn.commit()
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    def get(self, key: str) -> Optional[bytes]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return bytes(row[0]) if row else None
        finally:
            conn.close()

    def put(self, key: str, value: bytes) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                (key, sqlite3.Binary(value)),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()
