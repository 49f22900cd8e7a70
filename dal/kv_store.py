"""String-keyed stores holding JSON-encoded blobs.

Every directory in `dal/` goes through a `KeyValueStore`: it reads the whole
slice stored under its key, mutates it in memory and writes the whole slice
back. There are no partial writes, transactions or locks.
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from models.errors import StorageError
from utils.database_init import AsyncDatabaseInitializer

USERS_KEY = "dermasight-users"
CASES_KEY = "dermasight-cases"
MESSAGES_KEY = "dermasight-messages"
CURRENT_USER_KEY = "dermasight-current-user"


class KeyValueStore(ABC):
    """Interface shared by all store backings."""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """Return the raw string stored under `key`, or None."""

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Delete `key`; missing keys are ignored."""

    async def read_json(self, key: str, default: Any) -> Any:
        """Decode the blob under `key`, or return `default` when absent.

        Raises:
            StorageError: If the backing fails or the blob is not valid JSON.
        """
        try:
            raw = await self.get_item(key)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise StorageError(f"Stored value for {key!r} is not valid JSON") from exc

    async def write_json(self, key: str, value: Any) -> None:
        """Encode `value` as JSON and store it under `key`."""
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Value for {key!r} is not JSON serializable") from exc
        try:
            await self.set_item(key, payload)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store used in tests and for throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SQLiteKeyValueStore(KeyValueStore):
    """Store backed by the KV_STORE table of the application database.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`).
    """

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def get_item(self, key: str) -> Optional[str]:
        async with self._db.connection() as conn:
            cur = await conn.execute("SELECT value FROM KV_STORE WHERE key = ?", (key,))
            row = await cur.fetchone()
            return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        async with self._db.connection() as conn:
            await conn.execute(
                "INSERT INTO KV_STORE (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (key, value, int(time.time())),
            )
            await conn.commit()

    async def remove_item(self, key: str) -> None:
        async with self._db.connection() as conn:
            await conn.execute("DELETE FROM KV_STORE WHERE key = ?", (key,))
            await conn.commit()


async def read_slice(store: KeyValueStore, key: str, default: Any) -> Any:
    """Read a directory slice, logging and falling back to `default` on storage errors."""
    try:
        return await store.read_json(key, default)
    except StorageError as exc:
        logging.error("Failed to parse %s from store: %s", key, exc)
        return default


async def write_slice(store: KeyValueStore, key: str, value: Any) -> bool:
    """Write a directory slice; storage errors are logged and reported as False."""
    try:
        await store.write_json(key, value)
        return True
    except StorageError as exc:
        logging.error("Failed to save %s to store: %s", key, exc)
        return False
