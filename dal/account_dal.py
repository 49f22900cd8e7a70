"""Account records stored as one JSON list under `dermasight-users`."""

from __future__ import annotations

import logging
from typing import Any, List

from dal.kv_store import USERS_KEY, KeyValueStore, read_slice, write_slice
from models.account_models import User


def _is_readable(item: Any) -> bool:
    return isinstance(item, dict) and isinstance(item.get("email"), str) and bool(item["email"].strip())


class AccountDAL:
    """Read-modify-write access to the stored user list.

    Stored records without a usable email are skipped on read and written back
    untouched, so one bad record neither blocks other accounts nor gets lost.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def _load(self) -> List[Any]:
        raw = await read_slice(self._store, USERS_KEY, [])
        if not isinstance(raw, list):
            logging.error("Stored users are not a list; ignoring %s", type(raw).__name__)
            return []
        return raw

    async def list_users(self) -> List[User]:
        """Return all readable stored users; a corrupt slice reads as empty."""
        users = []
        for item in await self._load():
            if _is_readable(item):
                users.append(User.from_dict(item))
            else:
                logging.error("Skipping stored user without a usable email")
        return users

    async def save_users(self, users: List[User]) -> bool:
        unreadable = [item for item in await self._load() if not _is_readable(item)]
        return await write_slice(self._store, USERS_KEY, [u.to_dict() for u in users] + unreadable)
