"""The single "current user" marker, kept apart from the account table."""

from __future__ import annotations

import logging
from typing import Optional

from dal.kv_store import CURRENT_USER_KEY, KeyValueStore, read_slice, write_slice
from models.account_models import User


class SessionDAL:
	"""Persist, read and clear the logged-in user's public record."""

	def __init__(self, store: KeyValueStore) -> None:
		self._store = store

	async def save(self, user: User) -> None:
		await write_slice(self._store, CURRENT_USER_KEY, user.public().to_dict())

	async def get(self) -> Optional[User]:
		raw = await read_slice(self._store, CURRENT_USER_KEY, None)
		if not isinstance(raw, dict):
			return None
		return User.from_dict(raw)

	async def clear(self) -> None:
		try:
			await self._store.remove_item(CURRENT_USER_KEY)
		except Exception as exc:
			logging.error("Failed to clear current user session: %s", exc)
