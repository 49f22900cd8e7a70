"""Message directory: per-case threads stored as a map under `dermasight-messages`.

Appends notify in-process subscribers, so live views push updates instead of
re-reading the store on a timer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, List, Set

from dal.kv_store import MESSAGES_KEY, KeyValueStore, read_slice, write_slice
from models.message_models import MESSAGE_FIELDS, Message


class MessageDAL:
	"""Append-only message threads grouped by case id."""

	def __init__(self, store: KeyValueStore) -> None:
		self._store = store
		self._subscribers: Dict[str, Set[asyncio.Queue]] = {}

	async def _load(self) -> Dict[str, list]:
		raw = await read_slice(self._store, MESSAGES_KEY, {})
		if not isinstance(raw, dict):
			logging.error("Stored messages are not a mapping; ignoring %s", type(raw).__name__)
			return {}
		return raw

	@staticmethod
	def _thread(threads: Dict[str, Any], case_id: str) -> List[Dict[str, Any]]:
		"""Readable raw entries of one thread; malformed entries are logged and skipped."""
		raw = threads.get(case_id) or []
		if not isinstance(raw, list):
			logging.error("Stored thread for case %s is not a list; ignoring %s", case_id, type(raw).__name__)
			return []
		entries = []
		for item in raw:
			if isinstance(item, dict) and all(isinstance(item.get(k), str) for k in MESSAGE_FIELDS):
				entries.append(item)
			else:
				logging.error("Skipping unreadable stored message for case %s: %r", case_id, item)
		return entries

	async def list_for_case(self, case_id: str) -> List[Message]:
		"""Return the thread for `case_id` in insertion order (empty if none)."""
		threads = await self._load()
		return [Message.from_dict(item) for item in self._thread(threads, case_id)]

	async def append(self, case_id: str, message: Message) -> List[Message]:
		"""Append `message` and return the full updated thread.

		Unreadable stored entries stay in the stored thread but are left out
		of the returned sequence.
		"""
		threads = await self._load()
		stored = threads.get(case_id)
		thread = list(stored) if isinstance(stored, list) else []
		thread.append(message.to_dict())
		threads[case_id] = thread
		await write_slice(self._store, MESSAGES_KEY, threads)
		messages = [Message.from_dict(item) for item in self._thread(threads, case_id)]
		self._notify(case_id, messages)
		return messages

	async def subscribe(self, case_id: str) -> AsyncIterator[List[Message]]:
		"""Yield the current thread, then the full thread after every append.

		The subscription is registered before the first snapshot is read, so no
		append can fall between the two.
		"""
		queue: asyncio.Queue = asyncio.Queue()
		self._subscribers.setdefault(case_id, set()).add(queue)
		try:
			yield await self.list_for_case(case_id)
			while True:
				yield await queue.get()
		finally:
			subscribers = self._subscribers.get(case_id)
			if subscribers is not None:
				subscribers.discard(queue)
				if not subscribers:
					self._subscribers.pop(case_id, None)

	def subscriber_count(self, case_id: str) -> int:
		return len(self._subscribers.get(case_id, ()))

	def _notify(self, case_id: str, messages: List[Message]) -> None:
		for queue in self._subscribers.get(case_id, ()):
			queue.put_nowait(list(messages))
