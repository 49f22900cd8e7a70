"""Push a case thread to a websocket and accept messages sent over it."""
from __future__ import annotations

import asyncio
import contextlib
import json
from typing import Any, Dict

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from controllers.message_controller import build_message
from dal.message_dal import MessageDAL
from models.account_models import User
from models.errors import DermaSightError


class ThreadSocketHandler:
	"""Serve one case thread over one websocket.

	Outbound frames are `{"type": "messages", "messages": [...]}` carrying the
	full thread, sent once on connect and after every append to the case.
	Inbound frames are `{"type": "message.send", "text": ...}`.
	"""

	def __init__(self, messages: MessageDAL, user: User, case_id: str) -> None:
		self.messages = messages
		self.user = user
		self.case_id = case_id

	async def run(self, websocket: WebSocket) -> None:
		pusher = asyncio.create_task(self._push(websocket))
		try:
			while True:
				try:
					raw = await websocket.receive_text()
				except WebSocketDisconnect:
					break
				try:
					payload = json.loads(raw)
				except ValueError:
					await self._send(websocket, {"type": "error", "detail": "Payload must be JSON"})
					continue
				await self.handle(websocket, payload)
		finally:
			pusher.cancel()
			with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
				await pusher

	async def handle(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		"""Process a single inbound websocket payload."""
		if not isinstance(payload, dict) or payload.get("type") != "message.send":
			await self._send(websocket, {"type": "error", "detail": "Unsupported message type."})
			return
		try:
			await self.messages.append(self.case_id, build_message(self.user, payload.get("text") or ""))
		except DermaSightError as exc:
			await self._send(websocket, {"type": "error", "detail": str(exc)})

	async def _push(self, websocket: WebSocket) -> None:
		async for thread in self.messages.subscribe(self.case_id):
			await self._send(websocket, {"type": "messages", "messages": [m.to_dict() for m in thread]})

	async def _send(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		await websocket.send_text(json.dumps(payload))
