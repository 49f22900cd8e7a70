"""WebSocket endpoint pushing live case threads."""

from __future__ import annotations

import json

from fastapi import APIRouter, WebSocket

from controllers.case_controller import load_case
from controllers.message_socket import ThreadSocketHandler
from models.errors import DermaSightError

router = APIRouter()


@router.websocket("/ws/cases/{case_id}/messages")
async def case_thread_socket(websocket: WebSocket, case_id: str):
	"""Stream the case thread and accept new messages over one websocket."""
	await websocket.accept()
	user = await websocket.app.state.account_directory.current_user()
	if user is None:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Not logged in."}))
		await websocket.close()
		return
	try:
		await load_case(websocket, user, case_id)
	except DermaSightError as exc:
		await websocket.send_text(json.dumps({"type": "error", "detail": str(exc)}))
		await websocket.close()
		return

	handler = ThreadSocketHandler(websocket.app.state.message_dal, user, case_id)
	await handler.run(websocket)
	try:
		await websocket.close()
	except Exception:
		pass
