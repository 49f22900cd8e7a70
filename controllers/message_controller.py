"""Case message threads between a patient and clinicians."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import Request

from controllers.case_controller import load_case
from controllers.common import app_service, require_user, to_http_exception
from dal.message_dal import MessageDAL
from models.account_models import User
from models.errors import DermaSightError, ValidationError
from models.message_models import Message, utc_now_iso


def build_message(user: User, text: str) -> Message:
	"""Create a message from `user`, rejecting blank text."""
	cleaned = (text or "").strip()
	if not cleaned:
		raise ValidationError("Message text is required.")
	return Message(sender=user.role, text=cleaned, timestamp=utc_now_iso())


async def list_messages(request: Request, case_id: str) -> List[Dict[str, Any]]:
	"""Return the case thread in the order messages were sent."""
	user = await require_user(request)
	messages: MessageDAL = app_service(request, "message_dal")
	try:
		await load_case(request, user, case_id)
	except DermaSightError as exc:
		raise to_http_exception(exc) from exc
	return [m.to_dict() for m in await messages.list_for_case(case_id)]


async def post_message(request: Request, case_id: str, text: str) -> List[Dict[str, Any]]:
	"""Append a message as the current user's role and return the whole thread."""
	user = await require_user(request)
	messages: MessageDAL = app_service(request, "message_dal")
	try:
		await load_case(request, user, case_id)
		thread = await messages.append(case_id, build_message(user, text))
	except DermaSightError as exc:
		raise to_http_exception(exc) from exc
	return [m.to_dict() for m in thread]
