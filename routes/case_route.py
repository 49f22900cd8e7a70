"""FastAPI routes for case history, clinician triage and case messages."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers import case_controller, message_controller

router = APIRouter(prefix="/cases", tags=["cases"])


class MessagePayload(BaseModel):
	text: str


@router.get("")
async def list_cases_route(
	request: Request,
	sort: str = "date-desc",
	condition: Optional[str] = None,
	flagged: bool = False,
):
	try:
		return await case_controller.list_cases(request, sort, condition, flagged)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/conditions")
async def conditions_route(request: Request):
	try:
		return await case_controller.list_conditions(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{case_id}")
async def get_case_route(request: Request, case_id: str):
	try:
		return await case_controller.get_case(request, case_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{case_id}/flag")
async def toggle_flag_route(request: Request, case_id: str):
	try:
		return await case_controller.toggle_flag(request, case_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{case_id}/messages")
async def list_messages_route(request: Request, case_id: str):
	try:
		return await message_controller.list_messages(request, case_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{case_id}/messages")
async def post_message_route(request: Request, case_id: str, payload: MessagePayload):
	try:
		return await message_controller.post_message(request, case_id, payload.text)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
