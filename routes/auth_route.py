"""FastAPI routes for accounts and the current-user session."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers import auth_controller

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterPayload(BaseModel):
	name: str
	email: str
	password: str
	role: str
	licenseNumber: Optional[str] = None
	dateOfBirth: Optional[str] = None


class LoginPayload(BaseModel):
	email: str
	password: str


class ProfilePayload(BaseModel):
	name: str
	email: str


class ResetRequestPayload(BaseModel):
	email: str
	role: str


class ResetConfirmPayload(BaseModel):
	email: str
	code: str
	new_password: str


@router.post("/register")
async def register_route(request: Request, payload: RegisterPayload):
	try:
		return await auth_controller.register(
			request,
			payload.name,
			payload.email,
			payload.password,
			payload.role,
			license_number=payload.licenseNumber,
			date_of_birth=payload.dateOfBirth,
		)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/login")
async def login_route(request: Request, payload: LoginPayload):
	try:
		return await auth_controller.login(request, payload.email, payload.password)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/logout")
async def logout_route(request: Request):
	return await auth_controller.logout(request)


@router.get("/me")
async def me_route(request: Request):
	return await auth_controller.current_user(request)


@router.put("/profile")
async def profile_route(request: Request, payload: ProfilePayload):
	try:
		return await auth_controller.update_profile(request, payload.name, payload.email)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/password-reset/request")
async def reset_request_route(request: Request, payload: ResetRequestPayload):
	try:
		return await auth_controller.request_password_reset(request, payload.email, payload.role)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/password-reset/confirm")
async def reset_confirm_route(request: Request, payload: ResetConfirmPayload):
	try:
		return await auth_controller.confirm_password_reset(
			request, payload.email, payload.code, payload.new_password
		)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
