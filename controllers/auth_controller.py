"""Account and session endpoints' logic."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request

from controllers.common import app_service, require_user, to_http_exception
from models.errors import DermaSightError
from services.account_service import AccountDirectory


def _directory(request: Request) -> AccountDirectory:
    return app_service(request, "account_directory")


async def register(
    request: Request,
    name: str,
    email: str,
    password: str,
    role: str,
    license_number: Optional[str] = None,
    date_of_birth: Optional[str] = None,
) -> Dict[str, Any]:
    """Create an account; the new user becomes the current session."""
    try:
        user = await _directory(request).register(
            name, email, password, role, license_number=license_number, date_of_birth=date_of_birth
        )
    except DermaSightError as exc:
        raise to_http_exception(exc) from exc
    return user.to_dict()


async def login(request: Request, email: str, password: str) -> Dict[str, Any]:
    try:
        user = await _directory(request).login(email, password)
    except DermaSightError as exc:
        raise to_http_exception(exc) from exc
    return user.to_dict()


async def logout(request: Request) -> Dict[str, Any]:
    await _directory(request).logout()
    return {"logged_out": True}


async def current_user(request: Request) -> Dict[str, Any]:
    user = await require_user(request)
    return user.to_dict()


async def update_profile(request: Request, name: str, email: str) -> Dict[str, Any]:
    """Update the current user's name and email."""
    user = await require_user(request)
    try:
        updated = await _directory(request).update_profile(user.email, name, email)
    except DermaSightError as exc:
        raise to_http_exception(exc) from exc
    return updated.to_dict()


async def request_password_reset(request: Request, email: str, role: str) -> Dict[str, Any]:
    """Issue a reset code. The code itself is never returned over HTTP."""
    try:
        await _directory(request).request_password_reset(email, role)
    except DermaSightError as exc:
        raise to_http_exception(exc) from exc
    return {"requested": True}


async def confirm_password_reset(request: Request, email: str, code: str, new_password: str) -> Dict[str, Any]:
    try:
        await _directory(request).reset_password(email, code, new_password)
    except DermaSightError as exc:
        raise to_http_exception(exc) from exc
    return {"reset": True}
