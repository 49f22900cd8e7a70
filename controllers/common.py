"""Helpers shared by the controllers: app-state access and error translation."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request

from models.account_models import User
from models.case_models import CaseRecord
from models.errors import (
    AccessDenied,
    AuthError,
    DermaSightError,
    NotFoundError,
    RemoteAnalysisError,
    ValidationError,
)


def app_service(request: Request, name: str) -> Any:
    """Return a service attached to `app.state`, or fail with 500 if it is missing."""
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=500, detail=f"{name} not initialized.")
    return service


def to_http_exception(exc: DermaSightError) -> HTTPException:
    """Map a domain error onto the HTTP status shown to the client."""
    if isinstance(exc, AccessDenied):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, AuthError):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, RemoteAnalysisError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


async def require_user(request: Request) -> User:
    """Return the current session user or fail with 401."""
    directory = app_service(request, "account_directory")
    user = await directory.current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Not logged in.")
    return user


def ensure_case_access(user: User, case: CaseRecord) -> None:
    """Patients may only act on their own cases; doctors on any case.

    Raises:
        AccessDenied: A patient asked for someone else's case.
    """
    if user.role == "doctor":
        return
    if (case.userEmail or "").lower() != user.email.lower():
        raise AccessDenied("You do not have access to this case.")
