"""Case history and clinician triage."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Request

from controllers.common import app_service, ensure_case_access, require_user, to_http_exception
from dal.case_dal import CaseDAL
from models.account_models import User
from models.case_models import CaseRecord
from models.errors import CaseNotFound, DermaSightError
from services.case_triage import filter_and_sort, unique_conditions


async def _visible_cases(request: Request, user: User) -> List[CaseRecord]:
    cases: CaseDAL = app_service(request, "case_dal")
    if user.role == "doctor":
        return await cases.list_all()
    return await cases.list_for_user(user.email)


async def load_case(request: Request, user: User, case_id: str) -> CaseRecord:
    """Fetch a case the user may access, raising domain errors otherwise."""
    cases: CaseDAL = app_service(request, "case_dal")
    case = await cases.get(case_id)
    if case is None:
        raise CaseNotFound(f"Case {case_id} not found.")
    ensure_case_access(user, case)
    return case


async def list_cases(
    request: Request,
    sort: str = "date-desc",
    condition: Optional[str] = None,
    flagged: bool = False,
) -> List[Dict[str, Any]]:
    """Doctors see every case, patients their own history; both can filter and sort."""
    user = await require_user(request)
    try:
        cases = filter_and_sort(await _visible_cases(request, user), sort, condition, flagged)
    except DermaSightError as exc:
        raise to_http_exception(exc) from exc
    return [c.model_dump(exclude_none=True) for c in cases]


async def list_conditions(request: Request) -> List[str]:
    user = await require_user(request)
    return unique_conditions(await _visible_cases(request, user))


async def get_case(request: Request, case_id: str) -> Dict[str, Any]:
    user = await require_user(request)
    try:
        case = await load_case(request, user, case_id)
    except DermaSightError as exc:
        raise to_http_exception(exc) from exc
    return case.model_dump(exclude_none=True)


async def toggle_flag(request: Request, case_id: str) -> Dict[str, Any]:
    """Flip the manual high-risk flag of a case."""
    user = await require_user(request)
    cases: CaseDAL = app_service(request, "case_dal")
    try:
        await load_case(request, user, case_id)
        case = await cases.toggle_flag(case_id)
    except DermaSightError as exc:
        raise to_http_exception(exc) from exc
    return case.model_dump(exclude_none=True)
