"""Case directory: analysis results stored as one JSON list under `dermasight-cases`."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from dal.kv_store import CASES_KEY, KeyValueStore, read_slice, write_slice
from models.case_models import CaseRecord
from models.errors import CaseNotFound


def timestamp_sort_key(case: CaseRecord) -> float:
    """Epoch seconds of `case.timestamp`; missing or unparsable values sort earliest."""
    if not case.timestamp:
        return float("-inf")
    try:
        parsed = datetime.fromisoformat(case.timestamp.replace("Z", "+00:00"))
    except ValueError:
        return float("-inf")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _raw_case_id(item: Any) -> Optional[str]:
    """`doctor_dashboard.case_id` of a raw stored entry, or None if it has none."""
    if not isinstance(item, dict):
        return None
    dashboard = item.get("doctor_dashboard")
    return dashboard.get("case_id") if isinstance(dashboard, dict) else None


def _dump(case: CaseRecord) -> Dict[str, Any]:
    return case.model_dump(exclude_none=True)


class CaseDAL:
    """Upsert, list and update cases keyed by `doctor_dashboard.case_id`."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def _load(self) -> List[Any]:
        raw = await read_slice(self._store, CASES_KEY, [])
        if not isinstance(raw, list):
            logging.error("Stored cases are not a list; ignoring %s", type(raw).__name__)
            return []
        return raw

    async def list_all(self) -> List[CaseRecord]:
        """Return all readable cases, newest first. Cases without a timestamp come last."""
        cases: List[CaseRecord] = []
        for item in await self._load():
            try:
                cases.append(CaseRecord.model_validate(item))
            except PydanticValidationError as exc:
                logging.error("Skipping unreadable stored case: %s", exc)
        cases.sort(key=timestamp_sort_key, reverse=True)
        return cases

    async def get(self, case_id: str) -> Optional[CaseRecord]:
        for case in await self.list_all():
            if case.case_id == case_id:
                return case
        return None

    async def list_for_user(self, email: str) -> List[CaseRecord]:
        """Cases created by `email` (case-insensitive), newest first."""
        wanted = email.lower()
        return [c for c in await self.list_all() if (c.userEmail or "").lower() == wanted]

    async def upsert(self, case: CaseRecord) -> None:
        """Insert `case` at the front, dropping any stored case with the same id.

        Works on the raw stored list, so entries that fail validation on read
        are written back unchanged.
        """
        existing = await self._load()
        updated = [_dump(case)] + [item for item in existing if _raw_case_id(item) != case.case_id]
        await write_slice(self._store, CASES_KEY, updated)

    async def update(self, case: CaseRecord) -> bool:
        """Replace the stored case with the same id. Returns False (no write) if absent."""
        stored = await self._load()
        for index, item in enumerate(stored):
            if _raw_case_id(item) == case.case_id:
                stored[index] = _dump(case)
                return await write_slice(self._store, CASES_KEY, stored)
        return False

    async def toggle_flag(self, case_id: str) -> CaseRecord:
        """Flip `isManuallyFlagged` on a case and return the updated record."""
        case = await self.get(case_id)
        if case is None:
            raise CaseNotFound(f"Case {case_id} not found.")
        toggled = case.model_copy(update={"isManuallyFlagged": not case.isManuallyFlagged})
        await self.update(toggled)
        return toggled
