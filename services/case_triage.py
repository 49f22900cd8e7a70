"""Clinician case list: filtering and sorting."""

from __future__ import annotations

from typing import Iterable, List, Optional

from dal.case_dal import timestamp_sort_key
from models.case_models import CaseRecord
from models.errors import ValidationError

SORT_OPTIONS = ("date-desc", "date-asc", "risk-desc", "risk-asc", "priority-desc", "priority-asc")
PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}


def risk_value(case: CaseRecord) -> int:
    """Integer risk score; anything unparsable counts as 0."""
    try:
        return int(str(case.doctor_dashboard.risk_score).strip().rstrip("%"))
    except ValueError:
        return 0


def priority_value(case: CaseRecord) -> int:
    return PRIORITY_RANK.get(case.doctor_dashboard.priority_flag, 0)


def unique_conditions(cases: Iterable[CaseRecord]) -> List[str]:
    """Sorted distinct most-likely diseases across `cases`."""
    return sorted({c.patient_dashboard.most_likely_disease for c in cases})


def filter_and_sort(
    cases: Iterable[CaseRecord],
    sort: str = "date-desc",
    condition: Optional[str] = None,
    only_flagged: bool = False,
) -> List[CaseRecord]:
    """Filter by flag and condition, then sort. Manually flagged cases always come first.

    Args:
        cases: Cases to process.
        sort: One of `SORT_OPTIONS`.
        condition: Keep only this most-likely disease; None or "all" keeps everything.
        only_flagged: Keep only manually flagged cases.

    Raises:
        ValidationError: Unknown sort option.
    """
    if sort not in SORT_OPTIONS:
        raise ValidationError(f"Unknown sort option {sort!r}.")

    selected = list(cases)
    if only_flagged:
        selected = [c for c in selected if c.isManuallyFlagged]
    if condition and condition != "all":
        selected = [c for c in selected if c.patient_dashboard.most_likely_disease == condition]

    field, direction = sort.split("-")
    key = {"date": timestamp_sort_key, "risk": risk_value, "priority": priority_value}[field]
    selected.sort(key=key, reverse=direction == "desc")
    # stable sort keeps the order above within each flag group
    selected.sort(key=lambda c: not c.isManuallyFlagged)
    return selected
