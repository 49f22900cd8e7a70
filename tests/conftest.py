"""Shared test fixtures for DermaSight."""

import io
import itertools
from typing import List, Optional

import pytest
from PIL import Image

from dal.account_dal import AccountDAL
from dal.case_dal import CaseDAL
from dal.kv_store import InMemoryKeyValueStore
from dal.message_dal import MessageDAL
from dal.session_dal import SessionDAL
from models.case_models import CasePrediction, CaseRecord
from services.account_service import AccountDirectory

_case_ids = itertools.count(1)


def build_prediction(case_id: Optional[str] = None, **doctor_overrides) -> CasePrediction:
    doctor = {
        "case_id": case_id or f"case-{next(_case_ids)}",
        "summary": "Well-demarcated erythematous plaque with silvery scale.",
        "risk_score": "35",
        "priority_flag": "medium",
        "patient_alert": "none",
        "clinical_notes": "Consistent with plaque psoriasis.",
        "action_suggestion": "review optional",
    }
    doctor.update(doctor_overrides)
    return CasePrediction.model_validate(
        {
            "patient_dashboard": {
                "name": "Test Patient",
                "disease_predictions": [
                    {
                        "disease": "Psoriasis",
                        "probability": "70%",
                        "severity": "moderate",
                        "co_morbidity_flag": False,
                        "explanation": "Scaly plaques on extensor surfaces.",
                    }
                ],
                "most_likely_disease": "Psoriasis",
                "recommendation": "consult specialist",
                "doctor_message": "A dermatologist can confirm this.",
                "image_quality_feedback": "good",
            },
            "doctor_dashboard": doctor,
        }
    )


class ScriptedAnalyzer:
    """Remote analyzer double: records calls and fails on the listed call numbers (1-based)."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls: List[dict] = []

    async def analyze(self, image_bytes, *, mime_type, role, patient_name, notes=""):
        self.calls.append(
            {"image_bytes": image_bytes, "mime_type": mime_type, "role": role, "patient_name": patient_name, "notes": notes}
        )
        if len(self.calls) in self.fail_on:
            raise RuntimeError("model unavailable")
        return build_prediction()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def case_dal(store):
    return CaseDAL(store)


@pytest.fixture
def message_dal(store):
    return MessageDAL(store)


@pytest.fixture
def clock():
    """Mutable millisecond clock; set `clock.now` to move time."""

    class _Clock:
        now = 1_700_000_000_000

        def __call__(self):
            return self.now

    return _Clock()


@pytest.fixture
def directory(store, clock):
    return AccountDirectory(AccountDAL(store), SessionDAL(store), clock=clock)


@pytest.fixture
def make_case():
    """Factory for CaseRecord instances."""

    def _make(case_id=None, timestamp=None, flagged=False, user_email="a@x.com", disease=None, **doctor):
        prediction = build_prediction(case_id, **doctor)
        record = CaseRecord(
            **prediction.model_dump(),
            timestamp=timestamp,
            userEmail=user_email,
            isManuallyFlagged=flagged,
        )
        if disease:
            record.patient_dashboard.most_likely_disease = disease
        return record

    return _make


@pytest.fixture
def analyzer_factory():
    return ScriptedAnalyzer


@pytest.fixture
def png_bytes():
    """A small valid PNG image."""
    buf = io.BytesIO()
    Image.new("RGB", (64, 48), (200, 120, 110)).save(buf, format="PNG")
    return buf.getvalue()
