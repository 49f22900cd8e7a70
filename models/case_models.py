"""Case records: the analyzer's prediction plus the metadata attached to it."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class DiseasePrediction(BaseModel):
    disease: str
    probability: str
    severity: Literal["low", "moderate", "high"]
    co_morbidity_flag: bool
    explanation: str


class PatientDashboard(BaseModel):
    """Patient-facing view of one analysis."""

    name: str
    disease_predictions: List[DiseasePrediction]
    most_likely_disease: str
    recommendation: Literal["consult specialist", "monitor at home", "self-care"]
    doctor_message: str
    image_quality_feedback: Literal["good", "poor lighting", "blurry", "needs retake"]


class DoctorDashboard(BaseModel):
    """Clinician-facing summary, risk score and priority."""

    case_id: str
    summary: str
    risk_score: str
    priority_flag: Literal["low", "medium", "high"]
    patient_alert: str
    clinical_notes: str
    action_suggestion: Literal[
        "review required",
        "auto-clear",
        "high risk - immediate consult",
        "review optional",
    ]


class CasePrediction(BaseModel):
    """Structured payload returned by the remote analyzer."""

    model_config = ConfigDict(extra="ignore")

    patient_dashboard: PatientDashboard
    doctor_dashboard: DoctorDashboard
    warning: Optional[str] = None


class CaseRecord(CasePrediction):
    """A persisted case; `doctor_dashboard.case_id` is its key."""

    timestamp: Optional[str] = None
    imagePreviewUrl: Optional[str] = None
    userEmail: Optional[str] = None
    isManuallyFlagged: bool = False

    @property
    def case_id(self) -> str:
        return self.doctor_dashboard.case_id
