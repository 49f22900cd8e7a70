"""Function tool schema for the skin analysis call.

The schema mirrors `models.case_models.CasePrediction`; strict mode requires
every property to be listed as required, so the optional warning is nullable.
"""

from typing import Any, Dict

FUNCTION_NAME = "report_skin_assessment"

_DISEASE_PREDICTION = {
    "type": "object",
    "properties": {
        "disease": {"type": "string"},
        "probability": {"type": "string", "description": "Likelihood as a percentage, e.g. '72%'."},
        "severity": {"type": "string", "enum": ["low", "moderate", "high"]},
        "co_morbidity_flag": {"type": "boolean"},
        "explanation": {"type": "string"},
    },
    "required": ["disease", "probability", "severity", "co_morbidity_flag", "explanation"],
    "additionalProperties": False,
}

_PATIENT_DASHBOARD = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "The patient label supplied in the request."},
        "disease_predictions": {"type": "array", "items": _DISEASE_PREDICTION},
        "most_likely_disease": {"type": "string"},
        "recommendation": {
            "type": "string",
            "enum": ["consult specialist", "monitor at home", "self-care"],
        },
        "doctor_message": {"type": "string"},
        "image_quality_feedback": {
            "type": "string",
            "enum": ["good", "poor lighting", "blurry", "needs retake"],
        },
    },
    "required": [
        "name",
        "disease_predictions",
        "most_likely_disease",
        "recommendation",
        "doctor_message",
        "image_quality_feedback",
    ],
    "additionalProperties": False,
}

_DOCTOR_DASHBOARD = {
    "type": "object",
    "properties": {
        "case_id": {"type": "string", "description": "A new unique identifier for this case."},
        "summary": {"type": "string"},
        "risk_score": {"type": "string", "description": "Integer from 0 to 100, as a string."},
        "priority_flag": {"type": "string", "enum": ["low", "medium", "high"]},
        "patient_alert": {"type": "string"},
        "clinical_notes": {"type": "string"},
        "action_suggestion": {
            "type": "string",
            "enum": [
                "review required",
                "auto-clear",
                "high risk - immediate consult",
                "review optional",
            ],
        },
    },
    "required": [
        "case_id",
        "summary",
        "risk_score",
        "priority_flag",
        "patient_alert",
        "clinical_notes",
        "action_suggestion",
    ],
    "additionalProperties": False,
}

FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": FUNCTION_NAME,
    "description": "Return the patient-facing and clinician-facing assessment of the skin image.",
    "parameters": {
        "type": "object",
        "properties": {
            "patient_dashboard": _PATIENT_DASHBOARD,
            "doctor_dashboard": _DOCTOR_DASHBOARD,
            "warning": {
                "type": ["string", "null"],
                "description": "Set when the image is unusable or not a skin image.",
            },
        },
        "required": ["patient_dashboard", "doctor_dashboard", "warning"],
        "additionalProperties": False,
    },
    "strict": True,
}
