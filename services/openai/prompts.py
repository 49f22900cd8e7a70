"""Prompt builders for dermatology triage."""

import json


def build_system_prompt() -> str:
    """Return the system prompt for the skin analyzer."""
    return (
        "You are DermaSight, a dermatology triage assistant. "
        "You examine a single photograph of skin and produce two views of the same assessment: "
        "a plain-language patient dashboard and a concise clinician dashboard. "
        "You are careful and conservative: you never present a diagnosis as certain, "
        "you recommend a specialist whenever malignancy or infection cannot be excluded, "
        "and you report poor image quality instead of guessing. "
        "Risk scores are integers from 0 (benign) to 100 (urgent)."
    )


def build_user_prompt(role: str, patient_name: str, notes: str) -> str:
    """Return the user prompt carrying the request as JSON."""
    request_data = {
        "role": role,
        "patient_name": patient_name or "Anonymous",
        "notes": notes or "",
    }
    audience = (
        "The requester is a clinician; keep clinical_notes detailed."
        if role == "doctor"
        else "The requester is the patient; keep doctor_message reassuring and free of jargon."
    )
    return (
        "Assess the attached skin image and report it with the provided tool. "
        f"{audience}\n\nHere is the user's request:\n{json.dumps(request_data, indent=2)}"
    )
