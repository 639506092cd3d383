"""Plain-text worker context handed to the admin assistant."""

from __future__ import annotations

import json
from typing import Iterable

from safetyfirst.scoring import classify_risk, round_half_up
from safetyfirst.submissions import DailySubmission, WorkerProfile

NOT_SET = "Not set"


def _or_not_set(value) -> str:
    return NOT_SET if value is None else str(value)


def profile_block(profile: WorkerProfile) -> str:
    return "\n".join(
        [
            f"Name: {_or_not_set(profile.name)}",
            f"Email: {_or_not_set(profile.email)}",
            f"Age: {_or_not_set(profile.age)}",
            f"Gender: {_or_not_set(profile.gender)}",
            f"Job Title: {_or_not_set(profile.job_title)}",
            f"Department: {_or_not_set(profile.department)}",
            f"Years of Experience: {_or_not_set(profile.years_experience)}",
        ]
    )


def submission_block(index: int, s: DailySubmission) -> str:
    hazards = json.dumps(s.hazard_exposure_hours, sort_keys=True) if s.hazard_exposure_hours else "none"
    symptoms = ", ".join(sorted(s.symptoms)) if s.symptoms else "none"
    lines = [
        f"--- Form {index} ({s.date.isoformat()}) ---",
        f"Shift duration: {s.shift_duration_hours:g} hours",
        f"Fatigue level: {s.fatigue_level}/10",
        f"Risk score: {s.risk_score} ({classify_risk(s.risk_score or 0)})",
        f"PPE compliance: {s.ppe_items_used}/{s.ppe_items_required} ({round_half_up(s.ppe_compliance_rate * 100)}%)",
        f"Total hazard exposure hours: {s.total_hazard_exposure_hours:g}",
        f"Hazard exposures: {hazards}",
        f"Symptoms: {symptoms}",
        f"Incident reported: {'yes' if s.incident_reported else 'no'}",
    ]
    if s.incident_description:
        lines.append(f"Incident description: {s.incident_description}")
    if s.notes:
        lines.append(f"Notes: {s.notes}")
    return "\n".join(lines)


def build_worker_context(profile: WorkerProfile, submissions: Iterable[DailySubmission]) -> str:
    ordered = sorted(submissions, key=lambda s: s.date, reverse=True)
    forms = "\n\n".join(submission_block(i, s) for i, s in enumerate(ordered, start=1))
    return (
        f"## Worker profile\n{profile_block(profile)}\n\n"
        f"## Daily form submissions (most recent first)\n{forms or 'No form submissions yet.'}"
    )
