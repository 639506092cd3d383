"""
Plain records for daily submissions and worker profiles.

The scoring and aggregation code only ever sees these records, never ORM rows,
so a request can fetch its snapshot once and hand the same list to every consumer.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional

from safetyfirst.hazards import normalize_exposures

DEFAULT_AGE = 30
DEFAULT_YEARS_EXPERIENCE = 0

REQUIRED_FIELDS = (
    "date",
    "shift_duration",
    "fatigue_level",
    "ppe_items_required",
    "ppe_items_used",
    "hazard_exposures",
    "incident_reported",
)


class SubmissionError(ValueError):
    """Raised when a submitted form is missing fields or carries invalid values."""


@dataclass(frozen=True)
class DailySubmission:
    date: dt.date
    shift_duration_hours: float
    fatigue_level: int
    ppe_items_required: int
    ppe_items_used: int
    hazard_exposure_hours: Dict[str, float]
    symptoms: FrozenSet[str] = frozenset()
    incident_reported: bool = False
    incident_description: Optional[str] = None
    notes: Optional[str] = None
    ppe_details: List[str] = field(default_factory=list)
    risk_score: Optional[int] = None
    submitted_at: Optional[dt.datetime] = None

    @property
    def ppe_compliance_rate(self) -> float:
        if self.ppe_items_required == 0:
            return 1.0
        return self.ppe_items_used / self.ppe_items_required

    @property
    def total_hazard_exposure_hours(self) -> float:
        return sum(self.hazard_exposure_hours.values())

    @property
    def symptom_count(self) -> int:
        return len(self.symptoms)

    @classmethod
    def from_record(cls, form) -> "DailySubmission":
        """Build from a persisted DailyForm row."""
        return cls(
            date=form.date,
            shift_duration_hours=form.shift_duration,
            fatigue_level=form.fatigue_level,
            ppe_items_required=form.ppe_items_required,
            ppe_items_used=form.ppe_items_used,
            hazard_exposure_hours=dict(form.hazard_exposures or {}),
            symptoms=frozenset(form.symptoms or []),
            incident_reported=bool(form.incident_reported),
            incident_description=form.incident_description,
            notes=form.notes,
            ppe_details=list(form.ppe_details or []),
            risk_score=form.risk_score,
            submitted_at=form.submitted_at,
        )


def _as_int(payload: Mapping, key: str, low: int, high: Optional[int] = None) -> int:
    value = payload[key]
    if isinstance(value, bool):
        raise SubmissionError(f"{key} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise SubmissionError(f"{key} must be an integer") from None
    if number != value and not isinstance(value, str):
        raise SubmissionError(f"{key} must be an integer")
    if number < low or (high is not None and number > high):
        bound = f"between {low} and {high}" if high is not None else f">= {low}"
        raise SubmissionError(f"{key} must be {bound}")
    return number


def _as_date(value) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(str(value)[:10])
    except ValueError:
        raise SubmissionError("date must be an ISO date (YYYY-MM-DD)") from None


def parse_submission(payload: Mapping) -> DailySubmission:
    """
    Validate a raw form payload (snake_case keys) into a DailySubmission.
    Missing form fields are rejected rather than defaulted.
    """
    if not isinstance(payload, Mapping):
        raise SubmissionError("form payload must be an object")
    missing = [key for key in REQUIRED_FIELDS if payload.get(key) is None]
    if missing:
        raise SubmissionError(f"missing fields: {', '.join(missing)}")

    try:
        shift = float(payload["shift_duration"])
    except (TypeError, ValueError):
        raise SubmissionError("shift_duration must be a number") from None
    if not math.isfinite(shift):
        raise SubmissionError("shift_duration must be a finite number")
    if shift <= 0:
        raise SubmissionError("shift_duration must be positive")

    hazards = payload["hazard_exposures"]
    if not isinstance(hazards, Mapping):
        raise SubmissionError("hazard_exposures must be an object of category -> hours")
    try:
        exposures = normalize_exposures(hazards)
    except ValueError as exc:
        raise SubmissionError(str(exc)) from None

    symptoms = payload.get("symptoms") or []
    if not isinstance(symptoms, (list, tuple)) or not all(isinstance(s, str) for s in symptoms):
        raise SubmissionError("symptoms must be a list of labels")

    incident = payload["incident_reported"]
    if not isinstance(incident, bool):
        raise SubmissionError("incident_reported must be true or false")

    return DailySubmission(
        date=_as_date(payload["date"]),
        shift_duration_hours=shift,
        fatigue_level=_as_int(payload, "fatigue_level", 1, 10),
        ppe_items_required=_as_int(payload, "ppe_items_required", 0),
        ppe_items_used=_as_int(payload, "ppe_items_used", 0),
        hazard_exposure_hours=exposures,
        symptoms=frozenset(symptoms),
        incident_reported=incident,
        incident_description=(payload.get("incident_description") or None) if incident else None,
        notes=payload.get("notes") or None,
        ppe_details=list(payload.get("ppe_details") or []),
    )


@dataclass(frozen=True)
class WorkerProfile:
    user_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    years_experience: Optional[int] = None
    gender: Optional[str] = None
    job_title: Optional[str] = None
    department: Optional[str] = None

    @property
    def effective_age(self) -> int:
        return self.age or DEFAULT_AGE

    @property
    def effective_years_experience(self) -> int:
        return self.years_experience or DEFAULT_YEARS_EXPERIENCE

    @classmethod
    def from_record(cls, user) -> "WorkerProfile":
        return cls(
            user_id=user.id,
            name=user.name,
            email=user.email,
            age=user.age,
            years_experience=user.years_experience,
            gender=user.gender,
            job_title=user.job_title,
            department=user.department,
        )
