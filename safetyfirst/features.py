"""
Feature vector sent to the external ML scorer.

Field names are the scorer's wire contract. Gender is encoded with the fixed
GENDER_ENCODING map; unrecognised or missing values encode as "other".
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Dict, Iterable, Optional

from safetyfirst.history import HistoricalAggregator
from safetyfirst.scoring import round_half_up
from safetyfirst.submissions import DailySubmission, WorkerProfile

GENDER_ENCODING = {"male": 0, "female": 1, "other": 2}
GENDER_OTHER = GENDER_ENCODING["other"]


def encode_gender(gender: Optional[str]) -> int:
    if not gender:
        return GENDER_OTHER
    return GENDER_ENCODING.get(gender.strip().lower(), GENDER_OTHER)


@dataclass(frozen=True)
class FeatureVector:
    shift_duration: float
    fatigue_level: int
    ppe_compliance_rate: float
    total_hazard_exposure_hours: float
    age: int
    years_experience: int
    gender_encoded: int
    consecutive_days_worked: int
    daily_risk_score: int
    avg_risk_7d: float
    avg_risk_30d: float
    max_risk_7d: int
    total_hazard_hours_7d: float
    total_hazard_hours_30d: float
    avg_ppe_7d: float
    incidents_last_90d: int
    days_since_last_incident: int
    day_of_week: int
    month: int

    def to_payload(self) -> Dict[str, float]:
        return asdict(self)


FEATURE_NAMES = tuple(f.name for f in fields(FeatureVector))


def _js_weekday(day) -> int:
    # Sunday = 0 ... Saturday = 6
    return (day.weekday() + 1) % 7


def build_feature_vector(
    submission: DailySubmission,
    profile: WorkerProfile,
    history: Iterable[DailySubmission],
    baseline_score: int,
) -> FeatureVector:
    """
    Combine today's form, the worker profile and prior history.

    Windows are measured from the submission's own date, and any stored
    submission for that same date is left out, so resubmitting a day
    produces the same vector.
    """
    prior = [s for s in history if s.date != submission.date]
    agg = HistoricalAggregator(prior, submission.date)

    return FeatureVector(
        shift_duration=round(submission.shift_duration_hours, 2),
        fatigue_level=int(submission.fatigue_level),
        ppe_compliance_rate=round(submission.ppe_compliance_rate, 2),
        total_hazard_exposure_hours=round(submission.total_hazard_exposure_hours, 2),
        age=int(profile.effective_age),
        years_experience=int(profile.effective_years_experience),
        gender_encoded=encode_gender(profile.gender),
        # the day being scored always counts as worked
        consecutive_days_worked=1 + agg.consecutive_days_worked(start_offset=1),
        daily_risk_score=int(baseline_score),
        avg_risk_7d=round(agg.avg_risk(7, fallback=baseline_score), 2),
        avg_risk_30d=round(agg.avg_risk(30, fallback=baseline_score), 2),
        max_risk_7d=round_half_up(agg.max_risk(7, fallback=baseline_score)),
        total_hazard_hours_7d=round(agg.total_hazard_hours(7), 2),
        total_hazard_hours_30d=round(agg.total_hazard_hours(30), 2),
        avg_ppe_7d=round(agg.avg_ppe_compliance(7, fallback=submission.ppe_compliance_rate), 2),
        incidents_last_90d=agg.incident_count(90),
        days_since_last_incident=agg.days_since_last_incident(),
        day_of_week=_js_weekday(submission.date),
        month=submission.date.month,
    )
