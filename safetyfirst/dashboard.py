"""
Cohort and per-worker dashboard aggregation.

All functions take an already-fetched snapshot of submissions plus the
reference day, and return JSON-ready dicts.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from safetyfirst.history import HistoricalAggregator
from safetyfirst.notifications import recommend_notification
from safetyfirst.scoring import RISK_LEVELS, classify_risk, gauge_level, round_half_up
from safetyfirst.submissions import DailySubmission, WorkerProfile

WEEK_DAYS = 7
MONTH_DAYS = 30
INCIDENT_DAYS = 90
TREND_POINTS = 7
FATIGUE_LEVELS = range(1, 11)

# Policy for the "high risk workers" count; independent of the level thresholds
HIGH_RISK_AVERAGE = 50

ELEVATED_AVERAGE = 40
CRITICAL_AVERAGE = 60
HIGH_FATIGUE = 7
MAX_INCIDENT_ALERTS = 3
RECENT_FORMS = 10

_COLUMNS = ["user_id", "date", "days_ago", "risk_score", "ppe_compliance_rate", "fatigue_level", "incident_reported", "hazards"]


@dataclass
class WorkerHistory:
    profile: WorkerProfile
    submissions: List[DailySubmission] = field(default_factory=list)


def _mean_or_none(values) -> Optional[float]:
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)


def _rounded(value: Optional[float], scale: int = 1) -> Optional[int]:
    if value is None:
        return None
    return round_half_up(value * scale)


def _frame(histories: List[WorkerHistory], today: dt.date) -> pd.DataFrame:
    rows = [
        {
            "user_id": h.profile.user_id,
            "date": s.date,
            "days_ago": (today - s.date).days,
            "risk_score": s.risk_score,
            "ppe_compliance_rate": s.ppe_compliance_rate,
            "fatigue_level": s.fatigue_level,
            "incident_reported": s.incident_reported,
            "hazards": sorted(s.hazard_exposure_hours),
        }
        for h in histories
        for s in h.submissions
        if s.risk_score is not None
    ]
    frame = pd.DataFrame(rows, columns=_COLUMNS).astype(
        {
            "days_ago": "int64",
            "risk_score": "float64",
            "ppe_compliance_rate": "float64",
            "fatigue_level": "int64",
            "incident_reported": "bool",
        }
    )
    return frame[(frame["days_ago"] >= 0) & (frame["days_ago"] <= MONTH_DAYS)]


def _trend_days(today: dt.date) -> List[dt.date]:
    return [today - dt.timedelta(days=offset) for offset in range(TREND_POINTS - 1, -1, -1)]


def _label(day: dt.date) -> str:
    return f"{day:%a}, {day:%b} {day.day}"


def daily_risk_trend(frame: pd.DataFrame, today: dt.date) -> List[Dict]:
    """One point per calendar day for the last week, zero-filled."""
    counts = frame.groupby("date").size()
    means = frame.groupby("date")["risk_score"].mean()
    points = []
    for day in _trend_days(today):
        count = int(counts.get(day, 0))
        points.append(
            {
                "date": day.isoformat(),
                "label": _label(day),
                "avg_risk": round_half_up(float(means[day])) if count else 0,
                "form_count": count,
            }
        )
    return points


def ppe_compliance_trend(frame: pd.DataFrame, today: dt.date) -> List[Dict]:
    means = frame.groupby("date")["ppe_compliance_rate"].mean()
    points = []
    for day in _trend_days(today):
        mean = means.get(day)
        points.append(
            {
                "date": day.isoformat(),
                "label": f"{day:%a}",
                "compliance": round_half_up(float(mean) * 100) if mean is not None else 0,
            }
        )
    return points


def risk_distribution(frame: pd.DataFrame) -> Dict[str, int]:
    counts = frame["risk_score"].map(classify_risk).value_counts()
    return {level: int(counts.get(level, 0)) for level in RISK_LEVELS}


def hazard_frequency(frame: pd.DataFrame) -> List[Dict]:
    """Number of submissions mentioning each category (not hours)."""
    counts = frame["hazards"].explode().dropna().value_counts()
    items = [{"name": name, "count": int(count)} for name, count in counts.items()]
    return sorted(items, key=lambda item: (-item["count"], item["name"]))


def fatigue_distribution(week: pd.DataFrame) -> List[Dict]:
    counts = week["fatigue_level"].value_counts()
    return [{"level": level, "count": int(counts.get(level, 0))} for level in FATIGUE_LEVELS]


def _form_row(submission: DailySubmission) -> Dict:
    return {
        "date": submission.date.isoformat(),
        "risk_score": submission.risk_score,
        "risk_level": classify_risk(submission.risk_score) if submission.risk_score is not None else None,
        "fatigue_level": submission.fatigue_level,
        "ppe_compliance_rate": submission.ppe_compliance_rate,
        "total_hazard_exposure_hours": submission.total_hazard_exposure_hours,
        "symptoms": sorted(submission.symptoms),
        "incident_reported": submission.incident_reported,
    }


def worker_summary(history: WorkerHistory, today: dt.date) -> Dict:
    agg = HistoricalAggregator(history.submissions, today)
    week = agg.windowed(WEEK_DAYS)
    month = agg.windowed(MONTH_DAYS)
    latest = month[0] if month else None
    latest_score = latest.risk_score if latest and latest.risk_score is not None else 0
    submitted_today = latest is not None and latest.date == today
    level = classify_risk(latest_score)
    avg_risk = _mean_or_none(s.risk_score for s in week if s.risk_score is not None)
    avg_ppe = _mean_or_none(s.ppe_compliance_rate for s in week)
    profile = history.profile
    return {
        "id": profile.user_id,
        "name": profile.name or "Unknown",
        "email": profile.email,
        "age": profile.age,
        "gender": profile.gender,
        "years_experience": profile.years_experience,
        "job_title": profile.job_title,
        "department": profile.department,
        "forms_this_week": len(week),
        "avg_risk_7d": _rounded(avg_risk),
        "latest_risk_score": latest_score,
        "risk_level": level,
        "avg_ppe_compliance": _rounded(avg_ppe, 100),
        "has_submitted_today": submitted_today,
        "total_forms": len(month),
        "incidents_reported": sum(1 for s in month if s.incident_reported),
        "high_risk": avg_risk is not None and avg_risk > HIGH_RISK_AVERAGE,
        "recommended_notification": recommend_notification(level, submitted_today),
        "form_submissions": [_form_row(s) for s in month[:RECENT_FORMS]],
    }


def empty_team_dashboard() -> Dict:
    return {
        "team_id": None,
        "metrics": {
            "total_users": 0,
            "active_users": 0,
            "total_forms_today": 0,
            "total_forms_this_week": 0,
            "avg_risk_today": 0,
            "avg_risk_week": 0,
            "high_risk_users": 0,
            "incidents_this_month": 0,
            "compliance_rate": 0,
        },
        "users": [],
        "charts": {
            "daily_risk_trend": [],
            "risk_distribution": {level: 0 for level in RISK_LEVELS},
            "hazard_data": [],
            "ppe_compliance_trend": [],
            "fatigue_distribution": [],
        },
    }


def build_team_dashboard(histories: List[WorkerHistory], today: dt.date, team_id=None) -> Dict:
    frame = _frame(histories, today)
    week = frame[frame["days_ago"] <= WEEK_DAYS]
    today_forms = frame[frame["days_ago"] == 0]

    users = [worker_summary(h, today) for h in histories]
    users.sort(key=lambda u: u["latest_risk_score"], reverse=True)

    def avg_score(part: pd.DataFrame) -> int:
        return round_half_up(float(part["risk_score"].mean())) if len(part) else 0

    return {
        "team_id": team_id,
        "metrics": {
            "total_users": len(histories),
            "active_users": sum(1 for u in users if u["forms_this_week"] > 0),
            "total_forms_today": int(len(today_forms)),
            "total_forms_this_week": int(len(week)),
            "avg_risk_today": avg_score(today_forms),
            "avg_risk_week": avg_score(week),
            "high_risk_users": sum(1 for u in users if u["high_risk"]),
            "incidents_this_month": int(frame["incident_reported"].astype(bool).sum()),
            "compliance_rate": round_half_up(float(week["ppe_compliance_rate"].mean()) * 100) if len(week) else 0,
        },
        "users": users,
        "charts": {
            "daily_risk_trend": daily_risk_trend(frame, today),
            "risk_distribution": risk_distribution(frame),
            "hazard_data": hazard_frequency(frame),
            "ppe_compliance_trend": ppe_compliance_trend(frame, today),
            "fatigue_distribution": fatigue_distribution(week),
        },
    }


def _timestamp(submission: DailySubmission) -> str:
    if submission.submitted_at is not None:
        return submission.submitted_at.isoformat()
    return submission.date.isoformat()


def worker_alerts(agg: HistoricalAggregator, avg_risk_7d: Optional[float], now: dt.datetime) -> List[Dict]:
    alerts = []
    incidents = [s for s in agg.windowed(INCIDENT_DAYS) if s.incident_reported]
    for submission in incidents[:MAX_INCIDENT_ALERTS]:
        alerts.append(
            {
                "id": f"incident-{submission.date.isoformat()}",
                "title": "Incident Reported",
                "message": submission.incident_description or "An incident was reported on this day.",
                "severity": "high",
                "is_read": False,
                "created_at": _timestamp(submission),
            }
        )

    if avg_risk_7d is not None and avg_risk_7d > ELEVATED_AVERAGE:
        alerts.append(
            {
                "id": "elevated-risk",
                "title": "Elevated Risk Level",
                "message": (
                    f"Your average risk score over the past 7 days is {round_half_up(avg_risk_7d)}. "
                    "Consider reviewing your safety practices."
                ),
                "severity": "critical" if avg_risk_7d > CRITICAL_AVERAGE else "medium",
                "is_read": False,
                "created_at": now.isoformat(),
            }
        )

    tired_days = [s for s in agg.windowed(WEEK_DAYS) if s.fatigue_level >= HIGH_FATIGUE]
    if tired_days:
        alerts.append(
            {
                "id": "high-fatigue",
                "title": "High Fatigue Detected",
                "message": (
                    f"You reported high fatigue levels on {len(tired_days)} day(s) this week. "
                    "Please ensure adequate rest."
                ),
                "severity": "medium",
                "is_read": False,
                "created_at": now.isoformat(),
            }
        )
    return alerts


def build_worker_dashboard(submissions: List[DailySubmission], now: dt.datetime) -> Dict:
    """A worker's own view: latest score, streaks, weekly stats and alerts."""
    agg = HistoricalAggregator(submissions, now)
    today = agg.today
    week = agg.windowed(WEEK_DAYS)
    visible = agg.windowed(INCIDENT_DAYS)
    latest = visible[0] if visible else None
    latest_score = latest.risk_score if latest and latest.risk_score is not None else 0
    avg_risk_7d = _mean_or_none(s.risk_score for s in week if s.risk_score is not None)

    return {
        "latest_risk": {
            "total_score": latest_score,
            "risk_level": classify_risk(latest_score),
            "gauge_level": gauge_level(latest_score),
            "date": latest.date.isoformat() if latest else today.isoformat(),
        },
        "recent_forms": [
            {"date": s.date.isoformat(), "submitted_at": _timestamp(s), "risk_score": s.risk_score}
            for s in week[:WEEK_DAYS]
        ],
        "alerts": worker_alerts(agg, avg_risk_7d, now),
        "today_form_submitted": any(s.date == today for s in week),
        "consecutive_safe_days": agg.consecutive_safe_days(),
        "stats": {
            "forms_this_week": len(week),
            "avg_risk_7d": _rounded(avg_risk_7d) or 0,
            "incidents_last_90d": agg.incident_count(INCIDENT_DAYS),
        },
    }
