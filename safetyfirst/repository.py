"""Queries and the atomic per-day upsert for daily forms."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Dict, Iterable, List

from sqlalchemy.dialects import postgresql, sqlite

from safetyfirst.db import db
from safetyfirst.models import DailyForm, TeamMember, User
from safetyfirst.pipeline import ScoringOutcome
from safetyfirst.submissions import DailySubmission

logger = logging.getLogger(__name__)

# Columns never rewritten when a worker resubmits the same day
_INSERT_ONLY = {"user_id", "date", "submitted_at"}


_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def insert_for_dialect(name: str):
    """INSERT construct supporting ON CONFLICT DO UPDATE for the named dialect."""
    try:
        return _UPSERT_INSERTS[name]
    except KeyError:
        raise NotImplementedError(f"daily form upsert is not supported on {name!r}") from None


def upsert_daily_form(user_id: int, submission: DailySubmission, outcome: ScoringOutcome) -> DailyForm:
    """
    Insert the form, or replace the stored one for the same (user, date).
    Relies on the unique constraint so concurrent double submits cannot both insert.
    """
    now = dt.datetime.utcnow()
    values = {
        "user_id": user_id,
        "date": submission.date,
        "shift_duration": submission.shift_duration_hours,
        "fatigue_level": submission.fatigue_level,
        "ppe_items_required": submission.ppe_items_required,
        "ppe_items_used": submission.ppe_items_used,
        "ppe_compliance_rate": submission.ppe_compliance_rate,
        "ppe_details": list(submission.ppe_details),
        "hazard_exposures": dict(submission.hazard_exposure_hours),
        "total_hazard_exposure_hours": submission.total_hazard_exposure_hours,
        "symptoms": sorted(submission.symptoms),
        "incident_reported": submission.incident_reported,
        "incident_description": submission.incident_description,
        "notes": submission.notes,
        "rule_based_score": outcome.rule_based_score,
        "risk_score": outcome.risk_score,
        "score_source": outcome.source,
        "submitted_at": now,
        "updated_at": now,
    }
    insert = insert_for_dialect(db.engine.dialect.name)
    stmt = insert(DailyForm).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "date"],
        set_={key: stmt.excluded[key] for key in values if key not in _INSERT_ONLY},
    )
    db.session.execute(stmt)
    db.session.commit()
    logger.info(
        "Stored form user=%s date=%s risk_score=%s source=%s",
        user_id, submission.date, outcome.risk_score, outcome.source,
    )
    return DailyForm.query.filter_by(user_id=user_id, date=submission.date).one()


def forms_for_user(user_id: int, since: dt.date) -> List[DailyForm]:
    return (
        DailyForm.query.filter(DailyForm.user_id == user_id, DailyForm.date >= since)
        .order_by(DailyForm.date.desc())
        .all()
    )


def history_for_user(user_id: int, since: dt.date) -> List[DailySubmission]:
    return [DailySubmission.from_record(f) for f in forms_for_user(user_id, since)]


def team_users(team_id: int) -> List[User]:
    return (
        User.query.join(TeamMember, TeamMember.user_id == User.id)
        .filter(TeamMember.team_id == team_id)
        .order_by(User.id)
        .all()
    )


def histories_for_users(user_ids: Iterable[int], since: dt.date) -> Dict[int, List[DailySubmission]]:
    """One query for the whole cohort, grouped per user, most recent first."""
    ids = list(user_ids)
    grouped: Dict[int, List[DailySubmission]] = {uid: [] for uid in ids}
    if not ids:
        return grouped
    forms = (
        DailyForm.query.filter(DailyForm.user_id.in_(ids), DailyForm.date >= since)
        .order_by(DailyForm.date.desc())
        .all()
    )
    for form in forms:
        grouped[form.user_id].append(DailySubmission.from_record(form))
    return grouped
