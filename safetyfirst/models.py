"""SQLAlchemy models for users, teams and daily safety forms."""

from __future__ import annotations

import datetime as dt

from safetyfirst.db import db


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    external_id = db.Column(db.String, unique=True, nullable=False)  # identity provider subject
    email = db.Column(db.String, nullable=True)
    name = db.Column(db.String, nullable=True)
    role = db.Column(db.String, nullable=False, default="worker")  # admin | manager | worker
    age = db.Column(db.Integer, nullable=True)
    years_experience = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String, nullable=True)  # male | female | other
    job_title = db.Column(db.String, nullable=True)
    department = db.Column(db.String, nullable=True)
    created_at = db.Column(db.DateTime, default=dt.datetime.utcnow)


class Team(db.Model):
    __tablename__ = "teams"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String, nullable=False)
    description = db.Column(db.String, nullable=True)
    created_at = db.Column(db.DateTime, default=dt.datetime.utcnow)
    members = db.relationship("TeamMember", backref="team", cascade="all, delete-orphan")


class TeamMember(db.Model):
    __tablename__ = "team_members"
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user = db.relationship("User")

    __table_args__ = (db.UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),)


class DailyForm(db.Model):
    __tablename__ = "daily_forms"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)  # calendar day of the shift
    shift_duration = db.Column(db.Float, nullable=False)
    fatigue_level = db.Column(db.Integer, nullable=False)
    ppe_items_required = db.Column(db.Integer, nullable=False)
    ppe_items_used = db.Column(db.Integer, nullable=False)
    ppe_compliance_rate = db.Column(db.Float, nullable=False)
    ppe_details = db.Column(db.JSON, default=list)
    hazard_exposures = db.Column(db.JSON, default=dict)
    total_hazard_exposure_hours = db.Column(db.Float, nullable=False, default=0.0)
    symptoms = db.Column(db.JSON, default=list)
    incident_reported = db.Column(db.Boolean, nullable=False, default=False)
    incident_description = db.Column(db.String, nullable=True)
    notes = db.Column(db.String, nullable=True)
    rule_based_score = db.Column(db.Integer, nullable=False)
    risk_score = db.Column(db.Integer, nullable=False)
    score_source = db.Column(db.String, nullable=False, default="rule_based")  # model | rule_based
    submitted_at = db.Column(db.DateTime, default=dt.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=dt.datetime.utcnow)

    __table_args__ = (db.UniqueConstraint("user_id", "date", name="uq_daily_forms_user_date"),)
