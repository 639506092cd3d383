"""Admin-facing endpoints for team dashboards, team management, notifications and reports."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path

import pandas as pd
from flask import Blueprint, current_app, jsonify, request

from safetyfirst.auth import ensure_admin, unauthorized
from safetyfirst.chat_context import build_worker_context
from safetyfirst.dashboard import MONTH_DAYS, WorkerHistory, build_team_dashboard, empty_team_dashboard
from safetyfirst.db import db
from safetyfirst.models import DailyForm, Team, TeamMember, User
from safetyfirst.notifications import NOTIFICATION_TYPES, MailSettings, Recipient, send_bulk
from safetyfirst.repository import forms_for_user, histories_for_users, history_for_user, team_users
from safetyfirst.routes_user import user_payload
from safetyfirst.routes_worker import form_payload
from safetyfirst.scoring import classify_risk
from safetyfirst.submissions import WorkerProfile

admin_bp = Blueprint("admin", __name__)
logger = logging.getLogger(__name__)

CONTEXT_DAYS = 30
CONTEXT_MAX_FORMS = 30


def _require_admin():
    if ensure_admin() is None:
        return unauthorized()
    return None


def team_payload(team: Team) -> dict:
    return {
        "id": team.id,
        "name": team.name,
        "description": team.description,
        "member_count": len(team.members),
        "members": [{"id": m.user.id, "name": m.user.name, "email": m.user.email} for m in team.members],
        "created_at": team.created_at.isoformat() if team.created_at else None,
    }


@admin_bp.route("/dashboard", methods=["GET"])
def dashboard():
    err = _require_admin()
    if err:
        return err
    team_id = request.args.get("team_id", type=int)
    if team_id is None:
        return jsonify(empty_team_dashboard())
    if db.session.get(Team, team_id) is None:
        return jsonify({"error": "team not found"}), 404

    today = dt.date.today()
    users = team_users(team_id)
    grouped = histories_for_users([u.id for u in users], today - dt.timedelta(days=MONTH_DAYS))
    histories = [WorkerHistory(WorkerProfile.from_record(u), grouped[u.id]) for u in users]
    return jsonify(build_team_dashboard(histories, today, team_id=team_id))


@admin_bp.route("/teams", methods=["GET"])
def list_teams():
    err = _require_admin()
    if err:
        return err
    teams = Team.query.order_by(Team.name.asc()).all()
    return jsonify({"teams": [team_payload(t) for t in teams]})


@admin_bp.route("/teams", methods=["POST"])
def create_team():
    err = _require_admin()
    if err:
        return err
    data = request.get_json(force=True, silent=True) or {}
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        return jsonify({"error": "team name is required"}), 400
    description = data.get("description")
    if not isinstance(description, str) or not description.strip():
        description = None
    team = Team(name=name.strip(), description=description.strip() if description else None)
    db.session.add(team)
    db.session.commit()
    return jsonify({"team": team_payload(team)}), 201


@admin_bp.route("/teams/<int:team_id>", methods=["GET"])
def get_team(team_id):
    err = _require_admin()
    if err:
        return err
    team = db.session.get(Team, team_id)
    if team is None:
        return jsonify({"error": "team not found"}), 404
    return jsonify({"team": team_payload(team)})


@admin_bp.route("/teams/<int:team_id>", methods=["DELETE"])
def delete_team(team_id):
    err = _require_admin()
    if err:
        return err
    team = db.session.get(Team, team_id)
    if team is None:
        return jsonify({"error": "team not found"}), 404
    db.session.delete(team)
    db.session.commit()
    return jsonify({"message": "deleted"})


@admin_bp.route("/teams/<int:team_id>/members", methods=["POST"])
def add_member(team_id):
    err = _require_admin()
    if err:
        return err
    data = request.get_json(force=True, silent=True) or {}
    user_id = data.get("user_id")
    if not isinstance(user_id, int):
        return jsonify({"error": "user_id is required"}), 400
    if db.session.get(Team, team_id) is None:
        return jsonify({"error": "team not found"}), 404
    if db.session.get(User, user_id) is None:
        return jsonify({"error": "user not found"}), 404
    if not TeamMember.query.filter_by(team_id=team_id, user_id=user_id).first():
        db.session.add(TeamMember(team_id=team_id, user_id=user_id))
        db.session.commit()
    return jsonify({"success": True})


@admin_bp.route("/teams/<int:team_id>/members/<int:user_id>", methods=["DELETE"])
def remove_member(team_id, user_id):
    err = _require_admin()
    if err:
        return err
    member = TeamMember.query.filter_by(team_id=team_id, user_id=user_id).first()
    if member is None:
        return jsonify({"error": "member not found"}), 404
    db.session.delete(member)
    db.session.commit()
    return jsonify({"success": True})


@admin_bp.route("/user/<int:user_id>", methods=["GET"])
def user_detail(user_id):
    err = _require_admin()
    if err:
        return err
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"error": "user not found"}), 404
    forms = forms_for_user(user.id, dt.date.today() - dt.timedelta(days=MONTH_DAYS))
    latest = forms[0].risk_score if forms else 0
    return jsonify(
        {
            "user": user_payload(user),
            "latest_risk_score": latest,
            "risk_level": classify_risk(latest),
            "forms": [form_payload(f) for f in forms],
        }
    )


@admin_bp.route("/user/<int:user_id>/context", methods=["GET"])
def user_context(user_id):
    """Text context for the assistant; the model call itself lives elsewhere."""
    err = _require_admin()
    if err:
        return err
    user = db.session.get(User, user_id)
    if user is None:
        return jsonify({"error": "user not found"}), 404
    history = history_for_user(user.id, dt.date.today() - dt.timedelta(days=CONTEXT_DAYS))
    context = build_worker_context(WorkerProfile.from_record(user), history[:CONTEXT_MAX_FORMS])
    return jsonify({"user_id": user.id, "context": context})


@admin_bp.route("/notify", methods=["POST"])
def notify():
    err = _require_admin()
    if err:
        return err
    data = request.get_json(force=True, silent=True) or {}
    kind = data.get("type")
    user_ids = data.get("user_ids") if isinstance(data.get("user_ids"), list) else []
    if kind not in NOTIFICATION_TYPES:
        return jsonify({"error": f"invalid type, use one of {', '.join(NOTIFICATION_TYPES)}"}), 400
    if not user_ids:
        return jsonify({"error": "select at least one worker"}), 400

    users = User.query.filter(User.id.in_(user_ids)).all()
    recipients = [Recipient(email=u.email, name=u.name) for u in users if u.email]
    result = send_bulk(recipients, kind, MailSettings.from_config(current_app.config))
    if result["total"] == 0:
        result["message"] = "No valid email addresses found for the selected workers."
    elif result["failed"] == 0:
        result["message"] = f"Successfully sent {result['sent']} email(s) to selected workers."
    else:
        result["message"] = f"Sent {result['sent']} email(s). {result['failed']} failed."
    return jsonify(result)


@admin_bp.route("/report/daily", methods=["GET"])
def daily_report():
    err = _require_admin()
    if err:
        return err
    date_str = request.args.get("date")
    try:
        date = dt.date.fromisoformat(date_str) if date_str else dt.date.today()
    except ValueError:
        return jsonify({"error": "date must be YYYY-MM-DD"}), 400

    rows = (
        db.session.query(DailyForm, User)
        .join(User, User.id == DailyForm.user_id)
        .filter(DailyForm.date == date)
        .all()
    )
    if not rows:
        return jsonify({"error": "no data"}), 404

    df = pd.DataFrame(
        [
            {
                "user_id": user.id,
                "name": user.name,
                "department": user.department,
                "risk_score": form.risk_score,
                "rule_based_score": form.rule_based_score,
                "score_source": form.score_source,
                "risk_level": classify_risk(form.risk_score),
                "fatigue_level": form.fatigue_level,
                "ppe_compliance_pct": round(form.ppe_compliance_rate * 100, 2),
                "hazard_hours": round(form.total_hazard_exposure_hours, 2),
                "symptom_count": len(form.symptoms or []),
                "incident_reported": form.incident_reported,
            }
            for form, user in rows
        ]
    ).sort_values("risk_score", ascending=False)

    reports_dir = Path(current_app.config["REPORTS_DIR"])
    reports_dir.mkdir(parents=True, exist_ok=True)
    report_path = reports_dir / f"daily_report_{date}.csv"
    df.to_csv(report_path, index=False)
    logger.info("Wrote daily report %s (%s rows)", report_path, len(df))

    return jsonify(
        {
            "report": str(report_path),
            "forms": int(len(df)),
            "avg_risk": round(float(df["risk_score"].mean()), 2),
            "level_counts": {k: int(v) for k, v in df["risk_level"].value_counts().items()},
        }
    )
