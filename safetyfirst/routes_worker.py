"""Worker-facing endpoints: daily form submission, history, dashboard."""

from __future__ import annotations

import datetime as dt
import logging

from flask import Blueprint, current_app, jsonify, request

from safetyfirst.auth import ensure_worker, unauthorized
from safetyfirst.dashboard import build_worker_dashboard
from safetyfirst.ml_client import MLScorerClient
from safetyfirst.pipeline import ScoringPipeline
from safetyfirst.repository import forms_for_user, history_for_user, upsert_daily_form
from safetyfirst.submissions import SubmissionError, WorkerProfile, parse_submission

worker_bp = Blueprint("worker", __name__)
logger = logging.getLogger(__name__)


def _pipeline() -> ScoringPipeline:
    cfg = current_app.config
    client = MLScorerClient(
        cfg.get("ML_SCORER_URL", ""),
        cfg.get("ML_SCORER_TIMEOUT", 8.0),
        session=current_app.extensions["ml_scorer_session"],
    )
    return ScoringPipeline(client)


def form_payload(form) -> dict:
    return {
        "id": form.id,
        "date": form.date.isoformat(),
        "shift_duration": form.shift_duration,
        "fatigue_level": form.fatigue_level,
        "ppe_items_required": form.ppe_items_required,
        "ppe_items_used": form.ppe_items_used,
        "ppe_compliance_rate": form.ppe_compliance_rate,
        "ppe_details": form.ppe_details or [],
        "hazard_exposures": form.hazard_exposures or {},
        "total_hazard_exposure_hours": form.total_hazard_exposure_hours,
        "symptoms": form.symptoms or [],
        "incident_reported": form.incident_reported,
        "incident_description": form.incident_description,
        "notes": form.notes,
        "rule_based_score": form.rule_based_score,
        "risk_score": form.risk_score,
        "score_source": form.score_source,
        "submitted_at": form.submitted_at.isoformat() if form.submitted_at else None,
    }


@worker_bp.route("/forms", methods=["POST"])
def submit_form():
    user = ensure_worker()
    if user is None:
        return unauthorized()
    payload = request.get_json(force=True, silent=True)
    try:
        submission = parse_submission(payload)
    except SubmissionError as exc:
        return jsonify({"error": str(exc)}), 400

    since = submission.date - dt.timedelta(days=current_app.config["HISTORY_LOOKBACK_DAYS"])
    history = history_for_user(user.id, since)
    outcome = _pipeline().score(submission, WorkerProfile.from_record(user), history)
    form = upsert_daily_form(user.id, submission, outcome)

    response = outcome.as_dict()
    response["form"] = form_payload(form)
    return jsonify(response)


@worker_bp.route("/forms", methods=["GET"])
def list_forms():
    user = ensure_worker()
    if user is None:
        return unauthorized()
    try:
        days = int(request.args.get("days", 90))
    except ValueError:
        return jsonify({"error": "days must be an integer"}), 400
    since = dt.date.today() - dt.timedelta(days=days)
    return jsonify({"forms": [form_payload(f) for f in forms_for_user(user.id, since)]})


@worker_bp.route("/dashboard", methods=["GET"])
def dashboard():
    user = ensure_worker()
    if user is None:
        return unauthorized()
    now = dt.datetime.now()
    since = now.date() - dt.timedelta(days=current_app.config["HISTORY_LOOKBACK_DAYS"])
    return jsonify(build_worker_dashboard(history_for_user(user.id, since), now))
