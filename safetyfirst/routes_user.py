"""Profile endpoints and first-sight sync of identity-provider users."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from safetyfirst.auth import current_user, identity, unauthorized
from safetyfirst.db import db
from safetyfirst.features import GENDER_ENCODING
from safetyfirst.models import User

user_bp = Blueprint("user", __name__)
logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "age", "gender", "years_experience", "job_title", "department")


def user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "external_id": user.external_id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "age": user.age,
        "gender": user.gender,
        "years_experience": user.years_experience,
        "job_title": user.job_title,
        "department": user.department,
    }


def _optional_int(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@user_bp.route("/sync", methods=["POST"])
def sync():
    subject = identity()
    if not subject:
        return unauthorized()
    existing = User.query.filter_by(external_id=subject).first()
    if existing:
        return jsonify({"user": user_payload(existing), "created": False})
    data = request.get_json(force=True, silent=True) or {}
    user = User(external_id=subject, email=data.get("email") or "", name=data.get("name") or None, role="worker")
    db.session.add(user)
    db.session.commit()
    logger.info("Created local user for subject %s", subject)
    return jsonify({"user": user_payload(user), "created": True})


@user_bp.route("/profile", methods=["GET"])
def get_profile():
    user = current_user()
    if user is None:
        return unauthorized()
    return jsonify({"user": user_payload(user)})


@user_bp.route("/profile", methods=["PATCH"])
def update_profile():
    user = current_user()
    if user is None:
        return unauthorized()
    data = request.get_json(force=True, silent=True) or {}
    if "gender" in data and data["gender"] not in (None, *GENDER_ENCODING):
        return jsonify({"error": f"gender must be one of {', '.join(GENDER_ENCODING)}"}), 400
    for key in PROFILE_FIELDS:
        if key not in data:
            continue
        if key == "age":
            user.age = _optional_int(data[key])
        elif key == "years_experience":
            user.years_experience = _optional_int(data[key]) or 0
        else:
            setattr(user, key, data[key])
    db.session.commit()
    return jsonify({"user": user_payload(user)})
