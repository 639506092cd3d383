"""
Identity helpers.

Sign-in happens at the upstream identity provider; requests arrive with the
provider's subject id in the IDENTITY_HEADER header.
"""

from __future__ import annotations

from typing import Optional

from flask import current_app, jsonify, request

from safetyfirst.models import User

ADMIN_ROLES = {"admin", "manager"}


def identity() -> Optional[str]:
    value = request.headers.get(current_app.config["IDENTITY_HEADER"], "").strip()
    return value or None


def current_user() -> Optional[User]:
    subject = identity()
    if not subject:
        return None
    return User.query.filter_by(external_id=subject).first()


def ensure_admin() -> Optional[User]:
    user = current_user()
    if user is None or user.role not in ADMIN_ROLES:
        return None
    return user


def ensure_worker() -> Optional[User]:
    return current_user()


def unauthorized():
    return jsonify({"error": "unauthorized"}), 401
