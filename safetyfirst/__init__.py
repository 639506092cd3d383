"""Flask application factory for the SafetyFirst risk-scoring service."""

from __future__ import annotations

import logging

import requests
from flask import Flask

import config
from safetyfirst.db import db, init_db
from safetyfirst.routes_admin import admin_bp
from safetyfirst.routes_user import user_bp
from safetyfirst.routes_worker import worker_bp


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(config)
    if overrides:
        app.config.update(overrides)
    db.init_app(app)
    # Shared by every scoring request; MLScorerClient is rebuilt per request from config
    app.extensions["ml_scorer_session"] = requests.Session()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    with app.app_context():
        init_db()
    app.register_blueprint(worker_bp, url_prefix="/worker")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(user_bp, url_prefix="/user")

    if not app.config.get("ML_SCORER_URL"):
        logging.info("ML_SCORER_URL not set; risk scores use the rule-based scorer only")

    @app.route("/healthz")
    def healthz():
        return {"status": "ok"}

    return app
