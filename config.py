"""
Global configuration for the SafetyFirst risk-scoring service.
Every value can be overridden from the environment.
"""

import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_PATH = os.path.join(BASE_DIR, "safetyfirst.db")
SQLALCHEMY_DATABASE_URI = os.environ.get("SAFETYFIRST_DATABASE_URL", f"sqlite:///{DB_PATH}")
SQLALCHEMY_TRACK_MODIFICATIONS = False
SECRET_KEY = os.environ.get("SAFETYFIRST_SECRET", "dev-secret-change-me")

# Subject id forwarded by the upstream identity provider
IDENTITY_HEADER = os.environ.get("SAFETYFIRST_IDENTITY_HEADER", "X-Identity-Id")

# External ML scorer; empty URL means rule-based scoring only
ML_SCORER_URL = os.environ.get("ML_SCORER_URL", "")
ML_SCORER_TIMEOUT = float(os.environ.get("ML_SCORER_TIMEOUT", "8"))

# Days of history fetched when building the feature vector
HISTORY_LOOKBACK_DAYS = 90

# Outgoing mail
SMTP_HOST = os.environ.get("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
SMTP_USER = os.environ.get("SMTP_USER", "")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
MAIL_FROM = os.environ.get("MAIL_FROM", SMTP_USER or "noreply@safetyfirst.local")
SMTP_TIMEOUT = int(os.environ.get("SMTP_TIMEOUT", "12"))
DEV_MAIL_DIR = os.environ.get("DEV_MAIL_DIR", "")

REPORTS_DIR = os.environ.get("SAFETYFIRST_REPORTS_DIR", os.path.join(BASE_DIR, "reports"))
