"""Notification decisions and email delivery for workers."""

from __future__ import annotations

import datetime as dt
import logging
import os
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Dict, Iterable, List, Optional

from safetyfirst.scoring import CRITICAL, HIGH

logger = logging.getLogger(__name__)

NO_FORM = "no_form"
HIGH_RISK = "high_risk"
NOTIFICATION_TYPES = (NO_FORM, HIGH_RISK)

SUBJECTS = {
    NO_FORM: "SafetyFirst: Complete your daily form before starting your shift",
    HIGH_RISK: "SafetyFirst: Do not report to work - elevated risk assessment",
}

BODIES = {
    NO_FORM: (
        "Hello {name},\n\n"
        "You have not completed your daily safety form for today. Per company policy, "
        "you must not start your shift until the form is submitted.\n\n"
        "Please log in to SafetyFirst and complete your daily safety assessment before beginning work.\n\n"
        "If you have already submitted the form, please disregard this message.\n\n"
        "SafetyFirst Admin"
    ),
    HIGH_RISK: (
        "Hello {name},\n\n"
        "Based on our latest risk assessment, your current risk level is elevated. "
        "For your safety and the safety of others, please do not report to work today.\n\n"
        "A safety coordinator or supervisor will follow up with you. If you believe this is an "
        "error or have questions, please contact your manager or the safety team.\n\n"
        "SafetyFirst Admin"
    ),
}


class NotificationError(Exception):
    pass


def recommend_notification(risk_level: str, submitted_today: bool) -> Optional[str]:
    """Which email, if any, a worker should get given today's state."""
    if not submitted_today:
        return NO_FORM
    if risk_level in (HIGH, CRITICAL):
        return HIGH_RISK
    return None


@dataclass
class Recipient:
    email: str
    name: Optional[str] = None


@dataclass
class MailSettings:
    host: str
    port: int
    user: str = ""
    password: str = ""
    sender: str = "noreply@safetyfirst.local"
    timeout: int = 12
    outbox_dir: str = ""

    @classmethod
    def from_config(cls, cfg) -> "MailSettings":
        return cls(
            host=cfg["SMTP_HOST"],
            port=int(cfg["SMTP_PORT"]),
            user=cfg.get("SMTP_USER", ""),
            password=cfg.get("SMTP_PASSWORD", ""),
            sender=cfg.get("MAIL_FROM") or "noreply@safetyfirst.local",
            timeout=int(cfg.get("SMTP_TIMEOUT", 12)),
            outbox_dir=cfg.get("DEV_MAIL_DIR", ""),
        )


def compose(kind: str, recipient: Recipient, sender: str) -> EmailMessage:
    if kind not in NOTIFICATION_TYPES:
        raise ValueError(f"unknown notification type: {kind}")
    msg = EmailMessage()
    msg["From"] = f"SafetyFirst <{sender}>"
    msg["To"] = recipient.email
    msg["Subject"] = SUBJECTS[kind]
    msg.set_content(BODIES[kind].format(name=recipient.name or "Worker"))
    return msg


def _connect(settings: MailSettings) -> smtplib.SMTP:
    if not (settings.host and settings.user and settings.password):
        raise NotificationError("SMTP is not configured: set SMTP_HOST, SMTP_USER and SMTP_PASSWORD")
    context = ssl.create_default_context()
    if settings.port == 465:
        server = smtplib.SMTP_SSL(settings.host, settings.port, timeout=settings.timeout, context=context)
    else:
        server = smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout)
        server.starttls(context=context)
    server.login(settings.user, settings.password)
    return server


def _write_outbox(settings: MailSettings, msg: EmailMessage) -> None:
    os.makedirs(settings.outbox_dir, exist_ok=True)
    stamp = dt.datetime.utcnow().strftime("%Y%m%d-%H%M%S-%f")
    path = os.path.join(settings.outbox_dir, f"{stamp}-{msg['To']}.eml")
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(msg.as_string())


def unique_recipients(recipients: Iterable[Recipient]) -> List[Recipient]:
    seen = set()
    result = []
    for r in recipients:
        if not r.email or r.email in seen:
            continue
        seen.add(r.email)
        result.append(r)
    return result


def send_bulk(recipients: Iterable[Recipient], kind: str, settings: MailSettings) -> Dict:
    """Send one email per unique address; failures are collected, not raised."""
    targets = unique_recipients(recipients)
    sent = 0
    errors: List[str] = []
    if not targets:
        return {"sent": 0, "failed": 0, "errors": [], "total": 0}

    server = None
    try:
        if not settings.outbox_dir:
            server = _connect(settings)
        for recipient in targets:
            msg = compose(kind, recipient, settings.sender)
            try:
                if server is None:
                    _write_outbox(settings, msg)
                else:
                    server.send_message(msg)
                sent += 1
            except (smtplib.SMTPException, OSError) as exc:
                logger.error("Failed to send %s email to %s: %s", kind, recipient.email, exc)
                errors.append(f"{recipient.email}: {exc}")
    except (NotificationError, smtplib.SMTPException, OSError) as exc:
        logger.error("Could not open mail transport: %s", exc)
        errors.extend(f"{r.email}: {exc}" for r in targets[sent + len(errors):])
    finally:
        if server is not None:
            try:
                server.quit()
            except smtplib.SMTPException:
                logger.warning("SMTP quit failed", exc_info=True)

    logger.info("Notification %s: sent=%s failed=%s", kind, sent, len(targets) - sent)
    return {"sent": sent, "failed": len(targets) - sent, "errors": errors, "total": len(targets)}
