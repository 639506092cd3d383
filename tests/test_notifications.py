import smtplib

from safetyfirst.notifications import (
    HIGH_RISK,
    NO_FORM,
    MailSettings,
    Recipient,
    compose,
    recommend_notification,
    send_bulk,
)


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.sent = []
        self.logged_in = False
        self.closed = False
        FakeSMTP.instances.append(self)

    def starttls(self, context=None):
        pass

    def login(self, user, password):
        self.logged_in = True

    def send_message(self, msg):
        if msg["To"] == "bounce@example.com":
            raise smtplib.SMTPException("mailbox unavailable")
        self.sent.append(msg)

    def quit(self):
        self.closed = True


def test_recommendation():
    assert recommend_notification("low", submitted_today=False) == NO_FORM
    assert recommend_notification("critical", submitted_today=False) == NO_FORM
    assert recommend_notification("high", submitted_today=True) == HIGH_RISK
    assert recommend_notification("critical", submitted_today=True) == HIGH_RISK
    assert recommend_notification("medium", submitted_today=True) is None


def test_compose_uses_name_or_default():
    msg = compose(HIGH_RISK, Recipient("a@example.com"), "safety@example.com")
    assert msg["Subject"].startswith("SafetyFirst: Do not report to work")
    assert "Hello Worker," in msg.get_content()


def test_outbox_delivery_dedupes(tmp_path):
    settings = MailSettings(host="", port=587, outbox_dir=str(tmp_path))
    recipients = [Recipient("a@example.com", "A"), Recipient("a@example.com", "A"), Recipient("", "No mail")]
    result = send_bulk(recipients, NO_FORM, settings)
    assert result == {"sent": 1, "failed": 0, "errors": [], "total": 1}
    assert len(list(tmp_path.glob("*.eml"))) == 1


def test_smtp_failures_are_collected(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    settings = MailSettings(host="smtp.test", port=587, user="u", password="p")
    result = send_bulk(
        [Recipient("ok@example.com", "Ok"), Recipient("bounce@example.com", "Bounce")],
        HIGH_RISK,
        settings,
    )
    assert result["sent"] == 1
    assert result["failed"] == 1
    assert result["errors"][0].startswith("bounce@example.com")
    server = FakeSMTP.instances[0]
    assert server.logged_in and server.closed


def test_missing_smtp_config_fails_every_recipient():
    settings = MailSettings(host="smtp.test", port=587)
    result = send_bulk([Recipient("a@example.com"), Recipient("b@example.com")], NO_FORM, settings)
    assert result["sent"] == 0
    assert result["failed"] == 2
    assert len(result["errors"]) == 2
