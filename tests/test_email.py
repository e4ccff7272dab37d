import smtplib

import pytest

from helpers import email


SMTP_ENV = {
    "SMTP_FROM_USER": "CareNest",
    "SMTP_SERVER": "smtp.example.com",
    "SMTP_PORT": "465",
    "SMTP_FROM_ADDRESS": "noreply@example.com",
    "SMTP_PASSWORD": "pw",
}


class FakeSMTP:
    sent = []

    def __init__(self, server, port):
        self.server = server
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def login(self, user, password):
        pass

    def send_message(self, message):
        FakeSMTP.sent.append(message)


@pytest.fixture
def smtp_env(monkeypatch):
    for key, value in SMTP_ENV.items():
        monkeypatch.setenv(key, value)
    FakeSMTP.sent = []
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)


def test_unconfigured_smtp_skips_sending():
    assert email.smtp_configured() is False
    assert email.send_otp_email("alice@x.com", "123456") is True
    assert email.send_password_reset_email("alice@x.com", "http://x/reset-password/t") is True


def test_otp_mail_is_sent(smtp_env):
    assert email.send_otp_email("alice@x.com", "123456") is True

    message = FakeSMTP.sent[0]
    assert message["To"] == "alice@x.com"
    assert message["Subject"] == "CareNest - Email Verification OTP"
    assert "123456" in message.get_payload()[0].get_payload()


def test_smtp_failure_reports_false(smtp_env, monkeypatch):
    def refuse(server, port):
        raise smtplib.SMTPConnectError(421, "busy")

    monkeypatch.setattr(smtplib, "SMTP_SSL", refuse)

    assert email.send_password_reset_email("alice@x.com", "http://x/reset-password/t") is False


async def test_delivery_runs_off_the_event_loop(smtp_env):
    assert await email.deliver_otp("alice@x.com", "654321") is True
    assert FakeSMTP.sent
