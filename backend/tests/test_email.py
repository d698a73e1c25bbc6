from __future__ import annotations

import smtplib
from types import SimpleNamespace

import pytest

from app.services import email as email_service
from app.services.email import EmailDeliveryError


def _settings(**overrides):
    defaults = dict(
        smtp_host="smtp.primary.test",
        smtp_port=587,
        smtp_username="primary-user",
        smtp_password="primary-pass",
        smtp_from_email="no-reply@example.com",
        smtp_from_name="Sistema Verano",
        smtp_use_tls=True,
        smtp_use_ssl=False,
        smtp_retry_attempts=2,
        smtp_retry_backoff_seconds=0.0,
        smtp_timeout_seconds=5,
    )
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _fake_smtp(on_send=None, on_login=None):
    class FakeSMTP:
        instances: list["FakeSMTP"] = []

        def __init__(self, host, port, timeout=None):
            self.host = host
            self.port = port
            self.logins: list[tuple[str, str]] = []
            self.sent: list = []
            self.tls = False
            FakeSMTP.instances.append(self)

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def starttls(self, context=None):
            self.tls = True

        def login(self, username, password):
            self.logins.append((username, password))
            if on_login is not None:
                on_login()

        def send_message(self, message):
            if on_send is not None:
                on_send(len(FakeSMTP.instances))
            self.sent.append(message)
            return {}

    return FakeSMTP


def test_send_email_delivers_over_starttls(monkeypatch):
    monkeypatch.setattr(email_service, "get_settings", lambda: _settings())
    fake = _fake_smtp()
    monkeypatch.setattr(email_service.smtplib, "SMTP", fake)

    email_service.send_email(to_email="rider@example.com", subject="Hi", text_content="body", html_content="<p>body</p>")

    [connection] = fake.instances
    assert connection.host == "smtp.primary.test"
    assert connection.tls is True
    assert connection.logins == [("primary-user", "primary-pass")]
    message = connection.sent[0]
    assert message["From"] == "Sistema Verano <no-reply@example.com>"
    assert message["To"] == "rider@example.com"
    assert message.is_multipart()


def test_send_email_uses_ssl_transport_when_enabled(monkeypatch):
    monkeypatch.setattr(email_service, "get_settings", lambda: _settings(smtp_use_ssl=True, smtp_port=465))
    ssl_fake = _fake_smtp()
    monkeypatch.setattr(email_service.smtplib, "SMTP_SSL", ssl_fake)
    monkeypatch.setattr(email_service.smtplib, "SMTP", _fake_smtp(on_send=lambda _: pytest.fail("plain SMTP used")))

    email_service.send_email(to_email="rider@example.com", subject="Hi", text_content="body")

    assert ssl_fake.instances[0].port == 465


def test_send_email_retries_connection_drop_and_succeeds(monkeypatch):
    monkeypatch.setattr(email_service, "get_settings", lambda: _settings(smtp_retry_attempts=2))

    def drop_first(attempt):
        if attempt == 1:
            raise smtplib.SMTPServerDisconnected("network drop")

    fake = _fake_smtp(on_send=drop_first)
    monkeypatch.setattr(email_service.smtplib, "SMTP", fake)

    email_service.send_email(to_email="rider@example.com", subject="Code", text_content="hello")

    assert len(fake.instances) == 2


def test_send_email_gives_up_after_retry_budget(monkeypatch):
    monkeypatch.setattr(email_service, "get_settings", lambda: _settings(smtp_retry_attempts=3))

    def always_drop(attempt):
        raise smtplib.SMTPServerDisconnected("network drop")

    fake = _fake_smtp(on_send=always_drop)
    monkeypatch.setattr(email_service.smtplib, "SMTP", fake)

    with pytest.raises(EmailDeliveryError, match="SMTP connection failed"):
        email_service.send_email(to_email="rider@example.com", subject="Code", text_content="hello")
    assert len(fake.instances) == 3


def test_send_email_does_not_retry_authentication_failure(monkeypatch):
    monkeypatch.setattr(email_service, "get_settings", lambda: _settings(smtp_retry_attempts=3))

    def reject_login():
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    fake = _fake_smtp(on_login=reject_login)
    monkeypatch.setattr(email_service.smtplib, "SMTP", fake)

    with pytest.raises(EmailDeliveryError, match="SMTP authentication failed"):
        email_service.send_email(to_email="rider@example.com", subject="Code", text_content="hello")
    assert len(fake.instances) == 1


def test_send_email_requires_configuration(monkeypatch):
    monkeypatch.setattr(email_service, "get_settings", lambda: _settings(smtp_host=None))

    with pytest.raises(EmailDeliveryError, match="SMTP is not configured"):
        email_service.send_email(to_email="rider@example.com", subject="Code", text_content="hello")


def test_gmail_app_password_whitespace_is_stripped(monkeypatch):
    settings = _settings(smtp_host="smtp.gmail.com", smtp_password="abcd efgh ijkl mnop")
    monkeypatch.setattr(email_service, "get_settings", lambda: settings)
    fake = _fake_smtp()
    monkeypatch.setattr(email_service.smtplib, "SMTP", fake)

    email_service.send_email(to_email="rider@example.com", subject="Code", text_content="hello")

    assert fake.instances[0].logins == [("primary-user", "abcdefghijklmnop")]


def test_login_otp_email_carries_code_and_expiry(monkeypatch):
    captured: dict = {}

    def fake_send_email(**kwargs):
        captured.update(kwargs)

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    email_service.send_login_otp_email(to_email="rider@example.com", otp_code="042137", user_name="Rider", expires_minutes=5)

    assert captured["to_email"] == "rider@example.com"
    assert "042137" in captured["text_content"]
    assert "5 minutes" in captured["text_content"]
    assert captured["text_content"].startswith("Hello Rider,")
    assert "042137" in captured["html_content"]


def test_password_reset_email_carries_code(monkeypatch):
    captured: dict = {}
    monkeypatch.setattr(email_service, "send_email", lambda **kwargs: captured.update(kwargs))

    email_service.send_password_reset_email(
        to_email="rider@example.com", reset_code="908172", user_name=None, expires_minutes=15
    )

    assert captured["subject"] == "Password reset"
    assert "908172" in captured["text_content"]
    assert captured["text_content"].startswith("Hello,")
