from __future__ import annotations

from dataclasses import dataclass
from email.message import EmailMessage
import logging
import smtplib
import ssl
import time

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    pass


@dataclass(frozen=True)
class _SmtpEndpoint:
    host: str
    port: int
    username: str | None
    password: str
    from_email: str
    from_name: str | None
    use_tls: bool
    use_ssl: bool


def _build_from_header(from_email: str, from_name: str | None) -> str:
    if from_name:
        return f"{from_name} <{from_email}>"
    return from_email


def _resolve_smtp_password(host: str | None, raw_password: str | None) -> str:
    password = raw_password or ""
    if host and host.lower() == "smtp.gmail.com":
        # Gmail app-passwords are often copied with spaces.
        return "".join(password.split())
    return password


def _build_endpoint(settings) -> _SmtpEndpoint:
    if not settings.smtp_host or not settings.smtp_from_email:
        raise EmailDeliveryError("SMTP is not configured")
    return _SmtpEndpoint(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=_resolve_smtp_password(settings.smtp_host, settings.smtp_password),
        from_email=settings.smtp_from_email,
        from_name=settings.smtp_from_name,
        use_tls=settings.smtp_use_tls,
        use_ssl=settings.smtp_use_ssl,
    )


def _build_message(
    *,
    endpoint: _SmtpEndpoint,
    to_email: str,
    subject: str,
    text_content: str,
    html_content: str | None,
) -> EmailMessage:
    message = EmailMessage()
    message["From"] = _build_from_header(endpoint.from_email, endpoint.from_name)
    message["To"] = to_email
    message["Subject"] = subject
    message.set_content(text_content)
    if html_content:
        message.add_alternative(html_content, subtype="html")
    return message


def _deliver(endpoint: _SmtpEndpoint, message: EmailMessage, timeout: int) -> None:
    if endpoint.use_ssl:
        with smtplib.SMTP_SSL(endpoint.host, endpoint.port, timeout=timeout) as smtp:
            if endpoint.username:
                smtp.login(endpoint.username, endpoint.password)
            smtp.send_message(message)
        return

    with smtplib.SMTP(endpoint.host, endpoint.port, timeout=timeout) as smtp:
        if endpoint.use_tls:
            smtp.starttls(context=ssl.create_default_context())
        if endpoint.username:
            smtp.login(endpoint.username, endpoint.password)
        smtp.send_message(message)


def _is_connection_issue(exc: Exception) -> bool:
    return isinstance(
        exc,
        (
            smtplib.SMTPConnectError,
            smtplib.SMTPServerDisconnected,
            smtplib.SMTPHeloError,
            OSError,
            TimeoutError,
        ),
    )


def send_email(*, to_email: str, subject: str, text_content: str, html_content: str | None = None) -> None:
    settings = get_settings()
    endpoint = _build_endpoint(settings)
    timeout = max(1, settings.smtp_timeout_seconds)
    retry_attempts = max(1, settings.smtp_retry_attempts)
    retry_backoff_seconds = max(0.0, settings.smtp_retry_backoff_seconds)
    message = _build_message(
        endpoint=endpoint,
        to_email=to_email,
        subject=subject,
        text_content=text_content,
        html_content=html_content,
    )

    last_error: Exception | None = None
    last_error_message = "Unable to deliver email"
    for attempt in range(1, retry_attempts + 1):
        try:
            _deliver(endpoint, message, timeout)
            return
        except smtplib.SMTPAuthenticationError as exc:
            last_error, last_error_message = exc, "SMTP authentication failed"
            break
        except smtplib.SMTPRecipientsRefused as exc:
            last_error, last_error_message = exc, "SMTP recipient rejected"
            break
        except smtplib.SMTPSenderRefused as exc:
            last_error, last_error_message = exc, "SMTP sender rejected"
            break
        except smtplib.SMTPDataError as exc:
            last_error, last_error_message = exc, "SMTP data rejected"
            break
        except Exception as exc:
            last_error = exc
            if not _is_connection_issue(exc):
                last_error_message = "Unable to deliver email"
                break
            last_error_message = "SMTP connection failed"
            logger.warning("SMTP attempt %s/%s to %s failed: %s", attempt, retry_attempts, endpoint.host, exc)
            if attempt < retry_attempts and retry_backoff_seconds > 0:
                time.sleep(retry_backoff_seconds * attempt)

    raise EmailDeliveryError(last_error_message) from last_error


def send_login_otp_email(*, to_email: str, otp_code: str, user_name: str | None, expires_minutes: int) -> None:
    greeting = f"Hello {user_name}," if user_name else "Hello,"
    text_content = (
        f"{greeting}\n\n"
        f"Your verification code is: {otp_code}\n"
        f"This code will expire in {expires_minutes} minutes.\n\n"
        "Do not share this code with anyone. If you did not request it, ignore this message."
    )
    html_content = (
        f"<p>{greeting}</p>"
        "<p>Use the following code to finish signing in:</p>"
        f"<p style=\"font-size:32px;font-family:monospace;letter-spacing:6px\"><strong>{otp_code}</strong></p>"
        f"<p>This code will expire in <strong>{expires_minutes} minutes</strong>.</p>"
        "<p>If you did not request this code, ignore this message.</p>"
    )
    send_email(
        to_email=to_email,
        subject="Your verification code",
        text_content=text_content,
        html_content=html_content,
    )


def send_password_reset_email(*, to_email: str, reset_code: str, user_name: str | None, expires_minutes: int) -> None:
    greeting = f"Hello {user_name}," if user_name else "Hello,"
    text_content = (
        f"{greeting}\n\n"
        "We received a request to reset your password.\n"
        f"Your recovery code is: {reset_code}\n"
        f"This code will expire in {expires_minutes} minutes.\n\n"
        "If you did not request a reset, ignore this message. "
        "Your current password stays valid until you change it."
    )
    html_content = (
        f"<p>{greeting}</p>"
        "<p>We received a request to reset your password. Your recovery code is:</p>"
        f"<p style=\"font-size:32px;font-family:monospace;letter-spacing:6px\"><strong>{reset_code}</strong></p>"
        f"<p>This code will expire in <strong>{expires_minutes} minutes</strong>.</p>"
    )
    send_email(
        to_email=to_email,
        subject="Password reset",
        text_content=text_content,
        html_content=html_content,
    )
