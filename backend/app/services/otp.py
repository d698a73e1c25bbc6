"""One-time code issuance and verification.

Two stores back the codes:

* login codes live in ``login_otp_challenges``; a user has at most one
  pending challenge and issuing a new one consumes the previous one;
* password-reset codes live in ``password_reset_codes`` keyed by the
  lowercased email; a newer request overwrites the entry and resets its
  attempt budget.

Codes are stored as SHA-256 digests. Expired entries are cleaned up lazily
by the next consuming check.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import hashlib
import logging
import secrets

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import (
    OtpAttemptsExceededError,
    OtpExpiredError,
    OtpMismatchError,
    OtpStateError,
    ValidationError,
)
from app.models.login_otp import LoginOtpChallenge
from app.models.password_reset import PasswordResetCode

logger = logging.getLogger(__name__)

CODE_DIGITS = 6


@dataclass(frozen=True)
class IssuedCode:
    code: str
    expires_at: datetime


@dataclass(frozen=True)
class ResetCodeStatus:
    valid: bool
    message: str
    expires_in: int | None = None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_dt(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_numeric_code(digits: int = CODE_DIGITS) -> str:
    return f"{secrets.randbelow(10 ** digits):0{digits}d}"


def hash_code(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _codes_match(supplied: str, stored_hash: str) -> bool:
    return secrets.compare_digest(hash_code(supplied), stored_hash)


# Login codes


def get_pending_login_challenge(db: Session, user_id: int) -> LoginOtpChallenge | None:
    return db.execute(
        select(LoginOtpChallenge)
        .where(LoginOtpChallenge.user_id == user_id, LoginOtpChallenge.used_at.is_(None))
        .order_by(LoginOtpChallenge.expires_at.desc())
    ).scalars().first()


def issue_login_otp(db: Session, *, user_id: int, expire_minutes: int, max_attempts: int) -> IssuedCode:
    now = utcnow()
    pending = db.execute(
        select(LoginOtpChallenge).where(
            LoginOtpChallenge.user_id == user_id,
            LoginOtpChallenge.used_at.is_(None),
        )
    ).scalars()
    for row in pending:
        row.used_at = now

    code = generate_numeric_code()
    expires_at = now + timedelta(minutes=expire_minutes)
    db.add(
        LoginOtpChallenge(
            user_id=user_id,
            code_hash=hash_code(code),
            expires_at=expires_at,
            max_attempts=max_attempts,
        )
    )
    db.commit()
    logger.info("Issued login code for user %s (expires %s)", user_id, expires_at.isoformat())
    return IssuedCode(code=code, expires_at=expires_at)


def verify_login_otp(db: Session, *, user_id: int, code: str) -> None:
    """Consume the user's pending login code or raise.

    Expiry and attempt exhaustion clear the pending code; a plain mismatch
    keeps it so the client can retry until it expires.
    """
    challenge = get_pending_login_challenge(db, user_id)
    if challenge is None:
        raise OtpStateError("No verification code is pending. Sign in again to request a new one.")

    now = utcnow()
    if now > normalize_dt(challenge.expires_at):
        challenge.used_at = now
        db.commit()
        raise OtpExpiredError("The verification code has expired. Please request a new one.")

    if not _codes_match(code, challenge.code_hash):
        challenge.attempt_count += 1
        remaining = max(0, challenge.max_attempts - challenge.attempt_count)
        if remaining == 0:
            challenge.used_at = now
            db.commit()
            logger.warning("Login code for user %s exhausted its attempts", user_id)
            raise OtpAttemptsExceededError("Maximum verification attempts exceeded. Sign in again.")
        db.commit()
        raise OtpMismatchError(
            "Incorrect verification code.",
            details={"remaining_attempts": remaining},
        )

    challenge.used_at = now
    db.commit()


# Password-reset codes


def issue_password_reset_code(
    db: Session,
    *,
    email: str,
    expire_minutes: int,
    max_attempts: int = 5,
) -> IssuedCode:
    key = email.strip().lower()
    code = generate_numeric_code()
    expires_at = utcnow() + timedelta(minutes=expire_minutes)

    entry = db.get(PasswordResetCode, key)
    if entry is None:
        entry = PasswordResetCode(email=key)
        db.add(entry)
    entry.code_hash = hash_code(code)
    entry.expires_at = expires_at
    entry.attempt_count = 0
    entry.max_attempts = max_attempts
    db.commit()
    return IssuedCode(code=code, expires_at=expires_at)


def _record_reset_miss(entry: PasswordResetCode) -> int:
    entry.attempt_count += 1
    return max(0, entry.max_attempts - entry.attempt_count)


def check_password_reset_code(db: Session, *, email: str, code: str) -> PasswordResetCode:
    """Return the matching entry without consuming it.

    A stale or exhausted entry is deleted before raising. A mismatch counts
    against the entry's attempt budget; the last allowed miss deletes it.
    """
    key = email.strip().lower()
    entry = db.get(PasswordResetCode, key)
    if entry is None:
        raise ValidationError("Invalid or expired code", code="reset_code_invalid")

    if utcnow() > normalize_dt(entry.expires_at):
        db.delete(entry)
        db.commit()
        raise ValidationError("The code has expired. Request a new one.", code="reset_code_expired")

    if entry.attempts_exhausted:
        db.delete(entry)
        db.commit()
        raise OtpAttemptsExceededError(
            "Too many incorrect codes. Request a new one.",
            code="reset_attempts_exceeded",
        )

    if not _codes_match(code, entry.code_hash):
        remaining = _record_reset_miss(entry)
        if remaining == 0:
            db.delete(entry)
            db.commit()
            logger.warning("Password reset code for %s exhausted its attempts", key)
            raise OtpAttemptsExceededError(
                "Too many incorrect codes. Request a new one.",
                code="reset_attempts_exceeded",
            )
        db.commit()
        raise ValidationError(
            "Incorrect code",
            code="reset_code_mismatch",
            details={"remaining_attempts": remaining},
        )
    return entry


def inspect_password_reset_code(db: Session, *, email: str, code: str) -> ResetCodeStatus:
    """Report on a reset code without consuming or deleting the entry.

    Wrong guesses still draw from the attempt budget shared with
    :func:`check_password_reset_code`.
    """
    entry = db.get(PasswordResetCode, email.strip().lower())
    if entry is None:
        return ResetCodeStatus(valid=False, message="Code not found")

    remaining = normalize_dt(entry.expires_at) - utcnow()
    if remaining.total_seconds() < 0:
        return ResetCodeStatus(valid=False, message="Code expired")
    if entry.attempts_exhausted:
        return ResetCodeStatus(valid=False, message="Too many attempts")
    if not _codes_match(code, entry.code_hash):
        _record_reset_miss(entry)
        db.commit()
        if entry.attempts_exhausted:
            return ResetCodeStatus(valid=False, message="Too many attempts")
        return ResetCodeStatus(valid=False, message="Incorrect code")
    return ResetCodeStatus(valid=True, message="Code is valid", expires_in=int(remaining.total_seconds()))
