from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    LoginMethodError,
    ResourceNotFoundError,
)
from app.core.security import get_password_hash, verify_password
from app.models.user import User
from app.services import otp
from app.services.google_auth import GoogleIdentity

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()


def local_uid_for(email: str, prefix: str) -> str:
    return f"{prefix}{email}"


def register_local_user(db: Session, *, email: str, password: str, name: str, uid_prefix: str) -> User:
    if get_user_by_email(db, email) is not None:
        raise ConflictError("This email is already registered. Please sign in.")

    user = User(
        email=email,
        name=name,
        firebase_uid=local_uid_for(email, uid_prefix),
        hashed_password=get_password_hash(password),
        app_version="1",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("This email is already registered. Please sign in.") from exc
    db.refresh(user)
    logger.info("Registered local account %s", user.id)
    return user


def authenticate_local_user(db: Session, *, email: str, password: str, uid_prefix: str) -> User:
    """Credential check for password sign-in (login step one)."""
    user = get_user_by_email(db, email)
    if user is None:
        raise AuthenticationError("Invalid credentials")
    if not user.is_local_account(uid_prefix):
        raise LoginMethodError("This email is registered with Google. Please sign in with Google.")
    if not user.hashed_password:
        raise ConfigurationError("Account configuration error")
    if not verify_password(password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthenticationError("User account is inactive")
    return user


def upsert_google_user(db: Session, identity: GoogleIdentity) -> User:
    """Find by provider subject, else link an existing email account, else create."""
    user = db.execute(select(User).where(User.firebase_uid == identity.uid)).scalar_one_or_none()
    if user is None:
        user = get_user_by_email(db, identity.email)
        if user is not None:
            # Linking replaces the local subject, so password sign-in stops working.
            logger.info("Linking Google identity to existing account %s", user.id)
            user.firebase_uid = identity.uid
        else:
            user = User(
                email=identity.email.strip().lower(),
                firebase_uid=identity.uid,
                name=identity.name or identity.email.split("@")[0],
                photo_url=identity.picture,
                app_version="P",
            )
            db.add(user)
    if identity.name:
        user.name = identity.name
    if identity.picture:
        user.photo_url = identity.picture

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Unable to link Google account") from exc
    db.refresh(user)
    return user


def reset_password(db: Session, *, email: str, code: str, new_password: str, uid_prefix: str) -> User:
    entry = otp.check_password_reset_code(db, email=email, code=code)

    user = get_user_by_email(db, email)
    if user is None:
        raise ResourceNotFoundError("User")
    if not user.is_local_account(uid_prefix):
        raise LoginMethodError("This account uses Google sign-in. Reset your password with Google.")

    user.hashed_password = get_password_hash(new_password)
    db.delete(entry)
    db.commit()
    logger.info("Password reset completed for account %s", user.id)
    return user
