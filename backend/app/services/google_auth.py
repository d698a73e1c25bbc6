from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from threading import Lock

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions

from app.core.config import get_settings
from app.core.exceptions import AuthenticationError, ConfigurationError, IdentityProviderError

logger = logging.getLogger(__name__)

_init_lock = Lock()


@dataclass(frozen=True)
class GoogleIdentity:
    uid: str
    email: str
    email_verified: bool
    name: str | None = None
    picture: str | None = None


def _build_credential(settings) -> credentials.Certificate:
    if settings.firebase_service_account:
        return credentials.Certificate(json.loads(settings.firebase_service_account))
    if settings.firebase_service_account_path:
        return credentials.Certificate(settings.firebase_service_account_path)
    if settings.firebase_project_id and settings.firebase_client_email and settings.firebase_private_key:
        return credentials.Certificate(
            {
                "type": "service_account",
                "project_id": settings.firebase_project_id,
                "client_email": settings.firebase_client_email,
                "private_key": settings.firebase_private_key.replace("\\n", "\n"),
                "token_uri": "https://oauth2.googleapis.com/token",
            }
        )
    raise ConfigurationError("Firebase Admin is not configured")


def get_firebase_app() -> firebase_admin.App:
    with _init_lock:
        try:
            return firebase_admin.get_app()
        except ValueError:
            return firebase_admin.initialize_app(_build_credential(get_settings()))


def verify_firebase_token(id_token: str) -> GoogleIdentity:
    app = get_firebase_app()
    try:
        decoded = firebase_auth.verify_id_token(id_token, app=app)
    except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError) as exc:
        logger.info("Rejected Firebase ID token: %s", exc)
        raise AuthenticationError("Invalid or expired Firebase token") from exc
    except firebase_exceptions.FirebaseError as exc:
        # Includes CertificateFetchError when Google public keys are unreachable.
        logger.error("Firebase token verification unavailable: %s", exc)
        raise IdentityProviderError("Google sign-in is temporarily unavailable. Please try again later.") from exc

    if not decoded.get("email") or not decoded.get("email_verified"):
        raise AuthenticationError("Google account email is not verified")

    return GoogleIdentity(
        uid=decoded["uid"],
        email=decoded["email"],
        email_verified=True,
        name=decoded.get("name"),
        picture=decoded.get("picture"),
    )
