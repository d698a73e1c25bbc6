import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.core.config import get_settings
from app.core.exceptions import AuthenticationError, DeliveryError, ValidationError
from app.core.security import create_access_token
from app.models.user import User
from app.schemas.password import (
    MessageOut,
    PasswordResetConfirm,
    PasswordResetRequest,
    ResetCodeStatusOut,
)
from app.schemas.user import (
    AuthResponse,
    GoogleLoginRequest,
    LoginOtpPendingOut,
    LoginRequest,
    RegisterRequest,
    UserDetailOut,
)
from app.services import accounts, otp
from app.services.email import EmailDeliveryError, send_login_otp_email, send_password_reset_email
from app.services.google_auth import verify_firebase_token
from app.services.rate_limit import enforce_rate_limit

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If the email exists, you will receive a recovery code"

DELIVERY_ERROR_DETAILS = {
    "SMTP is not configured": "Email service not configured. Set SMTP settings in backend/.env and restart backend.",
    "SMTP authentication failed": "Email authentication failed. Verify SMTP username/password (or app password).",
    "SMTP connection failed": "Cannot connect to SMTP server. Verify SMTP host/port and TLS/SSL settings.",
    "SMTP recipient rejected": "Recipient email was rejected by the SMTP provider.",
    "SMTP sender rejected": "Sender email was rejected by the SMTP provider. Verify SMTP_FROM_EMAIL.",
}


def _delivery_error(exc: EmailDeliveryError) -> DeliveryError:
    detail = DELIVERY_ERROR_DETAILS.get(str(exc), "Unable to send verification email. Please try again later.")
    return DeliveryError(detail, details={"reason": str(exc)})


def _issue_session(user: User) -> AuthResponse:
    token = create_access_token(user.id, firebase_uid=user.firebase_uid, email=user.email)
    return AuthResponse(token=token, user=user)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, request: Request, db: Session = Depends(get_db)) -> AuthResponse:
    enforce_rate_limit(
        request=request,
        scope="auth.register",
        limit=settings.auth_rate_limit_register_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        identity=payload.email,
    )
    user = accounts.register_local_user(
        db,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        uid_prefix=settings.local_account_uid_prefix,
    )
    return _issue_session(user)


@router.post("/login", response_model=AuthResponse | LoginOtpPendingOut, response_model_exclude_none=True)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)) -> AuthResponse | LoginOtpPendingOut:
    if payload.is_otp_step:
        return verify_login_otp(payload, request, db)
    return request_login_otp(payload, request, db)


def request_login_otp(payload: LoginRequest, request: Request, db: Session) -> LoginOtpPendingOut:
    enforce_rate_limit(
        request=request,
        scope="auth.login",
        limit=settings.auth_rate_limit_login_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        identity=payload.email,
        identity_limit=settings.auth_rate_limit_identity_max_requests,
    )
    user = accounts.authenticate_local_user(
        db,
        email=payload.email,
        password=payload.password,
        uid_prefix=settings.local_account_uid_prefix,
    )
    issued = otp.issue_login_otp(
        db,
        user_id=user.id,
        expire_minutes=settings.login_otp_expire_minutes,
        max_attempts=settings.login_otp_max_attempts,
    )
    if settings.login_otp_log_to_terminal:
        logger.warning("LOGIN OTP | email=%s | otp=%s | expires_at=%s", user.email, issued.code, issued.expires_at)

    try:
        send_login_otp_email(
            to_email=user.email,
            otp_code=issued.code,
            user_name=user.name,
            expires_minutes=settings.login_otp_expire_minutes,
        )
    except EmailDeliveryError as exc:
        # The challenge stays stored; a code obtained another way still verifies.
        logger.exception("Failed to send login OTP email for %s", user.email)
        raise _delivery_error(exc) from exc

    return LoginOtpPendingOut(
        message="Verification code sent. Please check your email.",
        expires_in=settings.login_otp_expire_minutes * 60,
        otp_hint=issued.code if settings.expose_login_otp else None,
    )


def verify_login_otp(payload: LoginRequest, request: Request, db: Session) -> AuthResponse:
    enforce_rate_limit(
        request=request,
        scope="auth.login.verify_otp",
        limit=settings.auth_rate_limit_login_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        identity=payload.email,
        identity_limit=settings.auth_rate_limit_identity_max_requests,
    )
    user = accounts.get_user_by_email(db, payload.email)
    if user is None:
        raise AuthenticationError("Invalid or expired verification code")
    otp.verify_login_otp(db, user_id=user.id, code=payload.otp)
    logger.info("User %s completed OTP login", user.id)
    return _issue_session(user)


@router.post("/google", response_model=AuthResponse)
def google_login(payload: GoogleLoginRequest, request: Request, db: Session = Depends(get_db)) -> AuthResponse:
    enforce_rate_limit(
        request=request,
        scope="auth.google",
        limit=settings.auth_rate_limit_google_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
    )
    identity = verify_firebase_token(payload.id_token)
    user = accounts.upsert_google_user(db, identity)
    return _issue_session(user)


@router.get("/me", response_model=UserDetailOut)
def me(current_user: User = Depends(get_current_user)) -> UserDetailOut:
    return current_user


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)) -> dict:
    # Tokens are stateless; the client discards its copy.
    return {"success": True}


@router.post("/forgot-password", response_model=MessageOut)
def forgot_password(payload: PasswordResetRequest, request: Request, db: Session = Depends(get_db)) -> MessageOut:
    enforce_rate_limit(
        request=request,
        scope="auth.password.forgot",
        limit=settings.auth_rate_limit_password_reset_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        identity=payload.email,
        identity_limit=settings.auth_rate_limit_identity_max_requests,
    )
    user = accounts.get_user_by_email(db, payload.email)
    if user is not None and user.is_local_account(settings.local_account_uid_prefix):
        issued = otp.issue_password_reset_code(
            db,
            email=payload.email,
            expire_minutes=settings.password_reset_expire_minutes,
            max_attempts=settings.password_reset_max_attempts,
        )
        try:
            send_password_reset_email(
                to_email=user.email,
                reset_code=issued.code,
                user_name=user.name,
                expires_minutes=settings.password_reset_expire_minutes,
            )
        except EmailDeliveryError as exc:
            logger.exception("Failed to send password reset email for %s", user.email)
            raise _delivery_error(exc) from exc

    return MessageOut(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=MessageOut)
def reset_password(payload: PasswordResetConfirm, request: Request, db: Session = Depends(get_db)) -> MessageOut:
    enforce_rate_limit(
        request=request,
        scope="auth.password.reset",
        limit=settings.auth_rate_limit_password_reset_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        identity=payload.email,
        identity_limit=settings.auth_rate_limit_identity_max_requests,
    )
    accounts.reset_password(
        db,
        email=payload.email,
        code=payload.code,
        new_password=payload.new_password,
        uid_prefix=settings.local_account_uid_prefix,
    )
    return MessageOut(message="Password updated successfully")


@router.get("/reset-password", response_model=ResetCodeStatusOut, response_model_exclude_none=True)
def check_reset_code(
    email: str,
    code: str,
    request: Request,
    db: Session = Depends(get_db),
) -> ResetCodeStatusOut:
    if not email.strip() or not code.strip():
        raise ValidationError("Email and code are required")
    # Same scope as the POST so guesses through either path share one budget.
    enforce_rate_limit(
        request=request,
        scope="auth.password.reset",
        limit=settings.auth_rate_limit_password_reset_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        identity=email,
        identity_limit=settings.auth_rate_limit_identity_max_requests,
    )
    result = otp.inspect_password_reset_code(db, email=email, code=code.strip())
    return ResetCodeStatusOut(valid=result.valid, message=result.message, expires_in=result.expires_in)
