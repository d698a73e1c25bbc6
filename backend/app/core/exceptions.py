class AppError(Exception):
    """Base class for all application exceptions."""

    status_code: int = 500
    code: str | None = None

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict = None,
        code: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details or {}
        self.headers = headers
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised when request input is malformed beyond what the schemas catch."""
    status_code = 400
    code = "validation_error"


class AuthenticationError(AppError):
    """Raised for bad credentials or an unusable session token."""
    status_code = 401
    code = "authentication_failed"


class LoginMethodError(AppError):
    """Raised when an account must sign in through a different identity provider."""
    status_code = 400
    code = "wrong_login_method"


class PermissionDeniedError(AppError):
    status_code = 403
    code = "permission_denied"


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    status_code = 404
    code = "not_found"

    def __init__(self, resource_type: str, resource_id: str | int | None = None):
        if resource_id is None:
            message = f"{resource_type} not found"
        else:
            message = f"{resource_type} with id {resource_id} not found"
        super().__init__(message)


class ConflictError(AppError):
    status_code = 409
    code = "conflict"


class OtpStateError(AppError):
    """No verification code is pending for the account."""
    status_code = 400
    code = "otp_not_pending"


class OtpExpiredError(AppError):
    """The pending code timed out; it has been cleared."""
    status_code = 401
    code = "otp_expired"


class OtpMismatchError(AppError):
    """The supplied code does not match; the pending code is kept for retry."""
    status_code = 401
    code = "otp_invalid"


class OtpAttemptsExceededError(AppError):
    status_code = 429
    code = "otp_attempts_exceeded"


class RateLimitError(AppError):
    status_code = 429
    code = "rate_limited"

    def __init__(self, scope: str, retry_after: int):
        super().__init__(
            f"Too many requests for {scope}. Try again in {retry_after} second(s).",
            details={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )


class DeliveryError(AppError):
    """Raised when the outbound mail transport could not deliver a code."""
    status_code = 503
    code = "delivery_failed"


class IdentityProviderError(AppError):
    """Raised when the identity provider cannot be reached to verify a token."""
    status_code = 503
    code = "identity_provider_unavailable"


class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    status_code = 500
    code = "configuration_error"
