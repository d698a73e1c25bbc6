from datetime import datetime

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.schemas.preference import PreferenceOut


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(alias="userId")
    email: EmailStr
    name: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")
    app_version: str | None = Field(default=None, alias="appVersion")


class UserDetailOut(UserOut):
    firebase_uid: str = Field(alias="firebaseUID")
    created_at: datetime | None = Field(default=None, alias="createdAt")


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=2, max_length=200)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if len(trimmed) < 2:
            raise ValueError("Name must be at least 2 characters")
        return trimmed


class AuthResponse(BaseModel):
    token: str
    user: UserOut


class LoginRequest(BaseModel):
    """Both login phases share one endpoint: a body carrying ``otp`` is phase two."""

    email: EmailStr
    password: str | None = Field(default=None, min_length=1, max_length=128)
    otp: str | None = Field(default=None, pattern=r"^\d{6}$")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)

    @model_validator(mode="after")
    def require_password_or_otp(self) -> "LoginRequest":
        if self.otp is None and self.password is None:
            raise ValueError("Either password or otp is required")
        return self

    @property
    def is_otp_step(self) -> bool:
        return self.otp is not None


class LoginOtpPendingOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    requires_otp: bool = Field(default=True, alias="requiresOTP")
    message: str
    expires_in: int = Field(ge=1, alias="expiresIn")
    otp_hint: str | None = Field(default=None, alias="otpHint")


class GoogleLoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id_token: str = Field(alias="idToken", min_length=1)


class UserUpdate(BaseModel):
    """Profile fields a user may change; email and sign-in identity are fixed."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=2, max_length=200)
    photo_url: AnyHttpUrl | None = Field(default=None, alias="photoURL")
    app_version: str | None = Field(default=None, alias="appVersion", min_length=1, max_length=1)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        if len(trimmed) < 2:
            raise ValueError("Name must be at least 2 characters")
        return trimmed

    @model_validator(mode="after")
    def require_change(self) -> "UserUpdate":
        if not self.model_fields_set:
            raise ValueError("Provide name, photoURL or appVersion to update")
        return self


class ProfileStatsOut(BaseModel):
    opinions: int = 0
    favorites: int = 0
    comparisons: int = 0


class UserProfileOut(BaseModel):
    """Public view of an account. ``email`` and ``preferences`` are filled for the owner only."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(alias="userId")
    email: EmailStr | None = None
    name: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")
    app_version: str | None = Field(default=None, alias="appVersion")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    stats: ProfileStatsOut
    preferences: list[PreferenceOut] | None = None
