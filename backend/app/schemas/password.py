from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class PasswordResetRequest(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class PasswordResetConfirm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    code: str = Field(pattern=r"^\d{6}$")
    new_password: str = Field(alias="newPassword", min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ResetCodeStatusOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    message: str
    expires_in: int | None = Field(default=None, alias="expiresIn")


class MessageOut(BaseModel):
    message: str
