from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _clean_comment(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


class OpinionAuthorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(alias="userId")
    name: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")


class OpinionCreate(BaseModel):
    rate: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=255)

    @field_validator("comment")
    @classmethod
    def normalize_comment(cls, value: str | None) -> str | None:
        return _clean_comment(value)


class OpinionUpdate(BaseModel):
    rate: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=255)

    @field_validator("comment")
    @classmethod
    def normalize_comment(cls, value: str | None) -> str | None:
        return _clean_comment(value)

    @model_validator(mode="after")
    def require_change(self) -> "OpinionUpdate":
        if not self.model_fields_set:
            raise ValueError("Provide rate or comment to update")
        return self


class OpinionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    vehicle_id: int = Field(alias="vehicleId")
    rate: int
    comment: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    user: OpinionAuthorOut
