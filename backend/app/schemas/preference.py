from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.schemas.vehicle import NamedOut


class PreferenceCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    brand_id: int = Field(alias="brandID", gt=0)
    category_id: int = Field(alias="categoryID", gt=0)
    price_max: int = Field(alias="priceMax", gt=0)


class PreferenceUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    brand_id: int | None = Field(default=None, alias="brandID", gt=0)
    category_id: int | None = Field(default=None, alias="categoryID", gt=0)
    price_max: int | None = Field(default=None, alias="priceMax", gt=0)

    @model_validator(mode="after")
    def require_change(self) -> "PreferenceUpdate":
        if not self.model_fields_set:
            raise ValueError("Provide brandID, categoryID or priceMax to update")
        return self


class PreferenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    brand: NamedOut
    category: NamedOut
    price_max: int = Field(alias="priceMax")
    created_at: datetime | None = Field(default=None, alias="createdAt")
