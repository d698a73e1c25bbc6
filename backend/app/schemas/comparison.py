from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from app.schemas.vehicle import VehicleOut


class ComparisonCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vehicle_ids: list[PositiveInt] = Field(alias="vehicleIds", min_length=1, max_length=10)


class ComparisonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    created_at: datetime | None = Field(default=None, alias="createdAt")
    vehicles: list[VehicleOut]
