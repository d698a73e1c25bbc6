from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class NamedOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class VehicleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    year: int
    price: int
    image_url: str | None = Field(default=None, alias="imageUrl")
    brand: NamedOut
    model: NamedOut
    version: NamedOut
    category: NamedOut


class VehiclePage(BaseModel):
    items: list[VehicleOut]
    page: int
    limit: int
    total: int
    pages: int


SortField = Literal["price", "year", "brand"]
SortOrder = Literal["asc", "desc"]


class FavoriteCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vehicle_id: int = Field(alias="vehicleId", gt=0)


class VehicleModelOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    brand_id: int = Field(alias="brandId")
    vehicle_count: int = Field(default=0, alias="vehicleCount")


class VehicleVersionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    model_id: int = Field(alias="modelId")
    vehicle_count: int = Field(default=0, alias="vehicleCount")


class VehicleSuggestionOut(VehicleOut):
    text: str


class VehicleSuggestions(BaseModel):
    items: list[VehicleSuggestionOut]
    message: str | None = None


class ComparedVehicleOut(VehicleOut):
    average_rating: float = Field(default=0.0, alias="averageRating")
    total_opinions: int = Field(default=0, alias="totalOpinions")
    total_favorites: int = Field(default=0, alias="totalFavorites")


Side = Literal["vehicle1", "vehicle2"]


class ComparisonDifferencesOut(BaseModel):
    """``None`` in a winner field means both vehicles tie on that measure."""

    model_config = ConfigDict(populate_by_name=True)

    price_difference: int = Field(alias="priceDifference")
    cheaper_vehicle: Side | None = Field(default=None, alias="cheaperVehicle")
    year_difference: int = Field(alias="yearDifference")
    newer_vehicle: Side | None = Field(default=None, alias="newerVehicle")
    rating_difference: float = Field(alias="ratingDifference")
    better_rated: Side | None = Field(default=None, alias="betterRated")


class VehicleComparisonOut(BaseModel):
    vehicle1: ComparedVehicleOut
    vehicle2: ComparedVehicleOut
    differences: ComparisonDifferencesOut
