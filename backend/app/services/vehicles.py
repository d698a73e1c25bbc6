from __future__ import annotations

from dataclasses import dataclass
import math

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError, ValidationError
from app.models.favorite import FavoriteVehicle
from app.models.opinion import VehicleOpinion
from app.models.vehicle import Vehicle, VehicleBrand, VehicleModel, VehicleVersion


@dataclass(frozen=True)
class VehicleFilters:
    brand_id: int | None = None
    category_id: int | None = None
    year_min: int | None = None
    year_max: int | None = None
    price_min: int | None = None
    price_max: int | None = None
    sort_by: str = "price"
    sort_order: str = "asc"

    def conditions(self) -> list:
        if self.year_min is not None and self.year_max is not None and self.year_min > self.year_max:
            raise ValidationError("yearMin cannot be greater than yearMax")
        if self.price_min is not None and self.price_max is not None and self.price_min > self.price_max:
            raise ValidationError("priceMin cannot be greater than priceMax")

        clauses = []
        if self.brand_id is not None:
            clauses.append(Vehicle.brand_id == self.brand_id)
        if self.category_id is not None:
            clauses.append(Vehicle.category_id == self.category_id)
        if self.year_min is not None:
            clauses.append(Vehicle.year >= self.year_min)
        if self.year_max is not None:
            clauses.append(Vehicle.year <= self.year_max)
        if self.price_min is not None:
            clauses.append(Vehicle.price >= self.price_min)
        if self.price_max is not None:
            clauses.append(Vehicle.price <= self.price_max)
        return clauses


@dataclass(frozen=True)
class VehicleSearchResult:
    items: list[Vehicle]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def search_vehicles(db: Session, filters: VehicleFilters, *, page: int, limit: int) -> VehicleSearchResult:
    conditions = filters.conditions()
    total = db.execute(select(func.count(Vehicle.id)).where(*conditions)).scalar_one()

    statement = select(Vehicle).where(*conditions)
    if filters.sort_by == "brand":
        sort_column = VehicleBrand.name
        statement = statement.join(VehicleBrand, VehicleBrand.id == Vehicle.brand_id)
    elif filters.sort_by == "year":
        sort_column = Vehicle.year
    else:
        sort_column = Vehicle.price
    ordering = sort_column.desc() if filters.sort_order == "desc" else sort_column.asc()
    statement = statement.order_by(ordering, Vehicle.id).offset((page - 1) * limit).limit(limit)

    items = list(db.execute(statement).scalars())
    return VehicleSearchResult(items=items, page=page, limit=limit, total=total)


def get_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = db.get(Vehicle, vehicle_id)
    if vehicle is None:
        raise ResourceNotFoundError("Vehicle", vehicle_id)
    return vehicle


def list_favorites(db: Session, user_id: int) -> list[Vehicle]:
    statement = (
        select(Vehicle)
        .join(FavoriteVehicle, FavoriteVehicle.vehicle_id == Vehicle.id)
        .where(FavoriteVehicle.user_id == user_id)
        .order_by(FavoriteVehicle.created_at.desc(), Vehicle.id)
    )
    return list(db.execute(statement).scalars())


def add_favorite(db: Session, *, user_id: int, vehicle_id: int) -> bool:
    """Return ``True`` when a new favorite row was created."""
    get_vehicle(db, vehicle_id)
    if db.get(FavoriteVehicle, (user_id, vehicle_id)) is not None:
        return False
    db.add(FavoriteVehicle(user_id=user_id, vehicle_id=vehicle_id))
    db.commit()
    return True


def remove_favorite(db: Session, *, user_id: int, vehicle_id: int) -> None:
    favorite = db.get(FavoriteVehicle, (user_id, vehicle_id))
    if favorite is None:
        raise ResourceNotFoundError("Favorite", vehicle_id)
    db.delete(favorite)
    db.commit()


# Catalog lookups


def list_models(db: Session, *, brand_id: int | None = None) -> list[tuple[VehicleModel, int]]:
    """Models ordered by name, each with the number of vehicles listed under it."""
    statement = (
        select(VehicleModel, func.count(Vehicle.id))
        .outerjoin(Vehicle, Vehicle.model_id == VehicleModel.id)
        .group_by(VehicleModel.id)
        .order_by(VehicleModel.name, VehicleModel.id)
    )
    if brand_id is not None:
        statement = statement.where(VehicleModel.brand_id == brand_id)
    return [(model, count) for model, count in db.execute(statement)]


def list_versions(db: Session, *, model_id: int | None = None) -> list[tuple[VehicleVersion, int]]:
    statement = (
        select(VehicleVersion, func.count(Vehicle.id))
        .outerjoin(Vehicle, Vehicle.version_id == VehicleVersion.id)
        .group_by(VehicleVersion.id)
        .order_by(VehicleVersion.name, VehicleVersion.id)
    )
    if model_id is not None:
        statement = statement.where(VehicleVersion.model_id == model_id)
    return [(version, count) for version, count in db.execute(statement)]


# Quick search

MIN_QUERY_LENGTH = 2
YEAR_RANGE = (1900, 2100)


def describe_vehicle(vehicle: Vehicle) -> str:
    return f"{vehicle.brand.name} {vehicle.model.name} {vehicle.version.name} {vehicle.year}"


def suggest_vehicles(db: Session, query: str, *, limit: int) -> list[Vehicle]:
    """Match ``query`` against brand, model and version names, or an exact year."""
    term = query.strip()
    if len(term) < MIN_QUERY_LENGTH:
        return []

    pattern = f"%{term.lower()}%"
    matches = [
        func.lower(VehicleBrand.name).like(pattern),
        func.lower(VehicleModel.name).like(pattern),
        func.lower(VehicleVersion.name).like(pattern),
    ]
    if term.isdigit() and YEAR_RANGE[0] <= int(term) <= YEAR_RANGE[1]:
        matches.append(Vehicle.year == int(term))

    statement = (
        select(Vehicle)
        .join(VehicleBrand, VehicleBrand.id == Vehicle.brand_id)
        .join(VehicleModel, VehicleModel.id == Vehicle.model_id)
        .join(VehicleVersion, VehicleVersion.id == Vehicle.version_id)
        .where(or_(*matches))
        .order_by(Vehicle.year.desc(), VehicleBrand.name, VehicleModel.name, Vehicle.id)
        .limit(limit)
    )
    return list(db.execute(statement).scalars())


# Side-by-side comparison


@dataclass(frozen=True)
class VehicleStats:
    average_rating: float = 0.0
    total_opinions: int = 0
    total_favorites: int = 0


@dataclass(frozen=True)
class VehiclePairComparison:
    first: Vehicle
    second: Vehicle
    first_stats: VehicleStats
    second_stats: VehicleStats

    @staticmethod
    def _winner(first: float, second: float, *, prefer_lower: bool = False) -> str | None:
        if first == second:
            return None
        first_wins = first < second if prefer_lower else first > second
        return "vehicle1" if first_wins else "vehicle2"

    def differences(self) -> dict:
        rating_gap = abs(self.first_stats.average_rating - self.second_stats.average_rating)
        return {
            "price_difference": abs(self.first.price - self.second.price),
            "cheaper_vehicle": self._winner(self.first.price, self.second.price, prefer_lower=True),
            "year_difference": abs(self.first.year - self.second.year),
            "newer_vehicle": self._winner(self.first.year, self.second.year),
            "rating_difference": round(rating_gap, 2),
            "better_rated": self._winner(self.first_stats.average_rating, self.second_stats.average_rating),
        }


def vehicle_stats(db: Session, vehicle_id: int) -> VehicleStats:
    average, opinions = db.execute(
        select(func.avg(VehicleOpinion.rate), func.count(VehicleOpinion.id)).where(
            VehicleOpinion.vehicle_id == vehicle_id
        )
    ).one()
    favorites = db.execute(
        select(func.count()).select_from(FavoriteVehicle).where(FavoriteVehicle.vehicle_id == vehicle_id)
    ).scalar_one()
    return VehicleStats(
        average_rating=round(float(average or 0), 2),
        total_opinions=opinions,
        total_favorites=favorites,
    )


def parse_vehicle_pair(raw: str) -> tuple[int, int]:
    parts = [part.strip() for part in raw.split(",")]
    if len(parts) != 2:
        raise ValidationError("Provide exactly 2 vehicle ids to compare")
    try:
        first, second = (int(part) for part in parts)
    except ValueError as exc:
        raise ValidationError("Vehicle ids must be integers") from exc
    if first <= 0 or second <= 0:
        raise ValidationError("Vehicle ids must be positive")
    if first == second:
        raise ValidationError("Choose two different vehicles to compare")
    return first, second


def compare_vehicles(db: Session, first_id: int, second_id: int) -> VehiclePairComparison:
    first = get_vehicle(db, first_id)
    second = get_vehicle(db, second_id)
    return VehiclePairComparison(
        first=first,
        second=second,
        first_stats=vehicle_stats(db, first.id),
        second_stats=vehicle_stats(db, second.id),
    )
