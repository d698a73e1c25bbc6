from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.vehicle import (
    ComparedVehicleOut,
    ComparisonDifferencesOut,
    SortField,
    SortOrder,
    VehicleComparisonOut,
    VehicleOut,
    VehiclePage,
    VehicleSuggestionOut,
    VehicleSuggestions,
)
from app.services.vehicles import (
    MIN_QUERY_LENGTH,
    VehicleFilters,
    compare_vehicles,
    describe_vehicle,
    get_vehicle,
    parse_vehicle_pair,
    search_vehicles,
    suggest_vehicles,
)

router = APIRouter()


@router.get("", response_model=VehiclePage)
def list_vehicles(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    brand_id: int | None = Query(default=None, alias="brandID", gt=0),
    category_id: int | None = Query(default=None, alias="categoryID", gt=0),
    year_min: int | None = Query(default=None, alias="yearMin"),
    year_max: int | None = Query(default=None, alias="yearMax"),
    price_min: int | None = Query(default=None, alias="priceMin", ge=0),
    price_max: int | None = Query(default=None, alias="priceMax", ge=0),
    sort_by: SortField = Query(default="price", alias="sortBy"),
    sort_order: SortOrder = Query(default="asc", alias="sortOrder"),
    db: Session = Depends(get_db),
) -> VehiclePage:
    filters = VehicleFilters(
        brand_id=brand_id,
        category_id=category_id,
        year_min=year_min,
        year_max=year_max,
        price_min=price_min,
        price_max=price_max,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    result = search_vehicles(db, filters, page=page, limit=limit)
    return VehiclePage(
        items=[VehicleOut.model_validate(item) for item in result.items],
        page=result.page,
        limit=result.limit,
        total=result.total,
        pages=result.pages,
    )


# "/search" and "/compare" must stay above "/{vehicle_id}".
@router.get("/search", response_model=VehicleSuggestions)
def quick_search(
    q: str = Query(default=""),
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
) -> VehicleSuggestions:
    if len(q.strip()) < MIN_QUERY_LENGTH:
        return VehicleSuggestions(items=[], message=f"Type at least {MIN_QUERY_LENGTH} characters to search")
    matches = suggest_vehicles(db, q, limit=limit)
    return VehicleSuggestions(
        items=[
            VehicleSuggestionOut(**VehicleOut.model_validate(vehicle).model_dump(), text=describe_vehicle(vehicle))
            for vehicle in matches
        ]
    )


@router.get("/compare", response_model=VehicleComparisonOut)
def compare(ids: str = Query(min_length=1), db: Session = Depends(get_db)) -> VehicleComparisonOut:
    first_id, second_id = parse_vehicle_pair(ids)
    result = compare_vehicles(db, first_id, second_id)
    return VehicleComparisonOut(
        vehicle1=_compared(result.first, result.first_stats),
        vehicle2=_compared(result.second, result.second_stats),
        differences=ComparisonDifferencesOut(**result.differences()),
    )


def _compared(vehicle, stats) -> ComparedVehicleOut:
    base = VehicleOut.model_validate(vehicle).model_dump()
    return ComparedVehicleOut(
        **base,
        average_rating=stats.average_rating,
        total_opinions=stats.total_opinions,
        total_favorites=stats.total_favorites,
    )


@router.get("/{vehicle_id}", response_model=VehicleOut)
def vehicle_detail(vehicle_id: int, db: Session = Depends(get_db)) -> VehicleOut:
    return get_vehicle(db, vehicle_id)
