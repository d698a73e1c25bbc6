from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.vehicle import VehicleBrand, VehicleCategory
from app.schemas.vehicle import NamedOut, VehicleModelOut, VehicleVersionOut
from app.services import vehicles

router = APIRouter()


@router.get("/brands", response_model=list[NamedOut])
def list_brands(db: Session = Depends(get_db)) -> list[NamedOut]:
    return list(db.execute(select(VehicleBrand).order_by(VehicleBrand.name)).scalars())


@router.get("/categories", response_model=list[NamedOut])
def list_categories(db: Session = Depends(get_db)) -> list[NamedOut]:
    return list(db.execute(select(VehicleCategory).order_by(VehicleCategory.name)).scalars())


@router.get("/models", response_model=list[VehicleModelOut])
def list_models(
    brand_id: int | None = Query(default=None, alias="brandID", gt=0),
    db: Session = Depends(get_db),
) -> list[VehicleModelOut]:
    return [
        VehicleModelOut(id=model.id, name=model.name, brand_id=model.brand_id, vehicle_count=count)
        for model, count in vehicles.list_models(db, brand_id=brand_id)
    ]


@router.get("/versions", response_model=list[VehicleVersionOut])
def list_versions(
    model_id: int | None = Query(default=None, alias="modelID", gt=0),
    db: Session = Depends(get_db),
) -> list[VehicleVersionOut]:
    return [
        VehicleVersionOut(id=version.id, name=version.name, model_id=version.model_id, vehicle_count=count)
        for version, count in vehicles.list_versions(db, model_id=model_id)
    ]
