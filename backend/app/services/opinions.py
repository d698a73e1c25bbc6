from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import PermissionDeniedError, ResourceNotFoundError, ValidationError
from app.models.opinion import VehicleOpinion
from app.services.vehicles import get_vehicle

UNSET = object()


def list_opinions(db: Session, vehicle_id: int) -> list[VehicleOpinion]:
    get_vehicle(db, vehicle_id)
    statement = (
        select(VehicleOpinion)
        .where(VehicleOpinion.vehicle_id == vehicle_id)
        .order_by(VehicleOpinion.created_at.desc(), VehicleOpinion.id.desc())
    )
    return list(db.execute(statement).scalars())


def upsert_opinion(
    db: Session,
    *,
    vehicle_id: int,
    user_id: int,
    rate: int,
    comment: str | None,
) -> tuple[VehicleOpinion, bool]:
    """Create the user's opinion of a vehicle, or replace the existing one.

    Returns the opinion and whether it was newly created.
    """
    get_vehicle(db, vehicle_id)
    opinion = db.execute(
        select(VehicleOpinion).where(VehicleOpinion.vehicle_id == vehicle_id, VehicleOpinion.user_id == user_id)
    ).scalar_one_or_none()

    created = opinion is None
    if created:
        opinion = VehicleOpinion(vehicle_id=vehicle_id, user_id=user_id)
        db.add(opinion)
    opinion.rate = rate
    opinion.comment = comment
    db.commit()
    db.refresh(opinion)
    return opinion, created


def _owned_opinion(db: Session, *, vehicle_id: int, opinion_id: int, user_id: int) -> VehicleOpinion:
    opinion = db.get(VehicleOpinion, opinion_id)
    if opinion is None:
        raise ResourceNotFoundError("Opinion", opinion_id)
    if opinion.vehicle_id != vehicle_id:
        raise ValidationError("The opinion does not belong to this vehicle")
    if opinion.user_id != user_id:
        raise PermissionDeniedError("You can only change your own opinions")
    return opinion


def update_opinion(
    db: Session,
    *,
    vehicle_id: int,
    opinion_id: int,
    user_id: int,
    rate: int | None = None,
    comment=UNSET,
) -> VehicleOpinion:
    opinion = _owned_opinion(db, vehicle_id=vehicle_id, opinion_id=opinion_id, user_id=user_id)
    if rate is not None:
        opinion.rate = rate
    if comment is not UNSET:
        opinion.comment = comment
    db.commit()
    db.refresh(opinion)
    return opinion


def delete_opinion(db: Session, *, vehicle_id: int, opinion_id: int, user_id: int) -> None:
    opinion = _owned_opinion(db, vehicle_id=vehicle_id, opinion_id=opinion_id, user_id=user_id)
    db.delete(opinion)
    db.commit()
