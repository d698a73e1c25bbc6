from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError, ValidationError
from app.models.comparison import UserComparison, comparison_vehicles
from app.models.vehicle import Vehicle

logger = logging.getLogger(__name__)


def list_comparisons(db: Session, user_id: int) -> list[UserComparison]:
    statement = (
        select(UserComparison)
        .where(UserComparison.user_id == user_id)
        .order_by(UserComparison.created_at.desc(), UserComparison.id.desc())
    )
    return list(db.execute(statement).scalars())


def create_comparison(db: Session, *, user_id: int, vehicle_ids: list[int]) -> UserComparison:
    """Save the vehicles in the order given; repeated ids are kept once."""
    ordered = list(dict.fromkeys(vehicle_ids))
    found = set(db.execute(select(Vehicle.id).where(Vehicle.id.in_(ordered))).scalars())
    missing = [vehicle_id for vehicle_id in ordered if vehicle_id not in found]
    if missing:
        raise ValidationError("Some vehicles do not exist", details={"missing_vehicle_ids": missing})

    comparison = UserComparison(user_id=user_id)
    db.add(comparison)
    db.flush()
    db.execute(
        comparison_vehicles.insert(),
        [
            {"comparison_id": comparison.id, "vehicle_id": vehicle_id, "position": position}
            for position, vehicle_id in enumerate(ordered)
        ],
    )
    db.commit()
    db.refresh(comparison)
    logger.info("User %s saved comparison %s of %s vehicle(s)", user_id, comparison.id, len(ordered))
    return comparison


def delete_comparison(db: Session, *, user_id: int, comparison_id: int) -> None:
    comparison = db.get(UserComparison, comparison_id)
    if comparison is None or comparison.user_id != user_id:
        raise ResourceNotFoundError("Comparison", comparison_id)
    db.delete(comparison)
    db.commit()
