from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError
from app.models.comparison import UserComparison, comparison_vehicles
from app.models.favorite import FavoriteVehicle
from app.models.login_otp import LoginOtpChallenge
from app.models.opinion import VehicleOpinion
from app.models.password_reset import PasswordResetCode
from app.models.preference import UserPreference
from app.models.user import User

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise ResourceNotFoundError("User", user_id)
    return user


def _count(db: Session, model, user_id: int) -> int:
    return db.execute(select(func.count()).select_from(model).where(model.user_id == user_id)).scalar_one()


def profile_stats(db: Session, user_id: int) -> dict[str, int]:
    return {
        "opinions": _count(db, VehicleOpinion, user_id),
        "favorites": _count(db, FavoriteVehicle, user_id),
        "comparisons": _count(db, UserComparison, user_id),
    }


def update_profile(db: Session, user: User, changes: dict) -> User:
    """Apply the given fields. ``name`` and ``photo_url`` may be cleared with ``None``."""
    for field in ("name", "photo_url", "app_version"):
        if field not in changes:
            continue
        value = changes[field]
        if value is None and field == "app_version":
            continue
        setattr(user, field, str(value) if value is not None else None)
    db.commit()
    db.refresh(user)
    return user


def delete_account(db: Session, user: User) -> None:
    """Remove the account together with everything it owns."""
    comparison_ids = select(UserComparison.id).where(UserComparison.user_id == user.id)
    db.execute(delete(comparison_vehicles).where(comparison_vehicles.c.comparison_id.in_(comparison_ids)))
    for model in (UserComparison, FavoriteVehicle, VehicleOpinion, UserPreference, LoginOtpChallenge):
        db.execute(delete(model).where(model.user_id == user.id))
    db.execute(delete(PasswordResetCode).where(PasswordResetCode.email == user.email))
    db.delete(user)
    db.commit()
    logger.info("Deleted account %s", user.id)
