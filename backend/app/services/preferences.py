from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError
from app.models.preference import UserPreference
from app.models.vehicle import VehicleBrand, VehicleCategory


def _require_brand(db: Session, brand_id: int) -> None:
    if db.get(VehicleBrand, brand_id) is None:
        raise ResourceNotFoundError("Brand", brand_id)


def _require_category(db: Session, category_id: int) -> None:
    if db.get(VehicleCategory, category_id) is None:
        raise ResourceNotFoundError("Category", category_id)


def list_preferences(db: Session, user_id: int) -> list[UserPreference]:
    statement = select(UserPreference).where(UserPreference.user_id == user_id).order_by(UserPreference.id)
    return list(db.execute(statement).scalars())


def create_preference(
    db: Session,
    *,
    user_id: int,
    brand_id: int,
    category_id: int,
    price_max: int,
) -> UserPreference:
    _require_brand(db, brand_id)
    _require_category(db, category_id)
    preference = UserPreference(user_id=user_id, brand_id=brand_id, category_id=category_id, price_max=price_max)
    db.add(preference)
    db.commit()
    db.refresh(preference)
    return preference


def get_user_preference(db: Session, *, user_id: int, preference_id: int) -> UserPreference:
    preference = db.get(UserPreference, preference_id)
    if preference is None or preference.user_id != user_id:
        raise ResourceNotFoundError("Preference", preference_id)
    return preference


def update_preference(
    db: Session,
    *,
    user_id: int,
    preference_id: int,
    brand_id: int | None = None,
    category_id: int | None = None,
    price_max: int | None = None,
) -> UserPreference:
    preference = get_user_preference(db, user_id=user_id, preference_id=preference_id)
    if brand_id is not None:
        _require_brand(db, brand_id)
        preference.brand_id = brand_id
    if category_id is not None:
        _require_category(db, category_id)
        preference.category_id = category_id
    if price_max is not None:
        preference.price_max = price_max
    db.commit()
    # Reload the joined brand and category after a foreign key change.
    db.refresh(preference)
    return preference


def delete_preference(db: Session, *, user_id: int, preference_id: int) -> None:
    preference = get_user_preference(db, user_id=user_id, preference_id=preference_id)
    db.delete(preference)
    db.commit()
