"""Seed the vehicle catalog and a local demo account.

Run:
  PYTHONPATH=backend python scripts/seed_catalog.py
"""

from __future__ import annotations

import os

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.security import get_password_hash
from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.user import User
from app.models.vehicle import Vehicle, VehicleBrand, VehicleCategory, VehicleModel, VehicleVersion

DEMO_EMAIL = os.getenv("DEMO_EMAIL", "demo@verano.example").strip().lower()
DEMO_PASSWORD = os.getenv("DEMO_PASSWORD", "DemoPass123")

CATEGORIES = ["Sedan", "SUV", "Pickup", "Sports", "Electric"]

# brand -> model -> versions
CATALOG: dict[str, dict[str, list[str]]] = {
    "Toyota": {"Corolla": ["Base", "Hybrid"], "RAV4": ["LE", "Adventure"]},
    "Honda": {"Civic": ["Sport", "Touring"], "CR-V": ["EX", "Touring"]},
    "Ford": {"F-150": ["XL", "Lariat"], "Mustang": ["EcoBoost", "GT"]},
    "Chevrolet": {"Silverado": ["WT", "LTZ"], "Bolt": ["EV", "EUV"]},
    "Nissan": {"Sentra": ["S", "SR"]},
}

# (brand, model, version, category, year, price)
VEHICLES = [
    ("Toyota", "Corolla", "Base", "Sedan", 2023, 420_000),
    ("Toyota", "Corolla", "Hybrid", "Sedan", 2024, 510_000),
    ("Toyota", "RAV4", "Adventure", "SUV", 2024, 720_000),
    ("Honda", "Civic", "Sport", "Sedan", 2023, 480_000),
    ("Honda", "CR-V", "Touring", "SUV", 2024, 760_000),
    ("Ford", "F-150", "Lariat", "Pickup", 2022, 980_000),
    ("Ford", "Mustang", "GT", "Sports", 2024, 1_150_000),
    ("Chevrolet", "Silverado", "LTZ", "Pickup", 2023, 1_020_000),
    ("Chevrolet", "Bolt", "EUV", "Electric", 2023, 690_000),
    ("Nissan", "Sentra", "SR", "Sedan", 2022, 390_000),
]


def _get_or_create(session: Session, model, **fields):
    existing = session.execute(select(model).filter_by(**fields)).scalar_one_or_none()
    if existing is not None:
        return existing
    instance = model(**fields)
    session.add(instance)
    session.flush()
    return instance


def seed_catalog(session: Session) -> int:
    categories = {name: _get_or_create(session, VehicleCategory, name=name) for name in CATEGORIES}
    brands: dict[str, VehicleBrand] = {}
    models: dict[tuple[str, str], VehicleModel] = {}
    versions: dict[tuple[str, str, str], VehicleVersion] = {}
    for brand_name, brand_models in CATALOG.items():
        brand = brands[brand_name] = _get_or_create(session, VehicleBrand, name=brand_name)
        for model_name, version_names in brand_models.items():
            model = models[(brand_name, model_name)] = _get_or_create(
                session, VehicleModel, brand_id=brand.id, name=model_name
            )
            for version_name in version_names:
                versions[(brand_name, model_name, version_name)] = _get_or_create(
                    session, VehicleVersion, model_id=model.id, name=version_name
                )

    created = 0
    for brand_name, model_name, version_name, category_name, year, price in VEHICLES:
        fields = dict(
            brand_id=brands[brand_name].id,
            model_id=models[(brand_name, model_name)].id,
            version_id=versions[(brand_name, model_name, version_name)].id,
            category_id=categories[category_name].id,
            year=year,
        )
        vehicle = session.execute(select(Vehicle).filter_by(**fields)).scalars().first()
        if vehicle is None:
            session.add(Vehicle(price=price, **fields))
            created += 1
        else:
            vehicle.price = price
    return created


def seed_demo_user(session: Session) -> User:
    prefix = get_settings().local_account_uid_prefix
    user = session.execute(select(User).where(User.email == DEMO_EMAIL)).scalar_one_or_none()
    if user is None:
        user = User(
            email=DEMO_EMAIL,
            name="Demo User",
            firebase_uid=f"{prefix}{DEMO_EMAIL}",
            hashed_password=get_password_hash(DEMO_PASSWORD),
            app_version="1",
        )
        session.add(user)
    else:
        user.hashed_password = get_password_hash(DEMO_PASSWORD)
        user.is_active = True
    return user


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        created = seed_catalog(session)
        user = seed_demo_user(session)
        session.commit()
        print(f"Seeded {created} new vehicle(s); demo account {user.email} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
