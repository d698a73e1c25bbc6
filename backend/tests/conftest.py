import os
import re

# Must be set before the app (and its cached settings/engine) is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.deps import get_db
from app.db.base import Base
from app.main import app
from app.models.vehicle import Vehicle, VehicleBrand, VehicleCategory, VehicleModel, VehicleVersion
from app.services.rate_limit import clear_rate_limiter

DEFAULT_PASSWORD = "password123"


@pytest.fixture()
def session_factory():
    clear_rate_limiter()
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()
    clear_rate_limiter()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def outbox(monkeypatch):
    """Capture outgoing mail instead of talking to SMTP."""
    sent: list[dict] = []

    def fake_send_email(*, to_email: str, subject: str, text_content: str, html_content=None):
        sent.append({"to": to_email, "subject": subject, "body": text_content})

    monkeypatch.setattr("app.services.email.send_email", fake_send_email)
    return sent


def last_code(outbox) -> str:
    assert outbox, "no email was sent"
    match = re.search(r"\b(\d{6})\b", outbox[-1]["body"])
    assert match is not None
    return match.group(1)


def register_user(client, email="driver@example.com", password=DEFAULT_PASSWORD, name="Test Driver"):
    response = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
    assert response.status_code == 201, response.text
    return response.json()


def login_with_otp(client, outbox, email="driver@example.com", password=DEFAULT_PASSWORD) -> dict:
    step_one = client.post("/api/auth/login", json={"email": email, "password": password})
    assert step_one.status_code == 200, step_one.text
    step_two = client.post("/api/auth/login", json={"email": email, "otp": last_code(outbox)})
    assert step_two.status_code == 200, step_two.text
    return step_two.json()


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def sign_in(client, outbox, email="driver@example.com") -> tuple[int, dict[str, str]]:
    """Register, complete both login steps and return the user id with auth headers."""
    register_user(client, email=email)
    data = login_with_otp(client, outbox, email=email)
    return data["user"]["userId"], auth_header(data["token"])


@pytest.fixture()
def catalog(session_factory) -> dict[str, int]:
    """Two brands, two categories and four vehicles; returns ids by label."""
    with session_factory() as db:
        toyota = VehicleBrand(name="Toyota")
        ford = VehicleBrand(name="Ford")
        sedan = VehicleCategory(name="Sedan")
        pickup = VehicleCategory(name="Pickup")
        db.add_all([toyota, ford, sedan, pickup])
        db.flush()

        corolla = VehicleModel(brand_id=toyota.id, name="Corolla")
        f150 = VehicleModel(brand_id=ford.id, name="F-150")
        db.add_all([corolla, f150])
        db.flush()

        base = VehicleVersion(model_id=corolla.id, name="Base")
        lariat = VehicleVersion(model_id=f150.id, name="Lariat")
        db.add_all([base, lariat])
        db.flush()

        rows = {
            "corolla_2022": Vehicle(brand_id=toyota.id, model_id=corolla.id, version_id=base.id,
                                    category_id=sedan.id, year=2022, price=380_000),
            "corolla_2024": Vehicle(brand_id=toyota.id, model_id=corolla.id, version_id=base.id,
                                    category_id=sedan.id, year=2024, price=450_000),
            "f150_2021": Vehicle(brand_id=ford.id, model_id=f150.id, version_id=lariat.id,
                                 category_id=pickup.id, year=2021, price=900_000),
            "f150_2023": Vehicle(brand_id=ford.id, model_id=f150.id, version_id=lariat.id,
                                 category_id=pickup.id, year=2023, price=1_050_000,
                                 image_url="https://cdn.example.com/f150.jpg"),
        }
        db.add_all(rows.values())
        db.commit()

        ids = {label: vehicle.id for label, vehicle in rows.items()}
        ids.update(toyota=toyota.id, ford=ford.id, sedan=sedan.id, pickup=pickup.id)
        ids.update(corolla=corolla.id, f150=f150.id, base=base.id, lariat=lariat.id)
        return ids
