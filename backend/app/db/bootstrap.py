from __future__ import annotations

from dataclasses import dataclass, field
import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "firebase_uid", "hashed_password", "is_active"},
    "login_otp_challenges": {"id", "user_id", "code_hash", "expires_at", "used_at", "attempt_count"},
    "password_reset_codes": {"email", "code_hash", "expires_at", "attempt_count", "max_attempts"},
    "vehicles": {"id", "brand_id", "model_id", "version_id", "category_id", "year", "price"},
    "favorite_vehicles": {"user_id", "vehicle_id"},
    "user_comparisons": {"id", "user_id"},
    "comparison_vehicles": {"comparison_id", "vehicle_id", "position"},
    "vehicle_opinions": {"id", "vehicle_id", "user_id", "rate"},
    "user_preferences": {"id", "user_id", "brand_id", "category_id", "price_max"},
}


@dataclass
class SchemaReport:
    missing_tables: list[str] = field(default_factory=list)
    missing_columns: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.missing_tables and not self.missing_columns


def inspect_schema(connection: Connection) -> SchemaReport:
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    report = SchemaReport()
    for table_name, required in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            report.missing_tables.append(table_name)
            continue
        existing = {column["name"] for column in inspector.get_columns(table_name)}
        missing = sorted(required - existing)
        if missing:
            report.missing_columns[table_name] = missing
    return report


def _assert_required_columns() -> None:
    with engine.connect() as connection:
        report = inspect_schema(connection)
    if report.missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(sorted(report.missing_tables))}")
    if report.missing_columns:
        flat = [f"{table}.{column}" for table, columns in report.missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flat)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception as exc:
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
