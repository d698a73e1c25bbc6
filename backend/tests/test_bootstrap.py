import pytest
from sqlalchemy import create_engine, text

from app.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_required_columns_cover_auth_and_catalog_tables():
    assert {"users", "login_otp_challenges", "password_reset_codes", "vehicles", "favorite_vehicles"} <= set(
        bootstrap.REQUIRED_COLUMNS
    )
    for table_name, columns in bootstrap.REQUIRED_COLUMNS.items():
        assert columns <= set(bootstrap.Base.metadata.tables[table_name].c.keys()), table_name


def test_inspect_schema_reports_missing_tables_and_columns():
    engine = create_engine("sqlite+pysqlite://")
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE users (id INTEGER PRIMARY KEY, email VARCHAR(255))"))
        report = bootstrap.inspect_schema(connection)

    assert not report.ok
    assert "vehicles" in report.missing_tables
    assert report.missing_columns["users"] == ["firebase_uid", "hashed_password", "is_active"]
    engine.dispose()
