"""create vehicle catalog

Revision ID: 20261019_0004
Revises: 20261019_0003
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0004"
down_revision = "20261019_0003"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "vehicle_brands",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
    )
    op.create_table(
        "vehicle_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
    )
    op.create_table(
        "vehicle_models",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("brand_id", sa.Integer(), sa.ForeignKey("vehicle_brands.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
    )
    op.create_index("ix_vehicle_models_brand_id", "vehicle_models", ["brand_id"], unique=False)
    op.create_table(
        "vehicle_versions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("model_id", sa.Integer(), sa.ForeignKey("vehicle_models.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
    )
    op.create_index("ix_vehicle_versions_model_id", "vehicle_versions", ["model_id"], unique=False)
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("brand_id", sa.Integer(), sa.ForeignKey("vehicle_brands.id"), nullable=False),
        sa.Column("model_id", sa.Integer(), sa.ForeignKey("vehicle_models.id"), nullable=False),
        sa.Column("version_id", sa.Integer(), sa.ForeignKey("vehicle_versions.id"), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("vehicle_categories.id"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    for column in ("brand_id", "model_id", "category_id", "year", "price"):
        op.create_index(f"ix_vehicles_{column}", "vehicles", [column], unique=False)


def downgrade() -> None:
    for column in ("price", "year", "category_id", "model_id", "brand_id"):
        op.drop_index(f"ix_vehicles_{column}", table_name="vehicles")
    op.drop_table("vehicles")
    op.drop_index("ix_vehicle_versions_model_id", table_name="vehicle_versions")
    op.drop_table("vehicle_versions")
    op.drop_index("ix_vehicle_models_brand_id", table_name="vehicle_models")
    op.drop_table("vehicle_models")
    op.drop_table("vehicle_categories")
    op.drop_table("vehicle_brands")
