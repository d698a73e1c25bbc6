"""create vehicle opinions

Revision ID: 20261019_0008
Revises: 20261019_0007
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0008"
down_revision = "20261019_0007"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "vehicle_opinions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("vehicle_id", sa.Integer(), sa.ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rate", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("vehicle_id", "user_id", name="uq_vehicle_opinions_vehicle_user"),
    )
    op.create_index("ix_vehicle_opinions_vehicle_id", "vehicle_opinions", ["vehicle_id"], unique=False)
    op.create_index("ix_vehicle_opinions_user_id", "vehicle_opinions", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_vehicle_opinions_user_id", table_name="vehicle_opinions")
    op.drop_index("ix_vehicle_opinions_vehicle_id", table_name="vehicle_opinions")
    op.drop_table("vehicle_opinions")
