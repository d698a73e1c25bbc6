"""create user comparisons

Revision ID: 20261019_0007
Revises: 20261019_0006
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0007"
down_revision = "20261019_0006"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_comparisons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_user_comparisons_user_id", "user_comparisons", ["user_id"], unique=False)
    op.create_table(
        "comparison_vehicles",
        sa.Column(
            "comparison_id",
            sa.Integer(),
            sa.ForeignKey("user_comparisons.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("vehicle_id", sa.Integer(), sa.ForeignKey("vehicles.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )


def downgrade() -> None:
    op.drop_table("comparison_vehicles")
    op.drop_index("ix_user_comparisons_user_id", table_name="user_comparisons")
    op.drop_table("user_comparisons")
