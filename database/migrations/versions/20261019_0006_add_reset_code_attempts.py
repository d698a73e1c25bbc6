"""add attempt budget to password reset codes

Revision ID: 20261019_0006
Revises: 20261019_0005
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0006"
down_revision = "20261019_0005"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("password_reset_codes") as batch_op:
        batch_op.add_column(sa.Column("attempt_count", sa.Integer(), nullable=False, server_default="0"))
        batch_op.add_column(sa.Column("max_attempts", sa.Integer(), nullable=False, server_default="5"))


def downgrade() -> None:
    with op.batch_alter_table("password_reset_codes") as batch_op:
        batch_op.drop_column("max_attempts")
        batch_op.drop_column("attempt_count")
