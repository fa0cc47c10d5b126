"""lease late fee terms

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-20 00:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


late_fee_type_enum = sa.Enum(
    "FLAT", "PERCENTAGE", name="late_fee_type_enum", create_constraint=True
)


def upgrade() -> None:
    late_fee_type_enum.create(op.get_bind(), checkfirst=True)
    with op.batch_alter_table("leases") as batch_op:
        batch_op.add_column(
            sa.Column("late_fee_amount", sa.Numeric(12, 2), nullable=True)
        )
        batch_op.add_column(
            sa.Column("late_fee_type", late_fee_type_enum, nullable=True)
        )


def downgrade() -> None:
    with op.batch_alter_table("leases") as batch_op:
        batch_op.drop_column("late_fee_type")
        batch_op.drop_column("late_fee_amount")
    late_fee_type_enum.drop(op.get_bind(), checkfirst=True)
