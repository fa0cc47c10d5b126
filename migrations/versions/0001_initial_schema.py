"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


account_type_enum = sa.Enum(
    "ASSET", "LIABILITY", "INCOME", "EXPENSE", name="account_type_enum"
)
debit_credit_enum = sa.Enum("DR", "CR", name="debit_credit_enum")
lease_status_enum = sa.Enum(
    "PENDING", "ACTIVE", "ENDED", name="lease_status_enum", create_constraint=True
)
rent_increase_status_enum = sa.Enum(
    "SCHEDULED", "APPLIED", "CANCELLED",
    name="rent_increase_status_enum",
    create_constraint=True,
)


def upgrade() -> None:
    op.create_table(
        "ledger_accounts",
        sa.Column("code", sa.String(length=10), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("account_type", account_type_enum, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("address", sa.String(length=300), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "units",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "property_id", sa.Integer(),
            sa.ForeignKey("properties.id"), nullable=False,
        ),
        sa.Column("unit_number", sa.String(length=50), nullable=False),
        sa.Column("square_feet", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_units_property_id", "units", ["property_id"])
    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "leases",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "property_id", sa.Integer(),
            sa.ForeignKey("properties.id"), nullable=True,
        ),
        sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id"), nullable=True),
        sa.Column("tenant_name", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("monthly_rent_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("charge_day", sa.Integer(), nullable=False),
        sa.Column("security_deposit_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("status", lease_status_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_leases_property_id", "leases", ["property_id"])
    op.create_index("ix_leases_unit_id", "leases", ["unit_id"])
    op.create_table(
        "scheduled_charges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "lease_id", sa.Integer(), sa.ForeignKey("leases.id"), nullable=False
        ),
        sa.Column(
            "account_code", sa.String(length=10),
            sa.ForeignKey("ledger_accounts.code"), nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=False),
        sa.Column("day_of_month", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("last_charged_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_scheduled_charges_lease_id", "scheduled_charges", ["lease_id"]
    )
    op.create_table(
        "posted_charges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "scheduled_charge_id", sa.Integer(),
            sa.ForeignKey("scheduled_charges.id"), nullable=False,
        ),
        sa.Column("period", sa.String(length=7), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("transaction_id", sa.Uuid(), nullable=False),
        sa.Column("posted_by", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "scheduled_charge_id", "period",
            name="uq_posted_charges_schedule_period",
        ),
    )
    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("transaction_id", sa.Uuid(), nullable=False),
        sa.Column(
            "account_code", sa.String(length=10),
            sa.ForeignKey("ledger_accounts.code"), nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("debit_credit", debit_credit_enum, nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("lease_id", sa.Integer(), sa.ForeignKey("leases.id"), nullable=True),
        sa.Column("posted_by", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column(
            "property_id", sa.Integer(),
            sa.ForeignKey("properties.id"), nullable=True,
        ),
        sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id"), nullable=True),
        sa.Column(
            "vendor_id", sa.Integer(), sa.ForeignKey("vendors.id"), nullable=True
        ),
        sa.Column("work_order_id", sa.Integer(), nullable=True),
        sa.Column(
            "scheduled_charge_id", sa.Integer(),
            sa.ForeignKey("scheduled_charges.id"), nullable=True,
        ),
        sa.Column("charge_period", sa.String(length=7), nullable=True),
        sa.Column("reversal_of", sa.Uuid(), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_ledger_entries_amount_positive"),
    )
    for column in (
        "transaction_id", "account_code", "entry_date", "lease_id",
        "property_id", "scheduled_charge_id", "reversal_of",
    ):
        op.create_index(f"ix_ledger_entries_{column}", "ledger_entries", [column])
    op.create_table(
        "rent_increases",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "lease_id", sa.Integer(), sa.ForeignKey("leases.id"), nullable=False
        ),
        sa.Column("previous_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("new_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("effective_date", sa.Date(), nullable=False),
        sa.Column("notice_date", sa.Date(), nullable=False),
        sa.Column("status", rent_increase_status_enum, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("applied_at", sa.DateTime(), nullable=True),
        sa.Column("applied_by", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_rent_increases_lease_id", "rent_increases", ["lease_id"])
    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_type", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("actor", sa.String(length=100), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_index("ix_rent_increases_lease_id", table_name="rent_increases")
    op.drop_table("rent_increases")
    for column in (
        "transaction_id", "account_code", "entry_date", "lease_id",
        "property_id", "scheduled_charge_id", "reversal_of",
    ):
        op.drop_index(f"ix_ledger_entries_{column}", table_name="ledger_entries")
    op.drop_table("ledger_entries")
    op.drop_table("posted_charges")
    op.drop_index("ix_scheduled_charges_lease_id", table_name="scheduled_charges")
    op.drop_table("scheduled_charges")
    op.drop_index("ix_leases_unit_id", table_name="leases")
    op.drop_index("ix_leases_property_id", table_name="leases")
    op.drop_table("leases")
    op.drop_table("vendors")
    op.drop_index("ix_units_property_id", table_name="units")
    op.drop_table("units")
    op.drop_table("properties")
    op.drop_table("ledger_accounts")
    for enum in (
        rent_increase_status_enum,
        lease_status_enum,
        debit_credit_enum,
        account_type_enum,
    ):
        enum.drop(op.get_bind(), checkfirst=True)
