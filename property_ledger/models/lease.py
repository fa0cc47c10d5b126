"""
Lease model.

A lease is the join key for most ledger entries: every charge
and payment against a tenant carries its lease_id, and the
tenant's balance is derived from the AR entries of the lease.
The lease itself never stores a balance.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Integer, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from property_ledger.models.base import Base
from property_ledger.models.enums import LateFeeType, LeaseStatus


class Lease(Base):
    __tablename__ = "leases"

    id: Mapped[int] = mapped_column(primary_key=True)
    property_id: Mapped[int | None] = mapped_column(
        ForeignKey("properties.id"), nullable=True, index=True
    )
    unit_id: Mapped[int | None] = mapped_column(
        ForeignKey("units.id"), nullable=True, index=True
    )
    tenant_name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    monthly_rent_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    # Day of month charges are due
    charge_day: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1
    )
    security_deposit_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    # FLAT: a currency amount. PERCENTAGE: percent of monthly rent.
    late_fee_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    late_fee_type: Mapped[LateFeeType | None] = mapped_column(
        SAEnum(LateFeeType, name="late_fee_type_enum", create_constraint=True),
        nullable=True,
    )
    status: Mapped[LeaseStatus] = mapped_column(
        SAEnum(LeaseStatus, name="lease_status_enum", create_constraint=True),
        nullable=False,
        default=LeaseStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    rental_property: Mapped["Property | None"] = relationship()
    unit: Mapped["Unit | None"] = relationship(back_populates="leases")
    ledger_entries: Mapped[list["LedgerEntry"]] = relationship(
        back_populates="lease"
    )
    scheduled_charges: Mapped[list["ScheduledCharge"]] = relationship(
        back_populates="lease"
    )

    def __repr__(self) -> str:
        return f"<Lease {self.id} {self.tenant_name} ({self.status.value})>"
