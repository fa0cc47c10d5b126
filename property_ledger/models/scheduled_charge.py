"""
Scheduled charge and posted charge models.

A ScheduledCharge is a recurring-charge template (monthly rent,
parking, pet fee). Each month it falls due once; the poster
turns that due period into a pair of ledger entries.

PostedCharge is the idempotency record for one
(scheduled_charge_id, period) pair. The unique constraint is
what guarantees a period is charged at most once, even when two
posting runs race each other.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Integer, Numeric, ForeignKey,
    UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from property_ledger.models.base import Base


class ScheduledCharge(Base):
    """
    Never hard-deleted while its lease is active. A schedule is
    ended by setting end_date.
    """

    __tablename__ = "scheduled_charges"

    id: Mapped[int] = mapped_column(primary_key=True)
    lease_id: Mapped[int] = mapped_column(
        ForeignKey("leases.id"), nullable=False, index=True
    )
    account_code: Mapped[str] = mapped_column(
        ForeignKey("ledger_accounts.code"), nullable=False, default="4000"
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    day_of_month: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    last_charged_date: Mapped[date | None] = mapped_column(
        Date, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    lease: Mapped["Lease"] = relationship(back_populates="scheduled_charges")
    posted_charges: Mapped[list["PostedCharge"]] = relationship(
        back_populates="scheduled_charge"
    )

    def is_open_on(self, on: date) -> bool:
        """True when the schedule's window covers the given date."""
        if on < self.start_date:
            return False
        return self.end_date is None or on <= self.end_date

    def __repr__(self) -> str:
        return f"<ScheduledCharge {self.id} {self.description} {self.amount}>"


class PostedCharge(Base):
    __tablename__ = "posted_charges"
    __table_args__ = (
        UniqueConstraint(
            "scheduled_charge_id", "period",
            name="uq_posted_charges_schedule_period",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    scheduled_charge_id: Mapped[int] = mapped_column(
        ForeignKey("scheduled_charges.id"), nullable=False
    )
    # YYYY-MM
    period: Mapped[str] = mapped_column(String(7), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    transaction_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    posted_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    scheduled_charge: Mapped["ScheduledCharge"] = relationship(
        back_populates="posted_charges"
    )

    def __repr__(self) -> str:
        return f"<PostedCharge {self.scheduled_charge_id} {self.period}>"
