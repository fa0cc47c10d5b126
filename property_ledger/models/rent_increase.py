"""
Rent increase model.

An increase is scheduled ahead of time and applied once its
effective date arrives. The status has a one-way state machine;
APPLIED and CANCELLED are terminal.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Text, Date, DateTime, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from property_ledger.models.base import Base
from property_ledger.models.enums import RentIncreaseStatus


VALID_TRANSITIONS: dict[RentIncreaseStatus, set[RentIncreaseStatus]] = {
    RentIncreaseStatus.SCHEDULED: {
        RentIncreaseStatus.APPLIED,
        RentIncreaseStatus.CANCELLED,
    },
    RentIncreaseStatus.APPLIED: set(),
    RentIncreaseStatus.CANCELLED: set(),
}


class RentIncrease(Base):
    __tablename__ = "rent_increases"

    id: Mapped[int] = mapped_column(primary_key=True)
    lease_id: Mapped[int] = mapped_column(
        ForeignKey("leases.id"), nullable=False, index=True
    )
    previous_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    new_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    notice_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[RentIncreaseStatus] = mapped_column(
        SAEnum(
            RentIncreaseStatus,
            name="rent_increase_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=RentIncreaseStatus.SCHEDULED,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    applied_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    applied_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    lease: Mapped["Lease"] = relationship()

    def can_transition_to(self, new_status: RentIncreaseStatus) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __repr__(self) -> str:
        return (
            f"<RentIncrease {self.id} {self.previous_amount}->"
            f"{self.new_amount} ({self.status.value})>"
        )
