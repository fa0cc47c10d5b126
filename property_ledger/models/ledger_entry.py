"""
Ledger entry model.

Each entry is one leg of a double-entry transaction. Legs of
the same business transaction share a transaction_id. Entries
are immutable: once flushed they are never modified or deleted,
and corrections are made by posting offsetting entries.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Integer, Numeric, ForeignKey, CheckConstraint,
    Enum as SAEnum, Uuid, event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from property_ledger.exceptions import ValidationError
from property_ledger.models.base import Base
from property_ledger.models.enums import DebitCredit


class LedgerEntry(Base):
    """
    An immutable debit or credit entry in the ledger.

    Within one transaction_id the DR amounts equal the CR
    amounts. This invariant is enforced by the LedgerService,
    not by the model.
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_ledger_entries_amount_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, default=uuid.uuid4, index=True
    )
    account_code: Mapped[str] = mapped_column(
        ForeignKey("ledger_accounts.code"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    debit_credit: Mapped[DebitCredit] = mapped_column(
        SAEnum(DebitCredit, name="debit_credit_enum"),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    lease_id: Mapped[int | None] = mapped_column(
        ForeignKey("leases.id"), nullable=True, index=True
    )
    posted_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    # Reporting drill-down linkage
    property_id: Mapped[int | None] = mapped_column(
        ForeignKey("properties.id"), nullable=True, index=True
    )
    unit_id: Mapped[int | None] = mapped_column(
        ForeignKey("units.id"), nullable=True
    )
    vendor_id: Mapped[int | None] = mapped_column(
        ForeignKey("vendors.id"), nullable=True
    )
    # Work orders live in another system; only the id is kept.
    work_order_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Set on entries produced by the scheduled charge poster
    scheduled_charge_id: Mapped[int | None] = mapped_column(
        ForeignKey("scheduled_charges.id"), nullable=True, index=True
    )
    charge_period: Mapped[str | None] = mapped_column(String(7), nullable=True)

    # transaction_id of the transaction this one offsets
    reversal_of: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, nullable=True, index=True
    )

    account: Mapped["LedgerAccount"] = relationship(back_populates="entries")
    lease: Mapped["Lease | None"] = relationship(back_populates="ledger_entries")
    rental_property: Mapped["Property | None"] = relationship()
    unit: Mapped["Unit | None"] = relationship()
    vendor: Mapped["Vendor | None"] = relationship()

    @property
    def signed_amount(self) -> Decimal:
        """Amount with debits positive and credits negative."""
        if self.debit_credit == DebitCredit.DR:
            return self.amount
        return -self.amount

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry {self.debit_credit.value} "
            f"{self.account_code} {self.amount}>"
        )


@event.listens_for(LedgerEntry, "before_update")
def _refuse_update(mapper, connection, target):
    raise ValidationError(
        f"Ledger entry {target.id} is immutable; post an offsetting entry"
    )


@event.listens_for(LedgerEntry, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise ValidationError(
        f"Ledger entry {target.id} cannot be deleted; post an offsetting entry"
    )
