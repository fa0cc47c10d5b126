"""
Balance and aging calculator.

Everything here is derived from the Accounts Receivable (1200)
entries of a lease; nothing is stored. A positive balance means
the tenant owes money, a negative balance means the tenant has
a credit.

Aging allocates payments oldest-first: the total of all AR
credits is applied against AR charges in entry_date order, and
whatever remains of each charge is bucketed by its own age.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from property_ledger.exceptions import NotFoundError
from property_ledger.models.enums import DebitCredit, LeaseStatus
from property_ledger.models.lease import Lease
from property_ledger.models.ledger_entry import LedgerEntry
from property_ledger.services.chart_of_accounts import ACCOUNTS_RECEIVABLE

ZERO = Decimal("0")

BUCKET_LABELS = ("0-30", "31-60", "61-90", "90+")


def bucket_for(days: int) -> str:
    if days <= 30:
        return "0-30"
    if days <= 60:
        return "31-60"
    if days <= 90:
        return "61-90"
    return "90+"


def empty_buckets() -> dict[str, Decimal]:
    return {label: ZERO for label in BUCKET_LABELS}


@dataclass
class OpenCharge:
    """A charge with whatever is still unpaid on it."""
    entry_id: int
    entry_date: date
    description: str
    amount: Decimal
    remaining: Decimal


@dataclass
class AgingResult:
    lease_id: int
    as_of_date: date
    buckets: dict[str, Decimal] = field(default_factory=empty_buckets)
    open_charges: list[OpenCharge] = field(default_factory=list)
    unapplied_credit: Decimal = ZERO

    @property
    def total_outstanding(self) -> Decimal:
        return sum(self.buckets.values(), ZERO)

    @property
    def oldest_open_charge(self) -> OpenCharge | None:
        return self.open_charges[0] if self.open_charges else None


def allocate_oldest_first(
    entries: list[LedgerEntry],
) -> tuple[list[OpenCharge], Decimal]:
    """
    Apply all AR credits to AR debits, oldest debit first.

    Entries are sorted here by (entry_date, created_at, id), so
    the result does not depend on the order they were inserted
    or queried. Returns the charges that still have something
    outstanding, oldest first, and any credit left over once
    every charge is paid.
    """
    ordered = sorted(
        entries, key=lambda e: (e.entry_date, e.created_at, e.id)
    )
    charges = [
        OpenCharge(
            entry_id=e.id,
            entry_date=e.entry_date,
            description=e.description,
            amount=e.amount,
            remaining=e.amount,
        )
        for e in ordered
        if e.debit_credit == DebitCredit.DR
    ]
    credit = sum(
        (e.amount for e in ordered if e.debit_credit == DebitCredit.CR), ZERO
    )

    for charge in charges:
        if credit <= 0:
            break
        applied = min(credit, charge.remaining)
        charge.remaining -= applied
        credit -= applied

    open_charges = [c for c in charges if c.remaining > 0]
    return open_charges, credit


@dataclass
class TenantBalance:
    lease_id: int
    tenant_name: str
    status: LeaseStatus
    balance: Decimal
    monthly_rent: Decimal
    property_name: str | None = None
    unit_name: str | None = None


@dataclass
class TenantBalanceSummary:
    total_tenants: int = 0
    tenants_owing: int = 0
    tenants_with_credit: int = 0
    total_owed: Decimal = ZERO
    total_credits: Decimal = ZERO

    @property
    def net_balance(self) -> Decimal:
        return self.total_owed - self.total_credits


@dataclass
class StatementLine:
    entry_id: int
    transaction_id: uuid.UUID
    entry_date: date
    description: str
    charge: Decimal
    payment: Decimal
    running_balance: Decimal


@dataclass
class LeaseStatement:
    lease_id: int
    tenant_name: str
    property_name: str | None
    unit_name: str | None
    status: LeaseStatus
    lease_start: date | None
    lease_end: date | None
    start_date: date | None
    end_date: date
    opening_balance: Decimal
    lines: list[StatementLine] = field(default_factory=list)

    @property
    def total_charges(self) -> Decimal:
        return sum((line.charge for line in self.lines), ZERO)

    @property
    def total_payments(self) -> Decimal:
        return sum((line.payment for line in self.lines), ZERO)

    @property
    def closing_balance(self) -> Decimal:
        return self.opening_balance + self.total_charges - self.total_payments


class BalanceService:
    """Read-only; safe to use from concurrent requests."""

    def __init__(self, db: Session):
        self.db = db

    def _get_lease(self, lease_id: int) -> Lease:
        lease = self.db.get(Lease, lease_id)
        if not lease:
            raise NotFoundError("Lease", lease_id)
        return lease

    def _ar_entries(
        self, lease_id: int, as_of: date | None = None
    ) -> list[LedgerEntry]:
        stmt = select(LedgerEntry).where(
            LedgerEntry.lease_id == lease_id,
            LedgerEntry.account_code == ACCOUNTS_RECEIVABLE,
        )
        if as_of is not None:
            stmt = stmt.where(LedgerEntry.entry_date <= as_of)
        return list(self.db.execute(stmt).scalars().all())

    def balance_of(self, lease_id: int) -> Decimal:
        """Sum of AR debits minus sum of AR credits for the lease."""
        self._get_lease(lease_id)
        return sum(
            (e.signed_amount for e in self._ar_entries(lease_id)), ZERO
        )

    def aging_of(self, lease_id: int, as_of: date | None = None) -> AgingResult:
        """
        Bucket the lease's outstanding charges by age.

        Only entries dated on or before as_of are considered.
        Each charge's unpaid remainder lands in the bucket for
        (as_of - entry_date) days, so an old charge paid off by
        a later payment leaves the newer charges in younger buckets.
        """
        self._get_lease(lease_id)
        as_of = as_of or date.today()
        open_charges, unapplied = allocate_oldest_first(
            self._ar_entries(lease_id, as_of)
        )

        result = AgingResult(
            lease_id=lease_id,
            as_of_date=as_of,
            open_charges=open_charges,
            unapplied_credit=unapplied,
        )
        for charge in open_charges:
            days = (as_of - charge.entry_date).days
            result.buckets[bucket_for(days)] += charge.remaining
        return result

    def tenant_balances(self) -> tuple[list[TenantBalance], TenantBalanceSummary]:
        """Balance of every lease that has not ended, by tenant name."""
        leases = self.db.execute(
            select(Lease)
            .where(Lease.status != LeaseStatus.ENDED)
            .order_by(Lease.tenant_name, Lease.id)
        ).scalars().all()

        balances = []
        summary = TenantBalanceSummary()
        for lease in leases:
            balance = sum(
                (e.signed_amount for e in self._ar_entries(lease.id)), ZERO
            )
            balances.append(TenantBalance(
                lease_id=lease.id,
                tenant_name=lease.tenant_name,
                status=lease.status,
                balance=balance,
                monthly_rent=lease.monthly_rent_amount,
                property_name=(
                    lease.rental_property.name if lease.rental_property else None
                ),
                unit_name=lease.unit.unit_number if lease.unit else None,
            ))
            summary.total_tenants += 1
            if balance > 0:
                summary.tenants_owing += 1
                summary.total_owed += balance
            elif balance < 0:
                summary.tenants_with_credit += 1
                summary.total_credits += -balance
        return balances, summary

    def statement(
        self,
        lease_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> LeaseStatement:
        """
        Charges and payments of a lease with a running balance.

        Without start the statement runs from the first entry and
        opens at zero; otherwise everything dated before start is
        carried in as the opening balance. Reversals show up on the
        opposite side of what they reverse.
        """
        lease = self._get_lease(lease_id)
        end = end or date.today()
        entries = sorted(
            self._ar_entries(lease_id, end),
            key=lambda e: (e.entry_date, e.created_at, e.id),
        )

        opening = sum(
            (e.signed_amount for e in entries
             if start is not None and e.entry_date < start),
            ZERO,
        )
        statement = LeaseStatement(
            lease_id=lease.id,
            tenant_name=lease.tenant_name,
            property_name=(
                lease.rental_property.name if lease.rental_property else None
            ),
            unit_name=lease.unit.unit_number if lease.unit else None,
            status=lease.status,
            lease_start=lease.start_date,
            lease_end=lease.end_date,
            start_date=start,
            end_date=end,
            opening_balance=opening,
        )

        running = opening
        for entry in entries:
            if start is not None and entry.entry_date < start:
                continue
            running += entry.signed_amount
            is_charge = entry.debit_credit == DebitCredit.DR
            statement.lines.append(StatementLine(
                entry_id=entry.id,
                transaction_id=entry.transaction_id,
                entry_date=entry.entry_date,
                description=entry.description,
                charge=entry.amount if is_charge else ZERO,
                payment=ZERO if is_charge else entry.amount,
                running_balance=running,
            ))
        return statement
