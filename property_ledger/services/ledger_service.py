"""
Ledger service: the posting engine.

This service enforces the fundamental rules:
1. Every business transaction balances (debits = credits)
2. Entries are immutable (append-only)
3. Every entry references a known account code
4. Amounts are positive with at most two decimal places

No other service writes ledger entries directly. Payments,
charges, expenses and deposits all pass through here.
"""

import json
import logging
import uuid
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from property_ledger.config import get_settings
from property_ledger.exceptions import (
    NotFoundError,
    PostingError,
    ValidationError,
)
from property_ledger.models.audit_log import AuditLog
from property_ledger.models.enums import (
    AccountType,
    DebitCredit,
    LateFeeType,
    LeaseStatus,
)
from property_ledger.models.lease import Lease
from property_ledger.models.ledger_entry import LedgerEntry
from property_ledger.schemas.ledger import (
    ChargeRequest,
    DepositReceiveRequest,
    DepositReturnRequest,
    ExpenseRequest,
    LateFeeRequest,
    PaymentRequest,
    PostEntriesRequest,
    PostEntryParams,
)
from property_ledger.services.chart_of_accounts import (
    ACCOUNTS_RECEIVABLE,
    CASH,
    LATE_FEES,
    OTHER_INCOME,
    RENTAL_INCOME,
    SECURITY_DEPOSITS_HELD,
    lookup,
    require_account,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def validate_amount(amount: Decimal | None) -> Decimal:
    """Reject zero, negative and sub-cent amounts."""
    if amount is None or not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    if amount != amount.quantize(CENT):
        raise ValidationError("Amount cannot have more than two decimal places")
    return amount


class LedgerService:
    """
    All ledger writes pass through this service.

    The service takes a database session as a constructor
    argument, so the caller controls the transaction boundary:
    a successful posting is flushed but not committed. When the
    store fails mid-write, the service rolls the session back
    itself before raising PostingError, so a half-written
    transaction can never be committed by mistake.
    """

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    # --- Validation ---

    def require_lease(self, lease_id: int | None) -> Lease:
        if lease_id is None:
            raise ValidationError("Lease ID is required")
        lease = self.db.get(Lease, lease_id)
        if not lease:
            raise NotFoundError("Lease", lease_id)
        return lease

    def _build_entry(
        self,
        params: PostEntryParams,
        transaction_id: uuid.UUID,
        reversal_of: uuid.UUID | None = None,
    ) -> LedgerEntry:
        """Validate one leg and build its row without adding it."""
        validate_amount(params.amount)
        require_account(params.account_code)

        property_id = params.property_id
        unit_id = params.unit_id
        if params.lease_id is not None:
            lease = self.require_lease(params.lease_id)
            property_id = property_id or lease.property_id
            unit_id = unit_id or lease.unit_id

        return LedgerEntry(
            transaction_id=transaction_id,
            account_code=params.account_code,
            amount=params.amount,
            debit_credit=params.debit_credit,
            description=params.description,
            entry_date=params.entry_date or date.today(),
            lease_id=params.lease_id,
            posted_by=params.posted_by or self.settings.DEFAULT_ACTOR,
            property_id=property_id,
            unit_id=unit_id,
            vendor_id=params.vendor_id,
            work_order_id=params.work_order_id,
            scheduled_charge_id=params.scheduled_charge_id,
            charge_period=params.charge_period,
            reversal_of=reversal_of,
        )

    def _write(self, entries: list[LedgerEntry], what: str) -> list[LedgerEntry]:
        """
        Send every leg to the store in a single flush.

        Either all legs are written or, after a store failure,
        none are: the session is rolled back and the failure is
        surfaced as PostingError with the cause chained.
        """
        try:
            self.db.add_all(entries)
            self.db.flush()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to record %s", what)
            raise PostingError(f"Failed to record {what}") from exc
        return entries

    # --- Posting primitives ---

    def post_entry(self, params: PostEntryParams) -> LedgerEntry:
        """
        Append exactly one ledger entry.

        This is the primitive the business operations are built
        from. On its own it cannot keep the books balanced; use
        post_entries (or one of the record_* operations) for
        anything that represents a real transaction.
        """
        entry = self._build_entry(params, uuid.uuid4())
        self._write([entry], "ledger entry")
        return entry

    def post_entries(
        self, request: PostEntriesRequest, what: str = "transaction"
    ) -> list[LedgerEntry]:
        """
        Post a balanced set of ledger entries as one transaction.

        Every leg is validated before any is written, so a bad
        second leg never leaves the first one behind. If the
        transaction_id has been used before, the entries already
        posted under it are returned instead.
        """
        existing = self.get_entries_by_transaction(request.transaction_id)
        if existing:
            return existing

        entries = [
            self._build_entry(p, request.transaction_id, request.reversal_of)
            for p in request.entries
        ]

        total_debits = sum(
            (e.amount for e in entries if e.debit_credit == DebitCredit.DR),
            Decimal("0"),
        )
        total_credits = sum(
            (e.amount for e in entries if e.debit_credit == DebitCredit.CR),
            Decimal("0"),
        )
        if total_debits != total_credits:
            raise ValidationError(
                f"Transaction does not balance: "
                f"debits={total_debits}, credits={total_credits}"
            )

        self._write(entries, what)
        logger.info(
            "Posted %s %s: %d entries totalling %s",
            what, request.transaction_id, len(entries), total_debits,
        )
        return entries

    def _post_pair(
        self,
        debit_code: str,
        credit_code: str,
        amount: Decimal,
        description: str,
        entry_date: date | None,
        what: str,
        posted_by: str | None = None,
        lease_id: int | None = None,
        transaction_id: uuid.UUID | None = None,
        **linkage,
    ) -> list[LedgerEntry]:
        """Post a DR/CR pair of the same amount."""
        shared = dict(
            amount=amount,
            description=description,
            entry_date=entry_date or date.today(),
            lease_id=lease_id,
            posted_by=posted_by,
            **linkage,
        )
        request = PostEntriesRequest(
            transaction_id=transaction_id or uuid.uuid4(),
            entries=[
                PostEntryParams(
                    account_code=debit_code,
                    debit_credit=DebitCredit.DR,
                    **shared,
                ),
                PostEntryParams(
                    account_code=credit_code,
                    debit_credit=DebitCredit.CR,
                    **shared,
                ),
            ],
        )
        return self.post_entries(request, what)

    # --- Business transactions ---

    def record_payment(
        self, request: PaymentRequest, posted_by: str | None = None
    ) -> list[LedgerEntry]:
        """
        Record a tenant payment.

        Accounting:
            DEBIT  Cash (asset increases)
            CREDIT Accounts Receivable (tenant owes less)
        """
        validate_amount(request.amount)
        self.require_lease(request.lease_id)
        return self._post_pair(
            CASH,
            ACCOUNTS_RECEIVABLE,
            request.amount,
            request.description,
            request.payment_date,
            "payment",
            posted_by=posted_by,
            lease_id=request.lease_id,
        )

    def record_charge(
        self,
        request: ChargeRequest,
        posted_by: str | None = None,
        scheduled_charge_id: int | None = None,
        charge_period: str | None = None,
        transaction_id: uuid.UUID | None = None,
    ) -> list[LedgerEntry]:
        """
        Charge a tenant.

        Accounting:
            DEBIT  Accounts Receivable (tenant owes more)
            CREDIT Income account (revenue recognised)
        """
        validate_amount(request.amount)
        self.require_lease(request.lease_id)
        require_account(request.account_code, AccountType.INCOME)
        return self._post_pair(
            ACCOUNTS_RECEIVABLE,
            request.account_code,
            request.amount,
            request.description,
            request.entry_date,
            "charge",
            posted_by=posted_by,
            lease_id=request.lease_id,
            transaction_id=transaction_id,
            scheduled_charge_id=scheduled_charge_id,
            charge_period=charge_period,
        )

    def record_expense(
        self, request: ExpenseRequest, posted_by: str | None = None
    ) -> list[LedgerEntry]:
        """
        Record an expense paid from operating cash.

        Accounting:
            DEBIT  Expense account
            CREDIT Cash
        """
        validate_amount(request.amount)
        require_account(request.account_code, AccountType.EXPENSE)
        if request.lease_id is not None:
            self.require_lease(request.lease_id)
        return self._post_pair(
            request.account_code,
            CASH,
            request.amount,
            request.description,
            request.entry_date,
            "expense",
            posted_by=posted_by,
            lease_id=request.lease_id,
            property_id=request.property_id,
            unit_id=request.unit_id,
            vendor_id=request.vendor_id,
            work_order_id=request.work_order_id,
        )

    def _late_fee_posted(self, lease_id: int, period: str) -> bool:
        """True when the period already has a late fee that was not reversed."""
        posted = set(self.db.execute(
            select(LedgerEntry.transaction_id).where(
                LedgerEntry.lease_id == lease_id,
                LedgerEntry.account_code == LATE_FEES,
                LedgerEntry.charge_period == period,
                LedgerEntry.scheduled_charge_id.is_(None),
                LedgerEntry.reversal_of.is_(None),
            )
        ).scalars().all())
        if not posted:
            return False
        reversed_ids = set(self.db.execute(
            select(LedgerEntry.reversal_of).where(
                LedgerEntry.reversal_of.in_(posted)
            )
        ).scalars().all())
        return bool(posted - reversed_ids)

    def charge_late_fee(
        self,
        lease_id: int,
        request: LateFeeRequest,
        posted_by: str | None = None,
    ) -> list[LedgerEntry]:
        """
        Charge the lease's configured late fee for the month of fee_date.

        A FLAT fee is late_fee_amount itself; a PERCENTAGE fee is
        that percent of the rent on the lease's open rental-income
        schedules. A lease gets at most one late fee per month
        unless the earlier one was reversed. Unless the request is
        manual, the tenant must owe something.

        Accounting:
            DEBIT  Accounts Receivable
            CREDIT Late Fees
        """
        lease = self.require_lease(lease_id)
        if lease.status != LeaseStatus.ACTIVE:
            raise ValidationError("Lease is not active")
        if not lease.late_fee_amount or lease.late_fee_amount <= 0:
            raise ValidationError("Lease does not have a late fee configured")
        if lease.late_fee_type is None:
            raise ValidationError("Lease does not have a late fee type configured")

        fee_date = request.fee_date or date.today()
        if lease.late_fee_type == LateFeeType.FLAT:
            amount = lease.late_fee_amount
        else:
            rent = sum(
                (c.amount for c in lease.scheduled_charges
                 if c.account_code == RENTAL_INCOME and c.is_open_on(fee_date)),
                Decimal("0"),
            )
            if not rent:
                raise ValidationError(
                    "Cannot calculate percentage late fee without "
                    "a monthly rent schedule"
                )
            amount = (rent * lease.late_fee_amount / 100).quantize(
                CENT, rounding=ROUND_HALF_UP
            )

        period = fee_date.strftime("%Y-%m")
        month_name = fee_date.strftime("%B %Y")
        if self._late_fee_posted(lease.id, period):
            raise ValidationError(f"Late fee for {month_name} already exists")

        if not request.manual:
            totals = self._side_totals(
                LedgerEntry.account_code == ACCOUNTS_RECEIVABLE,
                LedgerEntry.lease_id == lease.id,
            )
            if totals[DebitCredit.DR] - totals[DebitCredit.CR] <= 0:
                raise ValidationError("No outstanding balance to charge late fee")

        return self._post_pair(
            ACCOUNTS_RECEIVABLE,
            LATE_FEES,
            amount,
            f"Late fee for {month_name} - {lease.tenant_name}",
            fee_date,
            "late fee",
            posted_by=posted_by,
            lease_id=lease.id,
            charge_period=period,
        )

    def receive_deposit(
        self, request: DepositReceiveRequest, posted_by: str | None = None
    ) -> list[LedgerEntry]:
        """
        Record a security deposit received.

        Accounting:
            DEBIT  Cash
            CREDIT Security Deposits Held (liability to the tenant)
        """
        validate_amount(request.amount)
        lease = self.require_lease(request.lease_id)
        description = (
            request.description
            or f"Security deposit received - {lease.tenant_name}"
        )
        return self._post_pair(
            CASH,
            SECURITY_DEPOSITS_HELD,
            request.amount,
            description,
            request.deposit_date,
            "security deposit",
            posted_by=posted_by,
            lease_id=request.lease_id,
        )

    def deposit_held(self, lease_id: int) -> Decimal:
        """Security deposit currently held for a lease (credits - debits)."""
        totals = self._side_totals(
            LedgerEntry.account_code == SECURITY_DEPOSITS_HELD,
            LedgerEntry.lease_id == lease_id,
        )
        return totals[DebitCredit.CR] - totals[DebitCredit.DR]

    def return_deposit(
        self, request: DepositReturnRequest, posted_by: str | None = None
    ) -> list[LedgerEntry]:
        """
        Release a security deposit at move-out.

        The refunded part goes back out of cash; deductions kept
        for damages or unpaid items become other income.

        Accounting:
            DEBIT  Security Deposits Held   (refund + deductions)
            CREDIT Cash                     (refund)
            CREDIT Other Income             (each deduction)
        """
        lease = self.require_lease(request.lease_id)

        if request.refund_amount < 0:
            raise ValidationError("Refund amount cannot be negative")
        for deduction in request.deductions:
            validate_amount(deduction.amount)

        total = request.refund_amount + sum(
            (d.amount for d in request.deductions), Decimal("0")
        )
        validate_amount(total)

        held = self.deposit_held(lease.id)
        if total > held:
            raise ValidationError(
                f"Deposit release of {total} exceeds deposit held ({held})"
            )

        return_date = request.return_date or date.today()
        legs = []
        if request.refund_amount > 0:
            refund_description = f"Security deposit refund - {lease.tenant_name}"
            legs.append((SECURITY_DEPOSITS_HELD, DebitCredit.DR,
                         request.refund_amount, refund_description))
            legs.append((CASH, DebitCredit.CR,
                         request.refund_amount, refund_description))
        for deduction in request.deductions:
            deduction_description = (
                f"Deposit deduction - {deduction.description}"[:500]
            )
            legs.append((SECURITY_DEPOSITS_HELD, DebitCredit.DR,
                         deduction.amount, deduction_description))
            legs.append((OTHER_INCOME, DebitCredit.CR,
                         deduction.amount, deduction_description))

        return self.post_entries(
            PostEntriesRequest(entries=[
                PostEntryParams(
                    account_code=code,
                    debit_credit=side,
                    amount=amount,
                    description=description,
                    entry_date=return_date,
                    lease_id=lease.id,
                    posted_by=posted_by,
                )
                for code, side, amount, description in legs
            ]),
            "security deposit return",
        )

    def reverse_transaction(
        self,
        transaction_id: uuid.UUID,
        reason: str,
        posted_by: str | None = None,
    ) -> list[LedgerEntry]:
        """
        Reverse a transaction by posting offsetting entries.

        The original entries are not touched. A new transaction
        mirrors them with debit and credit swapped and points back
        to the original through reversal_of.
        """
        originals = self.get_entries_by_transaction(transaction_id)
        if not originals:
            raise NotFoundError("Transaction", transaction_id)

        if any(e.reversal_of is not None for e in originals):
            raise ValidationError("A reversal cannot itself be reversed")

        already = self.db.execute(
            select(LedgerEntry.id)
            .where(LedgerEntry.reversal_of == transaction_id)
            .limit(1)
        ).scalar_one_or_none()
        if already is not None:
            raise ValidationError(f"Transaction {transaction_id} already reversed")

        actor = posted_by or self.settings.DEFAULT_ACTOR
        request = PostEntriesRequest(
            reversal_of=transaction_id,
            entries=[
                PostEntryParams(
                    account_code=e.account_code,
                    debit_credit=(
                        DebitCredit.CR
                        if e.debit_credit == DebitCredit.DR
                        else DebitCredit.DR
                    ),
                    amount=e.amount,
                    description=f"Reversal: {e.description}"[:500],
                    entry_date=date.today(),
                    lease_id=e.lease_id,
                    posted_by=actor,
                    property_id=e.property_id,
                    unit_id=e.unit_id,
                    vendor_id=e.vendor_id,
                    work_order_id=e.work_order_id,
                )
                for e in originals
            ],
        )
        entries = self.post_entries(request, "reversal")

        self.db.add(AuditLog(
            event_type="TRANSACTION_REVERSED",
            entity_type="ledger_transaction",
            actor=actor,
            details=json.dumps({
                "transaction_id": str(transaction_id),
                "reversal_id": str(request.transaction_id),
                "reason": reason,
            }),
        ))
        self.db.flush()
        return entries

    # --- Queries ---

    def _side_totals(self, *criteria) -> dict[DebitCredit, Decimal]:
        """Sum of amounts per side for entries matching the criteria."""
        rows = self.db.execute(
            select(
                LedgerEntry.debit_credit,
                func.coalesce(func.sum(LedgerEntry.amount), 0),
            )
            .where(*criteria)
            .group_by(LedgerEntry.debit_credit)
        ).all()
        totals = {DebitCredit.DR: Decimal("0"), DebitCredit.CR: Decimal("0")}
        for side, total in rows:
            totals[side] = Decimal(str(total)).quantize(CENT)
        return totals

    def get_account_balance(self, account_code: str) -> Decimal:
        """
        Balance of an account from its entries.

        For ASSET and EXPENSE accounts: balance = debits - credits
        For LIABILITY and INCOME: balance = credits - debits
        """
        account = lookup(account_code)
        totals = self._side_totals(LedgerEntry.account_code == account_code)
        if account.normal_balance == DebitCredit.DR:
            return totals[DebitCredit.DR] - totals[DebitCredit.CR]
        return totals[DebitCredit.CR] - totals[DebitCredit.DR]

    def get_entries_by_transaction(self, transaction_id) -> list[LedgerEntry]:
        """Return all entries for a transaction."""
        entries = self.db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.transaction_id == transaction_id)
            .order_by(LedgerEntry.id)
        ).scalars().all()
        return list(entries)

    def get_entries_by_lease(self, lease_id: int) -> list[LedgerEntry]:
        """Return all entries for a lease, newest first."""
        entries = self.db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.lease_id == lease_id)
            .order_by(LedgerEntry.entry_date.desc(), LedgerEntry.id.desc())
        ).scalars().all()
        return list(entries)

    def get_recent_entries(self, limit: int = 50) -> list[LedgerEntry]:
        """Most recently created entries."""
        entries = self.db.execute(
            select(LedgerEntry)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .limit(limit)
        ).scalars().all()
        return list(entries)
