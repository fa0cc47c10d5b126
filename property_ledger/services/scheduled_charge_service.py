"""
Scheduled charge poster.

Turns recurring-charge templates into ledger postings. Each
(scheduled charge, month) pair moves through:

    NOT_DUE -> DUE -> POSTED
               DUE -> SKIPPED
               DUE -> ERROR

A run is best-effort: every due item is committed or rolled
back on its own, and one failure never stops the rest of the
batch. Re-running is always safe because a period is claimed in
posted_charges, whose unique constraint lets it be posted once.
"""

import calendar
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from property_ledger.exceptions import (
    BatchItemError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from property_ledger.models.enums import AccountType, ChargeOutcome, LeaseStatus
from property_ledger.models.scheduled_charge import PostedCharge, ScheduledCharge
from property_ledger.schemas.ledger import ChargeRequest
from property_ledger.schemas.scheduled_charge import ScheduledChargeCreate
from property_ledger.services.chart_of_accounts import require_account
from property_ledger.services.ledger_service import LedgerService, validate_amount

logger = logging.getLogger(__name__)

SCHEDULER_ACTOR = "scheduled"


def period_of(d: date) -> str:
    """YYYY-MM period a date falls in."""
    return f"{d.year:04d}-{d.month:02d}"


def due_date_for(year: int, month: int, day_of_month: int) -> date:
    """Due date in a month, clamped to the month's last day."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day_of_month, last_day))


@dataclass
class PendingCharge:
    scheduled_charge: ScheduledCharge
    period: str
    due_date: date
    amount: Decimal


@dataclass
class ChargeResult:
    scheduled_charge_id: int
    lease_id: int
    description: str
    period: str
    due_date: date
    amount: Decimal
    status: ChargeOutcome
    message: str
    transaction_id: uuid.UUID | None = None


@dataclass
class PostDueResult:
    as_of_date: date
    results: list[ChargeResult] = field(default_factory=list)
    errors: list[BatchItemError] = field(default_factory=list)

    def _count(self, outcome: ChargeOutcome) -> int:
        return sum(1 for r in self.results if r.status == outcome)

    @property
    def posted(self) -> int:
        return self._count(ChargeOutcome.POSTED)

    @property
    def skipped(self) -> int:
        return self._count(ChargeOutcome.SKIPPED)


class ScheduledChargeService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger_service = LedgerService(db)

    # --- Schedule maintenance ---

    def create_schedule(self, request: ScheduledChargeCreate) -> ScheduledCharge:
        """Create a recurring charge for a lease."""
        validate_amount(request.amount)
        self.ledger_service.require_lease(request.lease_id)
        require_account(request.account_code, AccountType.INCOME)
        if not 1 <= request.day_of_month <= 31:
            raise ValidationError("Day of month must be between 1 and 31")
        if request.end_date and request.end_date < request.start_date:
            raise ValidationError("End date cannot be before start date")

        charge = ScheduledCharge(
            lease_id=request.lease_id,
            account_code=request.account_code,
            amount=request.amount,
            description=request.description,
            day_of_month=request.day_of_month,
            start_date=request.start_date,
            end_date=request.end_date,
        )
        self.db.add(charge)
        self.db.flush()
        return charge

    def get_schedule(self, scheduled_charge_id: int) -> ScheduledCharge:
        charge = self.db.get(ScheduledCharge, scheduled_charge_id)
        if not charge:
            raise NotFoundError("Scheduled charge", scheduled_charge_id)
        return charge

    def end_schedule(
        self, scheduled_charge_id: int, end_date: date
    ) -> ScheduledCharge:
        """
        Stop a schedule from a given date.

        Schedules are never deleted; periods already posted stay
        posted and their entries keep pointing at the schedule.
        """
        charge = self.get_schedule(scheduled_charge_id)
        if end_date < charge.start_date:
            raise ValidationError("End date cannot be before start date")
        charge.end_date = end_date
        self.db.flush()
        return charge

    # --- Due periods ---

    def _is_posted(self, scheduled_charge_id: int, period: str) -> bool:
        return self.db.execute(
            select(PostedCharge.id).where(
                PostedCharge.scheduled_charge_id == scheduled_charge_id,
                PostedCharge.period == period,
            )
        ).scalar_one_or_none() is not None

    def _due_period(
        self, charge: ScheduledCharge, as_of: date
    ) -> tuple[str, date] | None:
        """
        The period of as_of's month if the charge is due by as_of.

        Returns None while the charge is NOT_DUE: its day of the
        month has not arrived yet, or the schedule starts later.
        Only the current month is considered; earlier months are
        not back-filled.
        """
        due = due_date_for(as_of.year, as_of.month, charge.day_of_month)
        if due > as_of or due < charge.start_date:
            return None
        return period_of(due), due

    def _schedules(self, lease_id: int | None = None) -> list[ScheduledCharge]:
        stmt = select(ScheduledCharge).order_by(ScheduledCharge.id)
        if lease_id is not None:
            stmt = stmt.where(ScheduledCharge.lease_id == lease_id)
        return list(self.db.execute(stmt).scalars().all())

    def find_pending(
        self, as_of: date | None = None, lease_id: int | None = None
    ) -> list[PendingCharge]:
        """Charges that are due, not yet posted, and postable."""
        as_of = as_of or date.today()
        pending = []
        for charge in self._schedules(lease_id):
            if charge.lease.status != LeaseStatus.ACTIVE:
                continue
            due_period = self._due_period(charge, as_of)
            if due_period is None:
                continue
            period, due = due_period
            if not charge.is_open_on(due) or self._is_posted(charge.id, period):
                continue
            pending.append(PendingCharge(
                scheduled_charge=charge,
                period=period,
                due_date=due,
                amount=charge.amount,
            ))
        return pending

    def pending_summary(
        self, as_of: date | None = None
    ) -> tuple[list[PendingCharge], Decimal]:
        pending = self.find_pending(as_of)
        total = sum((p.amount for p in pending), Decimal("0"))
        return pending, total

    # --- Posting ---

    def _post_one(
        self, charge: ScheduledCharge, period: str, due: date, posted_by: str
    ) -> uuid.UUID:
        """Claim the period, then post DR AR / CR income for it."""
        lease = charge.lease
        if lease.status != LeaseStatus.ACTIVE:
            raise ValidationError(
                f"Lease {lease.id} is not active (status: {lease.status.value})"
            )

        transaction_id = uuid.uuid4()
        self.db.add(PostedCharge(
            scheduled_charge_id=charge.id,
            period=period,
            due_date=due,
            transaction_id=transaction_id,
            posted_by=posted_by,
        ))
        # Flush the claim first: a concurrent run fails here on the
        # unique constraint before any ledger entry is written.
        self.db.flush()

        month_name = due.strftime("%B %Y")
        self.ledger_service.record_charge(
            ChargeRequest(
                lease_id=lease.id,
                amount=charge.amount,
                account_code=charge.account_code,
                description=f"{charge.description} - {month_name}",
                entry_date=due,
            ),
            posted_by=posted_by,
            scheduled_charge_id=charge.id,
            charge_period=period,
            transaction_id=transaction_id,
        )
        charge.last_charged_date = due
        self.db.flush()
        return transaction_id

    def post_due(
        self,
        as_of: date | None = None,
        lease_id: int | None = None,
        posted_by: str = SCHEDULER_ACTOR,
    ) -> PostDueResult:
        """
        Post every due scheduled charge.

        Commits after each posted item and rolls back after each
        failed one. Already-posted periods and periods past the
        schedule's end date are skipped; failures are collected
        in the result, never raised.
        """
        as_of = as_of or date.today()
        result = PostDueResult(as_of_date=as_of)

        for charge in self._schedules(lease_id):
            due_period = self._due_period(charge, as_of)
            if due_period is None:
                continue
            period, due = due_period

            item = ChargeResult(
                scheduled_charge_id=charge.id,
                lease_id=charge.lease_id,
                description=charge.description,
                period=period,
                due_date=due,
                amount=charge.amount,
                status=ChargeOutcome.SKIPPED,
                message="",
            )
            result.results.append(item)

            if charge.end_date is not None and due > charge.end_date:
                item.message = f"Schedule ended on {charge.end_date.isoformat()}"
                continue

            if self._is_posted(charge.id, period):
                item.message = f"Already posted for {period}"
                continue

            try:
                item.transaction_id = self._post_one(
                    charge, period, due, posted_by
                )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                item.transaction_id = None
                item.message = "Already posted (duplicate prevented)"
                continue
            except (LedgerError, SQLAlchemyError) as exc:
                self.db.rollback()
                item.transaction_id = None
                item.status = ChargeOutcome.ERROR
                item.message = str(exc)
                result.errors.append(BatchItemError(
                    item_id=item.scheduled_charge_id,
                    reason=str(exc),
                    lease_id=item.lease_id,
                    period=period,
                ))
                logger.warning(
                    "Scheduled charge %s for %s failed: %s",
                    item.scheduled_charge_id, period, exc,
                )
                continue

            item.status = ChargeOutcome.POSTED
            item.message = f"Posted {item.description} of {item.amount:.2f}"

        logger.info(
            "Scheduled charge run as of %s: %d posted, %d skipped, %d errors",
            as_of, result.posted, result.skipped, len(result.errors),
        )
        return result
