"""
Rent increase applier.

Increases are scheduled with a notice date and an effective
date. apply_pending moves every SCHEDULED increase whose date
has arrived to APPLIED: the lease's monthly rent and its open
rental-income schedules take the new amount. No ledger entry is
posted; the next scheduled charge simply posts the new amount.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from property_ledger.config import get_settings
from property_ledger.exceptions import (
    BatchItemError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from property_ledger.models.audit_log import AuditLog
from property_ledger.models.enums import LeaseStatus, RentIncreaseStatus
from property_ledger.models.lease import Lease
from property_ledger.models.rent_increase import RentIncrease
from property_ledger.models.scheduled_charge import ScheduledCharge
from property_ledger.schemas.rent_increase import RentIncreaseCreate
from property_ledger.services.chart_of_accounts import RENTAL_INCOME
from property_ledger.services.ledger_service import LedgerService, validate_amount

logger = logging.getLogger(__name__)


@dataclass
class AppliedIncrease:
    rent_increase_id: int
    lease_id: int
    tenant_name: str
    previous_amount: Decimal
    new_amount: Decimal
    effective_date: date
    schedules_updated: int


@dataclass
class ApplyPendingResult:
    as_of_date: date
    results: list[AppliedIncrease] = field(default_factory=list)
    errors: list[BatchItemError] = field(default_factory=list)

    @property
    def applied(self) -> int:
        return len(self.results)


class RentIncreaseService:

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def get(self, rent_increase_id: int) -> RentIncrease:
        increase = self.db.get(RentIncrease, rent_increase_id)
        if not increase:
            raise NotFoundError("Rent increase", rent_increase_id)
        return increase

    def schedule_increase(self, request: RentIncreaseCreate) -> RentIncrease:
        """
        Schedule a rent increase for a lease.

        The lease's current rent is recorded as previous_amount.
        Notice date defaults to today and cannot fall after the
        effective date.
        """
        validate_amount(request.new_amount)
        lease = LedgerService(self.db).require_lease(request.lease_id)
        if lease.status == LeaseStatus.ENDED:
            raise ValidationError(f"Lease {lease.id} has ended")

        notice_date = request.notice_date or date.today()
        if notice_date > request.effective_date:
            raise ValidationError("Notice date cannot be after effective date")

        increase = RentIncrease(
            lease_id=lease.id,
            previous_amount=lease.monthly_rent_amount,
            new_amount=request.new_amount,
            effective_date=request.effective_date,
            notice_date=notice_date,
            status=RentIncreaseStatus.SCHEDULED,
            notes=request.notes,
        )
        self.db.add(increase)
        self.db.flush()
        return increase

    def cancel(self, rent_increase_id: int, actor: str | None = None) -> RentIncrease:
        increase = self.get(rent_increase_id)
        if not increase.can_transition_to(RentIncreaseStatus.CANCELLED):
            raise ValidationError(
                f"Cannot cancel rent increase {increase.id} "
                f"(status: {increase.status.value})"
            )
        increase.status = RentIncreaseStatus.CANCELLED
        self.db.add(AuditLog(
            event_type="RENT_INCREASE_CANCELLED",
            entity_type="rent_increase",
            entity_id=increase.id,
            actor=actor or self.settings.DEFAULT_ACTOR,
            details=json.dumps({"lease_id": increase.lease_id}),
        ))
        self.db.flush()
        return increase

    def list_pending(self, as_of: date | None = None) -> list[RentIncrease]:
        """SCHEDULED increases effective on or before as_of, oldest first."""
        as_of = as_of or date.today()
        return list(self.db.execute(
            select(RentIncrease)
            .where(
                RentIncrease.status == RentIncreaseStatus.SCHEDULED,
                RentIncrease.effective_date <= as_of,
            )
            .order_by(RentIncrease.effective_date, RentIncrease.id)
        ).scalars().all())

    def _rent_schedules(self, lease_id: int, effective: date) -> list[ScheduledCharge]:
        return list(self.db.execute(
            select(ScheduledCharge).where(
                ScheduledCharge.lease_id == lease_id,
                ScheduledCharge.account_code == RENTAL_INCOME,
                (ScheduledCharge.end_date.is_(None))
                | (ScheduledCharge.end_date >= effective),
            )
        ).scalars().all())

    def _apply_one(self, increase: RentIncrease, applied_by: str) -> AppliedIncrease:
        if not increase.can_transition_to(RentIncreaseStatus.APPLIED):
            raise ValidationError(
                f"Rent increase {increase.id} is {increase.status.value}"
            )
        lease: Lease = increase.lease
        if lease.status != LeaseStatus.ACTIVE:
            raise ValidationError(
                f"Lease {lease.id} is not active (status: {lease.status.value})"
            )

        lease.monthly_rent_amount = increase.new_amount
        schedules = self._rent_schedules(lease.id, increase.effective_date)
        for schedule in schedules:
            schedule.amount = increase.new_amount

        increase.status = RentIncreaseStatus.APPLIED
        increase.applied_at = datetime.utcnow()
        increase.applied_by = applied_by

        self.db.add(AuditLog(
            event_type="RENT_INCREASE_APPLIED",
            entity_type="rent_increase",
            entity_id=increase.id,
            actor=applied_by,
            details=json.dumps({
                "lease_id": lease.id,
                "previous_amount": str(increase.previous_amount),
                "new_amount": str(increase.new_amount),
                "effective_date": increase.effective_date.isoformat(),
                "schedules_updated": len(schedules),
            }),
        ))
        self.db.flush()

        return AppliedIncrease(
            rent_increase_id=increase.id,
            lease_id=lease.id,
            tenant_name=lease.tenant_name,
            previous_amount=increase.previous_amount,
            new_amount=increase.new_amount,
            effective_date=increase.effective_date,
            schedules_updated=len(schedules),
        )

    def apply_pending(
        self, as_of: date | None = None, applied_by: str | None = None
    ) -> ApplyPendingResult:
        """
        Apply every scheduled increase that has become effective.

        Each increase is committed on its own; a failure is rolled
        back, collected in the result and the run moves on.
        """
        as_of = as_of or date.today()
        applied_by = applied_by or self.settings.DEFAULT_ACTOR
        result = ApplyPendingResult(as_of_date=as_of)

        for increase in self.list_pending(as_of):
            increase_id = increase.id
            lease_id = increase.lease_id
            try:
                applied = self._apply_one(increase, applied_by)
                self.db.commit()
            except (LedgerError, SQLAlchemyError) as exc:
                self.db.rollback()
                result.errors.append(BatchItemError(
                    item_id=increase_id,
                    reason=str(exc),
                    lease_id=lease_id,
                ))
                logger.warning(
                    "Rent increase %s for lease %s failed: %s",
                    increase_id, lease_id, exc,
                )
                continue
            result.results.append(applied)

        logger.info(
            "Rent increase run as of %s: %d applied, %d errors",
            as_of, result.applied, len(result.errors),
        )
        return result
