"""
Tests for the scheduled charge poster.

Tests cover:
- Due date clamping and period keys
- Pending charges
- Posting and idempotent re-runs
- Skips for ended schedules
- Partial failure isolation
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from property_ledger.exceptions import ValidationError
from property_ledger.models.enums import ChargeOutcome, LeaseStatus
from property_ledger.models.ledger_entry import LedgerEntry
from property_ledger.models.scheduled_charge import PostedCharge
from property_ledger.services.balance_service import BalanceService
from property_ledger.services.scheduled_charge_service import (
    ScheduledChargeService,
    due_date_for,
    period_of,
)
from property_ledger.schemas.scheduled_charge import ScheduledChargeCreate


def make_schedule(db_session, lease, amount="1500.00", day_of_month=1,
                  description="Rent", start_date=date(2026, 1, 1),
                  end_date=None, account_code="4000"):
    charge = ScheduledChargeService(db_session).create_schedule(
        ScheduledChargeCreate(
            lease_id=lease.id,
            account_code=account_code,
            amount=Decimal(amount),
            description=description,
            day_of_month=day_of_month,
            start_date=start_date,
            end_date=end_date,
        )
    )
    db_session.commit()
    return charge


class TestDueDates:

    def test_day_clamped_to_month_end(self):
        assert due_date_for(2026, 2, 31) == date(2026, 2, 28)
        assert due_date_for(2028, 2, 30) == date(2028, 2, 29)
        assert due_date_for(2026, 4, 31) == date(2026, 4, 30)

    def test_period_key(self):
        assert period_of(date(2026, 3, 15)) == "2026-03"


class TestCreateSchedule:

    def test_requires_lease(self, db_session):
        with pytest.raises(ValidationError, match="Lease ID is required"):
            ScheduledChargeService(db_session).create_schedule(
                ScheduledChargeCreate(
                    amount=Decimal("10"),
                    description="Parking",
                    day_of_month=1,
                    start_date=date(2026, 1, 1),
                )
            )

    def test_rejects_non_income_account(self, db_session, lease):
        with pytest.raises(ValidationError, match="expected INCOME"):
            make_schedule(db_session, lease, account_code="5000")

    def test_rejects_bad_day(self, db_session, lease):
        with pytest.raises(ValidationError, match="Day of month"):
            make_schedule(db_session, lease, day_of_month=32)

    def test_end_schedule(self, db_session, lease):
        charge = make_schedule(db_session, lease)
        ended = ScheduledChargeService(db_session).end_schedule(
            charge.id, date(2026, 6, 30)
        )
        assert ended.end_date == date(2026, 6, 30)


class TestFindPending:

    def test_due_charge_is_pending(self, db_session, lease):
        make_schedule(db_session, lease, day_of_month=5)
        pending, total = ScheduledChargeService(db_session).pending_summary(
            date(2026, 3, 10)
        )
        assert len(pending) == 1
        assert pending[0].period == "2026-03"
        assert pending[0].due_date == date(2026, 3, 5)
        assert total == Decimal("1500.00")

    def test_not_yet_due(self, db_session, lease):
        make_schedule(db_session, lease, day_of_month=15)
        pending = ScheduledChargeService(db_session).find_pending(
            date(2026, 3, 10)
        )
        assert pending == []

    def test_inactive_lease_not_pending(self, db_session, make_lease):
        lease = make_lease(status=LeaseStatus.PENDING)
        make_schedule(db_session, lease)
        assert ScheduledChargeService(db_session).find_pending(
            date(2026, 3, 10)
        ) == []


class TestPostDue:

    def test_posts_due_charge(self, db_session, lease):
        charge = make_schedule(db_session, lease, day_of_month=1)
        service = ScheduledChargeService(db_session)

        result = service.post_due(date(2026, 3, 2))

        assert result.posted == 1
        assert result.errors == []
        item = result.results[0]
        assert item.status == ChargeOutcome.POSTED
        assert item.period == "2026-03"

        entries = db_session.execute(
            select(LedgerEntry).where(
                LedgerEntry.transaction_id == item.transaction_id
            )
        ).scalars().all()
        assert len(entries) == 2
        assert all(e.description == "Rent - March 2026" for e in entries)
        assert all(e.entry_date == date(2026, 3, 1) for e in entries)
        assert all(e.posted_by == "scheduled" for e in entries)
        assert all(e.scheduled_charge_id == charge.id for e in entries)
        assert all(e.charge_period == "2026-03" for e in entries)
        assert BalanceService(db_session).balance_of(lease.id) == Decimal("1500")
        db_session.refresh(charge)
        assert charge.last_charged_date == date(2026, 3, 1)

    def test_second_run_skips(self, db_session, lease):
        make_schedule(db_session, lease)
        service = ScheduledChargeService(db_session)

        first = service.post_due(date(2026, 3, 2))
        second = service.post_due(date(2026, 3, 2))

        assert first.posted == 1
        assert second.posted == 0
        assert second.skipped == 1
        assert "Already posted" in second.results[0].message
        assert BalanceService(db_session).balance_of(lease.id) == Decimal("1500")
        claims = db_session.execute(select(PostedCharge)).scalars().all()
        assert len(claims) == 1

    def test_duplicate_claim_is_skipped(self, db_session, lease, monkeypatch):
        make_schedule(db_session, lease)
        service = ScheduledChargeService(db_session)
        service.post_due(date(2026, 3, 2))

        # Let the second run reach the posted_charges unique constraint
        monkeypatch.setattr(service, "_is_posted", lambda *args: False)
        second = service.post_due(date(2026, 3, 2))

        assert second.posted == 0
        assert second.skipped == 1
        assert second.errors == []
        item = second.results[0]
        assert item.status == ChargeOutcome.SKIPPED
        assert item.message == "Already posted (duplicate prevented)"
        assert item.transaction_id is None
        assert BalanceService(db_session).balance_of(lease.id) == Decimal("1500")
        claims = db_session.execute(select(PostedCharge)).scalars().all()
        assert len(claims) == 1

    def test_only_current_month_considered(self, db_session, lease):
        make_schedule(db_session, lease, start_date=date(2026, 1, 1))
        result = ScheduledChargeService(db_session).post_due(date(2026, 3, 2))

        assert [r.period for r in result.results] == ["2026-03"]

    def test_ended_schedule_skipped(self, db_session, lease):
        make_schedule(
            db_session, lease, day_of_month=15, end_date=date(2026, 3, 10)
        )
        result = ScheduledChargeService(db_session).post_due(date(2026, 3, 20))

        assert result.posted == 0
        assert result.skipped == 1
        assert "ended" in result.results[0].message

    def test_partial_failure_isolated(self, db_session, make_lease):
        first = make_lease(tenant_name="First")
        second = make_lease(tenant_name="Second")
        third = make_lease(tenant_name="Third")
        make_schedule(db_session, first)
        make_schedule(db_session, second)
        make_schedule(db_session, third)

        second.status = LeaseStatus.ENDED
        db_session.commit()

        result = ScheduledChargeService(db_session).post_due(date(2026, 3, 2))

        assert result.posted == 2
        assert len(result.errors) == 1
        assert result.errors[0].lease_id == second.id
        assert "not active" in result.errors[0].reason
        statuses = [r.status for r in result.results]
        assert statuses == [
            ChargeOutcome.POSTED, ChargeOutcome.ERROR, ChargeOutcome.POSTED,
        ]
        balances = BalanceService(db_session)
        assert balances.balance_of(first.id) == Decimal("1500")
        assert balances.balance_of(second.id) == Decimal("0")
        assert balances.balance_of(third.id) == Decimal("1500")

    def test_filter_by_lease(self, db_session, make_lease):
        first = make_lease()
        second = make_lease()
        make_schedule(db_session, first)
        make_schedule(db_session, second)

        result = ScheduledChargeService(db_session).post_due(
            date(2026, 3, 2), lease_id=second.id
        )

        assert [r.lease_id for r in result.results] == [second.id]
