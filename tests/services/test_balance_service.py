"""
Tests for balances and aging.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from property_ledger.exceptions import NotFoundError
from property_ledger.models.enums import LeaseStatus
from property_ledger.services.balance_service import BalanceService, bucket_for
from property_ledger.services.ledger_service import LedgerService
from property_ledger.schemas.ledger import (
    ChargeRequest,
    DepositReceiveRequest,
    PaymentRequest,
)

DAY_1 = date(2026, 1, 1)


def day(n):
    return DAY_1 + timedelta(days=n - 1)


def charge(db_session, lease, amount, on):
    LedgerService(db_session).record_charge(ChargeRequest(
        lease_id=lease.id, amount=Decimal(amount), account_code="4000",
        entry_date=on,
    ))
    db_session.commit()


def pay(db_session, lease, amount, on):
    LedgerService(db_session).record_payment(PaymentRequest(
        lease_id=lease.id, amount=Decimal(amount), payment_date=on,
    ))
    db_session.commit()


class TestBucketFor:

    @pytest.mark.parametrize("days,label", [
        (0, "0-30"), (30, "0-30"), (31, "31-60"), (60, "31-60"),
        (61, "61-90"), (90, "61-90"), (91, "90+"), (400, "90+"),
    ])
    def test_boundaries(self, days, label):
        assert bucket_for(days) == label


class TestBalance:

    def test_no_entries_is_zero(self, db_session, lease):
        assert BalanceService(db_session).balance_of(lease.id) == Decimal("0")

    def test_overpayment_is_credit(self, db_session, lease):
        charge(db_session, lease, "100", day(1))
        pay(db_session, lease, "150", day(2))
        assert BalanceService(db_session).balance_of(lease.id) == Decimal("-50")

    def test_unknown_lease(self, db_session):
        with pytest.raises(NotFoundError):
            BalanceService(db_session).balance_of(999)


class TestAging:

    def test_payment_applied_to_oldest_charge(self, db_session, lease):
        charge(db_session, lease, "100", day(1))
        charge(db_session, lease, "100", day(40))
        pay(db_session, lease, "100", day(45))

        aging = BalanceService(db_session).aging_of(lease.id, day(46))

        assert aging.buckets["31-60"] == Decimal("0")
        assert aging.buckets["0-30"] == Decimal("100")
        assert aging.total_outstanding == Decimal("100")
        assert aging.oldest_open_charge.entry_date == day(40)

    def test_independent_of_insert_order(self, db_session, lease):
        pay(db_session, lease, "100", day(45))
        charge(db_session, lease, "100", day(40))
        charge(db_session, lease, "100", day(1))

        aging = BalanceService(db_session).aging_of(lease.id, day(46))

        assert aging.buckets["31-60"] == Decimal("0")
        assert aging.buckets["0-30"] == Decimal("100")

    def test_partial_payment_leaves_remainder_in_old_bucket(
        self, db_session, lease
    ):
        charge(db_session, lease, "1000", day(1))
        pay(db_session, lease, "400", day(50))

        aging = BalanceService(db_session).aging_of(lease.id, day(100))

        assert aging.buckets["90+"] == Decimal("600")
        assert aging.total_outstanding == Decimal("600")

    def test_entries_after_as_of_ignored(self, db_session, lease):
        charge(db_session, lease, "100", day(1))
        charge(db_session, lease, "200", day(20))

        aging = BalanceService(db_session).aging_of(lease.id, day(10))

        assert aging.total_outstanding == Decimal("100")

    def test_unapplied_credit_reported(self, db_session, lease):
        charge(db_session, lease, "100", day(1))
        pay(db_session, lease, "175", day(2))

        aging = BalanceService(db_session).aging_of(lease.id, day(3))

        assert aging.total_outstanding == Decimal("0")
        assert aging.unapplied_credit == Decimal("75")


class TestTenantBalances:

    def test_summary(self, db_session, make_lease):
        owing = make_lease(tenant_name="Owing")
        credit = make_lease(tenant_name="Credit")
        make_lease(tenant_name="Ended", status=LeaseStatus.ENDED)

        charge(db_session, owing, "300", day(1))
        pay(db_session, credit, "50", day(1))

        balances, summary = BalanceService(db_session).tenant_balances()

        assert [b.tenant_name for b in balances] == ["Credit", "Owing"]
        assert summary.total_tenants == 2
        assert summary.tenants_owing == 1
        assert summary.tenants_with_credit == 1
        assert summary.total_owed == Decimal("300")
        assert summary.total_credits == Decimal("50")
        assert summary.net_balance == Decimal("250")


class TestStatement:

    def test_running_balance_from_first_entry(self, db_session, lease):
        charge(db_session, lease, "1500", date(2026, 3, 1))
        pay(db_session, lease, "1000", date(2026, 3, 3))
        charge(db_session, lease, "1500", date(2026, 4, 1))

        statement = BalanceService(db_session).statement(
            lease.id, end=date(2026, 4, 30)
        )

        assert statement.opening_balance == Decimal("0")
        assert [line.running_balance for line in statement.lines] == [
            Decimal("1500"), Decimal("500"), Decimal("2000"),
        ]
        assert statement.total_charges == Decimal("3000")
        assert statement.total_payments == Decimal("1000")
        assert statement.closing_balance == Decimal("2000")
        assert statement.tenant_name == lease.tenant_name

    def test_earlier_activity_carried_in(self, db_session, lease):
        charge(db_session, lease, "1500", date(2026, 3, 1))
        pay(db_session, lease, "1000", date(2026, 3, 3))
        charge(db_session, lease, "1500", date(2026, 4, 1))

        statement = BalanceService(db_session).statement(
            lease.id, date(2026, 4, 1), date(2026, 4, 30)
        )

        assert statement.opening_balance == Decimal("500")
        assert len(statement.lines) == 1
        assert statement.lines[0].charge == Decimal("1500")
        assert statement.closing_balance == Decimal("2000")

    def test_deposits_not_listed(self, db_session, lease):
        LedgerService(db_session).receive_deposit(DepositReceiveRequest(
            lease_id=lease.id, amount=Decimal("1000"), deposit_date=day(1),
        ))
        db_session.commit()
        pay(db_session, lease, "200", day(2))

        statement = BalanceService(db_session).statement(lease.id, end=day(10))

        assert len(statement.lines) == 1
        assert statement.lines[0].payment == Decimal("200")
        assert statement.closing_balance == Decimal("-200")

    def test_unknown_lease(self, db_session):
        with pytest.raises(NotFoundError):
            BalanceService(db_session).statement(999)
