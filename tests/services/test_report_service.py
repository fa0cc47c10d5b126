"""
Tests for the reporting aggregator.
"""

from datetime import date
from decimal import Decimal

import pytest

from property_ledger.exceptions import NotFoundError
from property_ledger.models import Property, Unit
from property_ledger.services.ledger_service import LedgerService
from property_ledger.services.report_service import (
    ReportService,
    change_percent,
    previous_period,
)
from property_ledger.schemas.ledger import (
    ChargeRequest,
    DepositDeduction,
    DepositReceiveRequest,
    DepositReturnRequest,
    ExpenseRequest,
    PaymentRequest,
)

MARCH = (date(2026, 3, 1), date(2026, 3, 31))


def charge(db_session, lease, amount, on, account_code="4000"):
    LedgerService(db_session).record_charge(ChargeRequest(
        lease_id=lease.id,
        amount=Decimal(amount),
        account_code=account_code,
        entry_date=on,
    ))
    db_session.commit()


def expense(db_session, amount, on, account_code="5000", property_id=None):
    LedgerService(db_session).record_expense(ExpenseRequest(
        account_code=account_code,
        amount=Decimal(amount),
        description="Repair",
        entry_date=on,
        property_id=property_id,
    ))
    db_session.commit()


class TestHelpers:

    def test_previous_period_same_length(self):
        assert previous_period(*MARCH) == (date(2026, 1, 29), date(2026, 2, 28))

    def test_change_percent_zero_previous(self):
        assert change_percent(Decimal("100"), Decimal("0")) == Decimal("0.0")

    def test_change_percent_rounded(self):
        assert change_percent(Decimal("200"), Decimal("150")) == Decimal("33.3")


class TestEmptyLedger:

    def test_reports_are_zeroed(self, db_session):
        reports = ReportService(db_session)

        pnl = reports.profit_and_loss(*MARCH)
        assert pnl.total_income == Decimal("0")
        assert pnl.net_operating_income == Decimal("0")
        assert pnl.expense_ratio == Decimal("0.0")

        assert reports.income_breakdown(*MARCH).total_income == Decimal("0")
        assert reports.aging_report(date(2026, 3, 31)).total_outstanding == 0
        assert reports.all_transactions(*MARCH).rows == []

        trial = reports.trial_balance(date(2026, 3, 31))
        assert trial.accounts == []
        assert trial.is_balanced

        rent_roll = reports.rent_roll(date(2026, 3, 31))
        assert rent_roll.summary.total_units == 0
        assert rent_roll.summary.occupancy_rate == 0


class TestProfitAndLoss:

    def test_income_expenses_and_comparison(self, db_session, lease):
        charge(db_session, lease, "1000", date(2026, 2, 15))
        charge(db_session, lease, "1500", date(2026, 3, 1))
        charge(db_session, lease, "50", date(2026, 3, 5), account_code="4010")
        expense(db_session, "310", date(2026, 3, 10))

        pnl = ReportService(db_session).profit_and_loss(*MARCH)

        assert pnl.total_income == Decimal("1550")
        assert pnl.total_expenses == Decimal("310")
        assert pnl.net_operating_income == Decimal("1240")
        assert pnl.previous_total_income == Decimal("1000")
        assert pnl.income_change_percent == Decimal("55.0")
        assert pnl.expense_ratio == Decimal("20.0")
        assert pnl.profit_margin == Decimal("80.0")
        rent = next(line for line in pnl.income if line.code == "4000")
        assert rent.amount == Decimal("1500")
        assert rent.previous_amount == Decimal("1000")
        assert rent.change_percent == Decimal("50.0")

    def test_reversal_nets_out(self, db_session, lease):
        ledger = LedgerService(db_session)
        entries = ledger.record_charge(ChargeRequest(
            lease_id=lease.id, amount=Decimal("100"), account_code="4000",
            entry_date=date.today(),
        ))
        db_session.commit()
        ledger.reverse_transaction(entries[0].transaction_id, "error")
        db_session.commit()

        today = date.today()
        pnl = ReportService(db_session).profit_and_loss(today, today)
        assert pnl.total_income == Decimal("0")

    def test_property_filter(self, db_session, make_lease):
        first = make_lease()
        second = make_lease()
        charge(db_session, first, "1000", date(2026, 3, 1))
        charge(db_session, second, "700", date(2026, 3, 1))

        pnl = ReportService(db_session).profit_and_loss(
            *MARCH, property_id=second.property_id
        )
        assert pnl.total_income == Decimal("700")


class TestIncomeBreakdown:

    def test_shares(self, db_session, lease):
        charge(db_session, lease, "750", date(2026, 3, 1))
        charge(db_session, lease, "250", date(2026, 3, 2), account_code="4030")

        breakdown = ReportService(db_session).income_breakdown(*MARCH)

        assert breakdown.total_income == Decimal("1000")
        shares = {a.code: a.percent_of_total for a in breakdown.accounts}
        assert shares == {"4000": Decimal("75.0"), "4030": Decimal("25.0")}


class TestAgingReport:

    def test_totals_across_leases(self, db_session, make_lease):
        first = make_lease(tenant_name="First")
        second = make_lease(tenant_name="Second")
        paid = make_lease(tenant_name="Paid")
        charge(db_session, first, "100", date(2026, 1, 1))
        charge(db_session, second, "200", date(2026, 3, 20))
        charge(db_session, paid, "300", date(2026, 3, 1))
        LedgerService(db_session).record_payment(PaymentRequest(
            lease_id=paid.id, amount=Decimal("300"), payment_date=date(2026, 3, 2),
        ))
        db_session.commit()

        report = ReportService(db_session).aging_report(date(2026, 3, 31))

        assert [t.tenant_name for t in report.tenants] == ["Second", "First"]
        assert report.buckets["0-30"] == Decimal("200")
        assert report.buckets["61-90"] == Decimal("100")
        assert report.total_outstanding == Decimal("300")
        assert report.over_30 == Decimal("100")
        assert report.over_90 == Decimal("0")


class TestRentRoll:

    def test_occupancy(self, db_session, make_lease):
        building = Property(name="Building A")
        db_session.add(building)
        db_session.flush()
        make_lease(
            tenant_name="Tenant 101",
            rental_property=building,
            unit_number="101",
            monthly_rent=Decimal("1200.00"),
        )
        db_session.add(Unit(property_id=building.id, unit_number="102"))
        db_session.commit()

        rent_roll = ReportService(db_session).rent_roll(date(2026, 3, 1))

        row = rent_roll.properties[0]
        assert row.property_name == "Building A"
        assert [u.unit_number for u in row.units] == ["101", "102"]
        assert row.occupied_units == 1
        assert row.vacant_units == 1
        assert row.occupancy_rate == 50
        assert row.total_monthly_rent == Decimal("1200.00")
        assert rent_roll.summary.total_annual_rent == Decimal("14400.00")


class TestAllTransactions:

    def test_rows_and_totals(self, db_session, lease):
        charge(db_session, lease, "500", date(2026, 3, 1))
        expense(db_session, "80", date(2026, 3, 2))

        listing = ReportService(db_session).all_transactions(*MARCH)

        assert len(listing.rows) == 4
        assert listing.total_debits == listing.total_credits == Decimal("580")
        assert listing.rows[0].tenant_name == lease.tenant_name

    def test_account_filter(self, db_session, lease):
        charge(db_session, lease, "500", date(2026, 3, 1))
        listing = ReportService(db_session).all_transactions(
            *MARCH, account_code="1200"
        )
        assert [r.debit for r in listing.rows] == [Decimal("500")]

    def test_unknown_account(self, db_session):
        with pytest.raises(NotFoundError):
            ReportService(db_session).all_transactions(*MARCH, account_code="9999")


class TestAccountDrillDown:

    def test_opening_and_closing(self, db_session, lease):
        charge(db_session, lease, "1000", date(2026, 2, 1))
        charge(db_session, lease, "1000", date(2026, 3, 1))
        LedgerService(db_session).record_payment(PaymentRequest(
            lease_id=lease.id, amount=Decimal("600"), payment_date=date(2026, 3, 5),
        ))
        db_session.commit()

        drill = ReportService(db_session).account_drill_down("1200", *MARCH)

        assert drill.opening_balance == Decimal("1000")
        assert drill.period_debits == Decimal("1000")
        assert drill.period_credits == Decimal("600")
        assert drill.closing_balance == Decimal("1400")
        assert [r.running_balance for r in drill.entries] == [
            Decimal("2000"), Decimal("1400"),
        ]


class TestTrialBalance:

    def test_balanced(self, db_session, lease):
        charge(db_session, lease, "1500", date(2026, 3, 1))
        LedgerService(db_session).record_payment(PaymentRequest(
            lease_id=lease.id, amount=Decimal("1000"), payment_date=date(2026, 3, 2),
        ))
        db_session.commit()
        expense(db_session, "200", date(2026, 3, 3))

        trial = ReportService(db_session).trial_balance(date(2026, 3, 31))

        lines = {a.code: a for a in trial.accounts}
        assert lines["1000"].balance == Decimal("800")
        assert lines["1000"].balance_side == "DR"
        assert lines["1200"].balance == Decimal("500")
        assert lines["4000"].balance_side == "CR"
        assert trial.total_debits == Decimal("1500")
        assert trial.total_credits == Decimal("1500")
        assert trial.is_balanced


def march_activity(db_session, lease):
    charge(db_session, lease, "1500", date(2026, 3, 1))
    ledger = LedgerService(db_session)
    ledger.receive_deposit(DepositReceiveRequest(
        lease_id=lease.id, amount=Decimal("1000"), deposit_date=date(2026, 3, 1),
    ))
    ledger.record_payment(PaymentRequest(
        lease_id=lease.id, amount=Decimal("1000"), payment_date=date(2026, 3, 2),
    ))
    db_session.commit()
    expense(db_session, "200", date(2026, 3, 3))


class TestBalanceSheet:

    def test_assets_equal_liabilities_and_equity(self, db_session, lease):
        march_activity(db_session, lease)

        sheet = ReportService(db_session).balance_sheet(date(2026, 3, 31))

        assets = {a.code: a.balance for a in sheet.assets}
        liabilities = {a.code: a.balance for a in sheet.liabilities}
        assert assets == {"1000": Decimal("1800"), "1200": Decimal("500")}
        assert liabilities == {"2200": Decimal("1000")}
        assert sheet.retained_earnings == Decimal("1300")
        assert sheet.total_assets == Decimal("2300")
        assert sheet.total_liabilities_and_equity == Decimal("2300")
        assert sheet.is_balanced

    def test_before_any_activity(self, db_session, lease):
        march_activity(db_session, lease)

        sheet = ReportService(db_session).balance_sheet(date(2026, 2, 28))

        assert sheet.assets == []
        assert sheet.liabilities == []
        assert sheet.total_assets == Decimal("0")
        assert sheet.is_balanced


class TestCashFlow:

    def test_lines_by_counter_account(self, db_session, lease):
        march_activity(db_session, lease)

        flow = ReportService(db_session).cash_flow(*MARCH)

        lines = {line.code: line.amount for line in flow.lines}
        assert lines == {
            "1200": Decimal("1000"),
            "2200": Decimal("1000"),
            "5000": Decimal("-200"),
        }
        assert flow.opening_balance == Decimal("0")
        assert flow.total_inflows == Decimal("2000")
        assert flow.total_outflows == Decimal("200")
        assert flow.closing_balance == Decimal("1800")

    def test_deposit_return_split(self, db_session, lease):
        march_activity(db_session, lease)
        LedgerService(db_session).return_deposit(DepositReturnRequest(
            lease_id=lease.id,
            refund_amount=Decimal("700"),
            deductions=[DepositDeduction(
                amount=Decimal("300"), description="Cleaning",
            )],
            return_date=date(2026, 4, 10),
        ))
        db_session.commit()

        flow = ReportService(db_session).cash_flow(
            date(2026, 4, 1), date(2026, 4, 30)
        )

        lines = {line.code: line.amount for line in flow.lines}
        assert lines == {"2200": Decimal("-1000"), "4100": Decimal("300")}
        assert flow.net_change == Decimal("-700")
        assert flow.opening_balance == Decimal("1800")
        assert flow.closing_balance == Decimal("1100")
        assert flow.previous_net_change == Decimal("800")

    def test_empty_period(self, db_session):
        flow = ReportService(db_session).cash_flow(*MARCH)
        assert flow.lines == []
        assert flow.net_change == Decimal("0")
