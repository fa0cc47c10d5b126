"""
Reporting aggregator.

Every report is computed from ledger entries at request time.
Nothing here writes; an empty ledger gives zeroed reports.

Income and expense amounts are net of reversals: an income
account reports credits minus debits and an expense account
debits minus credits, following each account's normal balance.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from property_ledger.models.enums import AccountType, DebitCredit, LeaseStatus
from property_ledger.models.lease import Lease
from property_ledger.models.ledger_entry import LedgerEntry
from property_ledger.models.property import Property
from property_ledger.services.balance_service import (
    BUCKET_LABELS,
    ZERO,
    BalanceService,
    TenantBalance,
    TenantBalanceSummary,
    empty_buckets,
)
from property_ledger.services.chart_of_accounts import (
    CASH,
    RENTAL_INCOME,
    ChartAccount,
    accounts_of_type,
    all_accounts,
    lookup,
)

TENTH = Decimal("0.1")


def percent(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole as a percentage to one decimal; 0 when whole is 0."""
    if not whole:
        return Decimal("0.0")
    return (part / whole * 100).quantize(TENTH, rounding=ROUND_HALF_UP)


def change_percent(current: Decimal, previous: Decimal) -> Decimal:
    if not previous:
        return Decimal("0.0")
    return percent(current - previous, abs(previous))


def current_month() -> tuple[date, date]:
    today = date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def previous_period(start: date, end: date) -> tuple[date, date]:
    """The period of equal length ending the day before start."""
    prev_end = start - timedelta(days=1)
    prev_start = prev_end - (end - start)
    return prev_start, prev_end


# --- Report results ---

@dataclass
class AccountLine:
    code: str
    name: str
    amount: Decimal
    previous_amount: Decimal = ZERO
    change_percent: Decimal = Decimal("0.0")
    percent_of_total: Decimal = Decimal("0.0")


@dataclass
class ProfitAndLoss:
    start_date: date
    end_date: date
    previous_start_date: date
    previous_end_date: date
    income: list[AccountLine]
    expenses: list[AccountLine]
    total_income: Decimal
    total_expenses: Decimal
    previous_total_income: Decimal
    previous_total_expenses: Decimal
    property_id: int | None = None

    @property
    def net_operating_income(self) -> Decimal:
        return self.total_income - self.total_expenses

    @property
    def previous_net_operating_income(self) -> Decimal:
        return self.previous_total_income - self.previous_total_expenses

    @property
    def income_change_percent(self) -> Decimal:
        return change_percent(self.total_income, self.previous_total_income)

    @property
    def expense_change_percent(self) -> Decimal:
        return change_percent(self.total_expenses, self.previous_total_expenses)

    @property
    def noi_change_percent(self) -> Decimal:
        return change_percent(
            self.net_operating_income, self.previous_net_operating_income
        )

    @property
    def expense_ratio(self) -> Decimal:
        return percent(self.total_expenses, self.total_income)

    @property
    def profit_margin(self) -> Decimal:
        return percent(self.net_operating_income, self.total_income)


@dataclass
class IncomeBreakdown:
    start_date: date
    end_date: date
    accounts: list[AccountLine]
    total_income: Decimal
    property_id: int | None = None


@dataclass
class TenantAging:
    lease_id: int
    tenant_name: str
    property_name: str | None
    unit_name: str | None
    buckets: dict[str, Decimal]
    total_outstanding: Decimal
    oldest_charge_date: date | None


@dataclass
class AgingReport:
    as_of_date: date
    tenants: list[TenantAging] = field(default_factory=list)
    buckets: dict[str, Decimal] = field(default_factory=empty_buckets)

    @property
    def total_outstanding(self) -> Decimal:
        return sum(self.buckets.values(), ZERO)

    @property
    def over_30(self) -> Decimal:
        return self.buckets["31-60"] + self.over_60

    @property
    def over_60(self) -> Decimal:
        return self.buckets["61-90"] + self.over_90

    @property
    def over_90(self) -> Decimal:
        return self.buckets["90+"]


@dataclass
class RentRollUnit:
    unit_id: int
    unit_number: str
    square_feet: int | None
    is_occupied: bool
    lease_id: int | None = None
    tenant_name: str | None = None
    monthly_rent: Decimal = ZERO
    lease_start: date | None = None
    lease_end: date | None = None

    @property
    def annual_rent(self) -> Decimal:
        return self.monthly_rent * 12


@dataclass
class RentRollProperty:
    property_id: int
    property_name: str
    property_address: str | None
    units: list[RentRollUnit] = field(default_factory=list)

    @property
    def total_units(self) -> int:
        return len(self.units)

    @property
    def occupied_units(self) -> int:
        return sum(1 for u in self.units if u.is_occupied)

    @property
    def vacant_units(self) -> int:
        return self.total_units - self.occupied_units

    @property
    def occupancy_rate(self) -> int:
        if not self.units:
            return 0
        return round(self.occupied_units * 100 / self.total_units)

    @property
    def total_monthly_rent(self) -> Decimal:
        return sum((u.monthly_rent for u in self.units), ZERO)

    @property
    def total_annual_rent(self) -> Decimal:
        return self.total_monthly_rent * 12


@dataclass
class RentRollSummary:
    total_properties: int = 0
    total_units: int = 0
    occupied_units: int = 0
    vacant_units: int = 0
    total_monthly_rent: Decimal = ZERO

    @property
    def occupancy_rate(self) -> int:
        if not self.total_units:
            return 0
        return round(self.occupied_units * 100 / self.total_units)

    @property
    def total_annual_rent(self) -> Decimal:
        return self.total_monthly_rent * 12


@dataclass
class RentRoll:
    as_of_date: date
    properties: list[RentRollProperty]
    summary: RentRollSummary


@dataclass
class TransactionRow:
    entry_id: int
    transaction_id: str
    entry_date: date
    account_code: str
    account_name: str
    description: str
    debit: Decimal
    credit: Decimal
    lease_id: int | None
    tenant_name: str | None
    property_id: int | None
    property_name: str | None
    posted_by: str


@dataclass
class TransactionListing:
    start_date: date
    end_date: date
    rows: list[TransactionRow]

    @property
    def total_debits(self) -> Decimal:
        return sum((r.debit for r in self.rows), ZERO)

    @property
    def total_credits(self) -> Decimal:
        return sum((r.credit for r in self.rows), ZERO)


@dataclass
class DrillDownRow:
    entry_id: int
    transaction_id: str
    entry_date: date
    description: str
    debit: Decimal
    credit: Decimal
    running_balance: Decimal
    lease_id: int | None


@dataclass
class AccountDrillDown:
    account_code: str
    account_name: str
    account_type: AccountType
    normal_balance: DebitCredit
    start_date: date
    end_date: date
    opening_balance: Decimal
    period_debits: Decimal
    period_credits: Decimal
    closing_balance: Decimal
    entries: list[DrillDownRow]


@dataclass
class TrialBalanceLine:
    code: str
    name: str
    account_type: AccountType
    normal_balance: DebitCredit
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal
    # DR, CR or ZERO
    balance_side: str


@dataclass
class TrialBalance:
    as_of_date: date
    accounts: list[TrialBalanceLine]

    @property
    def total_debits(self) -> Decimal:
        return sum(
            (a.balance for a in self.accounts if a.balance_side == "DR"), ZERO
        )

    @property
    def total_credits(self) -> Decimal:
        return sum(
            (a.balance for a in self.accounts if a.balance_side == "CR"), ZERO
        )

    @property
    def difference(self) -> Decimal:
        return abs(self.total_debits - self.total_credits)

    @property
    def is_balanced(self) -> bool:
        return self.difference == 0


@dataclass
class BalanceSheetLine:
    code: str
    name: str
    balance: Decimal


@dataclass
class BalanceSheet:
    """
    Assets against liabilities and equity as of a date.

    There are no equity accounts in the chart, so equity is the
    income earned less expenses incurred to date.
    """
    as_of_date: date
    assets: list[BalanceSheetLine]
    liabilities: list[BalanceSheetLine]
    retained_earnings: Decimal
    property_id: int | None = None

    @property
    def total_assets(self) -> Decimal:
        return sum((a.balance for a in self.assets), ZERO)

    @property
    def total_liabilities(self) -> Decimal:
        return sum((a.balance for a in self.liabilities), ZERO)

    @property
    def total_equity(self) -> Decimal:
        return self.retained_earnings

    @property
    def total_liabilities_and_equity(self) -> Decimal:
        return self.total_liabilities + self.total_equity

    @property
    def is_balanced(self) -> bool:
        return self.total_assets == self.total_liabilities_and_equity


@dataclass
class CashFlowLine:
    """Net cash moved against one account; positive is cash in."""
    code: str
    name: str
    account_type: AccountType
    amount: Decimal


@dataclass
class CashFlow:
    start_date: date
    end_date: date
    previous_start_date: date
    previous_end_date: date
    opening_balance: Decimal
    lines: list[CashFlowLine]
    previous_net_change: Decimal
    property_id: int | None = None

    @property
    def total_inflows(self) -> Decimal:
        return sum((line.amount for line in self.lines if line.amount > 0), ZERO)

    @property
    def total_outflows(self) -> Decimal:
        return -sum((line.amount for line in self.lines if line.amount < 0), ZERO)

    @property
    def net_change(self) -> Decimal:
        return self.total_inflows - self.total_outflows

    @property
    def closing_balance(self) -> Decimal:
        return self.opening_balance + self.net_change

    @property
    def net_change_percent(self) -> Decimal:
        return change_percent(self.net_change, self.previous_net_change)


class ReportService:
    """Read-only report queries."""

    def __init__(self, db: Session):
        self.db = db
        self.balance_service = BalanceService(db)

    # --- Helpers ---

    def _totals_by_account(self, *criteria) -> dict[str, dict[DebitCredit, Decimal]]:
        """DR and CR totals per account code for entries matching criteria."""
        rows = self.db.execute(
            select(
                LedgerEntry.account_code,
                LedgerEntry.debit_credit,
                func.coalesce(func.sum(LedgerEntry.amount), 0),
            )
            .where(*criteria)
            .group_by(LedgerEntry.account_code, LedgerEntry.debit_credit)
        ).all()

        totals: dict[str, dict[DebitCredit, Decimal]] = {}
        for code, side, total in rows:
            sides = totals.setdefault(
                code, {DebitCredit.DR: ZERO, DebitCredit.CR: ZERO}
            )
            sides[side] = Decimal(str(total)).quantize(Decimal("0.01"))
        return totals

    def _net_by_account(
        self,
        account_type: AccountType,
        start: date,
        end: date,
        property_id: int | None = None,
    ) -> dict[str, Decimal]:
        """Net amount per account of one type, in its normal-balance sign."""
        accounts = accounts_of_type(account_type)
        criteria = [
            LedgerEntry.account_code.in_([a.code for a in accounts]),
            LedgerEntry.entry_date >= start,
            LedgerEntry.entry_date <= end,
        ]
        if property_id is not None:
            criteria.append(LedgerEntry.property_id == property_id)

        totals = self._totals_by_account(*criteria)
        net = {}
        for account in accounts:
            sides = totals.get(account.code)
            if not sides:
                continue
            net[account.code] = _signed(account, sides)
        return net

    # --- Reports ---

    def profit_and_loss(
        self,
        start: date | None = None,
        end: date | None = None,
        property_id: int | None = None,
    ) -> ProfitAndLoss:
        """
        Income and expenses for a period, compared with the period
        of equal length immediately before it.
        """
        if start is None or end is None:
            default_start, default_end = current_month()
            start = start or default_start
            end = end or default_end
        prev_start, prev_end = previous_period(start, end)

        def lines(account_type: AccountType) -> tuple[list[AccountLine], Decimal, Decimal]:
            current = self._net_by_account(account_type, start, end, property_id)
            previous = self._net_by_account(
                account_type, prev_start, prev_end, property_id
            )
            result = []
            for account in accounts_of_type(account_type):
                if account.code not in current and account.code not in previous:
                    continue
                amount = current.get(account.code, ZERO)
                prev_amount = previous.get(account.code, ZERO)
                result.append(AccountLine(
                    code=account.code,
                    name=account.name,
                    amount=amount,
                    previous_amount=prev_amount,
                    change_percent=change_percent(amount, prev_amount),
                ))
            total = sum(current.values(), ZERO)
            for line in result:
                line.percent_of_total = percent(line.amount, total)
            return result, total, sum(previous.values(), ZERO)

        income, total_income, prev_income = lines(AccountType.INCOME)
        expenses, total_expenses, prev_expenses = lines(AccountType.EXPENSE)

        return ProfitAndLoss(
            start_date=start,
            end_date=end,
            previous_start_date=prev_start,
            previous_end_date=prev_end,
            income=income,
            expenses=expenses,
            total_income=total_income,
            total_expenses=total_expenses,
            previous_total_income=prev_income,
            previous_total_expenses=prev_expenses,
            property_id=property_id,
        )

    def income_breakdown(
        self,
        start: date | None = None,
        end: date | None = None,
        property_id: int | None = None,
    ) -> IncomeBreakdown:
        """Income per account for a period with each account's share."""
        if start is None or end is None:
            default_start, default_end = current_month()
            start = start or default_start
            end = end or default_end

        net = self._net_by_account(AccountType.INCOME, start, end, property_id)
        total = sum(net.values(), ZERO)
        accounts = [
            AccountLine(
                code=account.code,
                name=account.name,
                amount=net[account.code],
                percent_of_total=percent(net[account.code], total),
            )
            for account in accounts_of_type(AccountType.INCOME)
            if account.code in net
        ]
        return IncomeBreakdown(
            start_date=start,
            end_date=end,
            accounts=accounts,
            total_income=total,
            property_id=property_id,
        )

    def aging_report(self, as_of: date | None = None) -> AgingReport:
        """Aging of every ACTIVE lease that has something outstanding."""
        as_of = as_of or date.today()
        report = AgingReport(as_of_date=as_of)

        leases = self.db.execute(
            select(Lease)
            .where(Lease.status == LeaseStatus.ACTIVE)
            .order_by(Lease.tenant_name, Lease.id)
        ).scalars().all()

        for lease in leases:
            aging = self.balance_service.aging_of(lease.id, as_of)
            if aging.total_outstanding <= 0:
                continue
            oldest = aging.oldest_open_charge
            report.tenants.append(TenantAging(
                lease_id=lease.id,
                tenant_name=lease.tenant_name,
                property_name=(
                    lease.rental_property.name if lease.rental_property else None
                ),
                unit_name=lease.unit.unit_number if lease.unit else None,
                buckets=aging.buckets,
                total_outstanding=aging.total_outstanding,
                oldest_charge_date=oldest.entry_date if oldest else None,
            ))
            for label in BUCKET_LABELS:
                report.buckets[label] += aging.buckets[label]

        report.tenants.sort(key=lambda t: t.total_outstanding, reverse=True)
        return report

    def tenant_balances(self) -> tuple[list[TenantBalance], TenantBalanceSummary]:
        return self.balance_service.tenant_balances()

    def rent_roll(self, as_of: date | None = None) -> RentRoll:
        """
        Units by property with the tenant of each unit's active lease.

        Monthly rent is the total of the lease's open rental-income
        schedules, falling back to the lease's monthly rent amount
        when it has none.
        """
        as_of = as_of or date.today()
        properties = self.db.execute(
            select(Property).order_by(Property.name, Property.id)
        ).scalars().all()

        summary = RentRollSummary()
        rows = []
        for prop in properties:
            row = RentRollProperty(
                property_id=prop.id,
                property_name=prop.name,
                property_address=prop.address,
            )
            for unit in prop.units:
                lease = _current_lease(unit.leases, as_of)
                if lease is None:
                    row.units.append(RentRollUnit(
                        unit_id=unit.id,
                        unit_number=unit.unit_number,
                        square_feet=unit.square_feet,
                        is_occupied=False,
                    ))
                    continue
                row.units.append(RentRollUnit(
                    unit_id=unit.id,
                    unit_number=unit.unit_number,
                    square_feet=unit.square_feet,
                    is_occupied=True,
                    lease_id=lease.id,
                    tenant_name=lease.tenant_name,
                    monthly_rent=_monthly_rent(lease, as_of),
                    lease_start=lease.start_date,
                    lease_end=lease.end_date,
                ))

            summary.total_properties += 1
            summary.total_units += row.total_units
            summary.occupied_units += row.occupied_units
            summary.vacant_units += row.vacant_units
            summary.total_monthly_rent += row.total_monthly_rent
            rows.append(row)

        return RentRoll(as_of_date=as_of, properties=rows, summary=summary)

    def all_transactions(
        self,
        start: date | None = None,
        end: date | None = None,
        account_code: str | None = None,
        property_id: int | None = None,
    ) -> TransactionListing:
        """Every entry in a period with its account, tenant and property."""
        if start is None or end is None:
            default_start, default_end = current_month()
            start = start or default_start
            end = end or default_end
        if account_code is not None:
            lookup(account_code)

        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.entry_date >= start, LedgerEntry.entry_date <= end)
            .order_by(LedgerEntry.entry_date, LedgerEntry.id)
        )
        if account_code is not None:
            stmt = stmt.where(LedgerEntry.account_code == account_code)
        if property_id is not None:
            stmt = stmt.where(LedgerEntry.property_id == property_id)

        rows = []
        for entry in self.db.execute(stmt).scalars().all():
            rows.append(TransactionRow(
                entry_id=entry.id,
                transaction_id=str(entry.transaction_id),
                entry_date=entry.entry_date,
                account_code=entry.account_code,
                account_name=lookup(entry.account_code).name,
                description=entry.description,
                debit=entry.amount if entry.debit_credit == DebitCredit.DR else ZERO,
                credit=entry.amount if entry.debit_credit == DebitCredit.CR else ZERO,
                lease_id=entry.lease_id,
                tenant_name=entry.lease.tenant_name if entry.lease else None,
                property_id=entry.property_id,
                property_name=(
                    entry.rental_property.name if entry.rental_property else None
                ),
                posted_by=entry.posted_by,
            ))
        return TransactionListing(start_date=start, end_date=end, rows=rows)

    def account_drill_down(
        self,
        account_code: str,
        start: date | None = None,
        end: date | None = None,
    ) -> AccountDrillDown:
        """
        Entries of one account in a period with a running balance.

        The opening balance covers everything dated before start.
        """
        account = lookup(account_code)
        if start is None or end is None:
            default_start, default_end = current_month()
            start = start or default_start
            end = end or default_end

        opening_sides = self._totals_by_account(
            LedgerEntry.account_code == account_code,
            LedgerEntry.entry_date < start,
        ).get(account_code, {DebitCredit.DR: ZERO, DebitCredit.CR: ZERO})
        opening = _signed(account, opening_sides)

        entries = self.db.execute(
            select(LedgerEntry)
            .where(
                LedgerEntry.account_code == account_code,
                LedgerEntry.entry_date >= start,
                LedgerEntry.entry_date <= end,
            )
            .order_by(LedgerEntry.entry_date, LedgerEntry.id)
        ).scalars().all()

        running = opening
        debits = credits = ZERO
        rows = []
        for entry in entries:
            is_debit = entry.debit_credit == DebitCredit.DR
            if is_debit:
                debits += entry.amount
            else:
                credits += entry.amount
            if is_debit == (account.normal_balance == DebitCredit.DR):
                running += entry.amount
            else:
                running -= entry.amount
            rows.append(DrillDownRow(
                entry_id=entry.id,
                transaction_id=str(entry.transaction_id),
                entry_date=entry.entry_date,
                description=entry.description,
                debit=entry.amount if is_debit else ZERO,
                credit=ZERO if is_debit else entry.amount,
                running_balance=running,
                lease_id=entry.lease_id,
            ))

        return AccountDrillDown(
            account_code=account.code,
            account_name=account.name,
            account_type=account.account_type,
            normal_balance=account.normal_balance,
            start_date=start,
            end_date=end,
            opening_balance=opening,
            period_debits=debits,
            period_credits=credits,
            closing_balance=running,
            entries=rows,
        )

    def trial_balance(
        self, as_of: date | None = None, include_zero: bool = False
    ) -> TrialBalance:
        """
        Account totals as of a date.

        Each account's balance is shown on the side it falls on,
        so a contra balance (an asset in credit) shows as CR.
        Accounts without activity are left out unless include_zero.
        """
        as_of = as_of or date.today()
        totals = self._totals_by_account(LedgerEntry.entry_date <= as_of)

        lines = []
        for account in all_accounts():
            sides = totals.get(account.code)
            if not sides and not include_zero:
                continue
            sides = sides or {DebitCredit.DR: ZERO, DebitCredit.CR: ZERO}
            balance = _signed(account, sides)
            if balance == 0:
                side = "ZERO"
            elif balance > 0:
                side = account.normal_balance.value
            else:
                side = (
                    DebitCredit.CR.value
                    if account.normal_balance == DebitCredit.DR
                    else DebitCredit.DR.value
                )
            lines.append(TrialBalanceLine(
                code=account.code,
                name=account.name,
                account_type=account.account_type,
                normal_balance=account.normal_balance,
                debit_total=sides[DebitCredit.DR],
                credit_total=sides[DebitCredit.CR],
                balance=abs(balance),
                balance_side=side,
            ))
        return TrialBalance(as_of_date=as_of, accounts=lines)

    def balance_sheet(
        self, as_of: date | None = None, property_id: int | None = None
    ) -> BalanceSheet:
        """
        Asset and liability balances as of a date, with retained
        earnings (income less expenses to date) as equity.

        Accounts with a zero balance are left out.
        """
        as_of = as_of or date.today()
        criteria = [LedgerEntry.entry_date <= as_of]
        if property_id is not None:
            criteria.append(LedgerEntry.property_id == property_id)
        totals = self._totals_by_account(*criteria)

        def section(account_type: AccountType) -> list[BalanceSheetLine]:
            lines = []
            for account in accounts_of_type(account_type):
                sides = totals.get(account.code)
                if not sides:
                    continue
                balance = _signed(account, sides)
                if balance:
                    lines.append(BalanceSheetLine(
                        code=account.code, name=account.name, balance=balance,
                    ))
            return lines

        def net(account_type: AccountType) -> Decimal:
            return sum(
                (_signed(a, totals[a.code]) for a in accounts_of_type(account_type)
                 if a.code in totals),
                ZERO,
            )

        return BalanceSheet(
            as_of_date=as_of,
            assets=section(AccountType.ASSET),
            liabilities=section(AccountType.LIABILITY),
            retained_earnings=net(AccountType.INCOME) - net(AccountType.EXPENSE),
            property_id=property_id,
        )

    def _cash_change(self, *criteria) -> Decimal:
        sides = self._totals_by_account(
            LedgerEntry.account_code == CASH, *criteria
        ).get(CASH)
        if not sides:
            return ZERO
        return sides[DebitCredit.DR] - sides[DebitCredit.CR]

    def cash_flow(
        self,
        start: date | None = None,
        end: date | None = None,
        property_id: int | None = None,
    ) -> CashFlow:
        """
        Operating cash movement for a period by counter-account.

        Every transaction that touches cash balances, so the cash it
        moved equals the credits less the debits of its other legs.
        Summing those legs per account splits the period's net cash
        change into rent collected, deposits taken or returned,
        expenses paid and so on.
        """
        if start is None or end is None:
            default_start, default_end = current_month()
            start = start or default_start
            end = end or default_end
        prev_start, prev_end = previous_period(start, end)

        scope = []
        if property_id is not None:
            scope.append(LedgerEntry.property_id == property_id)
        in_period = [
            LedgerEntry.entry_date >= start, LedgerEntry.entry_date <= end,
        ]

        cash_transactions = select(LedgerEntry.transaction_id).where(
            LedgerEntry.account_code == CASH, *in_period, *scope
        )
        totals = self._totals_by_account(
            LedgerEntry.transaction_id.in_(cash_transactions),
            LedgerEntry.account_code != CASH,
        )

        lines = []
        for account in all_accounts():
            sides = totals.get(account.code)
            if not sides:
                continue
            amount = sides[DebitCredit.CR] - sides[DebitCredit.DR]
            if amount:
                lines.append(CashFlowLine(
                    code=account.code,
                    name=account.name,
                    account_type=account.account_type,
                    amount=amount,
                ))

        return CashFlow(
            start_date=start,
            end_date=end,
            previous_start_date=prev_start,
            previous_end_date=prev_end,
            opening_balance=self._cash_change(LedgerEntry.entry_date < start, *scope),
            lines=lines,
            previous_net_change=self._cash_change(
                LedgerEntry.entry_date >= prev_start,
                LedgerEntry.entry_date <= prev_end,
                *scope,
            ),
            property_id=property_id,
        )


def _signed(account: ChartAccount, sides: dict[DebitCredit, Decimal]) -> Decimal:
    if account.normal_balance == DebitCredit.DR:
        return sides[DebitCredit.DR] - sides[DebitCredit.CR]
    return sides[DebitCredit.CR] - sides[DebitCredit.DR]


def _current_lease(leases: list[Lease], as_of: date) -> Lease | None:
    for lease in leases:
        if lease.status != LeaseStatus.ACTIVE:
            continue
        if lease.start_date and lease.start_date > as_of:
            continue
        if lease.end_date and lease.end_date < as_of:
            continue
        return lease
    return None


def _monthly_rent(lease: Lease, as_of: date) -> Decimal:
    scheduled = [
        c.amount for c in lease.scheduled_charges
        if c.account_code == RENTAL_INCOME and c.is_open_on(as_of)
    ]
    if scheduled:
        return sum(scheduled, ZERO)
    return lease.monthly_rent_amount or ZERO
