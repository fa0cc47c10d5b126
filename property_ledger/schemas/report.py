"""
Pydantic schemas for reports.

Report services return plain dataclasses; these models read
them through from_attributes, computed properties included.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from property_ledger.models.enums import AccountType, DebitCredit, LeaseStatus


class ReportModel(BaseModel):
    model_config = {"from_attributes": True}


class AccountLineResponse(ReportModel):
    code: str
    name: str
    amount: Decimal
    previous_amount: Decimal
    change_percent: Decimal
    percent_of_total: Decimal


class ProfitAndLossResponse(ReportModel):
    start_date: date
    end_date: date
    previous_start_date: date
    previous_end_date: date
    property_id: int | None
    income: list[AccountLineResponse]
    expenses: list[AccountLineResponse]
    total_income: Decimal
    total_expenses: Decimal
    net_operating_income: Decimal
    previous_total_income: Decimal
    previous_total_expenses: Decimal
    previous_net_operating_income: Decimal
    income_change_percent: Decimal
    expense_change_percent: Decimal
    noi_change_percent: Decimal
    expense_ratio: Decimal
    profit_margin: Decimal


class IncomeBreakdownResponse(ReportModel):
    start_date: date
    end_date: date
    property_id: int | None
    accounts: list[AccountLineResponse]
    total_income: Decimal


class TenantAgingResponse(ReportModel):
    lease_id: int
    tenant_name: str
    property_name: str | None
    unit_name: str | None
    buckets: dict[str, Decimal]
    total_outstanding: Decimal
    oldest_charge_date: date | None


class AgingReportResponse(ReportModel):
    as_of_date: date
    buckets: dict[str, Decimal]
    total_outstanding: Decimal
    over_30: Decimal
    over_60: Decimal
    over_90: Decimal
    tenants: list[TenantAgingResponse]


class TenantBalanceResponse(ReportModel):
    lease_id: int
    tenant_name: str
    status: LeaseStatus
    balance: Decimal
    monthly_rent: Decimal
    property_name: str | None
    unit_name: str | None


class TenantBalanceSummaryResponse(ReportModel):
    total_tenants: int
    tenants_owing: int
    tenants_with_credit: int
    total_owed: Decimal
    total_credits: Decimal
    net_balance: Decimal


class TenantBalancesResponse(BaseModel):
    tenants: list[TenantBalanceResponse]
    summary: TenantBalanceSummaryResponse


class RentRollUnitResponse(ReportModel):
    unit_id: int
    unit_number: str
    square_feet: int | None
    is_occupied: bool
    lease_id: int | None
    tenant_name: str | None
    monthly_rent: Decimal
    annual_rent: Decimal
    lease_start: date | None
    lease_end: date | None


class RentRollPropertyResponse(ReportModel):
    property_id: int
    property_name: str
    property_address: str | None
    total_units: int
    occupied_units: int
    vacant_units: int
    occupancy_rate: int
    total_monthly_rent: Decimal
    total_annual_rent: Decimal
    units: list[RentRollUnitResponse]


class RentRollSummaryResponse(ReportModel):
    total_properties: int
    total_units: int
    occupied_units: int
    vacant_units: int
    occupancy_rate: int
    total_monthly_rent: Decimal
    total_annual_rent: Decimal


class RentRollResponse(ReportModel):
    as_of_date: date
    properties: list[RentRollPropertyResponse]
    summary: RentRollSummaryResponse


class TransactionRowResponse(ReportModel):
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


class TransactionListingResponse(ReportModel):
    start_date: date
    end_date: date
    rows: list[TransactionRowResponse]
    total_debits: Decimal
    total_credits: Decimal


class DrillDownRowResponse(ReportModel):
    entry_id: int
    transaction_id: str
    entry_date: date
    description: str
    debit: Decimal
    credit: Decimal
    running_balance: Decimal
    lease_id: int | None


class AccountDrillDownResponse(ReportModel):
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
    entries: list[DrillDownRowResponse]


class TrialBalanceLineResponse(ReportModel):
    code: str
    name: str
    account_type: AccountType
    normal_balance: DebitCredit
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal
    balance_side: str


class TrialBalanceResponse(ReportModel):
    as_of_date: date
    accounts: list[TrialBalanceLineResponse]
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool


class BalanceSheetLineResponse(ReportModel):
    code: str
    name: str
    balance: Decimal


class BalanceSheetResponse(ReportModel):
    as_of_date: date
    property_id: int | None
    assets: list[BalanceSheetLineResponse]
    liabilities: list[BalanceSheetLineResponse]
    retained_earnings: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_liabilities_and_equity: Decimal
    is_balanced: bool


class CashFlowLineResponse(ReportModel):
    code: str
    name: str
    account_type: AccountType
    amount: Decimal


class CashFlowResponse(ReportModel):
    start_date: date
    end_date: date
    previous_start_date: date
    previous_end_date: date
    property_id: int | None
    opening_balance: Decimal
    lines: list[CashFlowLineResponse]
    total_inflows: Decimal
    total_outflows: Decimal
    net_change: Decimal
    closing_balance: Decimal
    previous_net_change: Decimal
    net_change_percent: Decimal
