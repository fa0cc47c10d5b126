"""
Report endpoints.

All reports are read-only and derived from ledger entries at
request time. Periods default to the current calendar month.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from property_ledger.exceptions import ValidationError
from property_ledger.models.base import get_db
from property_ledger.services.report_service import ReportService
from property_ledger.schemas.report import (
    AccountDrillDownResponse,
    AgingReportResponse,
    BalanceSheetResponse,
    CashFlowResponse,
    IncomeBreakdownResponse,
    ProfitAndLossResponse,
    RentRollResponse,
    TenantBalanceResponse,
    TenantBalanceSummaryResponse,
    TenantBalancesResponse,
    TransactionListingResponse,
    TrialBalanceResponse,
)

router = APIRouter(prefix="/reports", tags=["Reports"])


def _check_period(start: date | None, end: date | None) -> None:
    if start and end and start > end:
        raise ValidationError("Start date cannot be after end date")


@router.get("/tenant-balances", response_model=TenantBalancesResponse)
def tenant_balances(db: Session = Depends(get_db)):
    balances, summary = ReportService(db).tenant_balances()
    return TenantBalancesResponse(
        tenants=[TenantBalanceResponse.model_validate(b) for b in balances],
        summary=TenantBalanceSummaryResponse.model_validate(summary),
    )


@router.get("/aging", response_model=AgingReportResponse)
def aging_report(
    as_of_date: date | None = Query(default=None, alias="asOfDate"),
    db: Session = Depends(get_db),
):
    """Receivables of every active lease by age bucket."""
    report = ReportService(db).aging_report(as_of_date)
    return AgingReportResponse.model_validate(report)


@router.get("/profit-loss", response_model=ProfitAndLossResponse)
def profit_and_loss(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    property_id: int | None = Query(default=None, alias="propertyId"),
    db: Session = Depends(get_db),
):
    """Income, expenses and NOI compared with the previous period."""
    _check_period(start_date, end_date)
    report = ReportService(db).profit_and_loss(start_date, end_date, property_id)
    return ProfitAndLossResponse.model_validate(report)


@router.get("/income-breakdown", response_model=IncomeBreakdownResponse)
def income_breakdown(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    property_id: int | None = Query(default=None, alias="propertyId"),
    db: Session = Depends(get_db),
):
    _check_period(start_date, end_date)
    report = ReportService(db).income_breakdown(start_date, end_date, property_id)
    return IncomeBreakdownResponse.model_validate(report)


@router.get("/rent-roll", response_model=RentRollResponse)
def rent_roll(
    as_of_date: date | None = Query(default=None, alias="asOfDate"),
    db: Session = Depends(get_db),
):
    """Units by property with their current tenant and rent."""
    return RentRollResponse.model_validate(ReportService(db).rent_roll(as_of_date))


@router.get("/all-transactions", response_model=TransactionListingResponse)
def all_transactions(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    account_code: str | None = Query(default=None, alias="accountCode"),
    property_id: int | None = Query(default=None, alias="propertyId"),
    db: Session = Depends(get_db),
):
    _check_period(start_date, end_date)
    listing = ReportService(db).all_transactions(
        start_date, end_date, account_code, property_id
    )
    return TransactionListingResponse.model_validate(listing)


@router.get("/accounts/{account_code}", response_model=AccountDrillDownResponse)
def account_drill_down(
    account_code: str,
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Entries of one account with opening and closing balance."""
    _check_period(start_date, end_date)
    report = ReportService(db).account_drill_down(
        account_code, start_date, end_date
    )
    return AccountDrillDownResponse.model_validate(report)


@router.get("/trial-balance", response_model=TrialBalanceResponse)
def trial_balance(
    as_of_date: date | None = Query(default=None, alias="asOfDate"),
    include_zero: bool = Query(default=False, alias="includeZero"),
    db: Session = Depends(get_db),
):
    report = ReportService(db).trial_balance(as_of_date, include_zero)
    return TrialBalanceResponse.model_validate(report)


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
def balance_sheet(
    as_of_date: date | None = Query(default=None, alias="asOfDate"),
    property_id: int | None = Query(default=None, alias="propertyId"),
    db: Session = Depends(get_db),
):
    """Assets, liabilities and retained earnings as of a date."""
    report = ReportService(db).balance_sheet(as_of_date, property_id)
    return BalanceSheetResponse.model_validate(report)


@router.get("/cash-flow", response_model=CashFlowResponse)
def cash_flow(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    property_id: int | None = Query(default=None, alias="propertyId"),
    db: Session = Depends(get_db),
):
    """Cash in and out for a period, by the account on the other side."""
    _check_period(start_date, end_date)
    report = ReportService(db).cash_flow(start_date, end_date, property_id)
    return CashFlowResponse.model_validate(report)
