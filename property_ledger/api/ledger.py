"""
Ledger API endpoints.

Read access to entries, account balances and lease balances,
plus reversal of a posted transaction and late fee charges.
The API layer is thin: balances, statements and aging are
calculated by the services, never stored.
"""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from property_ledger.api.deps import get_actor
from property_ledger.api.transactions import posting_response
from property_ledger.exceptions import LedgerError, NotFoundError, ValidationError
from property_ledger.models.base import get_db
from property_ledger.services.balance_service import BalanceService
from property_ledger.services.chart_of_accounts import all_accounts, lookup
from property_ledger.services.ledger_service import LedgerService
from property_ledger.schemas.ledger import (
    AccountBalanceResponse,
    AgingResponse,
    LateFeeRequest,
    LeaseBalanceResponse,
    LeaseStatementResponse,
    LedgerAccountResponse,
    LedgerEntryResponse,
    PostingResponse,
    ReverseRequest,
)

router = APIRouter(prefix="/ledger", tags=["Ledger"])


@router.get("", response_model=list[LedgerEntryResponse])
def list_recent_entries(
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Most recently posted entries, newest first."""
    return LedgerService(db).get_recent_entries(limit)


@router.get("/accounts", response_model=list[LedgerAccountResponse])
def list_accounts():
    """The chart of accounts."""
    return [
        LedgerAccountResponse(
            code=a.code,
            name=a.name,
            account_type=a.account_type,
            normal_balance=a.normal_balance,
        )
        for a in all_accounts()
    ]


@router.get(
    "/accounts/{account_code}/balance",
    response_model=AccountBalanceResponse,
)
def get_account_balance(
    account_code: str,
    db: Session = Depends(get_db),
):
    """
    Current balance of an account, signed by its normal balance.
    """
    account = lookup(account_code)
    balance = LedgerService(db).get_account_balance(account_code)
    return AccountBalanceResponse(
        account_code=account.code,
        account_name=account.name,
        account_type=account.account_type,
        balance=balance,
    )


@router.get(
    "/transactions/{transaction_id}",
    response_model=list[LedgerEntryResponse],
)
def get_transaction(
    transaction_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    entries = LedgerService(db).get_entries_by_transaction(transaction_id)
    if not entries:
        raise NotFoundError("Transaction", transaction_id)
    return entries


@router.post(
    "/transactions/{transaction_id}/reverse",
    response_model=PostingResponse,
    status_code=201,
)
def reverse_transaction(
    transaction_id: uuid.UUID,
    request: ReverseRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Reverse a posted transaction with offsetting entries.

    The original entries stay as they are.
    """
    service = LedgerService(db)
    try:
        entries = service.reverse_transaction(
            transaction_id, request.reason, posted_by=actor
        )
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return posting_response(entries, f"Transaction {transaction_id} reversed")


@router.get("/leases/{lease_id}/entries", response_model=list[LedgerEntryResponse])
def get_lease_entries(
    lease_id: int,
    db: Session = Depends(get_db),
):
    """All entries of a lease, newest first."""
    service = LedgerService(db)
    service.require_lease(lease_id)
    return service.get_entries_by_lease(lease_id)


@router.get("/leases/{lease_id}/balance", response_model=LeaseBalanceResponse)
def get_lease_balance(
    lease_id: int,
    db: Session = Depends(get_db),
):
    """What the tenant owes (positive) or holds as credit (negative)."""
    balance = BalanceService(db).balance_of(lease_id)
    return LeaseBalanceResponse(lease_id=lease_id, balance=balance)


@router.get("/leases/{lease_id}/aging", response_model=AgingResponse)
def get_lease_aging(
    lease_id: int,
    as_of_date: date | None = Query(default=None, alias="asOfDate"),
    db: Session = Depends(get_db),
):
    """Outstanding charges of a lease bucketed by age."""
    aging = BalanceService(db).aging_of(lease_id, as_of_date)
    return AgingResponse(
        lease_id=aging.lease_id,
        as_of_date=aging.as_of_date,
        buckets=aging.buckets,
        total_outstanding=aging.total_outstanding,
        unapplied_credit=aging.unapplied_credit,
    )


@router.get("/leases/{lease_id}/statement", response_model=LeaseStatementResponse)
def get_lease_statement(
    lease_id: int,
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Charges and payments of a lease with a running balance."""
    if start_date and end_date and start_date > end_date:
        raise ValidationError("Start date cannot be after end date")
    statement = BalanceService(db).statement(lease_id, start_date, end_date)
    return LeaseStatementResponse.model_validate(statement)


@router.post(
    "/leases/{lease_id}/charge-late-fee",
    response_model=PostingResponse,
    status_code=201,
)
def charge_late_fee(
    lease_id: int,
    request: LateFeeRequest | None = None,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Charge the lease's configured late fee for a month.

    Posts DR Accounts Receivable / CR Late Fees.
    """
    request = request or LateFeeRequest()
    service = LedgerService(db)
    try:
        entries = service.charge_late_fee(lease_id, request, posted_by=actor)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return posting_response(entries, f"Late fee charged for lease {lease_id}")
