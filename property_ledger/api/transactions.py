"""
Business transaction endpoints.

Payments, charges, expenses and security deposits. Each call
posts one balanced transaction through LedgerService and
commits it; any LedgerError rolls the session back and is
rendered by the application's exception handler.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from property_ledger.api.deps import get_actor
from property_ledger.exceptions import LedgerError
from property_ledger.models.base import get_db
from property_ledger.models.enums import DebitCredit
from property_ledger.models.ledger_entry import LedgerEntry
from property_ledger.services.ledger_service import LedgerService
from property_ledger.schemas.ledger import (
    ChargeRequest,
    DepositReceiveRequest,
    DepositReturnRequest,
    ExpenseRequest,
    LedgerEntryResponse,
    PaymentRequest,
    PostingResponse,
)

router = APIRouter(tags=["Transactions"])


def posting_response(entries: list[LedgerEntry], message: str) -> PostingResponse:
    return PostingResponse(
        transaction_id=entries[0].transaction_id,
        message=message,
        total_amount=sum(
            e.amount for e in entries if e.debit_credit == DebitCredit.DR
        ),
        entries=[LedgerEntryResponse.model_validate(e) for e in entries],
    )


@router.post("/payments", response_model=PostingResponse, status_code=201)
def record_payment(
    request: PaymentRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Record a tenant payment.

    Posts DR Cash / CR Accounts Receivable for the lease.
    """
    service = LedgerService(db)
    try:
        entries = service.record_payment(request, posted_by=actor)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return posting_response(entries, f"Payment of {request.amount} recorded")


@router.post("/charges", response_model=PostingResponse, status_code=201)
def record_charge(
    request: ChargeRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Charge a tenant.

    Posts DR Accounts Receivable / CR the income account given
    (Rental Income by default).
    """
    service = LedgerService(db)
    try:
        entries = service.record_charge(request, posted_by=actor)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return posting_response(entries, f"Charge of {request.amount} recorded")


@router.post("/expenses", response_model=PostingResponse, status_code=201)
def record_expense(
    request: ExpenseRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Record an expense: DR expense account / CR Cash."""
    service = LedgerService(db)
    try:
        entries = service.record_expense(request, posted_by=actor)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return posting_response(entries, f"Expense of {request.amount} recorded")


@router.post("/deposits/receive", response_model=PostingResponse, status_code=201)
def receive_deposit(
    request: DepositReceiveRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Record a security deposit: DR Cash / CR Security Deposits Held."""
    service = LedgerService(db)
    try:
        entries = service.receive_deposit(request, posted_by=actor)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return posting_response(
        entries, f"Security deposit of {request.amount} received"
    )


@router.post("/deposits/return", response_model=PostingResponse, status_code=201)
def return_deposit(
    request: DepositReturnRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Release a security deposit at move-out.

    The refund goes back out of cash; deductions become other
    income. The total cannot exceed the deposit held.
    """
    service = LedgerService(db)
    try:
        entries = service.return_deposit(request, posted_by=actor)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return posting_response(entries, "Security deposit returned")
