"""
Rent increase endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from property_ledger.api.deps import get_actor
from property_ledger.exceptions import LedgerError
from property_ledger.models.base import get_db
from property_ledger.services.rent_increase_service import RentIncreaseService
from property_ledger.schemas.rent_increase import (
    AppliedIncreaseResponse,
    ApplyPendingRequest,
    ApplyPendingResponse,
    RentIncreaseCreate,
    RentIncreaseResponse,
)
from property_ledger.schemas.scheduled_charge import BatchItemErrorResponse

router = APIRouter(prefix="/rent-increases", tags=["Rent Increases"])


@router.post("", response_model=RentIncreaseResponse, status_code=201)
def schedule_increase(
    request: RentIncreaseCreate,
    db: Session = Depends(get_db),
):
    """Schedule a rent increase for a lease."""
    service = RentIncreaseService(db)
    try:
        increase = service.schedule_increase(request)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return increase


@router.get("/pending", response_model=list[RentIncreaseResponse])
def list_pending(
    as_of_date: date | None = Query(default=None, alias="asOfDate"),
    db: Session = Depends(get_db),
):
    """Scheduled increases whose effective date has arrived."""
    return RentIncreaseService(db).list_pending(as_of_date)


@router.post("/{rent_increase_id}/cancel", response_model=RentIncreaseResponse)
def cancel_increase(
    rent_increase_id: int,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    service = RentIncreaseService(db)
    try:
        increase = service.cancel(rent_increase_id, actor)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return increase


@router.post("/apply-pending", response_model=ApplyPendingResponse)
def apply_pending(
    request: ApplyPendingRequest | None = None,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Apply every scheduled increase that is now effective.

    Each increase is applied and committed on its own; failures
    are listed under errors.
    """
    request = request or ApplyPendingRequest()
    result = RentIncreaseService(db).apply_pending(request.as_of_date, actor)
    return ApplyPendingResponse(
        as_of_date=result.as_of_date,
        applied=result.applied,
        results=[
            AppliedIncreaseResponse(
                rent_increase_id=a.rent_increase_id,
                lease_id=a.lease_id,
                tenant_name=a.tenant_name,
                previous_amount=a.previous_amount,
                new_amount=a.new_amount,
                effective_date=a.effective_date,
                schedules_updated=a.schedules_updated,
            )
            for a in result.results
        ],
        errors=[
            BatchItemErrorResponse(
                item_id=e.item_id,
                reason=e.reason,
                lease_id=e.lease_id,
                period=e.period,
            )
            for e in result.errors
        ],
    )
