"""
Scheduled charge endpoints.

post-due is meant to be called once a day by an external
scheduler. It is safe to call more often: a period that is
already posted is reported as skipped.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from property_ledger.exceptions import LedgerError
from property_ledger.models.base import get_db
from property_ledger.services.scheduled_charge_service import (
    ChargeResult,
    PendingCharge,
    PostDueResult,
    ScheduledChargeService,
    SCHEDULER_ACTOR,
)
from property_ledger.schemas.scheduled_charge import (
    BatchItemErrorResponse,
    ChargeResultResponse,
    EndScheduleRequest,
    PendingChargeResponse,
    PendingSummaryResponse,
    PostDueRequest,
    PostDueResponse,
    PostDueSummary,
    ScheduledChargeCreate,
    ScheduledChargeResponse,
)

router = APIRouter(prefix="/scheduled-charges", tags=["Scheduled Charges"])


def _pending_response(p: PendingCharge) -> PendingChargeResponse:
    return PendingChargeResponse(
        scheduled_charge_id=p.scheduled_charge.id,
        lease_id=p.scheduled_charge.lease_id,
        description=p.scheduled_charge.description,
        period=p.period,
        due_date=p.due_date,
        amount=p.amount,
    )


def _result_response(r: ChargeResult) -> ChargeResultResponse:
    return ChargeResultResponse(
        scheduled_charge_id=r.scheduled_charge_id,
        lease_id=r.lease_id,
        description=r.description,
        period=r.period,
        due_date=r.due_date,
        amount=r.amount,
        status=r.status,
        message=r.message,
        transaction_id=r.transaction_id,
    )


def post_due_response(result: PostDueResult) -> PostDueResponse:
    return PostDueResponse(
        as_of_date=result.as_of_date,
        summary=PostDueSummary(
            total=len(result.results),
            posted=result.posted,
            skipped=result.skipped,
            errors=len(result.errors),
        ),
        results=[_result_response(r) for r in result.results],
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


@router.post("", response_model=ScheduledChargeResponse, status_code=201)
def create_schedule(
    request: ScheduledChargeCreate,
    db: Session = Depends(get_db),
):
    """Create a recurring monthly charge for a lease."""
    service = ScheduledChargeService(db)
    try:
        charge = service.create_schedule(request)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return charge


@router.post("/{scheduled_charge_id}/end", response_model=ScheduledChargeResponse)
def end_schedule(
    scheduled_charge_id: int,
    request: EndScheduleRequest,
    db: Session = Depends(get_db),
):
    """Stop a schedule from a date. Posted periods are not touched."""
    service = ScheduledChargeService(db)
    try:
        charge = service.end_schedule(scheduled_charge_id, request.end_date)
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    return charge


@router.get("/pending", response_model=PendingSummaryResponse)
def list_pending(
    as_of_date: date | None = Query(default=None, alias="asOfDate"),
    db: Session = Depends(get_db),
):
    """Charges that post-due would post right now."""
    as_of = as_of_date or date.today()
    pending, total = ScheduledChargeService(db).pending_summary(as_of)
    return PendingSummaryResponse(
        as_of_date=as_of,
        count=len(pending),
        total_amount=total,
        charges=[_pending_response(p) for p in pending],
    )


@router.post("/post-due", response_model=PostDueResponse)
def post_due(
    request: PostDueRequest | None = None,
    db: Session = Depends(get_db),
):
    """
    Post every due scheduled charge.

    Always returns 200 with itemized results; failed items are
    listed under errors and do not stop the rest of the run.
    """
    request = request or PostDueRequest()
    result = ScheduledChargeService(db).post_due(
        as_of=request.as_of_date,
        lease_id=request.lease_id,
        posted_by=SCHEDULER_ACTOR,
    )
    return post_due_response(result)
