"""
Pydantic schemas for rent increases.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from property_ledger.models.enums import RentIncreaseStatus
from property_ledger.schemas.ledger import RequestModel
from property_ledger.schemas.scheduled_charge import BatchItemErrorResponse


class RentIncreaseCreate(RequestModel):
    lease_id: int | None = None
    new_amount: Decimal
    effective_date: date
    notice_date: date | None = None
    notes: str | None = Field(default=None, max_length=1000)


class ApplyPendingRequest(RequestModel):
    """Defaults to today."""
    as_of_date: date | None = None


class RentIncreaseResponse(BaseModel):
    id: int
    lease_id: int
    previous_amount: Decimal
    new_amount: Decimal
    effective_date: date
    notice_date: date
    status: RentIncreaseStatus
    notes: str | None
    applied_at: datetime | None
    applied_by: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class AppliedIncreaseResponse(BaseModel):
    rent_increase_id: int
    lease_id: int
    tenant_name: str
    previous_amount: Decimal
    new_amount: Decimal
    effective_date: date
    schedules_updated: int


class ApplyPendingResponse(BaseModel):
    as_of_date: date
    applied: int
    results: list[AppliedIncreaseResponse]
    errors: list[BatchItemErrorResponse]
