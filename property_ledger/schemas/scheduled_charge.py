"""
Pydantic schemas for scheduled charges and posting runs.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from property_ledger.models.enums import ChargeOutcome
from property_ledger.schemas.ledger import RequestModel


class ScheduledChargeCreate(RequestModel):
    lease_id: int | None = None
    account_code: str = Field(default="4000", max_length=10)
    amount: Decimal
    description: str = Field(min_length=1, max_length=200)
    day_of_month: int
    start_date: date
    end_date: date | None = None


class EndScheduleRequest(RequestModel):
    end_date: date


class PostDueRequest(RequestModel):
    """Both fields optional: defaults are today and every lease."""
    as_of_date: date | None = None
    lease_id: int | None = None


class ScheduledChargeResponse(BaseModel):
    id: int
    lease_id: int
    account_code: str
    amount: Decimal
    description: str
    day_of_month: int
    start_date: date
    end_date: date | None
    last_charged_date: date | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PendingChargeResponse(BaseModel):
    scheduled_charge_id: int
    lease_id: int
    description: str
    period: str
    due_date: date
    amount: Decimal


class PendingSummaryResponse(BaseModel):
    as_of_date: date
    count: int
    total_amount: Decimal
    charges: list[PendingChargeResponse]


class ChargeResultResponse(BaseModel):
    scheduled_charge_id: int
    lease_id: int
    description: str
    period: str
    due_date: date
    amount: Decimal
    status: ChargeOutcome
    message: str
    transaction_id: uuid.UUID | None = None


class BatchItemErrorResponse(BaseModel):
    item_id: int
    reason: str
    lease_id: int | None = None
    period: str | None = None


class PostDueSummary(BaseModel):
    total: int
    posted: int
    skipped: int
    errors: int


class PostDueResponse(BaseModel):
    as_of_date: date
    summary: PostDueSummary
    results: list[ChargeResultResponse]
    errors: list[BatchItemErrorResponse]
