"""
Pydantic schemas for ledger operations.

Request schemas only check shape and types. Business rules
(positive amounts, required lease, known account codes) are
checked by LedgerService so that the same rules apply whether
a posting comes from HTTP, a batch job or a script.

Request fields accept both snake_case and camelCase names.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from property_ledger.models.enums import AccountType, DebitCredit, LeaseStatus


class RequestModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


# --- Request Schemas ---

class PostEntryParams(RequestModel):
    """A single debit or credit."""
    account_code: str = Field(max_length=10)
    amount: Decimal
    debit_credit: DebitCredit
    description: str = Field(min_length=1, max_length=500)
    entry_date: date | None = None
    lease_id: int | None = None
    posted_by: str | None = Field(default=None, max_length=100)
    property_id: int | None = None
    unit_id: int | None = None
    vendor_id: int | None = None
    work_order_id: int | None = None
    scheduled_charge_id: int | None = None
    charge_period: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}$")


class PostEntriesRequest(RequestModel):
    """
    A complete transaction: a group of entries that must balance.

    The caller may provide a transaction_id so that a retry with
    the same id returns the entries already posted.
    """
    transaction_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    entries: list[PostEntryParams] = Field(min_length=2)
    reversal_of: uuid.UUID | None = None

    @field_validator("entries")
    @classmethod
    def must_have_debits_and_credits(cls, v: list) -> list:
        sides = {e.debit_credit for e in v}
        if DebitCredit.DR not in sides or DebitCredit.CR not in sides:
            raise ValueError(
                "transaction must contain at least one debit and one credit"
            )
        return v


class PaymentRequest(RequestModel):
    lease_id: int | None = None
    amount: Decimal
    payment_date: date | None = None
    description: str = Field(default="Payment received", max_length=500)


class ChargeRequest(RequestModel):
    lease_id: int | None = None
    amount: Decimal
    account_code: str = Field(max_length=10)
    description: str = Field(default="Charge", max_length=500)
    entry_date: date | None = None


class ExpenseRequest(RequestModel):
    account_code: str = Field(max_length=10)
    amount: Decimal
    description: str = Field(min_length=1, max_length=500)
    entry_date: date | None = None
    lease_id: int | None = None
    property_id: int | None = None
    unit_id: int | None = None
    vendor_id: int | None = None
    work_order_id: int | None = None


class DepositReceiveRequest(RequestModel):
    lease_id: int | None = None
    amount: Decimal
    deposit_date: date | None = None
    description: str | None = Field(default=None, max_length=500)


class DepositDeduction(RequestModel):
    amount: Decimal
    description: str = Field(min_length=1, max_length=500)


class DepositReturnRequest(RequestModel):
    lease_id: int | None = None
    refund_amount: Decimal = Decimal("0")
    deductions: list[DepositDeduction] = Field(default_factory=list)
    return_date: date | None = None


class LateFeeRequest(RequestModel):
    """
    Charge the lease's late fee for the month of fee_date.

    manual charges the fee even when nothing is outstanding.
    """
    fee_date: date | None = None
    manual: bool = False


class ReverseRequest(RequestModel):
    reason: str = Field(min_length=1, max_length=255)


# --- Response Schemas ---

class LedgerEntryResponse(BaseModel):
    """Single entry in API responses."""
    id: int
    transaction_id: uuid.UUID
    account_code: str
    amount: Decimal
    debit_credit: DebitCredit
    description: str
    entry_date: date
    lease_id: int | None
    posted_by: str
    created_at: datetime
    property_id: int | None
    unit_id: int | None
    vendor_id: int | None
    work_order_id: int | None
    scheduled_charge_id: int | None
    charge_period: str | None
    reversal_of: uuid.UUID | None

    model_config = {"from_attributes": True}


class PostingResponse(BaseModel):
    """Response after posting a business transaction."""
    transaction_id: uuid.UUID
    message: str
    total_amount: Decimal
    entries: list[LedgerEntryResponse]


class LedgerAccountResponse(BaseModel):
    code: str
    name: str
    account_type: AccountType
    normal_balance: DebitCredit


class AccountBalanceResponse(BaseModel):
    account_code: str
    account_name: str
    account_type: AccountType
    balance: Decimal


class LeaseBalanceResponse(BaseModel):
    lease_id: int
    balance: Decimal


class AgingResponse(BaseModel):
    lease_id: int
    as_of_date: date
    buckets: dict[str, Decimal]
    total_outstanding: Decimal
    unapplied_credit: Decimal


class StatementLineResponse(BaseModel):
    entry_id: int
    transaction_id: uuid.UUID
    entry_date: date
    description: str
    charge: Decimal
    payment: Decimal
    running_balance: Decimal

    model_config = {"from_attributes": True}


class LeaseStatementResponse(BaseModel):
    """Receivable activity of one lease with a running balance."""
    lease_id: int
    tenant_name: str
    property_name: str | None
    unit_name: str | None
    status: LeaseStatus
    lease_start: date | None
    lease_end: date | None
    start_date: date | None
    end_date: date
    opening_balance: Decimal
    total_charges: Decimal
    total_payments: Decimal
    closing_balance: Decimal
    lines: list[StatementLineResponse]

    model_config = {"from_attributes": True}
