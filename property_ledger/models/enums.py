"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class AccountType(str, enum.Enum):
    """Account categories used by the chart of accounts."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class DebitCredit(str, enum.Enum):
    """Side of a ledger entry."""
    DR = "DR"
    CR = "CR"


class LeaseStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    ENDED = "ENDED"


class RentIncreaseStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    APPLIED = "APPLIED"
    CANCELLED = "CANCELLED"


class ChargeOutcome(str, enum.Enum):
    """Result of one (scheduled charge, period) in a posting run."""
    POSTED = "POSTED"
    SKIPPED = "SKIPPED"
    ERROR = "ERROR"


class LateFeeType(str, enum.Enum):
    """How a lease's late_fee_amount is read."""
    FLAT = "FLAT"
    PERCENTAGE = "PERCENTAGE"
