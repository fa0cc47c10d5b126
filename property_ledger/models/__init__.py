"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from property_ledger.models.base import Base
from property_ledger.models.enums import (
    AccountType,
    DebitCredit,
    LateFeeType,
    LeaseStatus,
    RentIncreaseStatus,
    ChargeOutcome,
)
from property_ledger.models.audit_log import AuditLog
from property_ledger.models.ledger_account import LedgerAccount
from property_ledger.models.ledger_entry import LedgerEntry
from property_ledger.models.property import Property, Unit
from property_ledger.models.vendor import Vendor
from property_ledger.models.lease import Lease
from property_ledger.models.scheduled_charge import ScheduledCharge, PostedCharge
from property_ledger.models.rent_increase import RentIncrease

__all__ = [
    "Base",
    "AccountType",
    "DebitCredit",
    "LateFeeType",
    "LeaseStatus",
    "RentIncreaseStatus",
    "ChargeOutcome",
    "AuditLog",
    "LedgerAccount",
    "LedgerEntry",
    "Property",
    "Unit",
    "Vendor",
    "Lease",
    "ScheduledCharge",
    "PostedCharge",
    "RentIncrease",
]
