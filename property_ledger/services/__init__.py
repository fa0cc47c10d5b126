"""Business logic services."""

from property_ledger.services.ledger_service import LedgerService
from property_ledger.services.balance_service import BalanceService
from property_ledger.services.scheduled_charge_service import ScheduledChargeService
from property_ledger.services.rent_increase_service import RentIncreaseService
from property_ledger.services.report_service import ReportService

__all__ = [
    "LedgerService",
    "BalanceService",
    "ScheduledChargeService",
    "RentIncreaseService",
    "ReportService",
]
