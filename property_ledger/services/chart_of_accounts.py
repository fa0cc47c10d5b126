"""
Chart of accounts.

A fixed registry of account codes. It is loaded with the module
and never changes at runtime; the ledger_accounts table is
seeded from it so entries have a foreign key target.

Codes:
    1000-1999  assets
    2000-2999  liabilities
    4000-4999  income
    5000-5999  expenses
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from property_ledger.exceptions import NotFoundError, ValidationError
from property_ledger.models.enums import AccountType, DebitCredit
from property_ledger.models.ledger_account import LedgerAccount


CASH = "1000"
ACCOUNTS_RECEIVABLE = "1200"
SECURITY_DEPOSITS_HELD = "2200"
RENTAL_INCOME = "4000"
LATE_FEES = "4010"
OTHER_INCOME = "4100"


@dataclass(frozen=True)
class ChartAccount:
    code: str
    name: str
    account_type: AccountType

    @property
    def normal_balance(self) -> DebitCredit:
        return normal_balance(self.account_type)


_ACCOUNTS = [
    ChartAccount(CASH, "Operating Cash", AccountType.ASSET),
    ChartAccount(ACCOUNTS_RECEIVABLE, "Accounts Receivable", AccountType.ASSET),
    ChartAccount(
        SECURITY_DEPOSITS_HELD, "Security Deposits Held", AccountType.LIABILITY
    ),
    ChartAccount(RENTAL_INCOME, "Rental Income", AccountType.INCOME),
    ChartAccount(LATE_FEES, "Late Fees", AccountType.INCOME),
    ChartAccount("4020", "Utility Reimbursement", AccountType.INCOME),
    ChartAccount("4030", "Parking Income", AccountType.INCOME),
    ChartAccount("4040", "Pet Fees", AccountType.INCOME),
    ChartAccount("4050", "Storage Income", AccountType.INCOME),
    ChartAccount("4060", "Application Fees", AccountType.INCOME),
    ChartAccount(OTHER_INCOME, "Other Income", AccountType.INCOME),
    ChartAccount("5000", "Repairs & Maintenance", AccountType.EXPENSE),
    ChartAccount("5010", "Utilities", AccountType.EXPENSE),
    ChartAccount("5020", "Insurance", AccountType.EXPENSE),
    ChartAccount("5030", "Property Taxes", AccountType.EXPENSE),
    ChartAccount("5040", "Management Fees", AccountType.EXPENSE),
    ChartAccount("5050", "Legal & Professional", AccountType.EXPENSE),
    ChartAccount("5060", "Advertising & Marketing", AccountType.EXPENSE),
    ChartAccount("5070", "Landscaping", AccountType.EXPENSE),
    ChartAccount("5080", "Cleaning & Janitorial", AccountType.EXPENSE),
    ChartAccount("5090", "Supplies", AccountType.EXPENSE),
    ChartAccount("5100", "Other Expenses", AccountType.EXPENSE),
]

CHART_OF_ACCOUNTS: dict[str, ChartAccount] = {a.code: a for a in _ACCOUNTS}


def normal_balance(account_type: AccountType) -> DebitCredit:
    """Debits increase ASSET and EXPENSE; credits increase the rest."""
    if account_type in (AccountType.ASSET, AccountType.EXPENSE):
        return DebitCredit.DR
    return DebitCredit.CR


def lookup(code: str) -> ChartAccount:
    """Return the account for a code, or raise NotFoundError."""
    account = CHART_OF_ACCOUNTS.get(code)
    if account is None:
        raise NotFoundError("Account", code)
    return account


def require_account(
    code: str, account_type: AccountType | None = None
) -> ChartAccount:
    """
    Resolve an account code for posting.

    Unknown codes and codes of the wrong type are input errors,
    so they raise ValidationError rather than NotFoundError.
    """
    account = CHART_OF_ACCOUNTS.get(code)
    if account is None:
        raise ValidationError(f"Account {code} does not exist")
    if account_type is not None and account.account_type != account_type:
        raise ValidationError(
            f"Account {code} is {account.account_type.value}, "
            f"expected {account_type.value}"
        )
    return account


def accounts_of_type(account_type: AccountType) -> list[ChartAccount]:
    """Accounts of one type, ordered by code."""
    return [a for a in _ACCOUNTS if a.account_type == account_type]


def all_accounts() -> list[ChartAccount]:
    return list(_ACCOUNTS)


def seed_chart_of_accounts(db: Session) -> int:
    """
    Insert any registry account missing from ledger_accounts.

    Safe to run on every startup. Returns the number of rows
    inserted. The caller commits.
    """
    existing = set(db.execute(select(LedgerAccount.code)).scalars().all())
    inserted = 0
    for account in _ACCOUNTS:
        if account.code in existing:
            continue
        db.add(LedgerAccount(
            code=account.code,
            name=account.name,
            account_type=account.account_type,
        ))
        inserted += 1
    db.flush()
    return inserted
