"""
Chart of accounts service.

Account codes are a one-digit type prefix followed by a three-digit
suffix. New accounts take the latest live suffix for their type plus
5, which leaves room to slot related accounts in between later.
Archived accounts do not count towards uniqueness.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from trip_ledger.errors import NotFoundError, ValidationError
from trip_ledger.models.base import utcnow
from trip_ledger.models.chart_of_account import ChartOfAccount
from trip_ledger.models.enums import AccountType, NormalBalance
from trip_ledger.schemas.chart_of_account import AccountCreate

logger = logging.getLogger(__name__)

TYPE_PREFIXES: dict[AccountType, str] = {
    AccountType.ASSET: "1",
    AccountType.LIABILITY: "2",
    AccountType.EQUITY: "3",
    AccountType.REVENUE: "4",
    AccountType.EXPENSE: "5",
}

SUFFIX_STEP = 5
MAX_SUFFIX = 999


class AccountCodes:
    """Accounts the trip revenue workflow posts against."""
    CASH = "1000"
    BANK = "1005"
    E_WALLET = "1010"
    DRIVER_RECEIVABLE = "1100"
    CONDUCTOR_RECEIVABLE = "1105"
    BOUNDARY_REVENUE = "4000"
    PERCENTAGE_REVENUE = "4005"


SYSTEM_ACCOUNTS: list[tuple[str, str, AccountType]] = [
    (AccountCodes.CASH, "Cash on Hand", AccountType.ASSET),
    (AccountCodes.BANK, "Cash in Bank", AccountType.ASSET),
    (AccountCodes.E_WALLET, "E-Wallet", AccountType.ASSET),
    (AccountCodes.DRIVER_RECEIVABLE, "Driver Receivable", AccountType.ASSET),
    (
        AccountCodes.CONDUCTOR_RECEIVABLE,
        "Conductor Receivable",
        AccountType.ASSET,
    ),
    (
        AccountCodes.BOUNDARY_REVENUE,
        "Boundary Trip Revenue",
        AccountType.REVENUE,
    ),
    (
        AccountCodes.PERCENTAGE_REVENUE,
        "Percentage Trip Revenue",
        AccountType.REVENUE,
    ),
]


def default_normal_balance(account_type: AccountType) -> NormalBalance:
    if account_type in (AccountType.ASSET, AccountType.EXPENSE):
        return NormalBalance.DEBIT
    return NormalBalance.CREDIT


class ChartOfAccountService:

    def __init__(self, db: Session):
        self.db = db

    def _live_code_exists(self, code: str) -> bool:
        return self.db.execute(
            select(ChartOfAccount.id).where(
                ChartOfAccount.account_code == code,
                ChartOfAccount.is_deleted.is_(False),
            )
        ).first() is not None

    def _generate_code(
        self, account_type: AccountType, custom_suffix: int | None = None
    ) -> str:
        prefix = TYPE_PREFIXES[account_type]

        if custom_suffix is not None:
            if custom_suffix < 0 or custom_suffix > MAX_SUFFIX:
                raise ValidationError("custom_suffix must be between 0 and 999")
            candidate = f"{prefix}{custom_suffix:03d}"
            if self._live_code_exists(candidate):
                raise ValidationError(
                    f"Account code override '{candidate}' already exists"
                )
            return candidate

        latest = self.db.execute(
            select(ChartOfAccount.account_code)
            .where(
                ChartOfAccount.account_type == account_type,
                ChartOfAccount.is_deleted.is_(False),
            )
            .order_by(ChartOfAccount.account_code.desc())
            .limit(1)
        ).scalar_one_or_none()

        next_suffix = 0
        if latest:
            next_suffix = int(latest[len(prefix):]) + SUFFIX_STEP
        if next_suffix > MAX_SUFFIX:
            raise ValidationError(
                f"Account code suffix overflow for {account_type.value}"
            )

        candidate = f"{prefix}{next_suffix:03d}"
        if self._live_code_exists(candidate):
            raise ValidationError(
                f"Generated account code conflict '{candidate}'. "
                f"Retry or specify custom_suffix"
            )
        return candidate

    def create_account(self, request: AccountCreate) -> ChartOfAccount:
        """
        Create an account with a generated code.

        Raises ValidationError if a live account of the same type
        already has this name.
        """
        duplicate = self.db.execute(
            select(ChartOfAccount.id).where(
                ChartOfAccount.account_type == request.account_type,
                ChartOfAccount.account_name == request.account_name,
                ChartOfAccount.is_deleted.is_(False),
            )
        ).first()
        if duplicate:
            raise ValidationError(
                f"Account '{request.account_name}' already exists "
                f"for type {request.account_type.value}"
            )

        account = ChartOfAccount(
            account_code=self._generate_code(
                request.account_type, request.custom_suffix
            ),
            account_name=request.account_name,
            account_type=request.account_type,
            normal_balance=(
                request.normal_balance
                or default_normal_balance(request.account_type)
            ),
            description=request.description,
        )
        self.db.add(account)
        self.db.flush()
        return account

    def get_account(self, account_id: int) -> ChartOfAccount:
        account = self.db.get(ChartOfAccount, account_id)
        if not account:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    def get_by_code(self, code: str) -> ChartOfAccount:
        account = self.db.execute(
            select(ChartOfAccount).where(
                ChartOfAccount.account_code == code,
                ChartOfAccount.is_deleted.is_(False),
            )
        ).scalar_one_or_none()
        if not account:
            raise NotFoundError(f"Account code {code} not found")
        return account

    def list_accounts(
        self,
        account_type: AccountType | None = None,
        include_archived: bool = False,
    ) -> list[ChartOfAccount]:
        stmt = select(ChartOfAccount).order_by(ChartOfAccount.account_code)
        if account_type:
            stmt = stmt.where(ChartOfAccount.account_type == account_type)
        if not include_archived:
            stmt = stmt.where(ChartOfAccount.is_deleted.is_(False))
        return list(self.db.execute(stmt).scalars().all())

    def archive_account(self, account_id: int) -> ChartOfAccount:
        """Archive an account. System accounts cannot be archived."""
        account = self.get_account(account_id)
        if account.is_deleted:
            raise ValidationError(
                f"Account {account.account_code} is already archived"
            )
        if account.is_system:
            raise ValidationError(
                f"System account {account.account_code} cannot be archived"
            )
        account.is_deleted = True
        account.archived_at = utcnow()
        self.db.flush()
        return account

    def seed_system_accounts(self) -> list[ChartOfAccount]:
        """Create any missing system account. Safe to call repeatedly."""
        created = []
        for code, name, account_type in SYSTEM_ACCOUNTS:
            if self._live_code_exists(code):
                continue
            account = ChartOfAccount(
                account_code=code,
                account_name=name,
                account_type=account_type,
                normal_balance=default_normal_balance(account_type),
                is_system=True,
            )
            self.db.add(account)
            created.append(account)
        self.db.flush()
        if created:
            logger.info("Seeded %d system accounts", len(created))
        return created
