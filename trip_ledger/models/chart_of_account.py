"""
Chart of accounts.

Journal entry lines post against these accounts by code. Codes are
a one-digit type prefix plus a three-digit suffix (e.g. 1005).
Accounts are never deleted once used, only archived.
"""

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from trip_ledger.models.base import Base, utcnow
from trip_ledger.models.enums import AccountType, NormalBalance


class ChartOfAccount(Base):
    """
    A single account in the chart of accounts.

    Code and (type, name) uniqueness ignore archived rows, so it is
    enforced by ChartOfAccountService rather than a unique index.
    """

    __tablename__ = "chart_of_accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    account_code: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )
    account_name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type_enum"),
        nullable=False,
    )
    normal_balance: Mapped[NormalBalance] = mapped_column(
        SAEnum(NormalBalance, name="normal_balance_enum"),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_system: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    archived_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<ChartOfAccount {self.account_code} {self.account_name}>"
