"""Pydantic schemas for the chart of accounts."""

from datetime import datetime

from pydantic import BaseModel, Field

from trip_ledger.models.enums import AccountType, NormalBalance


class AccountCreate(BaseModel):
    """
    Request to create an account.

    The code is generated from the type. custom_suffix pins the
    three-digit suffix instead of taking the next free one.
    """
    account_name: str = Field(min_length=1, max_length=100)
    account_type: AccountType
    normal_balance: NormalBalance | None = None
    description: str | None = Field(default=None, max_length=255)
    custom_suffix: int | None = None


class AccountResponse(BaseModel):
    id: int
    account_code: str
    account_name: str
    account_type: AccountType
    normal_balance: NormalBalance
    description: str | None
    is_system: bool
    is_deleted: bool
    created_at: datetime

    model_config = {"from_attributes": True}
