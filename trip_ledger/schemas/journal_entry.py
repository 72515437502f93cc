"""
Pydantic schemas for journal entries.

Line amounts are deliberately unconstrained here: the debit/credit
rules and the balance check live in JournalEntryService so that
every caller, HTTP or internal, gets the same validation messages.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from trip_ledger.models.enums import JournalEntryType, JournalStatus


# --- Request Schemas ---

class JournalLineCreate(BaseModel):
    """A single debit or credit against an account code."""
    account_code: str = Field(min_length=1, max_length=20)
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    description: str | None = Field(default=None, max_length=255)


class JournalEntryCreate(BaseModel):
    entry_date: date | None = None
    description: str | None = Field(default=None, max_length=500)
    source_module: str | None = Field(default=None, max_length=50)
    reference_id: str | None = Field(default=None, max_length=100)
    entry_type: JournalEntryType = JournalEntryType.MANUAL
    lines: list[JournalLineCreate]


class JournalEntryUpdate(BaseModel):
    """Partial update of a DRAFT entry. Supplying lines replaces all of them."""
    entry_date: date | None = None
    description: str | None = Field(default=None, max_length=500)
    lines: list[JournalLineCreate] | None = None


class JournalAdjustmentCreate(BaseModel):
    entry_date: date | None = None
    description: str = Field(min_length=1, max_length=400)
    lines: list[JournalLineCreate]


class JournalReversalCreate(BaseModel):
    reason: str = Field(min_length=1, max_length=255)
    entry_date: date | None = None


class JournalDeleteRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=255)


class JournalEntryQuery(BaseModel):
    status: JournalStatus | None = None
    date_from: date | None = None
    date_to: date | None = None
    source_module: str | None = None
    reference_id: str | None = None
    code: str | None = None
    include_deleted: bool = False
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


# --- Response Schemas ---

class JournalLineResponse(BaseModel):
    id: int
    line_number: int
    account_id: int
    account_code: str | None
    account_name: str | None
    description: str | None
    debit: Decimal
    credit: Decimal

    model_config = {"from_attributes": True}


class JournalEntrySummary(BaseModel):
    """Compact form used for links between entries and from revenues."""
    id: int
    code: str
    entry_date: date
    status: JournalStatus
    total_debit: Decimal
    total_credit: Decimal

    model_config = {"from_attributes": True}


class JournalEntryResponse(BaseModel):
    id: int
    code: str
    entry_date: date
    source_module: str | None
    reference_id: str | None
    description: str | None
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool
    status: JournalStatus
    entry_type: JournalEntryType
    adjustment_of_id: int | None
    reversal_of_id: int | None
    created_by: str | None
    approved_by: str | None
    approved_at: datetime | None
    is_deleted: bool
    created_at: datetime
    lines: list[JournalLineResponse]

    model_config = {"from_attributes": True}


class JournalEntryDetailResponse(JournalEntryResponse):
    reversals: list[JournalEntrySummary] = []
    adjustments: list[JournalEntrySummary] = []


class JournalEntryListResponse(BaseModel):
    data: list[JournalEntryResponse]
    total: int
    page: int
    limit: int
    pages: int
