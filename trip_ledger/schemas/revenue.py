"""
Pydantic schemas for trip revenue.

The detail response stitches together the revenue row, the cached
trip it came from, the remittance computation, any shortage
receivables and the journal entry, so a reviewer can see the whole
reconciliation in one payload.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from trip_ledger.models.enums import (
    PaymentFrequency,
    PaymentMethod,
    RemittanceStatus,
)
from trip_ledger.schemas.journal_entry import JournalEntrySummary
from trip_ledger.schemas.receivable import ReceivableResponse


# --- Request Schemas ---

class TripRevenueCreate(BaseModel):
    assignment_id: str = Field(min_length=1, max_length=100)
    bus_trip_id: str = Field(min_length=1, max_length=100)
    date_recorded: datetime | None = None
    payment_method: str | None = None
    description: str | None = Field(default=None, max_length=500)
    frequency: PaymentFrequency | None = None
    number_of_payments: int | None = Field(default=None, ge=1, le=365)


class TripRevenueUpdate(BaseModel):
    """
    Amend a recorded revenue.

    Changing the amount re-derives the remittance status and
    rebuilds the shortage receivables and the journal entry.
    """
    amount: Decimal | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=500)
    date_recorded: datetime | None = None
    frequency: PaymentFrequency | None = None
    number_of_payments: int | None = Field(default=None, ge=1, le=365)


class RevenueQuery(BaseModel):
    date_assigned_from: date | None = None
    date_assigned_to: date | None = None
    date_recorded_from: date | None = None
    date_recorded_to: date | None = None
    assignment_type: str | None = None
    remittance_status: RemittanceStatus | None = None
    trip_revenue_min: Decimal | None = None
    trip_revenue_max: Decimal | None = None
    search: str | None = None
    sort_by: Literal["date_recorded", "amount", "created_at"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class UnsyncedTripQuery(BaseModel):
    date_from: date | None = None
    date_to: date | None = None
    assignment_type: str | None = None
    search: str | None = None


# --- Response Schemas ---

class RevenueResponse(BaseModel):
    id: int
    code: str
    assignment_id: str
    bus_trip_id: str
    amount: Decimal
    date_recorded: datetime
    date_expected: date | None
    payment_method: PaymentMethod
    remittance_status: RemittanceStatus
    description: str | None
    driver_receivable_id: int | None
    conductor_receivable_id: int | None
    journal_entry_id: int | None
    created_by: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class RevenueListResponse(BaseModel):
    data: list[RevenueResponse]
    total: int
    page: int
    limit: int
    pages: int


class BusDetails(BaseModel):
    bus_id: int | None
    body_number: str | None
    license_plate: str | None
    bus_type: str | None
    bus_route: str | None
    date_assigned: date


class EmployeeSummary(BaseModel):
    employee_number: str
    name: str | None
    role: str


class RemittanceBreakdown(BaseModel):
    assignment_type: str
    assignment_value: Decimal
    trip_revenue: Decimal
    fuel_expense: Decimal
    company_share: Decimal
    expected_remittance: Decimal
    shortage: Decimal
    remittance_status: RemittanceStatus


class ShortageDetails(BaseModel):
    shortage: Decimal
    driver_share: Decimal
    conductor_share: Decimal
    receivables: list[ReceivableResponse]


class RevenueDetailResponse(RevenueResponse):
    bus_details: BusDetails | None = None
    employees: list[EmployeeSummary] = []
    remittance: RemittanceBreakdown | None = None
    shortage_details: ShortageDetails | None = None
    journal_entry: JournalEntrySummary | None = None


class UnsyncedTripResponse(BaseModel):
    id: int
    assignment_id: str
    bus_trip_id: str
    bus_route: str | None
    date_assigned: date
    trip_revenue: Decimal
    trip_fuel_expense: Decimal
    assignment_type: str
    assignment_value: Decimal
    payment_method: str | None
    body_number: str | None
    driver_employee_number: str | None
    conductor_employee_number: str | None

    model_config = {"from_attributes": True}


class TripProcessResult(BaseModel):
    assignment_id: str
    bus_trip_id: str
    success: bool
    revenue_id: int | None = None
    revenue_code: str | None = None
    error: str | None = None


class ProcessUnsyncedResponse(BaseModel):
    total: int
    processed: int
    failed: int
    results: list[TripProcessResult]
