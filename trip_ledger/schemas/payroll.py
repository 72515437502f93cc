"""Pydantic schemas for payroll periods."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from trip_ledger.models.enums import PayrollPeriodStatus, RateType


# --- Request Schemas ---

class PayrollPeriodCreate(BaseModel):
    period_start: date
    period_end: date


# --- Response Schemas ---

class PayrollResponse(BaseModel):
    id: int
    employee_number: str
    rate_type: RateType
    basic_rate: Decimal
    present_days: int
    basic_pay: Decimal
    total_benefits: Decimal
    total_deductions: Decimal
    gross_pay: Decimal
    net_pay: Decimal

    model_config = {"from_attributes": True}


class PayrollPeriodResponse(BaseModel):
    id: int
    code: str
    period_start: date
    period_end: date
    status: PayrollPeriodStatus
    total_employees: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    created_by: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PayrollPeriodDetailResponse(PayrollPeriodResponse):
    payrolls: list[PayrollResponse]


class PayrollProcessResponse(BaseModel):
    period: PayrollPeriodResponse
    processed: int
    failed: int
    errors: list[str]
