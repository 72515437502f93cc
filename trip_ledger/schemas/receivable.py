"""Pydantic schemas for receivables, installments and payments."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from trip_ledger.models.enums import (
    EmployeeRole,
    InstallmentStatus,
    PaymentFrequency,
    ReceivableStatus,
)


# --- Request Schemas ---

class ReceivablePaymentCreate(BaseModel):
    """
    A payment against one installment.

    payment_method is free text because upstream spellings vary;
    it is normalised by the service.
    """
    amount: Decimal = Field(gt=0)
    payment_method: str = "CASH"
    payment_date: date | None = None
    reference_number: str | None = Field(default=None, max_length=100)


class ScheduleRegenerate(BaseModel):
    number_of_payments: int = Field(ge=1, le=365)
    frequency: PaymentFrequency
    start_date: date | None = None


# --- Response Schemas ---

class InstallmentResponse(BaseModel):
    id: int
    installment_number: int
    due_date: date
    amount_due: Decimal
    amount_paid: Decimal
    balance: Decimal
    carried_over_amount: Decimal
    status: InstallmentStatus

    model_config = {"from_attributes": True}


class ReceivableResponse(BaseModel):
    id: int
    code: str
    debtor_name: str
    employee_number: str | None
    debtor_role: EmployeeRole
    description: str | None
    total_amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: ReceivableStatus
    frequency: PaymentFrequency
    number_of_payments: int
    start_date: date
    due_date: date
    last_payment_date: date | None
    last_payment_amount: Decimal | None
    created_at: datetime
    installments: list[InstallmentResponse]

    model_config = {"from_attributes": True}


class PaymentAllocationResponse(BaseModel):
    installment_id: int
    installment_number: int
    previous_balance: Decimal
    amount_applied: Decimal
    new_balance: Decimal
    new_status: InstallmentStatus
    is_carried_over: bool

    model_config = {"from_attributes": True}


class ReceivablePaymentResponse(BaseModel):
    receivable: ReceivableResponse
    allocations: list[PaymentAllocationResponse]
    payment_ids: list[int]
    journal_entry_id: int | None
    journal_entry_code: str | None
