"""Pydantic schemas for the system configuration singleton."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from trip_ledger.models.enums import PaymentFrequency


class SystemConfigUpdate(BaseModel):
    """Partial update. Omitted fields keep their current value."""
    minimum_wage: Decimal | None = Field(default=None, ge=0)
    duration_to_receivable_hours: int | None = Field(default=None, ge=0)
    receivable_due_date_days: int | None = Field(default=None, ge=0)
    driver_share_percentage: Decimal | None = None
    conductor_share_percentage: Decimal | None = None
    default_frequency: PaymentFrequency | None = None
    default_number_of_payments: int | None = None


class SystemConfigResponse(BaseModel):
    id: int | None
    config_code: str
    minimum_wage: Decimal
    duration_to_receivable_hours: int
    receivable_due_date_days: int
    driver_share_percentage: Decimal
    conductor_share_percentage: Decimal
    default_frequency: PaymentFrequency
    default_number_of_payments: int
    is_active: bool
    updated_by: str | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
