"""
System configuration model.

Holds the business knobs for shortage handling: how a shortage is
split between driver and conductor and how the resulting
receivables are scheduled. Exactly one row is active at a time.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Boolean, DateTime, Numeric, Integer, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from trip_ledger.models.base import Base, utcnow
from trip_ledger.models.enums import PaymentFrequency


DEFAULT_CONFIG_CODE = "DEFAULT"

# Used when no row has been saved yet
DEFAULTS = {
    "minimum_wage": Decimal("600"),
    "duration_to_receivable_hours": 72,
    "receivable_due_date_days": 30,
    "driver_share_percentage": Decimal("50"),
    "conductor_share_percentage": Decimal("50"),
    "default_frequency": PaymentFrequency.WEEKLY,
    "default_number_of_payments": 3,
}


class SystemConfiguration(Base):
    __tablename__ = "system_configuration"

    id: Mapped[int] = mapped_column(primary_key=True)
    config_code: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, default=DEFAULT_CONFIG_CODE
    )
    minimum_wage: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=DEFAULTS["minimum_wage"]
    )
    duration_to_receivable_hours: Mapped[int] = mapped_column(
        Integer, nullable=False,
        default=DEFAULTS["duration_to_receivable_hours"],
    )
    receivable_due_date_days: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULTS["receivable_due_date_days"]
    )
    driver_share_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False,
        default=DEFAULTS["driver_share_percentage"],
    )
    conductor_share_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False,
        default=DEFAULTS["conductor_share_percentage"],
    )
    default_frequency: Mapped[PaymentFrequency] = mapped_column(
        SAEnum(PaymentFrequency, name="payment_frequency_enum"),
        nullable=False,
        default=DEFAULTS["default_frequency"],
    )
    default_number_of_payments: Mapped[int] = mapped_column(
        Integer, nullable=False,
        default=DEFAULTS["default_number_of_payments"],
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    updated_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    @classmethod
    def with_defaults(cls) -> "SystemConfiguration":
        """An unsaved configuration populated with the defaults."""
        return cls(config_code=DEFAULT_CONFIG_CODE, is_active=True, **DEFAULTS)

    def __repr__(self) -> str:
        return f"<SystemConfiguration {self.config_code}>"
