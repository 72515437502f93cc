"""
Payroll period and per-employee payroll models.

Figures are computed by the payroll calculator from the HR payload
and stored, so a released period stays stable even if HR data
changes afterwards.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, Integer, Boolean, ForeignKey,
    UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trip_ledger.models.base import Base, utcnow
from trip_ledger.models.enums import PayrollPeriodStatus, RateType


class PayrollPeriod(Base):
    __tablename__ = "payroll_periods"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[PayrollPeriodStatus] = mapped_column(
        SAEnum(
            PayrollPeriodStatus,
            name="payroll_period_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=PayrollPeriodStatus.DRAFT,
    )
    total_employees: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    total_gross: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_deductions: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_net: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    payrolls: Mapped[list["Payroll"]] = relationship(
        back_populates="period",
        order_by="Payroll.employee_number",
    )

    def __repr__(self) -> str:
        return f"<PayrollPeriod {self.code} ({self.status.value})>"


class Payroll(Base):
    __tablename__ = "payrolls"
    __table_args__ = (
        UniqueConstraint(
            "payroll_period_id", "employee_number",
            name="uq_payroll_period_employee",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    payroll_period_id: Mapped[int] = mapped_column(
        ForeignKey("payroll_periods.id"), nullable=False, index=True
    )
    employee_number: Mapped[str] = mapped_column(String(50), nullable=False)
    rate_type: Mapped[RateType] = mapped_column(
        SAEnum(RateType, name="rate_type_enum"),
        nullable=False,
    )
    basic_rate: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    present_days: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    basic_pay: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_benefits: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_deductions: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    gross_pay: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    net_pay: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    period: Mapped["PayrollPeriod"] = relationship(back_populates="payrolls")

    def __repr__(self) -> str:
        return f"<Payroll {self.employee_number} net={self.net_pay}>"
