"""
Receivable, installment schedule and installment payment models.

A receivable is money a crew member owes the company for a trip
shortage. It is repaid through an ordered set of installments;
each payment against an installment is recorded as an immutable
InstallmentPayment row.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey, Integer, Boolean,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trip_ledger.models.base import Base, utcnow
from trip_ledger.models.enums import (
    EmployeeRole,
    InstallmentStatus,
    PaymentFrequency,
    PaymentMethod,
    ReceivableStatus,
)


class Receivable(Base):
    __tablename__ = "receivables"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    debtor_name: Mapped[str] = mapped_column(String(200), nullable=False)
    employee_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True, index=True
    )
    debtor_role: Mapped[EmployeeRole] = mapped_column(
        SAEnum(EmployeeRole, name="employee_role_enum"),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    balance: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    status: Mapped[ReceivableStatus] = mapped_column(
        SAEnum(
            ReceivableStatus,
            name="receivable_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=ReceivableStatus.PENDING,
    )
    frequency: Mapped[PaymentFrequency] = mapped_column(
        SAEnum(PaymentFrequency, name="payment_frequency_enum"),
        nullable=False,
    )
    number_of_payments: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    last_payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    last_payment_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    deleted_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    installments: Mapped[list["InstallmentSchedule"]] = relationship(
        back_populates="receivable",
        order_by="InstallmentSchedule.installment_number",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"<Receivable {self.code} {self.balance}/{self.total_amount} "
            f"({self.status.value})>"
        )


class InstallmentSchedule(Base):
    """
    One installment of a receivable.

    installment_number ordering is significant: cascading payments
    walk installments in ascending number.
    """

    __tablename__ = "installment_schedules"

    id: Mapped[int] = mapped_column(primary_key=True)
    receivable_id: Mapped[int] = mapped_column(
        ForeignKey("receivables.id"), nullable=False, index=True
    )
    installment_number: Mapped[int] = mapped_column(Integer, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount_due: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    balance: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    carried_over_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    status: Mapped[InstallmentStatus] = mapped_column(
        SAEnum(
            InstallmentStatus,
            name="installment_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=InstallmentStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    receivable: Mapped["Receivable"] = relationship(
        back_populates="installments"
    )
    payments: Mapped[list["InstallmentPayment"]] = relationship(
        back_populates="installment",
        order_by="InstallmentPayment.id",
    )

    def __repr__(self) -> str:
        return (
            f"<InstallmentSchedule #{self.installment_number} "
            f"{self.balance}/{self.amount_due} ({self.status.value})>"
        )


class InstallmentPayment(Base):
    """Immutable payment event. Never updated or deleted."""

    __tablename__ = "installment_payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    installment_id: Mapped[int] = mapped_column(
        ForeignKey("installment_schedules.id"), nullable=False, index=True
    )
    revenue_id: Mapped[int | None] = mapped_column(
        ForeignKey("revenues.id"), nullable=True, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(PaymentMethod, name="payment_method_enum"),
        nullable=False,
    )
    reference_number: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    journal_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True
    )
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    installment: Mapped["InstallmentSchedule"] = relationship(
        back_populates="payments"
    )

    def __repr__(self) -> str:
        return f"<InstallmentPayment {self.amount} on {self.payment_date}>"
