"""
Trip revenue model.

One row per external bus trip whose remittance has been recorded.
The (assignment_id, bus_trip_id) pair is unique so that two callers
racing past the is_revenue_recorded check cannot both insert.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trip_ledger.models.base import Base, utcnow
from trip_ledger.models.enums import RemittanceStatus, PaymentMethod


class Revenue(Base):
    __tablename__ = "revenues"
    __table_args__ = (
        UniqueConstraint(
            "assignment_id", "bus_trip_id", name="uq_revenue_trip"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    assignment_id: Mapped[str] = mapped_column(String(100), nullable=False)
    bus_trip_id: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    date_recorded: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    date_expected: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(PaymentMethod, name="payment_method_enum"),
        nullable=False,
        default=PaymentMethod.CASH,
    )
    remittance_status: Mapped[RemittanceStatus] = mapped_column(
        SAEnum(
            RemittanceStatus,
            name="remittance_status_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    driver_receivable_id: Mapped[int | None] = mapped_column(
        ForeignKey("receivables.id"), nullable=True
    )
    conductor_receivable_id: Mapped[int | None] = mapped_column(
        ForeignKey("receivables.id"), nullable=True
    )
    journal_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True
    )
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    driver_receivable: Mapped["Receivable | None"] = relationship(
        foreign_keys=[driver_receivable_id]
    )
    conductor_receivable: Mapped["Receivable | None"] = relationship(
        foreign_keys=[conductor_receivable_id]
    )
    journal_entry: Mapped["JournalEntry | None"] = relationship()

    @property
    def receivables(self) -> list["Receivable"]:
        return [
            r for r in (self.driver_receivable, self.conductor_receivable)
            if r is not None
        ]

    def __repr__(self) -> str:
        return (
            f"<Revenue {self.code} {self.amount} "
            f"({self.remittance_status.value})>"
        )
