"""
Journal entry models.

A journal entry groups balanced debit and credit lines. Entries
start as DRAFT and are the only editable state; once POSTED they
are locked and can only be superseded by an adjustment or a
reversal, which are themselves new entries pointing back here.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey, Integer, Boolean,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trip_ledger.models.base import Base, utcnow
from trip_ledger.models.enums import JournalStatus, JournalEntryType


# Valid state transitions. ADJUSTED and REVERSED are terminal.
VALID_TRANSITIONS: dict[JournalStatus, set[JournalStatus]] = {
    JournalStatus.DRAFT: {JournalStatus.POSTED},
    JournalStatus.POSTED: {JournalStatus.ADJUSTED, JournalStatus.REVERSED},
    JournalStatus.ADJUSTED: set(),
    JournalStatus.REVERSED: set(),
}


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    source_module: Mapped[str | None] = mapped_column(
        String(50), nullable=True, index=True
    )
    reference_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    total_debit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_credit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    status: Mapped[JournalStatus] = mapped_column(
        SAEnum(
            JournalStatus,
            name="journal_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=JournalStatus.DRAFT,
    )
    entry_type: Mapped[JournalEntryType] = mapped_column(
        SAEnum(
            JournalEntryType,
            name="journal_entry_type_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=JournalEntryType.MANUAL,
    )
    adjustment_of_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True, index=True
    )
    reversal_of_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True, index=True
    )
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    deleted_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    deletion_reason: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    lines: Mapped[list["JournalEntryLine"]] = relationship(
        back_populates="journal_entry",
        order_by="JournalEntryLine.line_number",
        cascade="all, delete-orphan",
    )
    adjustment_of: Mapped["JournalEntry | None"] = relationship(
        foreign_keys=[adjustment_of_id], remote_side=[id]
    )
    reversal_of: Mapped["JournalEntry | None"] = relationship(
        foreign_keys=[reversal_of_id], remote_side=[id]
    )

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit

    def can_transition_to(self, new_status: JournalStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __repr__(self) -> str:
        return f"<JournalEntry {self.code} ({self.status.value})>"


class JournalEntryLine(Base):
    """One debit or one credit against a single account."""

    __tablename__ = "journal_entry_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False, index=True
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    debit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    journal_entry: Mapped["JournalEntry"] = relationship(back_populates="lines")
    account: Mapped["ChartOfAccount"] = relationship()

    @property
    def account_code(self) -> str | None:
        return self.account.account_code if self.account else None

    @property
    def account_name(self) -> str | None:
        return self.account.account_name if self.account else None

    def __repr__(self) -> str:
        return (
            f"<JournalEntryLine #{self.line_number} "
            f"D{self.debit} C{self.credit}>"
        )
