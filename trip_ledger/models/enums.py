"""
Shared enumerations for database models.

Mapped to database enums so an invalid status or frequency is
rejected by the database, not just by Python validation.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"


class NormalBalance(str, enum.Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class JournalStatus(str, enum.Enum):
    """Lifecycle of a journal entry. Only DRAFT is editable."""
    DRAFT = "DRAFT"
    POSTED = "POSTED"
    ADJUSTED = "ADJUSTED"
    REVERSED = "REVERSED"


class JournalEntryType(str, enum.Enum):
    MANUAL = "MANUAL"
    AUTO_GENERATED = "AUTO_GENERATED"


class AssignmentType(str, enum.Enum):
    """How a trip crew's remittance to the company is computed."""
    BOUNDARY = "BOUNDARY"
    PERCENTAGE = "PERCENTAGE"


class RemittanceStatus(str, enum.Enum):
    PAID = "PAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"


class ReceivableStatus(str, enum.Enum):
    PENDING = "PENDING"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"


class InstallmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class PaymentFrequency(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"


class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    E_WALLET = "E_WALLET"
    REIMBURSEMENT = "REIMBURSEMENT"


class EmployeeRole(str, enum.Enum):
    """Which crew member owes a shortage receivable."""
    DRIVER = "DRIVER"
    CONDUCTOR = "CONDUCTOR"


class RateType(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    HOURLY = "HOURLY"


class PayrollPeriodStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PARTIAL = "PARTIAL"
    PROCESSED = "PROCESSED"
    RELEASED = "RELEASED"
