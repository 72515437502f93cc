"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from trip_ledger.models.base import Base
from trip_ledger.models.enums import (
    AccountType,
    AssignmentType,
    EmployeeRole,
    InstallmentStatus,
    JournalEntryType,
    JournalStatus,
    NormalBalance,
    PaymentFrequency,
    PaymentMethod,
    PayrollPeriodStatus,
    RateType,
    ReceivableStatus,
    RemittanceStatus,
)
from trip_ledger.models.chart_of_account import ChartOfAccount
from trip_ledger.models.journal_entry import JournalEntry, JournalEntryLine
from trip_ledger.models.receivable import (
    Receivable,
    InstallmentSchedule,
    InstallmentPayment,
)
from trip_ledger.models.revenue import Revenue
from trip_ledger.models.system_configuration import SystemConfiguration
from trip_ledger.models.external import (
    EmployeeLocal,
    BusLocal,
    RentalLocal,
    RentalEmployeeLocal,
    BusTripLocal,
)
from trip_ledger.models.payroll import PayrollPeriod, Payroll

__all__ = [
    "Base",
    "AccountType",
    "AssignmentType",
    "EmployeeRole",
    "InstallmentStatus",
    "JournalEntryType",
    "JournalStatus",
    "NormalBalance",
    "PaymentFrequency",
    "PaymentMethod",
    "PayrollPeriodStatus",
    "RateType",
    "ReceivableStatus",
    "RemittanceStatus",
    "ChartOfAccount",
    "JournalEntry",
    "JournalEntryLine",
    "Receivable",
    "InstallmentSchedule",
    "InstallmentPayment",
    "Revenue",
    "SystemConfiguration",
    "EmployeeLocal",
    "BusLocal",
    "RentalLocal",
    "RentalEmployeeLocal",
    "BusTripLocal",
    "PayrollPeriod",
    "Payroll",
]
