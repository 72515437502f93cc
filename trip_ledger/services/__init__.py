"""Business logic services."""

from trip_ledger.services.chart_of_account_service import ChartOfAccountService
from trip_ledger.services.installment_service import InstallmentService
from trip_ledger.services.journal_entry_service import JournalEntryService
from trip_ledger.services.payroll_service import PayrollService
from trip_ledger.services.sync_service import SyncService
from trip_ledger.services.system_config_service import SystemConfigService
from trip_ledger.services.trip_revenue_service import TripRevenueService

__all__ = [
    "ChartOfAccountService",
    "InstallmentService",
    "JournalEntryService",
    "PayrollService",
    "SyncService",
    "SystemConfigService",
    "TripRevenueService",
]
