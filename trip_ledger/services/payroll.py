"""
Payroll calculations.

Pure functions, no database access. HR sends a daily basic rate,
attendance records, and benefit/deduction items that each recur at
some frequency. For a period:

    basic_pay  = basic_rate * present_days
    gross_pay  = basic_pay + benefits
    net_pay    = gross_pay - deductions

An item contributes value * multiplier, where the multiplier is how
many times its frequency falls inside the period.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from trip_ledger.errors import ValidationError
from trip_ledger.models.enums import RateType
from trip_ledger.schemas.external import (
    PayrollAttendance,
    PayrollEmployee,
    PayrollItem,
)
from trip_ledger.services.remittance import to_decimal

ZERO = Decimal("0")

RATE_TYPES = {
    "DAILY": RateType.DAILY,
    "WEEKLY": RateType.WEEKLY,
    "MONTHLY": RateType.MONTHLY,
    "HOURLY": RateType.HOURLY,
}


@dataclass(frozen=True)
class AttendanceStats:
    present: int
    absent: int
    late: int


@dataclass(frozen=True)
class PayBreakdown:
    rate_type: RateType
    basic_rate: Decimal
    present_days: int
    basic_pay: Decimal
    total_benefits: Decimal
    total_deductions: Decimal
    gross_pay: Decimal
    net_pay: Decimal


def attendance_stats(attendances: list[PayrollAttendance]) -> AttendanceStats:
    statuses = [a.status for a in attendances]
    return AttendanceStats(
        present=statuses.count("Present"),
        absent=statuses.count("Absent"),
        late=statuses.count("Late"),
    )


def present_days(attendances: list[PayrollAttendance]) -> int:
    return attendance_stats(attendances).present


def date_ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    return start1 <= end2 and start2 <= end1


def _month_ends(start: date, end: date) -> int:
    count = 0
    year, month = start.year, start.month
    while True:
        last_day = date(year, month, calendar.monthrange(year, month)[1])
        if last_day > end:
            return count
        if last_day >= start:
            count += 1
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)


def _anniversaries(effective: date, start: date, end: date) -> int:
    count = 0
    for year in range(start.year, end.year + 1):
        # Feb 29 anniversaries fall on Feb 28 in common years
        day = min(effective.day, calendar.monthrange(year, effective.month)[1])
        anniversary = date(year, effective.month, day)
        if start <= anniversary <= end and anniversary >= effective:
            count += 1
    return count


def frequency_multiplier(
    frequency: str,
    effective_date: date | None,
    end_date: date | None,
    period_start: date,
    period_end: date,
    days_present: int,
) -> int:
    """
    How many times an item recurs within the payroll period.

    An item whose effective range does not overlap the period
    contributes nothing. Raises ValidationError for an unknown
    frequency.
    """
    item_start = effective_date or date.min
    item_end = end_date or date.max
    if not date_ranges_overlap(item_start, item_end, period_start, period_end):
        return 0

    key = (frequency or "").strip().lower()
    if key == "once":
        if effective_date is None:
            return 0
        return 1 if period_start <= effective_date <= period_end else 0
    if key == "daily":
        return days_present
    if key == "weekly":
        period_days = (period_end - period_start).days + 1
        return max(1, period_days // 7)
    if key == "monthly":
        return _month_ends(period_start, period_end)
    if key in ("annually", "yearly"):
        if effective_date is None:
            return 0
        return _anniversaries(effective_date, period_start, period_end)
    raise ValidationError(f"Unknown payroll item frequency: {frequency!r}")


def items_total(
    items: list[PayrollItem],
    period_start: date,
    period_end: date,
    days_present: int,
) -> Decimal:
    total = ZERO
    for item in items:
        if not item.is_active:
            continue
        multiplier = frequency_multiplier(
            item.frequency,
            item.effective_date,
            item.end_date,
            period_start,
            period_end,
            days_present,
        )
        total += to_decimal(item.value) * multiplier
    return total


def benefits_total(employee: PayrollEmployee, start: date, end: date) -> Decimal:
    return items_total(
        employee.benefits, start, end, present_days(employee.attendances)
    )


def deductions_total(employee: PayrollEmployee, start: date, end: date) -> Decimal:
    return items_total(
        employee.deductions, start, end, present_days(employee.attendances)
    )


def map_rate_type(raw: str | None) -> RateType:
    """HR's 'Daily'/'Weekly'/... to RateType. Anything else is DAILY."""
    return RATE_TYPES.get((raw or "").strip().upper(), RateType.DAILY)


def compute_pay(
    employee: PayrollEmployee, period_start: date, period_end: date
) -> PayBreakdown:
    days = present_days(employee.attendances)
    basic_rate = to_decimal(employee.basic_rate)
    basic_pay = basic_rate * days
    benefits = items_total(employee.benefits, period_start, period_end, days)
    deductions = items_total(employee.deductions, period_start, period_end, days)
    gross = basic_pay + benefits
    return PayBreakdown(
        rate_type=map_rate_type(employee.rate_type),
        basic_rate=basic_rate,
        present_days=days,
        basic_pay=basic_pay,
        total_benefits=benefits,
        total_deductions=deductions,
        gross_pay=gross,
        net_pay=gross - deductions,
    )


def format_employee_full_name(employee: PayrollEmployee) -> str:
    parts = [
        employee.first_name,
        employee.middle_name,
        employee.last_name,
        employee.suffix,
    ]
    return " ".join(p for p in parts if p)


def period_code(period_start: date, period_end: date) -> str:
    return f"{period_start.isoformat()}_{period_end.isoformat()}"


def working_days(period_start: date, period_end: date) -> int:
    """Weekdays (Mon-Fri) between the two dates, inclusive."""
    count = 0
    current = period_start
    while current <= period_end:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count
