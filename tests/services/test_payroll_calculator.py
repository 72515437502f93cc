"""Tests for the payroll calculations."""

from datetime import date
from decimal import Decimal

import pytest

from trip_ledger.errors import ValidationError
from trip_ledger.models.enums import RateType
from trip_ledger.schemas.external import PayrollEmployee
from trip_ledger.services.payroll import (
    attendance_stats,
    compute_pay,
    format_employee_full_name,
    frequency_multiplier,
    map_rate_type,
    period_code,
    working_days,
)

START = date(2026, 3, 1)
END = date(2026, 3, 15)


def multiplier(frequency, effective=None, end=None, days_present=10):
    return frequency_multiplier(frequency, effective, end, START, END, days_present)


def payroll_employee(**extra):
    values = {
        "employee_number": "EMP-001",
        "first_name": "Juan",
        "last_name": "Dela Cruz",
        "basic_rate": "600",
        "rate_type": "Daily",
        "attendances": [
            {"date": "2026-03-02", "status": "Present"},
            {"date": "2026-03-03", "status": "Present"},
            {"date": "2026-03-04", "status": "Absent"},
            {"date": "2026-03-05", "status": "Late"},
        ],
    }
    values.update(extra)
    return PayrollEmployee.model_validate(values)


class TestFrequencyMultiplier:

    def test_once_inside_period(self):
        assert multiplier("Once", effective=date(2026, 3, 5)) == 1

    def test_once_outside_period(self):
        assert multiplier("Once", effective=date(2026, 2, 5)) == 0

    def test_daily_counts_present_days(self):
        assert multiplier("Daily", days_present=7) == 7

    def test_weekly_counts_whole_weeks(self):
        assert multiplier("weekly") == 2

    def test_weekly_is_at_least_one(self):
        assert frequency_multiplier(
            "Weekly", None, None, START, date(2026, 3, 3), 0
        ) == 1

    def test_monthly_counts_month_ends(self):
        assert multiplier("Monthly") == 0
        assert frequency_multiplier(
            "Monthly", None, None, date(2026, 1, 15), date(2026, 3, 31), 0
        ) == 3

    def test_annually_counts_anniversaries(self):
        assert multiplier("Annually", effective=date(2020, 3, 10)) == 1
        assert multiplier("Yearly", effective=date(2020, 4, 10)) == 0

    def test_item_outside_effective_range(self):
        assert multiplier("Daily", effective=date(2026, 4, 1)) == 0
        assert multiplier("Daily", end=date(2026, 2, 28)) == 0

    def test_unknown_frequency_fails(self):
        with pytest.raises(ValidationError, match="Unknown payroll item frequency"):
            multiplier("Fortnightly")


class TestComputePay:

    def test_attendance_counts(self):
        stats = attendance_stats(payroll_employee().attendances)
        assert (stats.present, stats.absent, stats.late) == (2, 1, 1)

    def test_basic_pay_only(self):
        pay = compute_pay(payroll_employee(), START, END)
        assert pay.present_days == 2
        assert pay.basic_pay == Decimal("1200")
        assert pay.gross_pay == Decimal("1200")
        assert pay.net_pay == Decimal("1200")

    def test_benefits_and_deductions(self):
        employee = payroll_employee(
            benefits=[
                {"name": "Meal", "value": "50", "frequency": "Daily"},
                {"name": "Bonus", "value": "1000", "frequency": "Once",
                 "effective_date": "2026-03-10"},
                {"name": "Old", "value": "999", "frequency": "Daily",
                 "is_active": False},
            ],
            deductions=[
                {"name": "SSS", "value": "100", "frequency": "Weekly"},
            ],
        )
        pay = compute_pay(employee, START, END)

        assert pay.total_benefits == Decimal("1100")
        assert pay.total_deductions == Decimal("200")
        assert pay.gross_pay == Decimal("2300")
        assert pay.net_pay == Decimal("2100")

    def test_rate_type_mapping(self):
        assert map_rate_type("Monthly") == RateType.MONTHLY
        assert map_rate_type("per trip") == RateType.DAILY
        assert map_rate_type(None) == RateType.DAILY


class TestHelpers:

    def test_full_name_skips_blanks(self):
        employee = payroll_employee(middle_name=None, suffix="Jr.")
        assert format_employee_full_name(employee) == "Juan Dela Cruz Jr."

    def test_period_code(self):
        assert period_code(START, END) == "2026-03-01_2026-03-15"

    def test_working_days(self):
        # 2026-03-01 is a Sunday
        assert working_days(START, END) == 10
