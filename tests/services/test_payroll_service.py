"""Tests for the PayrollService."""

from datetime import date
from decimal import Decimal

import pytest

from trip_ledger.errors import BadRequestError, NotFoundError, ValidationError
from trip_ledger.integrations.external_client import ExternalFetchError
from trip_ledger.models.enums import PayrollPeriodStatus
from trip_ledger.schemas.external import PayrollEmployee
from trip_ledger.services.payroll_service import PayrollService


def hr_employee(number, rate="600", present=2, **extra):
    return PayrollEmployee.model_validate({
        "employee_number": number,
        "basic_rate": rate,
        "attendances": [
            {"date": f"2026-03-0{day}", "status": "Present"}
            for day in range(2, 2 + present)
        ],
        **extra,
    })


class StubHR:
    def __init__(self, employees=None, error=None):
        self.employees = employees or []
        self.error = error
        self.calls = []

    async def fetch_payroll(self, period_start, period_end, employee_number=None):
        self.calls.append((period_start, period_end))
        if self.error:
            raise self.error
        return self.employees


def open_period(db_session, client=None):
    service = PayrollService(db_session, client=client or StubHR())
    period = service.create_period(
        date(2026, 3, 1), date(2026, 3, 15), created_by="hr-admin"
    )
    db_session.commit()
    return service, period


class TestCreatePeriod:

    def test_new_period_is_draft(self, db_session):
        _, period = open_period(db_session)
        assert period.code == "2026-03-01_2026-03-15"
        assert period.status == PayrollPeriodStatus.DRAFT
        assert period.total_employees == 0

    def test_inverted_dates_fail(self, db_session):
        service = PayrollService(db_session, client=StubHR())
        with pytest.raises(ValidationError, match="on or before"):
            service.create_period(date(2026, 3, 15), date(2026, 3, 1))

    def test_overlapping_period_fails(self, db_session):
        service, _ = open_period(db_session)
        with pytest.raises(ValidationError, match="overlaps existing period"):
            service.create_period(date(2026, 3, 10), date(2026, 3, 31))

    def test_adjacent_period_is_fine(self, db_session):
        service, _ = open_period(db_session)
        period = service.create_period(date(2026, 3, 16), date(2026, 3, 31))
        assert period.code == "2026-03-16_2026-03-31"

    def test_unknown_period(self, db_session):
        with pytest.raises(NotFoundError):
            PayrollService(db_session, client=StubHR()).get_period(5)


class TestProcessPeriod:

    @pytest.mark.asyncio
    async def test_computes_and_totals(self, db_session):
        hr = StubHR([hr_employee("EMP-001"), hr_employee("EMP-002", rate="500", present=3)])
        service, period = open_period(db_session, client=hr)

        result = await service.process_period(period.id)

        assert hr.calls == [(date(2026, 3, 1), date(2026, 3, 15))]
        assert result.processed == 2
        assert result.failed == 0
        assert result.period.status == PayrollPeriodStatus.PROCESSED
        assert result.period.total_employees == 2
        assert result.period.total_net == Decimal("2700")
        assert [p.employee_number for p in period.payrolls] == ["EMP-001", "EMP-002"]

    @pytest.mark.asyncio
    async def test_bad_employee_makes_period_partial(self, db_session):
        hr = StubHR([
            hr_employee("EMP-001"),
            hr_employee("EMP-002", benefits=[
                {"name": "Odd", "value": "10", "frequency": "Fortnightly"},
            ]),
        ])
        service, period = open_period(db_session, client=hr)

        result = await service.process_period(period.id)

        assert result.processed == 1
        assert result.failed == 1
        assert result.errors[0].startswith("EMP-002:")
        assert period.status == PayrollPeriodStatus.PARTIAL

    @pytest.mark.asyncio
    async def test_partial_period_can_be_reprocessed(self, db_session):
        hr = StubHR([hr_employee("EMP-001", benefits=[
            {"name": "Odd", "value": "10", "frequency": "Fortnightly"},
        ])])
        service, period = open_period(db_session, client=hr)
        await service.process_period(period.id)

        hr.employees = [hr_employee("EMP-001"), hr_employee("EMP-001")]
        result = await service.process_period(period.id)

        assert result.period.status == PayrollPeriodStatus.PROCESSED
        assert result.period.total_employees == 1

    @pytest.mark.asyncio
    async def test_processed_period_is_frozen(self, db_session):
        service, period = open_period(db_session, client=StubHR([hr_employee("EMP-001")]))
        await service.process_period(period.id)

        with pytest.raises(BadRequestError, match="cannot be processed"):
            await service.process_period(period.id)

    @pytest.mark.asyncio
    async def test_hr_failure_is_bad_request(self, db_session):
        hr = StubHR(error=ExternalFetchError("Giving up on hr after 3 attempts"))
        service, period = open_period(db_session, client=hr)

        with pytest.raises(BadRequestError, match="Could not fetch payroll data"):
            await service.process_period(period.id)
        assert period.status == PayrollPeriodStatus.DRAFT
