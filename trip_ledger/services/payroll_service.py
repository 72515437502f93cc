"""
Payroll service — payroll periods and their per-employee figures.

A period is created empty in DRAFT. Processing pulls attendance,
rates, benefits and deductions from HR, computes each employee's pay
and stores it, so a period's figures stay fixed once processed even
if HR data moves on. An employee whose data cannot be computed is
reported and skipped; the period is then PARTIAL and can be
processed again.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from trip_ledger.errors import (
    BadRequestError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from trip_ledger.integrations.external_client import (
    ExternalDataClient,
    ExternalFetchError,
)
from trip_ledger.models.enums import PayrollPeriodStatus
from trip_ledger.models.payroll import Payroll, PayrollPeriod
from trip_ledger.schemas.external import PayrollEmployee
from trip_ledger.schemas.payroll import PayrollPeriodResponse, PayrollProcessResponse
from trip_ledger.services import payroll as calculator

logger = logging.getLogger(__name__)

PROCESSABLE = (PayrollPeriodStatus.DRAFT, PayrollPeriodStatus.PARTIAL)


class PayrollService:

    def __init__(self, db: Session, client: ExternalDataClient | None = None):
        self.db = db
        self.client = client or ExternalDataClient.from_settings()

    def create_period(self, period_start, period_end, created_by=None) -> PayrollPeriod:
        """
        Open a DRAFT period.

        Raises ValidationError if the dates are inverted or the range
        overlaps another live period.
        """
        if period_start > period_end:
            raise ValidationError("period_start must be on or before period_end")

        overlapping = self.db.execute(
            select(PayrollPeriod).where(
                PayrollPeriod.is_deleted.is_(False),
                PayrollPeriod.period_start <= period_end,
                PayrollPeriod.period_end >= period_start,
            ).limit(1)
        ).scalar_one_or_none()
        if overlapping:
            raise ValidationError(
                f"Payroll period overlaps existing period {overlapping.code}"
            )

        period = PayrollPeriod(
            code=calculator.period_code(period_start, period_end),
            period_start=period_start,
            period_end=period_end,
            status=PayrollPeriodStatus.DRAFT,
            created_by=created_by,
        )
        self.db.add(period)
        self.db.flush()
        logger.info("Created payroll period %s", period.code)
        return period

    def get_period(self, period_id: int) -> PayrollPeriod:
        period = self.db.get(PayrollPeriod, period_id)
        if not period or period.is_deleted:
            raise NotFoundError(f"Payroll period {period_id} not found")
        return period

    def _upsert(self, period: PayrollPeriod, employee_number: str, pay) -> Payroll:
        row = self.db.execute(
            select(Payroll).where(
                Payroll.payroll_period_id == period.id,
                Payroll.employee_number == employee_number,
            )
        ).scalar_one_or_none()
        if row is None:
            row = Payroll(period=period, employee_number=employee_number)
            self.db.add(row)

        row.rate_type = pay.rate_type
        row.basic_rate = pay.basic_rate
        row.present_days = pay.present_days
        row.basic_pay = pay.basic_pay
        row.total_benefits = pay.total_benefits
        row.total_deductions = pay.total_deductions
        row.gross_pay = pay.gross_pay
        row.net_pay = pay.net_pay
        # HR may list an employee twice; the lookup above must see this row
        self.db.flush()
        return row

    def _refresh_totals(self, period: PayrollPeriod) -> None:
        rows = self.db.execute(
            select(Payroll).where(Payroll.payroll_period_id == period.id)
        ).scalars().all()
        period.total_employees = len(rows)
        period.total_gross = sum((r.gross_pay for r in rows), Decimal("0"))
        period.total_deductions = sum(
            (r.total_deductions for r in rows), Decimal("0")
        )
        period.total_net = sum((r.net_pay for r in rows), Decimal("0"))

    def get_processable_period(self, period_id: int) -> PayrollPeriod:
        """The period, if it is still DRAFT or PARTIAL."""
        period = self.get_period(period_id)
        if period.status not in PROCESSABLE:
            raise BadRequestError(
                f"Payroll period {period.code} is {period.status.value} "
                f"and cannot be processed"
            )
        return period

    async def fetch_employees(self, period: PayrollPeriod) -> list[PayrollEmployee]:
        """HR's payroll data for the period. Raises BadRequestError if HR fails."""
        try:
            return await self.client.fetch_payroll(
                period.period_start, period.period_end
            )
        except ExternalFetchError as e:
            raise BadRequestError(f"Could not fetch payroll data from HR: {e}") from e

    def apply_payroll(
        self, period: PayrollPeriod, employees: list[PayrollEmployee]
    ) -> PayrollProcessResponse:
        """Compute and store each employee's pay, then refresh the period."""
        processed = 0
        errors = []
        for employee in employees:
            try:
                pay = calculator.compute_pay(
                    employee, period.period_start, period.period_end
                )
            except ServiceError as e:
                errors.append(f"{employee.employee_number}: {e}")
                continue
            self._upsert(period, employee.employee_number, pay)
            processed += 1

        self.db.flush()
        self._refresh_totals(period)
        period.status = (
            PayrollPeriodStatus.PARTIAL if errors else PayrollPeriodStatus.PROCESSED
        )
        self.db.flush()

        logger.info(
            "Processed payroll %s: %d employee(s), %d error(s), net %s",
            period.code, processed, len(errors), period.total_net,
        )
        return PayrollProcessResponse(
            period=PayrollPeriodResponse.model_validate(period),
            processed=processed,
            failed=len(errors),
            errors=errors,
        )

    async def process_period(self, period_id: int) -> PayrollProcessResponse:
        """
        Compute and store pay for every employee HR returns.

        Only DRAFT and PARTIAL periods can be processed. Raises
        BadRequestError if HR cannot be reached.
        """
        period = self.get_processable_period(period_id)
        employees = await self.fetch_employees(period)
        return self.apply_payroll(period, employees)
