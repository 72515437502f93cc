"""
Installment scheduling and cascading payment application.

A receivable is split into N installments. Installments 1..N-1 get
total/N rounded to the cent; installment N absorbs the rounding
remainder so the schedule always sums to the receivable total.

A payment names the installment it starts at. Whatever that
installment cannot absorb carries over to the next unpaid
installments in order, one immutable payment row per installment
touched.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.orm import Session

from trip_ledger.errors import ConflictError, NotFoundError, ValidationError
from trip_ledger.models.base import utcnow
from trip_ledger.models.enums import (
    EmployeeRole,
    InstallmentStatus,
    PaymentFrequency,
    PaymentMethod,
    ReceivableStatus,
)
from trip_ledger.models.receivable import (
    InstallmentPayment,
    InstallmentSchedule,
    Receivable,
)
from trip_ledger.services.codes import next_sequential_code
from trip_ledger.services.remittance import to_decimal

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")

FREQUENCY_DAYS = {
    PaymentFrequency.DAILY: 1,
    PaymentFrequency.WEEKLY: 7,
    PaymentFrequency.BIWEEKLY: 14,
}


@dataclass(frozen=True)
class InstallmentDraft:
    installment_number: int
    due_date: date
    amount_due: Decimal


@dataclass
class PaymentAllocation:
    installment_id: int
    installment_number: int
    previous_balance: Decimal
    amount_applied: Decimal
    new_balance: Decimal
    new_status: InstallmentStatus
    is_carried_over: bool


@dataclass
class PaymentApplication:
    receivable: Receivable
    allocations: list[PaymentAllocation] = field(default_factory=list)
    payments: list[InstallmentPayment] = field(default_factory=list)

    @property
    def total_applied(self) -> Decimal:
        return sum((a.amount_applied for a in self.allocations), ZERO)


def installment_due_date(
    start_date: date, frequency: PaymentFrequency, installment_number: int
) -> date:
    """Due date of installment N. MONTHLY steps calendar months."""
    if frequency == PaymentFrequency.MONTHLY:
        return start_date + relativedelta(months=installment_number)
    return start_date + timedelta(
        days=FREQUENCY_DAYS[frequency] * installment_number
    )


def generate_schedule(
    total_amount,
    start_date: date,
    number_of_payments: int,
    frequency: PaymentFrequency,
) -> list[InstallmentDraft]:
    """
    Split total_amount into number_of_payments installments.

    Raises ValidationError for a non-positive total or count, or
    when the amount is too small to split into that many cents.
    """
    total = to_decimal(total_amount)
    if number_of_payments < 1:
        raise ValidationError("number_of_payments must be at least 1")
    if total <= ZERO:
        raise ValidationError("Schedule total must be greater than zero")

    if number_of_payments > int(total / CENT):
        raise ValidationError(
            f"Amount {total} is too small to split into "
            f"{number_of_payments} installments"
        )

    base = (total / number_of_payments).quantize(CENT, rounding=ROUND_HALF_UP)
    if base * (number_of_payments - 1) >= total:
        # Rounding up would leave nothing for the last installment
        base = (total / number_of_payments).quantize(CENT, rounding=ROUND_DOWN)
    last = total - base * (number_of_payments - 1)

    drafts = []
    for number in range(1, number_of_payments + 1):
        drafts.append(InstallmentDraft(
            installment_number=number,
            due_date=installment_due_date(start_date, frequency, number),
            amount_due=last if number == number_of_payments else base,
        ))
    return drafts


def _status_for(balance: Decimal, paid: Decimal) -> InstallmentStatus:
    if balance <= ZERO:
        return InstallmentStatus.PAID
    if paid > ZERO:
        return InstallmentStatus.PARTIALLY_PAID
    return InstallmentStatus.PENDING


class InstallmentService:

    def __init__(self, db: Session):
        self.db = db

    def _build_installments(self, receivable: Receivable) -> list[InstallmentDraft]:
        drafts = generate_schedule(
            receivable.total_amount,
            receivable.start_date,
            receivable.number_of_payments,
            receivable.frequency,
        )
        for draft in drafts:
            receivable.installments.append(InstallmentSchedule(
                installment_number=draft.installment_number,
                due_date=draft.due_date,
                amount_due=draft.amount_due,
                amount_paid=ZERO,
                balance=draft.amount_due,
                carried_over_amount=ZERO,
                status=_status_for(draft.amount_due, ZERO),
            ))
        return drafts

    def create_receivable(
        self,
        debtor_name: str,
        debtor_role: EmployeeRole,
        total_amount,
        frequency: PaymentFrequency,
        number_of_payments: int,
        start_date: date,
        employee_number: str | None = None,
        description: str | None = None,
        due_date: date | None = None,
    ) -> Receivable:
        """
        Create a receivable together with its installment schedule.

        due_date is the overall settlement deadline; it defaults to the
        last installment's due date.
        """
        total = to_decimal(total_amount)
        receivable = Receivable(
            code=next_sequential_code(self.db, Receivable.code, "RCVL"),
            debtor_name=debtor_name,
            debtor_role=debtor_role,
            employee_number=employee_number,
            description=description,
            total_amount=total,
            paid_amount=ZERO,
            balance=total,
            status=ReceivableStatus.PENDING,
            frequency=frequency,
            number_of_payments=number_of_payments,
            start_date=start_date,
            due_date=due_date or start_date,
        )
        drafts = self._build_installments(receivable)
        if due_date is None:
            receivable.due_date = drafts[-1].due_date
        self.db.add(receivable)
        self.db.flush()
        return receivable

    def get_receivable(self, receivable_id: int) -> Receivable:
        receivable = self.db.get(Receivable, receivable_id)
        if not receivable or receivable.is_deleted:
            raise NotFoundError(f"Receivable {receivable_id} not found")
        return receivable

    def get_installment(self, installment_id: int) -> InstallmentSchedule:
        installment = self.db.get(InstallmentSchedule, installment_id)
        if not installment or installment.receivable.is_deleted:
            raise NotFoundError(f"Installment {installment_id} not found")
        return installment

    def has_payments(self, receivable: Receivable) -> bool:
        return receivable.paid_amount > ZERO or any(
            inst.amount_paid > ZERO for inst in receivable.installments
        )

    def regenerate_schedule(
        self,
        receivable_id: int,
        number_of_payments: int,
        frequency: PaymentFrequency,
        start_date: date | None = None,
    ) -> Receivable:
        """
        Replace a receivable's schedule with new terms.

        Refused with ConflictError once any installment has been paid,
        so payment history is never rewritten.
        """
        receivable = self.get_receivable(receivable_id)
        if self.has_payments(receivable):
            raise ConflictError(
                f"Cannot regenerate schedule for {receivable.code}: "
                f"payments have already been made"
            )

        # Validate the new terms before touching the old rows
        generate_schedule(
            receivable.total_amount,
            start_date or receivable.start_date,
            number_of_payments,
            frequency,
        )

        receivable.installments.clear()
        self.db.flush()

        receivable.number_of_payments = number_of_payments
        receivable.frequency = frequency
        if start_date is not None:
            receivable.start_date = start_date
        self._build_installments(receivable)
        self.db.flush()
        return receivable

    def delete_receivable(
        self, receivable: Receivable, deleted_by: str | None = None
    ) -> None:
        """
        Soft-delete an unpaid receivable.

        The row and its schedule stay so the code is never issued
        again.
        """
        if self.has_payments(receivable):
            raise ConflictError(
                f"Cannot delete {receivable.code}: "
                f"payments have already been made"
            )
        receivable.is_deleted = True
        receivable.deleted_by = deleted_by
        receivable.deleted_at = utcnow()
        self.db.flush()
        logger.info("Deleted receivable %s", receivable.code)

    def apply_payment(
        self,
        installment_id: int,
        amount,
        payment_date: date,
        payment_method: PaymentMethod,
        revenue_id: int | None = None,
        reference_number: str | None = None,
        created_by: str | None = None,
    ) -> PaymentApplication:
        """
        Apply a payment starting at one installment, cascading forward.

        Validates everything before writing:
        - the amount is positive
        - the starting installment is not already PAID
        - the amount does not exceed the receivable's balance, nor what
          the starting installment and the ones after it still owe
        """
        amount = to_decimal(amount)
        if amount <= ZERO:
            raise ValidationError("Payment amount must be greater than zero")

        start = self.get_installment(installment_id)
        if start.status == InstallmentStatus.PAID:
            raise ValidationError(
                f"Installment #{start.installment_number} is already paid"
            )

        receivable = start.receivable
        if amount > receivable.balance:
            raise ValidationError(
                f"Payment amount {amount} exceeds outstanding balance "
                f"{receivable.balance} of {receivable.code}"
            )

        eligible = self.db.execute(
            select(InstallmentSchedule)
            .where(
                InstallmentSchedule.receivable_id == receivable.id,
                InstallmentSchedule.status != InstallmentStatus.PAID,
                InstallmentSchedule.installment_number >= start.installment_number,
            )
            .order_by(InstallmentSchedule.installment_number)
        ).scalars().all()

        reachable = sum((inst.balance for inst in eligible), ZERO)
        if amount > reachable:
            raise ValidationError(
                f"Payment amount {amount} exceeds the {reachable} still owed "
                f"from installment #{start.installment_number} onwards"
            )

        application = PaymentApplication(receivable=receivable)
        remaining = amount
        for inst in eligible:
            if remaining <= ZERO:
                break
            applied = min(remaining, inst.balance)
            if applied <= ZERO:
                continue

            previous_balance = inst.balance
            inst.amount_paid = inst.amount_paid + applied
            inst.balance = inst.amount_due - inst.amount_paid
            inst.status = _status_for(inst.balance, inst.amount_paid)

            carried_over = inst.id != start.id
            if carried_over:
                inst.carried_over_amount = inst.carried_over_amount + applied

            payment = InstallmentPayment(
                installment=inst,
                revenue_id=revenue_id,
                amount=applied,
                payment_date=payment_date,
                payment_method=payment_method,
                reference_number=reference_number,
                created_by=created_by,
            )
            self.db.add(payment)
            application.payments.append(payment)
            application.allocations.append(PaymentAllocation(
                installment_id=inst.id,
                installment_number=inst.installment_number,
                previous_balance=previous_balance,
                amount_applied=applied,
                new_balance=inst.balance,
                new_status=inst.status,
                is_carried_over=carried_over,
            ))
            remaining -= applied

        receivable.paid_amount = receivable.paid_amount + amount
        receivable.balance = receivable.total_amount - receivable.paid_amount
        receivable.status = (
            ReceivableStatus.PAID
            if receivable.balance <= ZERO
            else ReceivableStatus.PARTIALLY_PAID
        )
        receivable.last_payment_date = payment_date
        receivable.last_payment_amount = amount
        self.db.flush()

        logger.info(
            "Applied %s to %s across %d installment(s)",
            amount, receivable.code, len(application.allocations),
        )
        return application

    def mark_overdue(self, as_of: date | None = None) -> int:
        """Flag unpaid installments past their due date. Returns the count."""
        as_of = as_of or date.today()
        overdue = self.db.execute(
            select(InstallmentSchedule)
            .join(Receivable, InstallmentSchedule.receivable_id == Receivable.id)
            .where(
                Receivable.is_deleted.is_(False),
                InstallmentSchedule.due_date < as_of,
                InstallmentSchedule.status.in_([
                    InstallmentStatus.PENDING,
                    InstallmentStatus.PARTIALLY_PAID,
                ]),
            )
        ).scalars().all()
        for inst in overdue:
            inst.status = InstallmentStatus.OVERDUE
        self.db.flush()
        return len(overdue)
