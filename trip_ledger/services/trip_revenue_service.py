"""
Trip revenue service — records what a bus crew remitted for a trip.

Recording a trip does four things in one transaction:
1. Inserts the Revenue row for the (assignment_id, bus_trip_id) pair
2. Opens a receivable per crew member for any shortage, each with
   its installment schedule
3. Books a balanced, posted journal entry for the remittance
4. Flags the cached trip as recorded so it is never picked up again

The caller commits. process_all_unsynced is the exception: it owns
one transaction per trip so a bad trip cannot sink the batch.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from trip_ledger.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ServiceError,
)
from trip_ledger.integrations.audit_client import AuditClient
from trip_ledger.models.base import utcnow
from trip_ledger.models.enums import (
    EmployeeRole,
    JournalEntryType,
    JournalStatus,
    PaymentFrequency,
    PaymentMethod,
    RemittanceStatus,
)
from trip_ledger.models.external import BusLocal, BusTripLocal, EmployeeLocal
from trip_ledger.models.journal_entry import JournalEntry
from trip_ledger.models.receivable import Receivable
from trip_ledger.models.revenue import Revenue
from trip_ledger.models.system_configuration import SystemConfiguration
from trip_ledger.schemas.journal_entry import (
    JournalEntryCreate,
    JournalEntrySummary,
    JournalLineCreate,
)
from trip_ledger.schemas.receivable import ReceivablePaymentCreate, ReceivableResponse
from trip_ledger.schemas.revenue import (
    BusDetails,
    EmployeeSummary,
    ProcessUnsyncedResponse,
    RemittanceBreakdown,
    RevenueDetailResponse,
    RevenueQuery,
    RevenueResponse,
    ShortageDetails,
    TripProcessResult,
    TripRevenueCreate,
    TripRevenueUpdate,
    UnsyncedTripQuery,
)
from trip_ledger.services import remittance
from trip_ledger.services.chart_of_account_service import AccountCodes
from trip_ledger.services.codes import next_sequential_code
from trip_ledger.services.installment_service import (
    InstallmentService,
    PaymentApplication,
)
from trip_ledger.services.journal_entry_service import JournalEntryService
from trip_ledger.services.pagination import paginate
from trip_ledger.services.system_config_service import SystemConfigService

logger = logging.getLogger(__name__)

AUDIT_MODULE = "REVENUE"
REVENUE_MODULE = "TRIP_REVENUE"
PAYMENT_MODULE = "RECEIVABLE_PAYMENT"

CENT = Decimal("0.01")
ZERO = Decimal("0")

ASSET_ACCOUNTS: dict[PaymentMethod, str] = {
    PaymentMethod.CASH: AccountCodes.CASH,
    PaymentMethod.REIMBURSEMENT: AccountCodes.CASH,
    PaymentMethod.BANK_TRANSFER: AccountCodes.BANK,
    PaymentMethod.E_WALLET: AccountCodes.E_WALLET,
}

RECEIVABLE_ACCOUNTS: dict[EmployeeRole, str] = {
    EmployeeRole.DRIVER: AccountCodes.DRIVER_RECEIVABLE,
    EmployeeRole.CONDUCTOR: AccountCodes.CONDUCTOR_RECEIVABLE,
}

SORT_COLUMNS = {
    "date_recorded": Revenue.date_recorded,
    "amount": Revenue.amount,
    "created_at": Revenue.created_at,
}


@dataclass(frozen=True)
class RemittanceResult:
    expected: Decimal
    shortage: Decimal
    company_share: Decimal
    status: RemittanceStatus


def compute_remittance(trip: BusTripLocal, collected=None) -> RemittanceResult:
    """Remittance figures for a trip, optionally with an amended collected amount."""
    collected = trip.trip_revenue if collected is None else collected
    expected = remittance.expected_remittance(
        trip.assignment_type,
        collected,
        trip.assignment_value,
        trip.trip_fuel_expense,
    )
    return RemittanceResult(
        expected=expected,
        shortage=remittance.shortage(expected, collected),
        company_share=remittance.company_share_amount(
            trip.assignment_type, collected, trip.assignment_value
        ),
        status=remittance.remittance_status(collected, expected),
    )


def split_shortage(
    shortage: Decimal, config: SystemConfiguration
) -> dict[EmployeeRole, Decimal]:
    """
    Each role's share of the shortage, in cents.

    The driver's share is rounded; the conductor takes the rest of the
    combined percentage, so two shares of a fully split shortage add up
    to it exactly.
    """
    driver_pct = config.driver_share_percentage
    conductor_pct = config.conductor_share_percentage
    driver = (shortage * driver_pct / 100).quantize(CENT, rounding=ROUND_HALF_UP)
    combined = (shortage * (driver_pct + conductor_pct) / 100).quantize(
        CENT, rounding=ROUND_HALF_UP
    )
    return {
        EmployeeRole.DRIVER: driver,
        EmployeeRole.CONDUCTOR: max(combined - driver, ZERO),
    }


def _trip_crew(trip: BusTripLocal) -> dict[EmployeeRole, str]:
    crew = {}
    if trip.driver_employee_number:
        crew[EmployeeRole.DRIVER] = trip.driver_employee_number
    if trip.conductor_employee_number:
        crew[EmployeeRole.CONDUCTOR] = trip.conductor_employee_number
    return crew


def _money(value: Decimal) -> str:
    return f"₱{value:,.2f}"


def _snapshot(revenue: Revenue) -> dict:
    return {
        "code": revenue.code,
        "assignment_id": revenue.assignment_id,
        "bus_trip_id": revenue.bus_trip_id,
        "amount": revenue.amount,
        "remittance_status": revenue.remittance_status.value,
        "payment_method": revenue.payment_method.value,
        "journal_entry_id": revenue.journal_entry_id,
    }


class TripRevenueService:
    """
    Orchestrates remittance, receivables and the ledger for bus trips.

    Collaborating services share this service's session, so
    everything they write lands in the same transaction.
    """

    def __init__(self, db: Session, audit: AuditClient | None = None):
        self.db = db
        self.audit = audit or AuditClient.from_settings()
        self.journal = JournalEntryService(db, audit=self.audit)
        self.installments = InstallmentService(db)
        self.config = SystemConfigService(db, audit=self.audit)

    # --- Lookups ---

    def _get_trip(self, assignment_id: str, bus_trip_id: str) -> BusTripLocal | None:
        return self.db.execute(
            select(BusTripLocal).where(
                BusTripLocal.assignment_id == assignment_id,
                BusTripLocal.bus_trip_id == bus_trip_id,
            )
        ).scalar_one_or_none()

    def _employee_names(self, numbers) -> dict[str, str]:
        numbers = [n for n in numbers if n]
        if not numbers:
            return {}
        employees = self.db.execute(
            select(EmployeeLocal).where(EmployeeLocal.employee_number.in_(numbers))
        ).scalars().all()
        return {e.employee_number: e.full_name for e in employees}

    def get_revenue(self, revenue_id: int) -> Revenue:
        revenue = self.db.get(Revenue, revenue_id)
        if not revenue:
            raise NotFoundError(f"Revenue {revenue_id} not found")
        return revenue

    # --- Building blocks ---

    def _create_shortage_receivables(
        self,
        trip: BusTripLocal,
        result: RemittanceResult,
        collected: Decimal,
        recorded_at: datetime,
        frequency: PaymentFrequency | None,
        number_of_payments: int | None,
    ) -> dict[EmployeeRole, Receivable]:
        if result.shortage <= ZERO:
            return {}

        config = self.config.get_config()
        shares = split_shortage(result.shortage, config)
        crew = _trip_crew(trip)
        names = self._employee_names(crew.values())
        start = recorded_at.date()
        due_date = start + timedelta(days=config.receivable_due_date_days)

        frequency = frequency or config.default_frequency
        number_of_payments = number_of_payments or config.default_number_of_payments

        receivables = {}
        for role, employee_number in crew.items():
            share = shares[role]
            if share <= ZERO:
                continue
            # At most one installment per centavo owed
            payments = min(number_of_payments, int(share / CENT))
            description = (
                f"{role.value} | {trip.assignment_type} trip shortage"
                f" - Bus: {trip.body_number or 'N/A'}"
                f" - Date: {trip.date_assigned.isoformat()}"
                f" - Expected: {_money(result.expected)}"
                f" - Collected: {_money(collected)}"
                f" - Shortage: {_money(result.shortage)}"
            )
            receivables[role] = self.installments.create_receivable(
                debtor_name=names.get(employee_number, employee_number),
                debtor_role=role,
                total_amount=share,
                frequency=frequency,
                number_of_payments=payments,
                start_date=start,
                employee_number=employee_number,
                description=description,
                due_date=due_date,
            )
        return receivables

    def _book_revenue_entry(
        self,
        revenue: Revenue,
        trip: BusTripLocal,
        receivables: dict[EmployeeRole, Receivable],
        actor: str | None,
    ) -> JournalEntry | None:
        """
        Post the remittance: debit what came in and what is owed, credit
        revenue for the sum of the debits. Zero lines are left out.
        """
        lines = []
        if revenue.amount > ZERO:
            lines.append(JournalLineCreate(
                account_code=ASSET_ACCOUNTS[revenue.payment_method],
                debit=revenue.amount,
                description=f"Remittance for trip {trip.bus_trip_id}",
            ))
        for role, receivable in receivables.items():
            if receivable.total_amount > ZERO:
                lines.append(JournalLineCreate(
                    account_code=RECEIVABLE_ACCOUNTS[role],
                    debit=receivable.total_amount,
                    description=f"{role.value.title()} shortage {receivable.code}",
                ))
        if not lines:
            logger.info("Nothing to book for %s, skipping journal entry", revenue.code)
            return None

        total = sum((line.debit for line in lines), ZERO)
        revenue_account = (
            AccountCodes.PERCENTAGE_REVENUE
            if remittance.is_percentage(trip.assignment_type)
            else AccountCodes.BOUNDARY_REVENUE
        )
        lines.append(JournalLineCreate(
            account_code=revenue_account,
            credit=total,
            description=f"{trip.assignment_type} trip revenue",
        ))

        entry = self.journal.create(
            JournalEntryCreate(
                entry_date=revenue.date_recorded.date(),
                description=(
                    f"Trip revenue {revenue.code} - Bus: {trip.body_number or 'N/A'}"
                    f" - Trip: {trip.bus_trip_id}"
                ),
                source_module=REVENUE_MODULE,
                reference_id=revenue.code,
                entry_type=JournalEntryType.AUTO_GENERATED,
                lines=lines,
            ),
            created_by=actor,
        )
        return self.journal.post(entry.id, approved_by=actor)

    def _link_receivables(
        self, revenue: Revenue, receivables: dict[EmployeeRole, Receivable]
    ) -> None:
        revenue.driver_receivable = receivables.get(EmployeeRole.DRIVER)
        revenue.conductor_receivable = receivables.get(EmployeeRole.CONDUCTOR)

    # --- Commands ---

    def create_revenue_for_trip(
        self, request: TripRevenueCreate, created_by: str | None = None
    ) -> Revenue:
        """
        Record the remittance for one cached trip.

        Raises NotFoundError if the trip is unknown, BadRequestError if
        it is deleted or already recorded, and ConflictError if another
        caller recorded it first.
        """
        trip = self._get_trip(request.assignment_id, request.bus_trip_id)
        if trip is None:
            raise NotFoundError(
                f"Bus trip {request.assignment_id}/{request.bus_trip_id} not found"
            )
        if trip.is_deleted:
            raise BadRequestError(
                f"Bus trip {trip.assignment_id}/{trip.bus_trip_id} has been deleted"
            )
        if trip.is_revenue_recorded:
            raise BadRequestError(
                f"Revenue for bus trip {trip.assignment_id}/{trip.bus_trip_id} "
                f"has already been recorded"
            )

        collected = remittance.to_decimal(trip.trip_revenue)
        result = compute_remittance(trip)
        recorded_at = request.date_recorded or utcnow()

        revenue = Revenue(
            code=next_sequential_code(self.db, Revenue.code, "REV"),
            assignment_id=trip.assignment_id,
            bus_trip_id=trip.bus_trip_id,
            amount=collected,
            date_recorded=recorded_at,
            date_expected=trip.date_assigned + timedelta(days=1),
            payment_method=remittance.normalize_payment_method(
                request.payment_method or trip.payment_method
            ),
            remittance_status=result.status,
            description=request.description,
            created_by=created_by,
        )
        self.db.add(revenue)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"Revenue for bus trip {trip.assignment_id}/{trip.bus_trip_id} "
                f"was recorded concurrently"
            ) from e

        receivables = self._create_shortage_receivables(
            trip, result, collected, recorded_at,
            request.frequency, request.number_of_payments,
        )
        self._link_receivables(revenue, receivables)

        entry = self._book_revenue_entry(revenue, trip, receivables, created_by)
        revenue.journal_entry = entry

        trip.is_revenue_recorded = True
        self.db.flush()

        logger.info(
            "Recorded %s for trip %s/%s: collected %s, expected %s, shortage %s",
            revenue.code, trip.assignment_id, trip.bus_trip_id,
            collected, result.expected, result.shortage,
        )
        self.audit.log_create(
            AUDIT_MODULE, revenue.id, revenue.code, _snapshot(revenue), created_by
        )
        return revenue

    def process_all_unsynced(self, actor: str | None = None) -> ProcessUnsyncedResponse:
        """Record every pending trip, oldest first, committing each one separately."""
        keys = self.db.execute(
            select(BusTripLocal.assignment_id, BusTripLocal.bus_trip_id)
            .where(
                BusTripLocal.is_revenue_recorded.is_(False),
                BusTripLocal.is_deleted.is_(False),
            )
            .order_by(BusTripLocal.date_assigned, BusTripLocal.id)
        ).all()

        results = []
        for assignment_id, bus_trip_id in keys:
            try:
                revenue = self.create_revenue_for_trip(
                    TripRevenueCreate(
                        assignment_id=assignment_id, bus_trip_id=bus_trip_id
                    ),
                    created_by=actor,
                )
                self.db.commit()
                results.append(TripProcessResult(
                    assignment_id=assignment_id,
                    bus_trip_id=bus_trip_id,
                    success=True,
                    revenue_id=revenue.id,
                    revenue_code=revenue.code,
                ))
            except (ServiceError, SQLAlchemyError) as e:
                self.db.rollback()
                logger.warning(
                    "Failed to record trip %s/%s: %s", assignment_id, bus_trip_id, e
                )
                results.append(TripProcessResult(
                    assignment_id=assignment_id,
                    bus_trip_id=bus_trip_id,
                    success=False,
                    error=str(e),
                ))

        processed = sum(1 for r in results if r.success)
        logger.info(
            "Processed unsynced trips: %d total, %d recorded, %d failed",
            len(results), processed, len(results) - processed,
        )
        return ProcessUnsyncedResponse(
            total=len(results),
            processed=processed,
            failed=len(results) - processed,
            results=results,
        )

    def update_revenue(
        self,
        revenue_id: int,
        request: TripRevenueUpdate,
        updated_by: str | None = None,
    ) -> Revenue:
        """
        Amend a recorded revenue.

        A new amount re-derives the status, replaces the shortage
        receivables and swaps the journal entry for a fresh one (the
        old one is reversed). New schedule terms alone regenerate the
        existing receivables. Both are refused once any receivable
        has been paid against, and a new amount is refused once the
        journal entry has been adjusted or reversed by hand.
        """
        revenue = self.get_revenue(revenue_id)
        before = _snapshot(revenue)

        amount_changed = (
            request.amount is not None and request.amount != revenue.amount
        )
        terms_changed = (
            request.frequency is not None or request.number_of_payments is not None
        )

        paid = [
            r for r in revenue.receivables if self.installments.has_payments(r)
        ]
        if (amount_changed or terms_changed) and paid:
            action = "change amount" if amount_changed else "regenerate schedules"
            raise ConflictError(
                f"Cannot {action} after payments have been made "
                f"({', '.join(r.code for r in paid)})"
            )

        old_entry = revenue.journal_entry
        if amount_changed and old_entry is not None and old_entry.status not in (
            JournalStatus.DRAFT, JournalStatus.POSTED,
        ):
            raise ConflictError(
                f"Cannot change amount of {revenue.code}: journal entry "
                f"{old_entry.code} is {old_entry.status.value}"
            )

        if request.date_recorded is not None:
            revenue.date_recorded = request.date_recorded
        if request.description is not None:
            revenue.description = request.description

        if amount_changed:
            self._rebuild(revenue, request, updated_by)
        elif terms_changed:
            for receivable in revenue.receivables:
                self.installments.regenerate_schedule(
                    receivable.id,
                    request.number_of_payments or receivable.number_of_payments,
                    request.frequency or receivable.frequency,
                )

        self.db.flush()
        self.audit.log_update(
            AUDIT_MODULE, revenue.id, revenue.code, before, _snapshot(revenue),
            updated_by,
        )
        return revenue

    def _rebuild(
        self, revenue: Revenue, request: TripRevenueUpdate, actor: str | None
    ) -> None:
        trip = self._get_trip(revenue.assignment_id, revenue.bus_trip_id)
        if trip is None:
            raise NotFoundError(
                f"Bus trip {revenue.assignment_id}/{revenue.bus_trip_id} not found"
            )

        old_terms = next(iter(revenue.receivables), None)
        frequency = request.frequency or (old_terms.frequency if old_terms else None)
        number_of_payments = request.number_of_payments or (
            old_terms.number_of_payments if old_terms else None
        )

        old_receivables = revenue.receivables
        self._link_receivables(revenue, {})
        self.db.flush()
        for receivable in old_receivables:
            self.installments.delete_receivable(receivable, deleted_by=actor)

        old_entry = revenue.journal_entry
        if old_entry is not None:
            reason = f"Amount of {revenue.code} changed to {request.amount}"
            if old_entry.status == JournalStatus.POSTED:
                reversal = self.journal.create_reversal(
                    old_entry.id, reason, created_by=actor
                )
                self.journal.post(reversal.id, approved_by=actor)
            elif old_entry.status == JournalStatus.DRAFT:
                self.journal.delete(old_entry.id, deleted_by=actor, reason=reason)
            revenue.journal_entry = None

        revenue.amount = request.amount
        result = compute_remittance(trip, request.amount)
        revenue.remittance_status = result.status

        receivables = self._create_shortage_receivables(
            trip, result, request.amount, revenue.date_recorded,
            frequency, number_of_payments,
        )
        self._link_receivables(revenue, receivables)
        revenue.journal_entry = self._book_revenue_entry(
            revenue, trip, receivables, actor
        )
        logger.info(
            "Rebuilt %s for amount %s (%s)",
            revenue.code, request.amount, result.status.value,
        )

    def record_receivable_payment(
        self,
        installment_id: int,
        request: ReceivablePaymentCreate,
        created_by: str | None = None,
    ) -> tuple[PaymentApplication, JournalEntry]:
        """
        Apply a crew payment to a shortage receivable and book it.

        The journal entry debits the asset account for the payment
        method and credits the debtor's receivable account; every
        payment row created by the cascade points at it.
        """
        installment = self.installments.get_installment(installment_id)
        receivable = installment.receivable
        revenue = self.db.execute(
            select(Revenue).where(
                or_(
                    Revenue.driver_receivable_id == receivable.id,
                    Revenue.conductor_receivable_id == receivable.id,
                )
            )
        ).scalar_one_or_none()

        method = remittance.normalize_payment_method(request.payment_method)
        payment_date = request.payment_date or date.today()
        application = self.installments.apply_payment(
            installment_id,
            request.amount,
            payment_date,
            method,
            revenue_id=revenue.id if revenue else None,
            reference_number=request.reference_number,
            created_by=created_by,
        )

        amount = application.total_applied
        source_code = revenue.code if revenue else receivable.code
        entry = self.journal.create(
            JournalEntryCreate(
                entry_date=payment_date,
                description=(
                    f"Payment on {receivable.code} by {receivable.debtor_name}"
                ),
                source_module=PAYMENT_MODULE,
                reference_id=f"{source_code}-PAY-{application.payments[0].id}",
                entry_type=JournalEntryType.AUTO_GENERATED,
                lines=[
                    JournalLineCreate(
                        account_code=ASSET_ACCOUNTS[method],
                        debit=amount,
                        description=f"{method.value} payment",
                    ),
                    JournalLineCreate(
                        account_code=RECEIVABLE_ACCOUNTS[receivable.debtor_role],
                        credit=amount,
                        description=f"Settle {receivable.code}",
                    ),
                ],
            ),
            created_by=created_by,
        )
        entry = self.journal.post(entry.id, approved_by=created_by)

        for payment in application.payments:
            payment.journal_entry_id = entry.id
        self.db.flush()
        return application, entry

    # --- Queries ---

    def list_revenues(self, query: RevenueQuery) -> tuple[list[Revenue], int]:
        stmt = select(Revenue).join(
            BusTripLocal,
            and_(
                BusTripLocal.assignment_id == Revenue.assignment_id,
                BusTripLocal.bus_trip_id == Revenue.bus_trip_id,
            ),
        )

        if query.date_assigned_from:
            stmt = stmt.where(BusTripLocal.date_assigned >= query.date_assigned_from)
        if query.date_assigned_to:
            stmt = stmt.where(BusTripLocal.date_assigned <= query.date_assigned_to)
        if query.date_recorded_from:
            stmt = stmt.where(
                Revenue.date_recorded
                >= datetime.combine(query.date_recorded_from, time.min)
            )
        if query.date_recorded_to:
            stmt = stmt.where(
                Revenue.date_recorded
                < datetime.combine(query.date_recorded_to + timedelta(days=1), time.min)
            )
        if query.assignment_type:
            stmt = stmt.where(
                BusTripLocal.assignment_type == query.assignment_type.upper()
            )
        if query.remittance_status:
            stmt = stmt.where(Revenue.remittance_status == query.remittance_status)
        if query.trip_revenue_min is not None:
            stmt = stmt.where(BusTripLocal.trip_revenue >= query.trip_revenue_min)
        if query.trip_revenue_max is not None:
            stmt = stmt.where(BusTripLocal.trip_revenue <= query.trip_revenue_max)
        if query.search:
            pattern = f"%{query.search}%"
            stmt = stmt.where(or_(
                Revenue.code.ilike(pattern),
                BusTripLocal.body_number.ilike(pattern),
            ))

        column = SORT_COLUMNS[query.sort_by]
        order = column.asc() if query.sort_order == "asc" else column.desc()
        stmt = stmt.order_by(order, Revenue.id.desc())
        return paginate(self.db, stmt, query.page, query.limit)

    def get_revenue_detail(self, revenue_id: int) -> RevenueDetailResponse:
        """The revenue with its trip, crew, computation, receivables and entry."""
        revenue = self.get_revenue(revenue_id)
        detail = RevenueDetailResponse(
            **RevenueResponse.model_validate(revenue).model_dump()
        )
        if revenue.journal_entry is not None:
            detail.journal_entry = JournalEntrySummary.model_validate(
                revenue.journal_entry
            )

        trip = self._get_trip(revenue.assignment_id, revenue.bus_trip_id)
        if trip is None:
            return detail

        bus = None
        if trip.bus_id is not None:
            bus = self.db.execute(
                select(BusLocal).where(BusLocal.bus_id == trip.bus_id)
            ).scalar_one_or_none()
        detail.bus_details = BusDetails(
            bus_id=trip.bus_id,
            body_number=trip.body_number or (bus.body_number if bus else None),
            license_plate=trip.bus_plate_number or (
                bus.license_plate if bus else None
            ),
            bus_type=trip.bus_type or (bus.bus_type if bus else None),
            bus_route=trip.bus_route,
            date_assigned=trip.date_assigned,
        )

        crew = _trip_crew(trip)
        names = self._employee_names(crew.values())
        detail.employees = [
            EmployeeSummary(
                employee_number=number,
                name=names.get(number),
                role=role.value,
            )
            for role, number in crew.items()
        ]

        result = compute_remittance(trip, revenue.amount)
        detail.remittance = RemittanceBreakdown(
            assignment_type=trip.assignment_type,
            assignment_value=trip.assignment_value,
            trip_revenue=revenue.amount,
            fuel_expense=trip.trip_fuel_expense,
            company_share=result.company_share,
            expected_remittance=result.expected,
            shortage=result.shortage,
            remittance_status=revenue.remittance_status,
        )

        if revenue.remittance_status == RemittanceStatus.PARTIALLY_PAID:
            detail.shortage_details = ShortageDetails(
                shortage=result.shortage,
                driver_share=(
                    revenue.driver_receivable.total_amount
                    if revenue.driver_receivable else ZERO
                ),
                conductor_share=(
                    revenue.conductor_receivable.total_amount
                    if revenue.conductor_receivable else ZERO
                ),
                receivables=[
                    ReceivableResponse.model_validate(r)
                    for r in revenue.receivables
                ],
            )
        return detail

    def list_unsynced_trips(self, query: UnsyncedTripQuery) -> list[BusTripLocal]:
        """Cached trips still waiting for their revenue to be recorded."""
        stmt = select(BusTripLocal).where(
            BusTripLocal.is_revenue_recorded.is_(False),
            BusTripLocal.is_deleted.is_(False),
        )
        if query.date_from:
            stmt = stmt.where(BusTripLocal.date_assigned >= query.date_from)
        if query.date_to:
            stmt = stmt.where(BusTripLocal.date_assigned <= query.date_to)
        if query.assignment_type:
            stmt = stmt.where(
                BusTripLocal.assignment_type == query.assignment_type.upper()
            )
        if query.search:
            pattern = f"%{query.search}%"
            stmt = stmt.where(or_(
                BusTripLocal.body_number.ilike(pattern),
                BusTripLocal.bus_route.ilike(pattern),
                BusTripLocal.assignment_id.ilike(pattern),
            ))
        stmt = stmt.order_by(BusTripLocal.date_assigned, BusTripLocal.id)
        return list(self.db.execute(stmt).scalars().all())
