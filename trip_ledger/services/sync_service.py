"""
Sync service — mirrors upstream systems into the local cache tables.

Every table is upserted by its natural key and committed on its own,
so one failing upstream never rolls back the others. Rows missing
from a successful fetch are soft-deleted; a failed fetch deletes
nothing. Tables are applied in dependency order (employees, buses,
rentals, trips) because trips and rentals link to the first two.

The revenue flags on trips and rentals belong to this service, not
to the upstream: once set they stay set across every re-sync.
"""

import logging
import time

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from trip_ledger.integrations.external_client import (
    ExternalDataClient,
    ExternalSnapshot,
    FetchResult,
)
from trip_ledger.models.base import utcnow
from trip_ledger.models.external import (
    BusLocal,
    BusTripLocal,
    EmployeeLocal,
    RentalEmployeeLocal,
    RentalLocal,
)
from trip_ledger.schemas.external import (
    ExternalBus,
    ExternalBusTrip,
    ExternalEmployee,
    ExternalRental,
)
from trip_ledger.schemas.sync import FullSyncResponse, TableSyncResult

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class SyncService:

    def __init__(self, db: Session, client: ExternalDataClient | None = None):
        self.db = db
        self.client = client or ExternalDataClient.from_settings()

    # --- Helpers ---

    def _known_employees(self) -> set[str]:
        return set(self.db.execute(
            select(EmployeeLocal.employee_number)
        ).scalars().all())

    def _known_buses(self) -> set[int]:
        return set(self.db.execute(select(BusLocal.bus_id)).scalars().all())

    def _run(self, table: str, apply) -> TableSyncResult:
        """Apply one table's changes and commit, or roll back and report."""
        started = time.perf_counter()
        result = TableSyncResult(success=True, table=table)
        try:
            apply(result)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Sync of %s failed: %s", table, e)
            result = TableSyncResult(success=False, table=table, errors=[str(e)])
        result.duration_ms = _elapsed_ms(started)
        logger.info(
            "Synced %s: %d inserted, %d updated, %d soft deleted",
            table, result.inserted, result.updated, result.soft_deleted,
        )
        return result

    def _soft_delete_missing(self, rows, seen: set, key, result: TableSyncResult):
        now = utcnow()
        for row in rows:
            if key(row) not in seen and not row.is_deleted:
                row.is_deleted = True
                row.last_synced_at = now
                result.soft_deleted += 1

    # --- Tables ---

    def sync_employees(self, records: list[ExternalEmployee]) -> TableSyncResult:
        def apply(result: TableSyncResult):
            existing = {
                e.employee_number: e
                for e in self.db.execute(select(EmployeeLocal)).scalars().all()
            }
            now = utcnow()
            seen = set()
            for record in records:
                seen.add(record.employee_number)
                values = dict(
                    first_name=record.first_name,
                    middle_name=record.middle_name,
                    last_name=record.last_name,
                    phone=record.phone,
                    position=record.position,
                    barangay=record.barangay,
                    zip_code=record.zip_code,
                    department_id=record.department_id,
                    department=record.department,
                    is_deleted=False,
                    last_synced_at=now,
                )
                row = existing.get(record.employee_number)
                if row is None:
                    self.db.add(EmployeeLocal(
                        employee_number=record.employee_number, **values
                    ))
                    result.inserted += 1
                else:
                    for name, value in values.items():
                        setattr(row, name, value)
                    result.updated += 1
            self._soft_delete_missing(
                existing.values(), seen, lambda r: r.employee_number, result
            )

        return self._run("employee_local", apply)

    def sync_buses(self, records: list[ExternalBus]) -> TableSyncResult:
        def apply(result: TableSyncResult):
            existing = {
                b.bus_id: b
                for b in self.db.execute(select(BusLocal)).scalars().all()
            }
            now = utcnow()
            seen = set()
            for record in records:
                seen.add(record.id)
                values = dict(
                    license_plate=record.license_plate,
                    body_number=record.body_number,
                    bus_type=record.type,
                    capacity=record.capacity,
                    is_deleted=False,
                    last_synced_at=now,
                )
                row = existing.get(record.id)
                if row is None:
                    self.db.add(BusLocal(bus_id=record.id, **values))
                    result.inserted += 1
                else:
                    for name, value in values.items():
                        setattr(row, name, value)
                    result.updated += 1
            self._soft_delete_missing(
                existing.values(), seen, lambda r: r.bus_id, result
            )

        return self._run("bus_local", apply)

    def sync_rentals(self, records: list[ExternalRental]) -> TableSyncResult:
        def apply(result: TableSyncResult):
            existing = {
                r.assignment_id: r
                for r in self.db.execute(select(RentalLocal)).scalars().all()
            }
            employees = self._known_employees()
            buses = self._known_buses()
            now = utcnow()
            seen = set()
            for record in records:
                seen.add(record.assignment_id)
                details = record.rental_details
                values = dict(
                    bus_id=record.bus_id if record.bus_id in buses else None,
                    body_number=record.body_number,
                    rental_status=record.rental_status,
                    rental_package=details.rental_package,
                    rental_start_date=details.rental_start_date,
                    rental_end_date=details.rental_end_date,
                    total_rental_amount=details.total_rental_amount,
                    down_payment_amount=details.down_payment_amount,
                    balance_amount=details.balance_amount,
                    cancelled_at=(
                        details.cancelled_at.replace(tzinfo=None)
                        if details.cancelled_at else None
                    ),
                    cancellation_reason=details.cancellation_reason,
                    is_deleted=False,
                    last_synced_at=now,
                )
                row = existing.get(record.assignment_id)
                if row is None:
                    row = RentalLocal(
                        assignment_id=record.assignment_id,
                        is_revenue_recorded=record.is_revenue_recorded,
                        is_expense_recorded=record.is_expense_recorded,
                        **values,
                    )
                    self.db.add(row)
                    result.inserted += 1
                else:
                    for name, value in values.items():
                        setattr(row, name, value)
                    row.is_revenue_recorded = (
                        row.is_revenue_recorded or record.is_revenue_recorded
                    )
                    row.is_expense_recorded = (
                        row.is_expense_recorded or record.is_expense_recorded
                    )
                    result.updated += 1

                crew = {
                    m.employee_id: m.employee_position_name
                    for m in record.employees
                    if m.employee_id in employees
                }
                for child in list(row.employees):
                    if child.employee_number not in crew:
                        row.employees.remove(child)
                    else:
                        child.position = crew.pop(child.employee_number)
                for employee_number, position in crew.items():
                    row.employees.append(RentalEmployeeLocal(
                        employee_number=employee_number, position=position
                    ))
            self._soft_delete_missing(
                existing.values(), seen, lambda r: r.assignment_id, result
            )

        return self._run("rental_local", apply)

    def sync_bus_trips(self, records: list[ExternalBusTrip]) -> TableSyncResult:
        def apply(result: TableSyncResult):
            existing = {
                (t.assignment_id, t.bus_trip_id): t
                for t in self.db.execute(select(BusTripLocal)).scalars().all()
            }
            employees = self._known_employees()
            buses = self._known_buses()
            now = utcnow()
            seen = set()
            for record in records:
                key = (record.assignment_id, record.bus_trip_id)
                seen.add(key)
                driver = record.employee_driver
                conductor = record.employee_conductor
                values = dict(
                    bus_route=record.bus_route,
                    date_assigned=record.date_assigned,
                    trip_revenue=record.trip_revenue,
                    trip_fuel_expense=record.trip_fuel_expense,
                    assignment_type=record.assignment_type.upper(),
                    assignment_value=record.assignment_value,
                    payment_method=record.payment_method,
                    bus_id=record.bus_id if record.bus_id in buses else None,
                    body_number=record.body_number,
                    bus_plate_number=record.bus_plate_number,
                    bus_type=record.bus_type,
                    driver_employee_number=(
                        driver.employee_id
                        if driver and driver.employee_id in employees else None
                    ),
                    conductor_employee_number=(
                        conductor.employee_id
                        if conductor and conductor.employee_id in employees
                        else None
                    ),
                    is_deleted=False,
                    last_synced_at=now,
                )
                row = existing.get(key)
                if row is None:
                    self.db.add(BusTripLocal(
                        assignment_id=record.assignment_id,
                        bus_trip_id=record.bus_trip_id,
                        is_revenue_recorded=record.is_revenue_recorded,
                        is_expense_recorded=record.is_expense_recorded,
                        **values,
                    ))
                    result.inserted += 1
                else:
                    for name, value in values.items():
                        setattr(row, name, value)
                    row.is_revenue_recorded = (
                        row.is_revenue_recorded or record.is_revenue_recorded
                    )
                    row.is_expense_recorded = (
                        row.is_expense_recorded or record.is_expense_recorded
                    )
                    result.updated += 1
            self._soft_delete_missing(
                existing.values(), seen,
                lambda r: (r.assignment_id, r.bus_trip_id), result,
            )

        return self._run("bus_trip_local", apply)

    # --- Orchestration ---

    def _apply(self, fetched: FetchResult, sync) -> TableSyncResult:
        if not fetched.ok:
            return TableSyncResult(
                success=False, table=fetched.table, errors=[fetched.error]
            )
        return sync(fetched.records)

    def apply_snapshot(
        self, snapshot: ExternalSnapshot, started: float | None = None
    ) -> FullSyncResponse:
        """Apply fetched tables in dependency order, committing each one."""
        started = started or time.perf_counter()
        employees = self._apply(snapshot.employees, self.sync_employees)
        buses = self._apply(snapshot.buses, self.sync_buses)
        rentals = self._apply(snapshot.rentals, self.sync_rentals)
        bus_trips = self._apply(snapshot.trips, self.sync_bus_trips)

        results = (employees, buses, rentals, bus_trips)
        success = all(r.success for r in results)
        if not success:
            logger.warning(
                "External sync finished with failures: %s",
                ", ".join(r.table for r in results if not r.success),
            )
        return FullSyncResponse(
            success=success,
            duration_ms=_elapsed_ms(started),
            employees=employees,
            buses=buses,
            rentals=rentals,
            bus_trips=bus_trips,
        )

    async def run_full_sync(self) -> FullSyncResponse:
        """Fetch every upstream concurrently, then apply them in order."""
        started = time.perf_counter()
        snapshot = await self.client.fetch_all()
        return self.apply_snapshot(snapshot, started)
