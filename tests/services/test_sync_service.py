"""
Tests for the SyncService.

Table syncs are exercised directly with parsed records; the full
sync runs against a stub client that returns a canned snapshot.
"""

from datetime import date
from decimal import Decimal

import pytest

from trip_ledger.integrations.external_client import ExternalSnapshot, FetchResult
from trip_ledger.models.external import (
    BusLocal,
    BusTripLocal,
    EmployeeLocal,
    RentalLocal,
)
from trip_ledger.schemas.external import (
    ExternalBus,
    ExternalBusTrip,
    ExternalEmployee,
    ExternalRental,
)
from trip_ledger.services.sync_service import SyncService


def employee(number, first="Juan", last="Dela Cruz", **extra):
    return ExternalEmployee.model_validate({
        "employeeNumber": number, "firstName": first, "lastName": last, **extra,
    })


def bus(bus_id, body_number="BUS-001"):
    return ExternalBus(id=bus_id, license_plate=f"PLT-{bus_id}", body_number=body_number)


def trip(assignment_id="ASG-1", bus_trip_id="TRIP-1", **extra):
    values = {
        "assignment_id": assignment_id,
        "bus_trip_id": bus_trip_id,
        "date_assigned": "2026-03-10",
        "trip_revenue": "2300",
        "trip_fuel_expense": "500",
        "assignment_type": "boundary",
        "assignment_value": "2000",
        "bus_id": 1,
        "employee_driver": {"employee_id": "EMP-001"},
        "employee_conductor": {"employee_id": "EMP-404"},
    }
    values.update(extra)
    return ExternalBusTrip.model_validate(values)


def rental(assignment_id="RNT-1", crew=("EMP-001",), **extra):
    values = {
        "assignment_id": assignment_id,
        "bus_id": 1,
        "rental_status": "approved",
        "rental_details": {"total_rental_amount": "15000"},
        "employees": [
            {"employee_id": n, "employee_position_name": "Driver"} for n in crew
        ],
    }
    values.update(extra)
    return ExternalRental.model_validate(values)


class StubClient:
    def __init__(self, snapshot):
        self.snapshot = snapshot

    async def fetch_all(self):
        return self.snapshot


class TestSyncEmployees:

    def test_insert_then_update(self, db_session):
        service = SyncService(db_session, client=StubClient(None))

        first = service.sync_employees([employee("EMP-001")])
        second = service.sync_employees([employee("EMP-001", first="Jose")])

        assert first.inserted == 1
        assert second.updated == 1
        row = db_session.query(EmployeeLocal).one()
        assert row.first_name == "Jose"

    def test_missing_rows_are_soft_deleted_and_revived(self, db_session):
        service = SyncService(db_session, client=StubClient(None))
        service.sync_employees([employee("EMP-001"), employee("EMP-002")])

        result = service.sync_employees([employee("EMP-001")])
        gone = db_session.query(EmployeeLocal).filter_by(employee_number="EMP-002").one()
        assert result.soft_deleted == 1
        assert gone.is_deleted is True

        service.sync_employees([employee("EMP-001"), employee("EMP-002")])
        assert gone.is_deleted is False


class TestSyncBusTrips:

    def test_links_only_known_buses_and_employees(self, db_session):
        service = SyncService(db_session, client=StubClient(None))
        service.sync_employees([employee("EMP-001")])
        service.sync_buses([bus(1)])

        result = service.sync_bus_trips([trip(), trip(bus_trip_id="TRIP-2", bus_id=99)])

        assert result.inserted == 2
        first, second = db_session.query(BusTripLocal).order_by(BusTripLocal.bus_trip_id).all()
        assert first.bus_id == 1
        assert first.driver_employee_number == "EMP-001"
        assert first.conductor_employee_number is None
        assert first.assignment_type == "BOUNDARY"
        assert second.bus_id is None

    def test_revenue_flag_survives_resync(self, db_session):
        service = SyncService(db_session, client=StubClient(None))
        service.sync_bus_trips([trip()])
        row = db_session.query(BusTripLocal).one()
        row.is_revenue_recorded = True
        db_session.commit()

        service.sync_bus_trips([trip(is_revenue_recorded=False, trip_revenue="2400")])

        assert row.is_revenue_recorded is True
        assert row.trip_revenue == Decimal("2400")

    def test_recorded_trip_dropped_upstream_keeps_its_flag(self, db_session):
        service = SyncService(db_session, client=StubClient(None))
        service.sync_bus_trips([trip(), trip(bus_trip_id="TRIP-2")])
        recorded = db_session.query(BusTripLocal).filter_by(bus_trip_id="TRIP-1").one()
        recorded.is_revenue_recorded = True
        db_session.commit()

        result = service.sync_bus_trips([trip(bus_trip_id="TRIP-2")])

        assert result.soft_deleted == 1
        assert db_session.query(BusTripLocal).count() == 2
        assert recorded.is_deleted is True
        assert recorded.is_revenue_recorded is True

    def test_upstream_flag_is_merged(self, db_session):
        service = SyncService(db_session, client=StubClient(None))
        service.sync_bus_trips([trip()])
        service.sync_bus_trips([trip(is_revenue_recorded=True)])
        assert db_session.query(BusTripLocal).one().is_revenue_recorded is True


class TestSyncRentals:

    def test_crew_is_replaced(self, db_session):
        service = SyncService(db_session, client=StubClient(None))
        service.sync_employees([employee("EMP-001"), employee("EMP-002")])
        service.sync_buses([bus(1)])
        service.sync_rentals([rental(crew=("EMP-001", "EMP-999"))])

        row = db_session.query(RentalLocal).one()
        assert [e.employee_number for e in row.employees] == ["EMP-001"]
        assert row.total_rental_amount == Decimal("15000")

        service.sync_rentals([rental(crew=("EMP-002",))])
        db_session.refresh(row)
        assert [e.employee_number for e in row.employees] == ["EMP-002"]


class TestFullSync:

    @pytest.mark.asyncio
    async def test_all_tables_applied_in_order(self, db_session):
        snapshot = ExternalSnapshot(
            employees=FetchResult("employee_local", [employee("EMP-001")]),
            buses=FetchResult("bus_local", [bus(1)]),
            rentals=FetchResult("rental_local", [rental()]),
            trips=FetchResult("bus_trip_local", [trip()]),
        )
        service = SyncService(db_session, client=StubClient(snapshot))

        result = await service.run_full_sync()

        assert result.success is True
        assert result.employees.inserted == 1
        assert result.bus_trips.inserted == 1
        trip_row = db_session.query(BusTripLocal).one()
        assert trip_row.driver_employee_number == "EMP-001"
        assert trip_row.bus_id == 1

    @pytest.mark.asyncio
    async def test_failed_fetch_deletes_nothing(self, db_session):
        db_session.add(BusLocal(bus_id=1, license_plate="PLT-1", body_number="BUS-001"))
        db_session.commit()
        snapshot = ExternalSnapshot(
            employees=FetchResult("employee_local", []),
            buses=FetchResult("bus_local", error="HTTP 503 from inventory"),
            rentals=FetchResult("rental_local", []),
            trips=FetchResult("bus_trip_local", []),
        )
        service = SyncService(db_session, client=StubClient(snapshot))

        result = await service.run_full_sync()

        assert result.success is False
        assert result.buses.success is False
        assert result.buses.errors == ["HTTP 503 from inventory"]
        assert result.employees.success is True
        assert db_session.query(BusLocal).one().is_deleted is False
