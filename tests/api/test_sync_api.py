"""
Tests for the external sync endpoint.

The upstream systems are replaced with an httpx.MockTransport so the
real client code parses, unwraps and retries against canned payloads.
"""

import threading

import httpx
import pytest

from trip_ledger.api.sync import get_sync_service
from trip_ledger.integrations.external_client import ExternalDataClient
from trip_ledger.main import app
from trip_ledger.services.sync_service import SyncService
from trip_ledger.services.trip_revenue_service import TripRevenueService

EMPLOYEES = {"employees": [
    {"employeeNumber": "EMP-001", "firstName": "Juan", "lastName": "Dela Cruz"},
    {"employeeNumber": "EMP-002", "firstName": "Pedro", "lastName": "Santos"},
]}
BUSES = {"data": [{"id": 1, "license_plate": "ABC-1234", "body_number": "BUS-001"}]}
RENTALS = []
TRIPS = {"data": [{
    "assignment_id": "ASG-100",
    "bus_trip_id": "TRIP-100",
    "date_assigned": "2026-03-10",
    "trip_revenue": 2300,
    "trip_fuel_expense": 500,
    "assignment_type": "Boundary",
    "assignment_value": 2000,
    "payment_method": "Company_Cash",
    "bus_id": 1,
    "body_number": "BUS-001",
    "employee_driver": {"employee_id": "EMP-001"},
    "employee_conductor": {"employee_id": "EMP-002"},
}]}


def upstream(broken=()):
    routes = {
        "hr.test": EMPLOYEES,
        "inventory.test": BUSES,
        "rentals.test": RENTALS,
        "trips.test": TRIPS,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host in broken:
            return httpx.Response(503)
        return httpx.Response(200, json=routes[host])

    return httpx.MockTransport(handler)


class ThreadRecordingClient(ExternalDataClient):
    fetch_thread = None

    async def fetch_all(self):
        self.fetch_thread = threading.get_ident()
        return await super().fetch_all()


class ThreadRecordingSyncService(SyncService):
    apply_thread = None

    def apply_snapshot(self, snapshot, started=None):
        self.apply_thread = threading.get_ident()
        return super().apply_snapshot(snapshot, started)


@pytest.fixture
def use_upstream(db_session):
    def _use(client_class=ExternalDataClient, service_class=SyncService, **kwargs):
        client = client_class(
            employees_url="http://hr.test/employees",
            buses_url="http://inventory.test/buses",
            rentals_url="http://rentals.test/rentals",
            trips_url="http://trips.test/trips",
            max_retries=1,
            backoff_base=0,
            transport=upstream(**kwargs),
        )
        service = service_class(db_session, client=client)
        app.dependency_overrides[get_sync_service] = lambda: service
        return service
    return _use


class TestSyncEndpoint:

    def test_full_sync_returns_200_and_records_trips(
        self, client, system_accounts, use_upstream
    ):
        use_upstream()

        response = client.post("/sync/external", headers={"X-User-Id": "scheduler"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["employees"]["inserted"] == 2
        assert data["bus_trips"]["inserted"] == 1
        assert data["revenue_processing"]["processed"] == 1

        revenues = client.get("/trip-revenues").json()
        assert revenues["total"] == 1
        assert revenues["data"][0]["created_by"] == "scheduler"

    def test_partial_failure_returns_207(self, client, system_accounts, use_upstream):
        use_upstream(broken=("inventory.test",))

        response = client.post("/sync/external")

        assert response.status_code == 207
        data = response.json()
        assert data["success"] is False
        assert data["buses"]["success"] is False
        assert data["employees"]["success"] is True
        assert data["bus_trips"]["success"] is True

    def test_resync_is_idempotent(self, client, system_accounts, use_upstream):
        use_upstream()
        client.post("/sync/external")

        data = client.post("/sync/external").json()

        assert data["bus_trips"]["inserted"] == 0
        assert data["bus_trips"]["updated"] == 1
        assert data["revenue_processing"]["total"] == 0

    def test_database_work_runs_off_the_event_loop(
        self, client, system_accounts, use_upstream, monkeypatch
    ):
        service = use_upstream(
            client_class=ThreadRecordingClient,
            service_class=ThreadRecordingSyncService,
        )
        revenue_threads = []
        process_all_unsynced = TripRevenueService.process_all_unsynced

        def recording_process(self, actor=None):
            revenue_threads.append(threading.get_ident())
            return process_all_unsynced(self, actor=actor)

        monkeypatch.setattr(
            TripRevenueService, "process_all_unsynced", recording_process
        )

        response = client.post("/sync/external")

        assert response.status_code == 200
        loop_thread = service.client.fetch_thread
        assert loop_thread is not None
        assert service.apply_thread not in (None, loop_thread)
        assert len(revenue_threads) == 1
        assert revenue_threads[0] != loop_thread
