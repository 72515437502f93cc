"""
Tests for the upstream data client.

HTTP is mocked with respx so the real httpx.AsyncClient code path,
retries included, is exercised. Backoff is zeroed to keep the suite fast.
"""

from datetime import date

import httpx
import pytest
import respx

from trip_ledger.integrations.external_client import (
    ExternalDataClient,
    ExternalFetchError,
)

HR = "http://hr.test/api/employees"
BUSES = "http://inventory.test/api/buses"
RENTALS = "http://ops.test/api/rentals"
TRIPS = "http://ops.test/api/trips"
PAYROLL = "http://hr.test/api/payroll"

TRIP = {
    "assignment_id": "ASG-1",
    "bus_trip_id": "TRIP-1",
    "date_assigned": "2026-03-10",
    "assignment_type": "BOUNDARY",
}


def make_client(**kwargs):
    values = dict(
        employees_url=HR,
        buses_url=BUSES,
        rentals_url=RENTALS,
        trips_url=TRIPS,
        payroll_url=PAYROLL,
        max_retries=3,
        backoff_base=0,
    )
    values.update(kwargs)
    return ExternalDataClient(**values)


class TestBackoff:

    def test_delay_doubles_and_caps(self):
        client = make_client(backoff_base=1.0, backoff_max=5.0)
        assert [client.backoff_delay(n) for n in range(4)] == [1.0, 2.0, 4.0, 5.0]


class TestFetchWithRetry:

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_server_errors_then_succeeds(self):
        route = respx.get(TRIPS).mock(side_effect=[
            httpx.Response(502),
            httpx.Response(503),
            httpx.Response(200, json=[TRIP]),
        ])
        client = make_client()

        async with httpx.AsyncClient() as http:
            payload = await client.fetch_with_retry(http, TRIPS)

        assert payload == [TRIP]
        assert route.call_count == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_network_errors(self):
        route = respx.get(TRIPS).mock(side_effect=[
            httpx.ConnectError("refused"),
            httpx.Response(200, json=[]),
        ])
        async with httpx.AsyncClient() as http:
            assert await make_client().fetch_with_retry(http, TRIPS) == []
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_client_error_is_not_retried(self):
        route = respx.get(TRIPS).mock(return_value=httpx.Response(404))

        async with httpx.AsyncClient() as http:
            with pytest.raises(ExternalFetchError, match="HTTP 404"):
                await make_client().fetch_with_retry(http, TRIPS)
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_gives_up_after_max_retries(self):
        route = respx.get(TRIPS).mock(return_value=httpx.Response(500))

        async with httpx.AsyncClient() as http:
            with pytest.raises(ExternalFetchError, match="after 3 attempts"):
                await make_client().fetch_with_retry(http, TRIPS)
        assert route.call_count == 3

    @pytest.mark.asyncio
    async def test_unconfigured_url(self):
        async with httpx.AsyncClient() as http:
            with pytest.raises(ExternalFetchError, match="not configured"):
                await make_client().fetch_with_retry(http, "")


class TestFetchAll:

    @pytest.mark.asyncio
    @respx.mock
    async def test_unwraps_each_upstream_shape(self):
        respx.get(HR).mock(return_value=httpx.Response(200, json={"employees": [
            {"employeeNumber": "EMP-001", "firstName": "Juan", "lastName": "Dela Cruz"},
        ]}))
        respx.get(BUSES).mock(return_value=httpx.Response(200, json={"buses": [
            {"id": 1, "license_plate": "ABC-1234", "body_number": "BUS-001"},
        ]}))
        respx.get(RENTALS).mock(return_value=httpx.Response(200, json={"data": []}))
        respx.get(TRIPS).mock(return_value=httpx.Response(200, json=[TRIP]))

        snapshot = await make_client().fetch_all()

        assert snapshot.employees.ok
        assert snapshot.employees.records[0].employee_number == "EMP-001"
        assert snapshot.buses.records[0].body_number == "BUS-001"
        assert snapshot.rentals.records == []
        assert snapshot.trips.records[0].bus_trip_id == "TRIP-1"

    @pytest.mark.asyncio
    @respx.mock
    async def test_one_failure_does_not_lose_the_others(self):
        respx.get(HR).mock(return_value=httpx.Response(200, json=[]))
        respx.get(BUSES).mock(return_value=httpx.Response(200, json={"unexpected": 1}))
        respx.get(RENTALS).mock(return_value=httpx.Response(401))
        respx.get(TRIPS).mock(return_value=httpx.Response(200, json=[TRIP]))

        snapshot = await make_client().fetch_all()

        assert snapshot.employees.ok
        assert not snapshot.buses.ok
        assert "Expected a list" in snapshot.buses.error
        assert not snapshot.rentals.ok
        assert snapshot.trips.ok

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_record_fails_the_table(self):
        respx.get(HR).mock(return_value=httpx.Response(200, json=[]))
        respx.get(BUSES).mock(return_value=httpx.Response(200, json=[]))
        respx.get(RENTALS).mock(return_value=httpx.Response(200, json=[]))
        respx.get(TRIPS).mock(return_value=httpx.Response(200, json=[{"bus_trip_id": "X"}]))

        snapshot = await make_client().fetch_all()

        assert not snapshot.trips.ok
        assert snapshot.trips.table == "bus_trip_local"


class TestFetchPayroll:

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_period_and_parses_payload(self):
        route = respx.get(PAYROLL).mock(return_value=httpx.Response(200, json={
            "payroll_period_start": "2026-03-01",
            "payroll_period_end": "2026-03-15",
            "employees": [{
                "employee_number": "EMP-001",
                "basic_rate": "600",
                "attendances": [{"date": "2026-03-02", "status": "Present"}],
            }],
        }))

        employees = await make_client().fetch_payroll(
            date(2026, 3, 1), date(2026, 3, 15), employee_number="EMP-001"
        )

        params = route.calls.last.request.url.params
        assert params["payroll_period_start"] == "2026-03-01"
        assert params["payroll_period_end"] == "2026-03-15"
        assert params["employee_number"] == "EMP-001"
        assert employees[0].attendances[0].attendance_date == date(2026, 3, 2)

    @pytest.mark.asyncio
    @respx.mock
    async def test_accepts_wrapped_list(self):
        respx.get(PAYROLL).mock(return_value=httpx.Response(
            200, json={"data": [{"employee_number": "EMP-001"}]}
        ))
        employees = await make_client().fetch_payroll(date(2026, 3, 1), date(2026, 3, 15))
        assert [e.employee_number for e in employees] == ["EMP-001"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_payload(self):
        respx.get(PAYROLL).mock(return_value=httpx.Response(200, json={"oops": True}))
        with pytest.raises(ExternalFetchError, match="Malformed payroll payload"):
            await make_client().fetch_payroll(date(2026, 3, 1), date(2026, 3, 15))
