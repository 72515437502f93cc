"""
Client for the upstream HR, inventory and operations APIs.

Fetches are async over httpx and fan out with asyncio.gather. Each
fetch retries network errors and 5xx responses with exponential
backoff; a 4xx is the caller's fault and fails immediately. When a
fetch gives up, only that table is lost, the others still arrive.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from trip_ledger.config import Settings, get_settings
from trip_ledger.schemas.external import (
    ExternalBus,
    ExternalBusTrip,
    ExternalEmployee,
    ExternalRental,
    PayrollEmployee,
    PayrollPayload,
    unwrap_list,
)

logger = logging.getLogger(__name__)


class ExternalFetchError(Exception):
    """An upstream fetch failed for good: retries exhausted or a bad payload."""


@dataclass
class FetchResult:
    table: str
    records: list = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ExternalSnapshot:
    employees: FetchResult
    buses: FetchResult
    rentals: FetchResult
    trips: FetchResult


class ExternalDataClient:

    def __init__(
        self,
        employees_url: str = "",
        buses_url: str = "",
        rentals_url: str = "",
        trips_url: str = "",
        payroll_url: str = "",
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        backoff_max: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.employees_url = employees_url
        self.buses_url = buses_url
        self.rentals_url = rentals_url
        self.trips_url = trips_url
        self.payroll_url = payroll_url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ExternalDataClient":
        settings = settings or get_settings()
        return cls(
            employees_url=settings.HR_EMPLOYEES_URL,
            buses_url=settings.INVENTORY_BUSES_URL,
            rentals_url=settings.OPERATIONS_RENTALS_URL,
            trips_url=settings.OPERATIONS_TRIPS_URL,
            payroll_url=settings.HR_PAYROLL_URL,
            timeout=settings.SYNC_TIMEOUT_SECONDS,
            max_retries=settings.SYNC_MAX_RETRIES,
            backoff_base=settings.SYNC_BACKOFF_BASE_SECONDS,
            backoff_max=settings.SYNC_BACKOFF_MAX_SECONDS,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after the given zero-based failed attempt."""
        return min(self.backoff_base * (2 ** attempt), self.backoff_max)

    async def fetch_with_retry(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: dict | None = None,
    ) -> Any:
        """GET url and return its JSON body, retrying transient failures."""
        if not url:
            raise ExternalFetchError("Upstream URL is not configured")

        last_error = None
        for attempt in range(self.max_retries):
            try:
                response = await client.get(url, params=params)
                if response.status_code >= 500:
                    raise httpx.HTTPStatusError(
                        f"Server error {response.status_code} from {url}",
                        request=response.request,
                        response=response,
                    )
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    raise ExternalFetchError(
                        f"HTTP {e.response.status_code} from {url}"
                    ) from e
                last_error = e
            except httpx.TransportError as e:
                last_error = e

            if attempt < self.max_retries - 1:
                delay = self.backoff_delay(attempt)
                logger.warning(
                    "Fetch of %s failed (attempt %d/%d): %s. Retrying in %.1fs",
                    url, attempt + 1, self.max_retries, last_error, delay,
                )
                await asyncio.sleep(delay)

        raise ExternalFetchError(
            f"Giving up on {url} after {self.max_retries} attempts: {last_error}"
        ) from last_error

    async def _fetch_table(
        self,
        client: httpx.AsyncClient,
        table: str,
        url: str,
        model,
        keys: tuple[str, ...],
    ) -> FetchResult:
        try:
            payload = await self.fetch_with_retry(client, url)
            records = [model.model_validate(r) for r in unwrap_list(payload, *keys)]
        except (ExternalFetchError, PydanticValidationError, ValueError) as e:
            logger.error("Could not fetch %s: %s", table, e)
            return FetchResult(table=table, error=str(e))
        logger.info("Fetched %d %s record(s)", len(records), table)
        return FetchResult(table=table, records=records)

    async def fetch_all(self) -> ExternalSnapshot:
        """Fetch all four upstream lists concurrently."""
        async with self._client() as client:
            employees, buses, rentals, trips = await asyncio.gather(
                self._fetch_table(
                    client, "employee_local", self.employees_url,
                    ExternalEmployee, ("employees", "data"),
                ),
                self._fetch_table(
                    client, "bus_local", self.buses_url,
                    ExternalBus, ("data", "buses"),
                ),
                self._fetch_table(
                    client, "rental_local", self.rentals_url,
                    ExternalRental, ("data", "rentals"),
                ),
                self._fetch_table(
                    client, "bus_trip_local", self.trips_url,
                    ExternalBusTrip, ("data", "trips"),
                ),
            )
        return ExternalSnapshot(
            employees=employees, buses=buses, rentals=rentals, trips=trips
        )

    async def fetch_payroll(
        self,
        period_start: date,
        period_end: date,
        employee_number: str | None = None,
    ) -> list[PayrollEmployee]:
        """
        Attendance, rates, benefits and deductions for a payroll period.

        Raises ExternalFetchError if HR cannot be reached or answers
        with something that is not a payroll payload.
        """
        params = {
            "payroll_period_start": period_start.isoformat(),
            "payroll_period_end": period_end.isoformat(),
        }
        if employee_number:
            params["employee_number"] = employee_number

        async with self._client() as client:
            payload = await self.fetch_with_retry(client, self.payroll_url, params)

        try:
            if isinstance(payload, dict) and "employees" in payload:
                return PayrollPayload.model_validate(payload).employees
            return [
                PayrollEmployee.model_validate(r)
                for r in unwrap_list(payload, "data")
            ]
        except (PydanticValidationError, ValueError) as e:
            raise ExternalFetchError(f"Malformed payroll payload: {e}") from e
