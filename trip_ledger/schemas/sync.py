"""Pydantic schemas for external data synchronisation results."""

from pydantic import BaseModel

from trip_ledger.schemas.revenue import ProcessUnsyncedResponse


class TableSyncResult(BaseModel):
    success: bool
    table: str
    inserted: int = 0
    updated: int = 0
    soft_deleted: int = 0
    errors: list[str] = []
    duration_ms: int = 0


class FullSyncResponse(BaseModel):
    """Overall success is true only when every table synced."""
    success: bool
    duration_ms: int
    employees: TableSyncResult
    buses: TableSyncResult
    rentals: TableSyncResult
    bus_trips: TableSyncResult
    revenue_processing: ProcessUnsyncedResponse | None = None
