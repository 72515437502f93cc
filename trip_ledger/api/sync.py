"""
External data sync endpoint.

Pulls employees, buses, rentals and trips from the upstream systems,
then records revenue for any trip that arrived unrecorded.
"""

import time

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from trip_ledger.api.deps import get_actor
from trip_ledger.models.base import get_db
from trip_ledger.schemas.sync import FullSyncResponse
from trip_ledger.services.sync_service import SyncService
from trip_ledger.services.trip_revenue_service import TripRevenueService

router = APIRouter(prefix="/sync", tags=["Sync"])


def get_sync_service(db: Session = Depends(get_db)) -> SyncService:
    return SyncService(db)


@router.post(
    "/external",
    response_model=FullSyncResponse,
    responses={207: {"model": FullSyncResponse}},
)
async def sync_external(
    db: Session = Depends(get_db),
    sync: SyncService = Depends(get_sync_service),
    actor: str = Depends(get_actor),
):
    """
    Run a full sync.

    Answers 200 when every table synced and 207 when at least one
    failed; the body always carries the per-table results. Only the
    upstream fetches run on the event loop.
    """
    started = time.perf_counter()
    snapshot = await sync.client.fetch_all()
    result = await run_in_threadpool(sync.apply_snapshot, snapshot, started)
    result.revenue_processing = await run_in_threadpool(
        TripRevenueService(db).process_all_unsynced, actor=actor
    )
    status_code = 200 if result.success else 207
    return JSONResponse(
        status_code=status_code, content=result.model_dump(mode="json")
    )
