"""Trip revenue endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trip_ledger.api.deps import get_actor
from trip_ledger.errors import ServiceError
from trip_ledger.models.base import get_db
from trip_ledger.schemas.revenue import (
    ProcessUnsyncedResponse,
    RevenueDetailResponse,
    RevenueListResponse,
    RevenueQuery,
    RevenueResponse,
    TripRevenueCreate,
    TripRevenueUpdate,
    UnsyncedTripQuery,
    UnsyncedTripResponse,
)
from trip_ledger.services.pagination import page_count
from trip_ledger.services.trip_revenue_service import TripRevenueService

router = APIRouter(prefix="/trip-revenues", tags=["Trip Revenues"])


@router.get("", response_model=RevenueListResponse)
def list_revenues(
    query: RevenueQuery = Depends(),
    db: Session = Depends(get_db),
):
    service = TripRevenueService(db)
    items, total = service.list_revenues(query)
    return RevenueListResponse(
        data=[RevenueResponse.model_validate(r) for r in items],
        total=total,
        page=query.page,
        limit=query.limit,
        pages=page_count(total, query.limit),
    )


@router.post("", response_model=RevenueResponse, status_code=201)
def create_revenue(
    request: TripRevenueCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Record the remittance for a synced bus trip.

    Any shortage opens driver and conductor receivables, and the
    remittance is booked as a posted journal entry.
    """
    service = TripRevenueService(db)
    try:
        revenue = service.create_revenue_for_trip(request, created_by=actor)
        db.commit()
        return revenue
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/unsynced-trips", response_model=list[UnsyncedTripResponse])
def list_unsynced_trips(
    query: UnsyncedTripQuery = Depends(),
    db: Session = Depends(get_db),
):
    service = TripRevenueService(db)
    return service.list_unsynced_trips(query)


@router.post("/process-unsynced", response_model=ProcessUnsyncedResponse)
def process_unsynced(
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Record every pending trip. Each trip succeeds or fails on its own."""
    service = TripRevenueService(db)
    return service.process_all_unsynced(actor=actor)


@router.get("/{revenue_id}", response_model=RevenueDetailResponse)
def get_revenue(revenue_id: int, db: Session = Depends(get_db)):
    service = TripRevenueService(db)
    try:
        return service.get_revenue_detail(revenue_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{revenue_id}", response_model=RevenueResponse)
def update_revenue(
    revenue_id: int,
    request: TripRevenueUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    service = TripRevenueService(db)
    try:
        revenue = service.update_revenue(revenue_id, request, updated_by=actor)
        db.commit()
        return revenue
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
