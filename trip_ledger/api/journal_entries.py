"""
Journal entry endpoints.

The API layer is thin: it handles HTTP concerns and delegates every
bookkeeping rule to JournalEntryService.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trip_ledger.api.deps import get_actor
from trip_ledger.errors import ServiceError
from trip_ledger.models.base import get_db
from trip_ledger.schemas.journal_entry import (
    JournalAdjustmentCreate,
    JournalDeleteRequest,
    JournalEntryCreate,
    JournalEntryDetailResponse,
    JournalEntryListResponse,
    JournalEntryQuery,
    JournalEntryResponse,
    JournalEntrySummary,
    JournalEntryUpdate,
    JournalReversalCreate,
)
from trip_ledger.services.journal_entry_service import JournalEntryService
from trip_ledger.services.pagination import page_count

router = APIRouter(prefix="/journal-entries", tags=["Journal Entries"])


def _detail(service: JournalEntryService, entry) -> JournalEntryDetailResponse:
    reversals, adjustments = service.get_related(entry)
    detail = JournalEntryDetailResponse.model_validate(entry)
    detail.reversals = [JournalEntrySummary.model_validate(e) for e in reversals]
    detail.adjustments = [
        JournalEntrySummary.model_validate(e) for e in adjustments
    ]
    return detail


@router.get("", response_model=JournalEntryListResponse)
def list_journal_entries(
    query: JournalEntryQuery = Depends(),
    db: Session = Depends(get_db),
):
    service = JournalEntryService(db)
    items, total = service.list_entries(query)
    return JournalEntryListResponse(
        data=[JournalEntryResponse.model_validate(e) for e in items],
        total=total,
        page=query.page,
        limit=query.limit,
        pages=page_count(total, query.limit),
    )


@router.post("", response_model=JournalEntryResponse, status_code=201)
def create_journal_entry(
    request: JournalEntryCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Create a DRAFT journal entry.

    Lines must each be a debit or a credit against an existing
    account, and the entry must balance exactly.
    """
    service = JournalEntryService(db)
    try:
        entry = service.create(request, created_by=actor)
        db.commit()
        return entry
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{entry_id}", response_model=JournalEntryDetailResponse)
def get_journal_entry(
    entry_id: int,
    include_deleted: bool = False,
    db: Session = Depends(get_db),
):
    service = JournalEntryService(db)
    try:
        entry = service.get(entry_id, include_deleted=include_deleted)
        return _detail(service, entry)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{entry_id}", response_model=JournalEntryResponse)
def update_journal_entry(
    entry_id: int,
    request: JournalEntryUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    service = JournalEntryService(db)
    try:
        entry = service.update(entry_id, request, updated_by=actor)
        db.commit()
        return entry
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{entry_id}", response_model=JournalEntryResponse)
def delete_journal_entry(
    entry_id: int,
    request: JournalDeleteRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Soft delete a DRAFT entry. Posted entries must be reversed instead."""
    service = JournalEntryService(db)
    try:
        entry = service.delete(entry_id, deleted_by=actor, reason=request.reason)
        db.commit()
        return entry
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{entry_id}/post", response_model=JournalEntryResponse)
def post_journal_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    service = JournalEntryService(db)
    try:
        entry = service.post(entry_id, approved_by=actor)
        db.commit()
        return entry
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post(
    "/{entry_id}/adjustments",
    response_model=JournalEntryResponse,
    status_code=201,
)
def create_adjustment(
    entry_id: int,
    request: JournalAdjustmentCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    service = JournalEntryService(db)
    try:
        entry = service.create_adjustment(entry_id, request, created_by=actor)
        db.commit()
        return entry
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post(
    "/{entry_id}/reversal",
    response_model=JournalEntryResponse,
    status_code=201,
)
def create_reversal(
    entry_id: int,
    request: JournalReversalCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Reverse a POSTED entry.

    The reversal mirrors every line with debit and credit swapped.
    An entry can only be reversed once.
    """
    service = JournalEntryService(db)
    try:
        entry = service.create_reversal(
            entry_id, request.reason, created_by=actor,
            entry_date=request.entry_date,
        )
        db.commit()
        return entry
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
