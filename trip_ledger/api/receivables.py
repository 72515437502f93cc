"""Receivable payment and schedule endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trip_ledger.api.deps import get_actor
from trip_ledger.errors import ServiceError
from trip_ledger.models.base import get_db
from trip_ledger.schemas.receivable import (
    PaymentAllocationResponse,
    ReceivablePaymentCreate,
    ReceivablePaymentResponse,
    ReceivableResponse,
    ScheduleRegenerate,
)
from trip_ledger.services.installment_service import InstallmentService
from trip_ledger.services.trip_revenue_service import TripRevenueService

router = APIRouter(prefix="/receivables", tags=["Receivables"])


@router.post(
    "/installments/{installment_id}/payments",
    response_model=ReceivablePaymentResponse,
    status_code=201,
)
def record_payment(
    installment_id: int,
    request: ReceivablePaymentCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Pay against an installment.

    Whatever the installment cannot absorb carries over to the
    following unpaid installments.
    """
    service = TripRevenueService(db)
    try:
        application, entry = service.record_receivable_payment(
            installment_id, request, created_by=actor
        )
        db.commit()
        return ReceivablePaymentResponse(
            receivable=ReceivableResponse.model_validate(application.receivable),
            allocations=[
                PaymentAllocationResponse.model_validate(a)
                for a in application.allocations
            ],
            payment_ids=[p.id for p in application.payments],
            journal_entry_id=entry.id,
            journal_entry_code=entry.code,
        )
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{receivable_id}", response_model=ReceivableResponse)
def get_receivable(receivable_id: int, db: Session = Depends(get_db)):
    service = InstallmentService(db)
    try:
        return service.get_receivable(receivable_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{receivable_id}/schedule", response_model=ReceivableResponse)
def regenerate_schedule(
    receivable_id: int,
    request: ScheduleRegenerate,
    db: Session = Depends(get_db),
):
    """Replace an unpaid receivable's installments with new terms."""
    service = InstallmentService(db)
    try:
        receivable = service.regenerate_schedule(
            receivable_id,
            request.number_of_payments,
            request.frequency,
            start_date=request.start_date,
        )
        db.commit()
        return receivable
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
