"""Payroll period endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from trip_ledger.api.deps import get_actor
from trip_ledger.errors import ServiceError
from trip_ledger.models.base import get_db
from trip_ledger.schemas.payroll import (
    PayrollPeriodCreate,
    PayrollPeriodDetailResponse,
    PayrollPeriodResponse,
    PayrollProcessResponse,
)
from trip_ledger.services.payroll_service import PayrollService

router = APIRouter(prefix="/payroll", tags=["Payroll"])


def get_payroll_service(db: Session = Depends(get_db)) -> PayrollService:
    return PayrollService(db)


@router.post("/periods", response_model=PayrollPeriodResponse, status_code=201)
def create_period(
    request: PayrollPeriodCreate,
    db: Session = Depends(get_db),
    service: PayrollService = Depends(get_payroll_service),
    actor: str = Depends(get_actor),
):
    try:
        period = service.create_period(
            request.period_start, request.period_end, created_by=actor
        )
        db.commit()
        return period
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/periods/{period_id}", response_model=PayrollPeriodDetailResponse)
def get_period(
    period_id: int,
    service: PayrollService = Depends(get_payroll_service),
):
    try:
        return service.get_period(period_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/periods/{period_id}/process", response_model=PayrollProcessResponse)
async def process_period(
    period_id: int,
    db: Session = Depends(get_db),
    service: PayrollService = Depends(get_payroll_service),
):
    """
    Pull the period's data from HR and compute everyone's pay.

    The period ends PROCESSED, or PARTIAL when some employees could
    not be computed. Only the HR fetch runs on the event loop.
    """
    try:
        period = await run_in_threadpool(service.get_processable_period, period_id)
        employees = await service.fetch_employees(period)
        result = await run_in_threadpool(service.apply_payroll, period, employees)
        await run_in_threadpool(db.commit)
        return result
    except ServiceError as e:
        await run_in_threadpool(db.rollback)
        raise HTTPException(status_code=e.status_code, detail=str(e))
