"""Chart of accounts endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trip_ledger.errors import ServiceError
from trip_ledger.models.base import get_db
from trip_ledger.models.enums import AccountType
from trip_ledger.schemas.chart_of_account import AccountCreate, AccountResponse
from trip_ledger.services.chart_of_account_service import ChartOfAccountService

router = APIRouter(prefix="/chart-of-accounts", tags=["Chart of Accounts"])


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    account_type: AccountType | None = None,
    include_archived: bool = False,
    db: Session = Depends(get_db),
):
    service = ChartOfAccountService(db)
    return service.list_accounts(account_type, include_archived)


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(request: AccountCreate, db: Session = Depends(get_db)):
    """
    Create an account.

    The code is allocated from the account type's prefix unless a
    custom_suffix is supplied.
    """
    service = ChartOfAccountService(db)
    try:
        account = service.create_account(request)
        db.commit()
        return account
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{account_id}/archive", response_model=AccountResponse)
def archive_account(account_id: int, db: Session = Depends(get_db)):
    service = ChartOfAccountService(db)
    try:
        account = service.archive_account(account_id)
        db.commit()
        return account
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
