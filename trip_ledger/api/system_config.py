"""System configuration endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trip_ledger.api.deps import get_actor
from trip_ledger.errors import ServiceError
from trip_ledger.models.base import get_db
from trip_ledger.schemas.system_config import (
    SystemConfigResponse,
    SystemConfigUpdate,
)
from trip_ledger.services.system_config_service import SystemConfigService

router = APIRouter(prefix="/system-config", tags=["System Configuration"])


@router.get("", response_model=SystemConfigResponse)
def get_config(db: Session = Depends(get_db)):
    """The active configuration, or the defaults if none was saved yet."""
    return SystemConfigService(db).get_config()


@router.patch("", response_model=SystemConfigResponse)
def update_config(
    request: SystemConfigUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    service = SystemConfigService(db)
    try:
        config = service.update_config(request, updated_by=actor)
        db.commit()
        return config
    except ServiceError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
