"""
Trip Ledger — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from trip_ledger.config import get_settings
from trip_ledger.logging_config import configure_logging
from trip_ledger.models.base import SessionLocal
from trip_ledger.services.chart_of_account_service import ChartOfAccountService
from trip_ledger.api.health import router as health_router
from trip_ledger.api.chart_of_accounts import router as chart_of_accounts_router
from trip_ledger.api.journal_entries import router as journal_entries_router
from trip_ledger.api.trip_revenues import router as trip_revenues_router
from trip_ledger.api.receivables import router as receivables_router
from trip_ledger.api.system_config import router as system_config_router
from trip_ledger.api.sync import router as sync_router
from trip_ledger.api.payroll import router as payroll_router

configure_logging()
logger = logging.getLogger(__name__)

settings = get_settings()


def seed_system_accounts() -> None:
    db = SessionLocal()
    try:
        ChartOfAccountService(db).seed_system_accounts()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("System account seeding skipped: %s", e)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    seed_system_accounts()
    yield
    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Trip revenue reconciliation and double-entry bookkeeping",
    lifespan=lifespan,
)

# Register routers
app.include_router(health_router)
app.include_router(chart_of_accounts_router)
app.include_router(journal_entries_router)
app.include_router(trip_revenues_router)
app.include_router(receivables_router)
app.include_router(system_config_router)
app.include_router(sync_router)
app.include_router(payroll_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "trip_ledger.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
