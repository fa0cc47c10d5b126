"""
Property Ledger FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from property_ledger.config import get_settings
from property_ledger.exceptions import LedgerError, ledger_exception_handler
from property_ledger.models.base import SessionLocal
from property_ledger.services.chart_of_accounts import seed_chart_of_accounts
from property_ledger.api.health import router as health_router
from property_ledger.api.ledger import router as ledger_router
from property_ledger.api.reports import router as reports_router
from property_ledger.api.rent_increases import router as rent_increases_router
from property_ledger.api.scheduled_charges import router as scheduled_charges_router
from property_ledger.api.transactions import router as transactions_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Make sure every chart account exists before serving requests."""
    db = SessionLocal()
    try:
        inserted = seed_chart_of_accounts(db)
        db.commit()
        if inserted:
            logger.info("Seeded %d ledger accounts", inserted)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not seed the chart of accounts")
    finally:
        db.close()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry ledger for property management",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_exception_handler(LedgerError, ledger_exception_handler)

# Register routers
app.include_router(health_router)
app.include_router(transactions_router)
app.include_router(ledger_router)
app.include_router(reports_router)
app.include_router(scheduled_charges_router)
app.include_router(rent_increases_router)
