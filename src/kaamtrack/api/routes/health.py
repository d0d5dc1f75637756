"""Health check endpoints."""

import logging
from datetime import date, datetime

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from kaamtrack import __version__
from kaamtrack.api.dependencies import AppClock, AppSettings, DbSession
from kaamtrack.calculators.normalize import local_date

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response.

    `business_date` is "today" in the configured timezone, the date that
    check-ins and rollups are filed under.
    """

    status: str
    version: str
    timestamp: datetime
    business_date: date
    database: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession, settings: AppSettings, clock: AppClock) -> HealthResponse:
    """Report database reachability and the clock the ledger runs on."""
    now = clock.now()
    db_ok = True
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        db_ok = False

    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=__version__,
        timestamp=now,
        business_date=local_date(now, settings.qr_window.tz),
        database="healthy" if db_ok else "unhealthy",
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check(settings: AppSettings) -> dict[str, str]:
    """Ready once settings have loaded."""
    return {"status": "ready", "timezone": settings.qr_window.timezone}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
