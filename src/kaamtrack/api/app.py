"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kaamtrack import __version__
from kaamtrack.api.errors import FailureResponse
from kaamtrack.api.routes import (
    attendance_router,
    health_router,
    me_router,
    payments_router,
    qr_router,
    reports_router,
    workers_router,
)
from kaamtrack.config import get_settings
from kaamtrack.database import create_schema, dispose_db, init_db
from kaamtrack.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    engine, _ = init_db()
    await create_schema(engine)
    logger.info("KaamTrack API started")
    yield
    # Shutdown
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="KaamTrack API",
        description="Attendance and wage ledger for daily-wage workers",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(FailureResponse)
    async def failure_handler(request: Request, exc: FailureResponse) -> JSONResponse:
        """Render a rejected core operation."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.failure.message, "code": exc.failure.kind.value},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(workers_router, prefix="/api/v1")
    app.include_router(attendance_router, prefix="/api/v1")
    app.include_router(payments_router, prefix="/api/v1")
    app.include_router(qr_router, prefix="/api/v1")
    app.include_router(reports_router, prefix="/api/v1")
    app.include_router(me_router, prefix="/api/v1")

    return app
