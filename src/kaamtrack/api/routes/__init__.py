"""API routes."""

from kaamtrack.api.routes.attendance import router as attendance_router
from kaamtrack.api.routes.health import router as health_router
from kaamtrack.api.routes.me import router as me_router
from kaamtrack.api.routes.payments import router as payments_router
from kaamtrack.api.routes.qr import router as qr_router
from kaamtrack.api.routes.reports import router as reports_router
from kaamtrack.api.routes.workers import router as workers_router

__all__ = [
    "attendance_router",
    "health_router",
    "me_router",
    "payments_router",
    "qr_router",
    "reports_router",
    "workers_router",
]
