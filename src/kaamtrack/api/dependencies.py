"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from kaamtrack.calculators.types import Identity, Role
from kaamtrack.config import Settings, get_settings
from kaamtrack.database import init_db
from kaamtrack.services import (
    AttendanceService,
    DailyQRCodeStateMachine,
    PaymentService,
    QRCodeService,
    ReportService,
    SystemClock,
    WorkerService,
)
from kaamtrack.services.clock import Clock
from kaamtrack.stores import SqlStore


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency. Handlers commit their own writes."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_app_settings() -> Settings:
    return get_settings()


def get_clock() -> Clock:
    return SystemClock()


def _parse_uuid(value: str, header: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header} format",
        )


async def get_identity(
    x_owner_id: Annotated[str | None, Header()] = None,
    x_role: Annotated[str | None, Header()] = None,
    x_worker_id: Annotated[str | None, Header()] = None,
) -> Identity:
    """Build the caller identity from headers set by the auth layer."""
    if not x_owner_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Owner-ID header is required",
        )
    owner_id = _parse_uuid(x_owner_id, "X-Owner-ID")

    try:
        role = Role((x_role or Role.OWNER.value).strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Role must be 'owner' or 'worker'",
        )

    worker_id = None
    if role == Role.WORKER:
        if not x_worker_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="X-Worker-ID header is required for workers",
            )
        worker_id = _parse_uuid(x_worker_id, "X-Worker-ID")

    return Identity(owner_id=owner_id, role=role, worker_id=worker_id)


async def get_owner_id(identity: Annotated[Identity, Depends(get_identity)]) -> UUID:
    """Owner-only endpoints; workers get 403."""
    if not identity.is_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can do this",
        )
    return identity.owner_id


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
AppClock = Annotated[Clock, Depends(get_clock)]
CallerIdentity = Annotated[Identity, Depends(get_identity)]
OwnerId = Annotated[UUID, Depends(get_owner_id)]


def get_worker_service(db: DbSession, settings: AppSettings, clock: AppClock) -> WorkerService:
    return WorkerService(SqlStore(db), clock, default_daily_rate=settings.default_daily_rate)


def get_payment_service(db: DbSession, settings: AppSettings, clock: AppClock) -> PaymentService:
    store = SqlStore(db)
    return PaymentService(store, store, clock, tz=settings.qr_window.tz)


def get_qr_service(db: DbSession, settings: AppSettings, clock: AppClock) -> QRCodeService:
    return QRCodeService(SqlStore(db), DailyQRCodeStateMachine(settings.qr_window), clock)


def get_attendance_service(
    db: DbSession,
    settings: AppSettings,
    clock: AppClock,
    qr_codes: Annotated[QRCodeService, Depends(get_qr_service)],
) -> AttendanceService:
    store = SqlStore(db)
    return AttendanceService(store, store, qr_codes, clock, tz=settings.qr_window.tz)


def get_report_service(db: DbSession, settings: AppSettings, clock: AppClock) -> ReportService:
    store = SqlStore(db)
    return ReportService(store, store, store, clock, tz=settings.qr_window.tz)


Workers = Annotated[WorkerService, Depends(get_worker_service)]
Payments = Annotated[PaymentService, Depends(get_payment_service)]
QRCodes = Annotated[QRCodeService, Depends(get_qr_service)]
Attendance = Annotated[AttendanceService, Depends(get_attendance_service)]
Reports = Annotated[ReportService, Depends(get_report_service)]
