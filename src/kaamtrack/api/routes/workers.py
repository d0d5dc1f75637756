"""Worker API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from kaamtrack.api.dependencies import (
    Attendance,
    DbSession,
    OwnerId,
    Payments,
    Reports,
    Workers,
)
from kaamtrack.api.errors import raise_for_failure
from kaamtrack.api.schemas import (
    AttendanceListResponse,
    AttendanceResponse,
    ErrorResponse,
    PaymentListResponse,
    PaymentResponse,
    WorkerCreate,
    WorkerListResponse,
    WorkerResponse,
    WorkerStatsResponse,
    WorkerUpdate,
)
from kaamtrack.services.worker_service import worker_not_found

router = APIRouter(prefix="/workers", tags=["workers"])


# ============================================================================
# Worker CRUD
# ============================================================================


@router.post(
    "",
    response_model=WorkerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_worker(
    db: DbSession,
    owner_id: OwnerId,
    workers: Workers,
    payload: WorkerCreate,
) -> WorkerResponse:
    """Register a worker and issue their permanent QR id."""
    result = await workers.create_worker(
        owner_id=owner_id,
        name=payload.name,
        work_type=payload.work_type,
        daily_rate=payload.daily_rate,
        phone=payload.phone,
    )
    raise_for_failure(result.failure)
    await db.commit()
    return WorkerResponse.model_validate(result.worker)


@router.get("", response_model=WorkerListResponse)
async def list_workers(
    owner_id: OwnerId,
    workers: Workers,
    include_inactive: bool = False,
) -> WorkerListResponse:
    """List the owner's workers, active only unless asked otherwise."""
    items = await workers.list_workers(owner_id, include_inactive=include_inactive)
    return WorkerListResponse(
        items=[WorkerResponse.model_validate(w) for w in items],
        total=len(items),
    )


@router.get(
    "/{worker_id}",
    response_model=WorkerResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_worker(
    owner_id: OwnerId,
    workers: Workers,
    worker_id: Annotated[UUID, Path()],
) -> WorkerResponse:
    result = await workers.get_worker(owner_id=owner_id, worker_id=worker_id)
    raise_for_failure(result.failure)
    return WorkerResponse.model_validate(result.worker)


@router.patch(
    "/{worker_id}",
    response_model=WorkerResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_worker(
    db: DbSession,
    owner_id: OwnerId,
    workers: Workers,
    worker_id: Annotated[UUID, Path()],
    payload: WorkerUpdate,
) -> WorkerResponse:
    result = await workers.update_worker(
        owner_id=owner_id,
        worker_id=worker_id,
        name=payload.name,
        work_type=payload.work_type,
        daily_rate=payload.daily_rate,
        phone=payload.phone,
        is_active=payload.is_active,
    )
    raise_for_failure(result.failure)
    await db.commit()
    return WorkerResponse.model_validate(result.worker)


@router.delete(
    "/{worker_id}",
    response_model=WorkerResponse,
    responses={404: {"model": ErrorResponse}},
)
async def deactivate_worker(
    db: DbSession,
    owner_id: OwnerId,
    workers: Workers,
    worker_id: Annotated[UUID, Path()],
) -> WorkerResponse:
    """Soft delete. Attendance and payments are kept."""
    result = await workers.deactivate_worker(owner_id=owner_id, worker_id=worker_id)
    raise_for_failure(result.failure)
    await db.commit()
    return WorkerResponse.model_validate(result.worker)


# ============================================================================
# Per-worker ledger views
# ============================================================================


@router.get(
    "/{worker_id}/stats",
    response_model=WorkerStatsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_worker_stats(
    owner_id: OwnerId,
    reports: Reports,
    worker_id: Annotated[UUID, Path()],
) -> WorkerStatsResponse:
    stats = await reports.worker_stats(owner_id=owner_id, worker_id=worker_id)
    if stats is None:
        raise_for_failure(worker_not_found(worker_id))
    return WorkerStatsResponse.model_validate(stats)


@router.get(
    "/{worker_id}/attendance",
    response_model=AttendanceListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_worker_attendance(
    owner_id: OwnerId,
    workers: Workers,
    attendance: Attendance,
    worker_id: Annotated[UUID, Path()],
    start: Annotated[date | None, Query()] = None,
    end: Annotated[date | None, Query()] = None,
) -> AttendanceListResponse:
    found = await workers.get_worker(owner_id=owner_id, worker_id=worker_id)
    raise_for_failure(found.failure)
    records = await attendance.list_attendance(worker_id=worker_id, start=start, end=end)
    return AttendanceListResponse(
        items=[AttendanceResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.get(
    "/{worker_id}/payments",
    response_model=PaymentListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_worker_payments(
    owner_id: OwnerId,
    workers: Workers,
    payments: Payments,
    worker_id: Annotated[UUID, Path()],
    start: Annotated[date | None, Query()] = None,
    end: Annotated[date | None, Query()] = None,
) -> PaymentListResponse:
    found = await workers.get_worker(owner_id=owner_id, worker_id=worker_id)
    raise_for_failure(found.failure)
    records = await payments.list_payments(worker_id=worker_id, start=start, end=end)
    return PaymentListResponse(
        items=[PaymentResponse.model_validate(p) for p in records],
        total=len(records),
    )
