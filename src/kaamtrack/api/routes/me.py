"""Worker self-service endpoint."""

from fastapi import APIRouter, HTTPException, status

from kaamtrack.api.dependencies import CallerIdentity, Reports
from kaamtrack.api.errors import raise_for_failure
from kaamtrack.api.schemas import (
    AttendanceResponse,
    ErrorResponse,
    MeResponse,
    WorkerResponse,
    WorkerStatsResponse,
)

router = APIRouter(tags=["me"])


@router.get(
    "/me",
    response_model=MeResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def my_summary(identity: CallerIdentity, reports: Reports) -> MeResponse:
    """A worker's own balance and last seven attendance records. Read-only."""
    if identity.is_owner or identity.worker_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only workers have a personal summary",
        )
    summary = await reports.worker_summary(
        owner_id=identity.owner_id, worker_id=identity.worker_id
    )
    raise_for_failure(summary.failure)

    stats = WorkerStatsResponse.model_validate(summary.stats)
    stats.worker_name = summary.worker.name if summary.worker else None
    return MeResponse(
        worker=WorkerResponse.model_validate(summary.worker),
        stats=stats,
        recent_attendance=[AttendanceResponse.model_validate(r) for r in summary.recent],
    )
