"""Manual attendance endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query, status

from kaamtrack.api.dependencies import Attendance, DbSession, OwnerId
from kaamtrack.api.errors import raise_for_failure
from kaamtrack.api.schemas import (
    AttendanceListResponse,
    AttendanceMark,
    AttendanceMarkResponse,
    AttendanceResponse,
    ErrorResponse,
)

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post(
    "",
    response_model=AttendanceMarkResponse,
    status_code=status.HTTP_200_OK,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def mark_attendance(
    db: DbSession,
    owner_id: OwnerId,
    attendance: Attendance,
    payload: AttendanceMark,
) -> AttendanceMarkResponse:
    """Create or overwrite the worker's record for the day."""
    result = await attendance.mark_attendance(
        owner_id=owner_id,
        worker_id=payload.worker_id,
        status=payload.status,
        on_date=payload.date,
        check_in_at=payload.check_in_at,
        check_out_at=payload.check_out_at,
        note=payload.note,
    )
    raise_for_failure(result.failure)
    await db.commit()
    return AttendanceMarkResponse(
        record=AttendanceResponse.model_validate(result.record),
        is_new=result.is_new,
    )


@router.get("", response_model=AttendanceListResponse)
async def list_attendance_for_day(
    owner_id: OwnerId,
    attendance: Attendance,
    on_date: Annotated[date | None, Query(alias="date")] = None,
) -> AttendanceListResponse:
    """All of the owner's records for one day (today by default)."""
    day = on_date or attendance.today()
    records = await attendance.list_for_date(owner_id, day)
    return AttendanceListResponse(
        items=[AttendanceResponse.model_validate(r) for r in records],
        total=len(records),
    )
