"""Daily QR code and check-in endpoints."""

from fastapi import APIRouter, status

from kaamtrack.api.dependencies import Attendance, DbSession, OwnerId, QRCodes
from kaamtrack.api.errors import require_result
from kaamtrack.api.schemas import (
    AttendanceResponse,
    CheckInRequest,
    CheckInResponse,
    ErrorResponse,
    QRCodeResponse,
    QRValidateRequest,
    QRValidateResponse,
)
from kaamtrack.calculators.types import DailyQRCode
from kaamtrack.services.state_machine import QRCodeState

router = APIRouter(prefix="/qr", tags=["qr"])


def _code_response(code: DailyQRCode, state: QRCodeState) -> QRCodeResponse:
    return QRCodeResponse(
        state=state.value,
        code=code.code,
        date=code.date,
        valid_from=code.valid_from,
        valid_until=code.valid_until,
    )


@router.post(
    "/generate",
    response_model=QRCodeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_code(
    db: DbSession,
    owner_id: OwnerId,
    qr_codes: QRCodes,
) -> QRCodeResponse:
    """Issue today's code; any previous code stops validating."""
    issued = await qr_codes.generate(owner_id)
    await db.commit()
    code = require_result(issued.code, None)
    return _code_response(code, issued.state)


@router.get("/current", response_model=QRCodeResponse)
async def current_code(owner_id: OwnerId, qr_codes: QRCodes) -> QRCodeResponse:
    current = await qr_codes.current(owner_id)
    if current.state == QRCodeState.NO_CODE or current.code is None:
        return QRCodeResponse(state=QRCodeState.NO_CODE.value)
    return _code_response(current.code, current.state)


@router.post("/validate", response_model=QRValidateResponse)
async def validate_code(
    owner_id: OwnerId,
    qr_codes: QRCodes,
    payload: QRValidateRequest,
) -> QRValidateResponse:
    """Check a code without side effects. Always 200; `valid` carries the outcome."""
    validation = await qr_codes.validate(owner_id, payload.code)
    if validation.failure is not None:
        return QRValidateResponse(
            valid=False,
            code=validation.failure.kind.value,
            message=validation.failure.message,
        )
    return QRValidateResponse(valid=True, message="QR code is active")


@router.post(
    "/check-in",
    response_model=CheckInResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        410: {"model": ErrorResponse},
    },
)
async def check_in(
    db: DbSession,
    owner_id: OwnerId,
    attendance: Attendance,
    payload: CheckInRequest,
) -> CheckInResponse:
    """Mark the scanned worker present. Repeat scans are reported, not duplicated."""
    result = await attendance.check_in(owner_id=owner_id, scanned_token=payload.token)
    record = require_result(result.record, result.failure)
    worker = require_result(result.worker, result.failure)
    await db.commit()
    return CheckInResponse(
        worker_id=worker.worker_id,
        worker_name=worker.name,
        already_marked=result.already_marked,
        message=result.message,
        record=AttendanceResponse.model_validate(record),
    )
