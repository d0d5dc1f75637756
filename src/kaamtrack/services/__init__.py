"""Application services over the storage protocols."""

from kaamtrack.services.attendance_service import (
    AttendanceResult,
    AttendanceService,
    CheckInResult,
)
from kaamtrack.services.clock import Clock, FixedClock, SystemClock
from kaamtrack.services.payment_service import PaymentResult, PaymentService
from kaamtrack.services.qr_service import QRCodeService, QRCodeStatus
from kaamtrack.services.report_service import (
    ReportPeriod,
    ReportResult,
    ReportService,
    WorkerSummary,
)
from kaamtrack.services.state_machine import (
    DailyQRCodeStateMachine,
    QRCodeState,
    QRValidation,
)
from kaamtrack.services.worker_service import WorkerResult, WorkerService

__all__ = [
    "AttendanceResult",
    "AttendanceService",
    "CheckInResult",
    "Clock",
    "DailyQRCodeStateMachine",
    "FixedClock",
    "PaymentResult",
    "PaymentService",
    "QRCodeService",
    "QRCodeState",
    "QRCodeStatus",
    "QRValidation",
    "ReportPeriod",
    "ReportResult",
    "ReportService",
    "SystemClock",
    "WorkerResult",
    "WorkerService",
    "WorkerSummary",
]
