"""SQLAlchemy ORM models."""

from kaamtrack.models.attendance import AttendanceRow
from kaamtrack.models.base import Base, TimestampMixin, UTCDateTime
from kaamtrack.models.payments import PaymentRow
from kaamtrack.models.qr_code import OwnerQRCodeRow
from kaamtrack.models.worker import WorkerRow

__all__ = [
    "AttendanceRow",
    "Base",
    "OwnerQRCodeRow",
    "PaymentRow",
    "TimestampMixin",
    "UTCDateTime",
    "WorkerRow",
]
