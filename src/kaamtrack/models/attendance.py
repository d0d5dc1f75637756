"""Attendance model. One row per (worker_id, date)."""

from __future__ import annotations

import datetime as dt
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from kaamtrack.calculators.types import AttendanceRecord, AttendanceStatus, MarkedVia
from kaamtrack.models.base import Base, TimestampMixin


class AttendanceRow(Base, TimestampMixin):
    """Attendance for a worker on a calendar date.

    Rows are overwritten in place by later marks for the same key and are
    only removed when the owning worker is purged.
    """

    __tablename__ = "attendance"

    attendance_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    worker_id: Mapped[UUID] = mapped_column(
        ForeignKey("worker.worker_id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    marked_via: Mapped[str] = mapped_column(String(10), nullable=False, default="manual")
    marked_at: Mapped[dt.datetime] = mapped_column(nullable=False)
    check_in_at: Mapped[dt.datetime | None] = mapped_column(nullable=True)
    check_out_at: Mapped[dt.datetime | None] = mapped_column(nullable=True)
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        UniqueConstraint("worker_id", "date", name="attendance_worker_date_uq"),
        CheckConstraint(
            "status IN ('present', 'absent', 'half-day')",
            name="attendance_status_ck",
        ),
        CheckConstraint("marked_via IN ('qr', 'manual')", name="attendance_marked_via_ck"),
    )

    def to_domain(self) -> AttendanceRecord:
        return AttendanceRecord(
            worker_id=self.worker_id,
            date=self.date,
            status=AttendanceStatus(self.status),
            marked_via=MarkedVia(self.marked_via),
            marked_at=self.marked_at,
            check_in_at=self.check_in_at,
            check_out_at=self.check_out_at,
            note=self.note,
            created_at=self.created_at,
            record_id=self.attendance_id,
        )
