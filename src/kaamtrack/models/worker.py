"""Worker model."""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from kaamtrack.calculators.money import from_minor, to_minor
from kaamtrack.calculators.types import Worker, WorkType
from kaamtrack.models.base import Base, TimestampMixin


class WorkerRow(Base, TimestampMixin):
    """A daily-wage worker. Never deleted; `is_active` is the soft-delete flag."""

    __tablename__ = "worker"

    worker_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    owner_id: Mapped[UUID] = mapped_column(nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    work_type: Mapped[str] = mapped_column(String(20), nullable=False, default="other")
    daily_rate_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    qr_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("daily_rate_minor >= 0", name="worker_daily_rate_ck"),
        CheckConstraint(
            "work_type IN ('construction', 'furniture', 'driver', 'factory', 'farm', 'helper', 'other')",
            name="worker_work_type_ck",
        ),
        Index("ix_worker_owner_active", "owner_id", "is_active"),
    )

    def to_domain(self) -> Worker:
        return Worker(
            worker_id=self.worker_id,
            owner_id=self.owner_id,
            name=self.name,
            work_type=WorkType(self.work_type),
            daily_rate=from_minor(self.daily_rate_minor),
            qr_id=self.qr_id,
            created_at=self.created_at,
            phone=self.phone,
            is_active=self.is_active,
        )

    @classmethod
    def from_domain(cls, worker: Worker) -> WorkerRow:
        return cls(
            worker_id=worker.worker_id,
            owner_id=worker.owner_id,
            name=worker.name,
            work_type=worker.work_type.value,
            daily_rate_minor=to_minor(worker.daily_rate),
            phone=worker.phone,
            qr_id=worker.qr_id,
            is_active=worker.is_active,
            created_at=worker.created_at,
        )
