"""Storage protocols consumed by the services.

Concrete backends (in-memory, SQLAlchemy) implement these. The services
never know which one they are talking to.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Protocol
from uuid import UUID

from kaamtrack.calculators.types import (
    AttendanceRecord,
    DailyQRCode,
    PaymentRecord,
    Worker,
)


# Called with (previous, incoming) while the key is held; returns the record to store.
AttendanceMerge = Callable[[AttendanceRecord, AttendanceRecord], AttendanceRecord]


@dataclass(frozen=True)
class UpsertResult:
    """Result of an attendance upsert.

    `previous` is the record that was overwritten, or None when the
    (worker_id, date) key was new.
    """

    record: AttendanceRecord
    previous: AttendanceRecord | None = None

    @property
    def is_new(self) -> bool:
        return self.previous is None


class WorkerDirectory(Protocol):
    """Worker lookup and registration."""

    async def get_worker(self, worker_id: UUID) -> Worker | None:
        ...

    async def list_active_workers(self, owner_id: UUID) -> list[Worker]:
        ...

    async def list_workers(self, owner_id: UUID) -> list[Worker]:
        """All workers including inactive ones (for historical views)."""
        ...

    async def find_worker_by_qr_id(self, owner_id: UUID, token: str) -> Worker | None:
        ...

    async def qr_id_exists(self, qr_id: str) -> bool:
        ...

    async def add_worker(self, worker: Worker) -> Worker:
        """Raises QRIdTakenError when `worker.qr_id` is already issued."""
        ...

    async def save_worker(self, worker: Worker) -> Worker:
        ...


class AttendanceStore(Protocol):
    """Attendance records keyed by (worker_id, date)."""

    async def upsert_attendance(
        self, record: AttendanceRecord, merge: AttendanceMerge | None = None
    ) -> UpsertResult:
        """Insert or overwrite atomically on (worker_id, date).

        When a record already exists and `merge` is given, the stored record
        is `merge(previous, record)`, computed inside the same atomic step.
        """
        ...

    async def get_attendance(self, worker_id: UUID, on_date: date) -> AttendanceRecord | None:
        ...

    async def list_attendance(
        self,
        worker_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        ...

    async def list_attendance_for_date(self, owner_id: UUID, on_date: date) -> list[AttendanceRecord]:
        ...

    async def list_attendance_for_owner(
        self,
        owner_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        ...


class PaymentStore(Protocol):
    """Append-only payment records."""

    async def append_payment(self, record: PaymentRecord) -> PaymentRecord:
        """Persist a new record and return it with its id assigned."""
        ...

    async def list_payments(
        self,
        worker_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PaymentRecord]:
        ...

    async def list_payments_for_owner(
        self,
        owner_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PaymentRecord]:
        ...


class QRCodeSlotStore(Protocol):
    """One current daily code per owner."""

    async def get_current_code(self, owner_id: UUID) -> DailyQRCode | None:
        ...

    async def replace_current_code(self, code: DailyQRCode) -> DailyQRCode:
        """Store `code` as the owner's only code, replacing any previous one."""
        ...


def in_range(value: date, start: date | None, end: date | None) -> bool:
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True
