"""SQLAlchemy-backed store implementing every storage protocol.

Attendance writes on PostgreSQL and SQLite start with INSERT .. ON CONFLICT
DO NOTHING. When the key already exists the row is read FOR UPDATE and
rewritten in the same transaction, so a concurrent writer for the same
(worker_id, date) waits and then sees the committed row as its previous
record. The owner's code slot uses ON CONFLICT DO UPDATE. Other dialects
fall back to select-then-write and report a lost insert race as
DuplicateKeyRaceError.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kaamtrack.calculators.money import to_minor
from kaamtrack.calculators.types import (
    AttendanceRecord,
    DailyQRCode,
    PaymentRecord,
    Worker,
)
from kaamtrack.errors import DuplicateKeyRaceError, QRIdTakenError
from kaamtrack.models import AttendanceRow, OwnerQRCodeRow, PaymentRow, WorkerRow
from kaamtrack.stores.base import AttendanceMerge, UpsertResult

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS: dict[str, Callable[..., Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

_ATTENDANCE_OVERWRITE = (
    "status",
    "marked_via",
    "marked_at",
    "check_in_at",
    "check_out_at",
    "note",
)


def _attendance_values(record: AttendanceRecord) -> dict[str, Any]:
    return {
        "attendance_id": record.record_id or uuid4(),
        "worker_id": record.worker_id,
        "date": record.date,
        "status": record.status.value,
        "marked_via": record.marked_via.value,
        "marked_at": record.marked_at,
        "check_in_at": record.check_in_at,
        "check_out_at": record.check_out_at,
        "note": record.note,
        "created_at": record.created_at or record.marked_at,
    }


class SqlStore:
    """Storage over an AsyncSession. The caller owns commit/rollback."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _native_insert(self) -> Callable[..., Any] | None:
        return _UPSERT_DIALECTS.get(self.session.get_bind().dialect.name)

    # Worker directory

    async def get_worker(self, worker_id: UUID) -> Worker | None:
        row = await self.session.get(WorkerRow, worker_id)
        return row.to_domain() if row else None

    async def list_active_workers(self, owner_id: UUID) -> list[Worker]:
        result = await self.session.execute(
            select(WorkerRow)
            .where(WorkerRow.owner_id == owner_id, WorkerRow.is_active.is_(True))
            .order_by(WorkerRow.created_at.desc())
        )
        return [row.to_domain() for row in result.scalars()]

    async def list_workers(self, owner_id: UUID) -> list[Worker]:
        result = await self.session.execute(
            select(WorkerRow)
            .where(WorkerRow.owner_id == owner_id)
            .order_by(WorkerRow.created_at.desc())
        )
        return [row.to_domain() for row in result.scalars()]

    async def find_worker_by_qr_id(self, owner_id: UUID, token: str) -> Worker | None:
        result = await self.session.execute(
            select(WorkerRow).where(WorkerRow.owner_id == owner_id, WorkerRow.qr_id == token)
        )
        row = result.scalar_one_or_none()
        return row.to_domain() if row else None

    async def qr_id_exists(self, qr_id: str) -> bool:
        result = await self.session.execute(
            select(WorkerRow.worker_id).where(WorkerRow.qr_id == qr_id)
        )
        return result.first() is not None

    async def add_worker(self, worker: Worker) -> Worker:
        insert = self._native_insert()
        if insert is None:
            row = WorkerRow.from_domain(worker)
            try:
                async with self.session.begin_nested():
                    self.session.add(row)
            except IntegrityError as exc:
                raise QRIdTakenError(worker.qr_id) from exc
            return row.to_domain()

        result = await self.session.execute(
            insert(WorkerRow)
            .values(
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
            .on_conflict_do_nothing(index_elements=["qr_id"])
        )
        if result.rowcount == 0:
            raise QRIdTakenError(worker.qr_id)
        row = await self.session.get(WorkerRow, worker.worker_id)
        if row is None:
            raise RuntimeError("Worker insert failed unexpectedly - no row found")
        return row.to_domain()

    async def save_worker(self, worker: Worker) -> Worker:
        row = await self.session.get(WorkerRow, worker.worker_id)
        if row is None:
            raise KeyError(worker.worker_id)
        row.name = worker.name
        row.work_type = worker.work_type.value
        row.daily_rate_minor = to_minor(worker.daily_rate)
        row.phone = worker.phone
        row.is_active = worker.is_active
        await self.session.flush()
        return row.to_domain()

    # Attendance

    async def _select_attendance(
        self, worker_id: UUID, on_date: date, *, for_update: bool = False
    ) -> AttendanceRow | None:
        query = select(AttendanceRow).where(
            AttendanceRow.worker_id == worker_id, AttendanceRow.date == on_date
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def _overwrite(
        self,
        row: AttendanceRow,
        record: AttendanceRecord,
        merge: AttendanceMerge | None,
    ) -> AttendanceRecord:
        previous = row.to_domain()
        incoming = record if merge is None else merge(previous, record)
        values = _attendance_values(incoming)
        for col in _ATTENDANCE_OVERWRITE:
            setattr(row, col, values[col])
        await self.session.flush()
        return previous

    async def upsert_attendance(
        self, record: AttendanceRecord, merge: AttendanceMerge | None = None
    ) -> UpsertResult:
        values = _attendance_values(record)
        previous: AttendanceRecord | None = None

        insert = self._native_insert()
        if insert is not None:
            result = await self.session.execute(
                insert(AttendanceRow)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["worker_id", "date"])
            )
            if result.rowcount == 0:
                # Key exists: lock the row, then merge over what was committed.
                existing = await self._select_attendance(
                    record.worker_id, record.date, for_update=True
                )
                if existing is None:
                    raise DuplicateKeyRaceError(record.worker_id, record.date)
                previous = await self._overwrite(existing, record, merge)
        else:
            existing = await self._select_attendance(
                record.worker_id, record.date, for_update=True
            )
            if existing is not None:
                previous = await self._overwrite(existing, record, merge)
            else:
                try:
                    async with self.session.begin_nested():
                        self.session.add(AttendanceRow(**values))
                except IntegrityError as exc:
                    logger.warning(
                        "Attendance insert race for worker %s on %s",
                        record.worker_id,
                        record.date,
                    )
                    raise DuplicateKeyRaceError(record.worker_id, record.date) from exc

        stored = await self._select_attendance(record.worker_id, record.date)
        if stored is None:
            raise RuntimeError("Attendance upsert failed unexpectedly - no row found")
        return UpsertResult(record=stored.to_domain(), previous=previous)

    async def get_attendance(self, worker_id: UUID, on_date: date) -> AttendanceRecord | None:
        row = await self._select_attendance(worker_id, on_date)
        return row.to_domain() if row else None

    async def list_attendance(
        self,
        worker_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        query = select(AttendanceRow).where(AttendanceRow.worker_id == worker_id)
        if start is not None:
            query = query.where(AttendanceRow.date >= start)
        if end is not None:
            query = query.where(AttendanceRow.date <= end)
        result = await self.session.execute(
            query.order_by(AttendanceRow.date.desc()).execution_options(populate_existing=True)
        )
        return [row.to_domain() for row in result.scalars()]

    async def list_attendance_for_date(self, owner_id: UUID, on_date: date) -> list[AttendanceRecord]:
        return await self.list_attendance_for_owner(owner_id, on_date, on_date)

    async def list_attendance_for_owner(
        self,
        owner_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        query = (
            select(AttendanceRow)
            .join(WorkerRow, AttendanceRow.worker_id == WorkerRow.worker_id)
            .where(WorkerRow.owner_id == owner_id)
        )
        if start is not None:
            query = query.where(AttendanceRow.date >= start)
        if end is not None:
            query = query.where(AttendanceRow.date <= end)
        result = await self.session.execute(
            query.order_by(AttendanceRow.date.desc()).execution_options(populate_existing=True)
        )
        return [row.to_domain() for row in result.scalars()]

    # Payments

    async def append_payment(self, record: PaymentRecord) -> PaymentRecord:
        row = PaymentRow(
            payment_id=uuid4(),
            worker_id=record.worker_id,
            amount_minor=to_minor(record.amount),
            payment_type=record.payment_type.value,
            date=record.date,
            note=record.note,
            created_at=record.created_at,
        )
        self.session.add(row)
        await self.session.flush()
        return row.to_domain()

    async def list_payments(
        self,
        worker_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PaymentRecord]:
        query = select(PaymentRow).where(PaymentRow.worker_id == worker_id)
        if start is not None:
            query = query.where(PaymentRow.date >= start)
        if end is not None:
            query = query.where(PaymentRow.date <= end)
        result = await self.session.execute(
            query.order_by(PaymentRow.date.desc(), PaymentRow.created_at.desc())
        )
        return [row.to_domain() for row in result.scalars()]

    async def list_payments_for_owner(
        self,
        owner_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PaymentRecord]:
        query = (
            select(PaymentRow)
            .join(WorkerRow, PaymentRow.worker_id == WorkerRow.worker_id)
            .where(WorkerRow.owner_id == owner_id)
        )
        if start is not None:
            query = query.where(PaymentRow.date >= start)
        if end is not None:
            query = query.where(PaymentRow.date <= end)
        result = await self.session.execute(
            query.order_by(PaymentRow.date.desc(), PaymentRow.created_at.desc())
        )
        return [row.to_domain() for row in result.scalars()]

    # QR code slot

    async def get_current_code(self, owner_id: UUID) -> DailyQRCode | None:
        result = await self.session.execute(
            select(OwnerQRCodeRow)
            .where(OwnerQRCodeRow.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return row.to_domain() if row else None

    async def replace_current_code(self, code: DailyQRCode) -> DailyQRCode:
        values = {
            "owner_id": code.owner_id,
            "code": code.code,
            "date": code.date,
            "valid_from": code.valid_from,
            "valid_until": code.valid_until,
            "created_at": code.created_at,
        }
        insert = self._native_insert()
        if insert is not None:
            stmt = insert(OwnerQRCodeRow).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["owner_id"],
                set_={col: stmt.excluded[col] for col in values if col != "owner_id"},
            )
            await self.session.execute(stmt)
        else:
            await self.session.merge(OwnerQRCodeRow(**values))
            await self.session.flush()

        stored = await self.get_current_code(code.owner_id)
        if stored is None:
            raise RuntimeError("QR code slot write failed unexpectedly - no row found")
        return stored
