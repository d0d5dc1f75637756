"""In-memory store implementing every storage protocol.

Used by tests and by callers embedding the core without a database.
Read-modify-write operations hold a per-key asyncio.Lock so concurrent
writers for the same (worker_id, date) or owner slot serialize. A key's
lock is dropped once nobody holds or waits on it.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import date
from typing import Hashable
from uuid import UUID, uuid4

from kaamtrack.calculators.types import (
    AttendanceRecord,
    DailyQRCode,
    PaymentRecord,
    Worker,
)
from kaamtrack.errors import QRIdTakenError
from kaamtrack.stores.base import AttendanceMerge, UpsertResult, in_range


class InMemoryStore:
    """Worker directory, attendance, payment and QR slot storage in dicts."""

    def __init__(self) -> None:
        self.workers: dict[UUID, Worker] = {}
        self.attendance: dict[tuple[UUID, date], AttendanceRecord] = {}
        self.payments: list[PaymentRecord] = []
        self.qr_codes: dict[UUID, DailyQRCode] = {}
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._lock_users: Counter[Hashable] = Counter()

    @asynccontextmanager
    async def _key_lock(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    def _owner_worker_ids(self, owner_id: UUID) -> set[UUID]:
        return {w.worker_id for w in self.workers.values() if w.owner_id == owner_id}

    # Worker directory

    async def get_worker(self, worker_id: UUID) -> Worker | None:
        return self.workers.get(worker_id)

    async def list_active_workers(self, owner_id: UUID) -> list[Worker]:
        return [w for w in await self.list_workers(owner_id) if w.is_active]

    async def list_workers(self, owner_id: UUID) -> list[Worker]:
        workers = [w for w in self.workers.values() if w.owner_id == owner_id]
        return sorted(workers, key=lambda w: w.created_at, reverse=True)

    async def find_worker_by_qr_id(self, owner_id: UUID, token: str) -> Worker | None:
        for worker in self.workers.values():
            if worker.owner_id == owner_id and worker.qr_id == token:
                return worker
        return None

    async def qr_id_exists(self, qr_id: str) -> bool:
        return any(w.qr_id == qr_id for w in self.workers.values())

    async def add_worker(self, worker: Worker) -> Worker:
        async with self._key_lock(("qr_id", worker.qr_id)):
            if worker.worker_id in self.workers:
                raise ValueError(f"Worker {worker.worker_id} already exists")
            if await self.qr_id_exists(worker.qr_id):
                raise QRIdTakenError(worker.qr_id)
            self.workers[worker.worker_id] = worker
            return worker

    async def save_worker(self, worker: Worker) -> Worker:
        existing = self.workers.get(worker.worker_id)
        if existing is None:
            raise KeyError(worker.worker_id)
        # qr_id, owner and creation time never change after registration
        saved = replace(
            worker,
            qr_id=existing.qr_id,
            owner_id=existing.owner_id,
            created_at=existing.created_at,
        )
        self.workers[worker.worker_id] = saved
        return saved

    # Attendance

    async def upsert_attendance(
        self, record: AttendanceRecord, merge: AttendanceMerge | None = None
    ) -> UpsertResult:
        key = record.key
        async with self._key_lock(("attendance", key)):
            previous = await self.get_attendance(record.worker_id, record.date)
            if previous is None:
                stored = replace(
                    record,
                    record_id=record.record_id or uuid4(),
                    created_at=record.created_at or record.marked_at,
                )
            else:
                incoming = record if merge is None else merge(previous, record)
                stored = replace(
                    incoming,
                    record_id=previous.record_id,
                    created_at=previous.created_at,
                )
            self.attendance[key] = stored
            return UpsertResult(record=stored, previous=previous)

    async def get_attendance(self, worker_id: UUID, on_date: date) -> AttendanceRecord | None:
        return self.attendance.get((worker_id, on_date))

    async def list_attendance(
        self,
        worker_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        records = [
            r
            for (wid, day), r in self.attendance.items()
            if wid == worker_id and in_range(day, start, end)
        ]
        return sorted(records, key=lambda r: r.date, reverse=True)

    async def list_attendance_for_date(self, owner_id: UUID, on_date: date) -> list[AttendanceRecord]:
        return await self.list_attendance_for_owner(owner_id, on_date, on_date)

    async def list_attendance_for_owner(
        self,
        owner_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        worker_ids = self._owner_worker_ids(owner_id)
        records = [
            r
            for (wid, day), r in self.attendance.items()
            if wid in worker_ids and in_range(day, start, end)
        ]
        return sorted(records, key=lambda r: (r.date, str(r.worker_id)), reverse=True)

    # Payments

    async def append_payment(self, record: PaymentRecord) -> PaymentRecord:
        stored = replace(record, payment_id=uuid4())
        self.payments.append(stored)
        return stored

    async def list_payments(
        self,
        worker_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PaymentRecord]:
        payments = [
            p
            for p in reversed(self.payments)
            if p.worker_id == worker_id and in_range(p.date, start, end)
        ]
        return sorted(payments, key=lambda p: p.date, reverse=True)

    async def list_payments_for_owner(
        self,
        owner_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PaymentRecord]:
        worker_ids = self._owner_worker_ids(owner_id)
        payments = [
            p
            for p in reversed(self.payments)
            if p.worker_id in worker_ids and in_range(p.date, start, end)
        ]
        return sorted(payments, key=lambda p: p.date, reverse=True)

    # QR code slot

    async def get_current_code(self, owner_id: UUID) -> DailyQRCode | None:
        return self.qr_codes.get(owner_id)

    async def replace_current_code(self, code: DailyQRCode) -> DailyQRCode:
        async with self._key_lock(("qr", code.owner_id)):
            self.qr_codes[code.owner_id] = code
            return code
