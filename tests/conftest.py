"""Pytest fixtures for KaamTrack tests."""

from __future__ import annotations

import asyncio
import itertools
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from kaamtrack.calculators.types import (
    AttendanceRecord,
    AttendanceStatus,
    DailyQRCode,
    MarkedVia,
    Worker,
    WorkType,
)
from kaamtrack.config import QRWindowPolicy
from kaamtrack.services import (
    AttendanceService,
    DailyQRCodeStateMachine,
    FixedClock,
    PaymentService,
    QRCodeService,
    ReportService,
    WorkerService,
)
from kaamtrack.stores import InMemoryStore

OWNER_ID = UUID("0b5f6c1e-8d0a-4a4e-9d55-0c3f1a7e2b10")
OTHER_OWNER_ID = UUID("7c2e9a44-31f0-4b7e-8f6d-5a9b2c1d3e4f")

# 2024-06-10 is a Monday. The default UTC window runs 07:00..11:00.
TODAY = date(2024, 6, 10)
MORNING = datetime(2024, 6, 10, 8, 0, tzinfo=timezone.utc)


class TickingClock(FixedClock):
    """Moves one minute forward every time it is read."""

    def now(self) -> datetime:
        instant = super().now()
        self.advance(minutes=1)
        return instant


def make_worker(
    name: str = "Ramesh",
    daily_rate: str = "500",
    *,
    owner_id: UUID = OWNER_ID,
    is_active: bool = True,
    qr_id: str | None = None,
) -> Worker:
    """Build a worker without going through a service."""
    worker_id = uuid4()
    return Worker(
        worker_id=worker_id,
        owner_id=owner_id,
        name=name,
        work_type=WorkType.CONSTRUCTION,
        daily_rate=Decimal(daily_rate),
        qr_id=qr_id or f"WKR-{worker_id.hex[:6].upper()}",
        created_at=MORNING,
        is_active=is_active,
    )


def make_record(
    worker: Worker,
    day: date,
    status: AttendanceStatus = AttendanceStatus.PRESENT,
    via: MarkedVia = MarkedVia.MANUAL,
) -> AttendanceRecord:
    return AttendanceRecord(
        worker_id=worker.worker_id,
        date=day,
        status=status,
        marked_via=via,
        marked_at=MORNING,
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(MORNING)


@pytest.fixture
def policy() -> QRWindowPolicy:
    """Fixed 07:00..11:00 window evaluated in UTC."""
    return QRWindowPolicy(timezone="UTC")


@pytest.fixture
def machine(policy: QRWindowPolicy) -> DailyQRCodeStateMachine:
    counter = itertools.count(1)
    return DailyQRCodeStateMachine(policy, token_factory=lambda: f"tok{next(counter)}")


class YieldingStore(InMemoryStore):
    """In-memory store whose reads give way to the event loop.

    Concurrent service calls then interleave between their reads and writes
    the way they would against a real database.
    """

    async def get_worker(self, worker_id: UUID) -> Worker | None:
        await asyncio.sleep(0)
        return await super().get_worker(worker_id)

    async def find_worker_by_qr_id(self, owner_id: UUID, token: str) -> Worker | None:
        await asyncio.sleep(0)
        return await super().find_worker_by_qr_id(owner_id, token)

    async def qr_id_exists(self, qr_id: str) -> bool:
        await asyncio.sleep(0)
        return await super().qr_id_exists(qr_id)

    async def get_attendance(self, worker_id: UUID, on_date: date) -> AttendanceRecord | None:
        await asyncio.sleep(0)
        return await super().get_attendance(worker_id, on_date)

    async def get_current_code(self, owner_id: UUID) -> DailyQRCode | None:
        await asyncio.sleep(0)
        return await super().get_current_code(owner_id)


@pytest.fixture
def store() -> InMemoryStore:
    return YieldingStore()


@pytest.fixture
def worker_service(store: InMemoryStore, clock: FixedClock) -> WorkerService:
    return WorkerService(store, clock, default_daily_rate=Decimal("500"))


@pytest.fixture
def qr_service(
    store: InMemoryStore, machine: DailyQRCodeStateMachine, clock: FixedClock
) -> QRCodeService:
    return QRCodeService(store, machine, clock)


@pytest.fixture
def attendance_service(
    store: InMemoryStore,
    qr_service: QRCodeService,
    clock: FixedClock,
    policy: QRWindowPolicy,
) -> AttendanceService:
    return AttendanceService(store, store, qr_service, clock, tz=policy.tz)


@pytest.fixture
def payment_service(
    store: InMemoryStore, clock: FixedClock, policy: QRWindowPolicy
) -> PaymentService:
    return PaymentService(store, store, clock, tz=policy.tz)


@pytest.fixture
def report_service(
    store: InMemoryStore, clock: FixedClock, policy: QRWindowPolicy
) -> ReportService:
    return ReportService(store, store, store, clock, tz=policy.tz)


@pytest.fixture
async def worker(worker_service: WorkerService) -> Worker:
    """A registered active worker on a 500/day rate."""
    result = await worker_service.create_worker(
        owner_id=OWNER_ID, name="Ramesh Kumar", work_type="construction", daily_rate="500"
    )
    assert result.ok
    assert result.worker is not None
    return result.worker
