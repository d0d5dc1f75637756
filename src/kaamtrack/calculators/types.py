"""Type definitions for the ledger and attendance core.

The core only ever sees these already-validated records. Storage rows and
API payloads are converted into them at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class AttendanceStatus(str, Enum):
    """Attendance status for one worker on one date."""

    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"


class MarkedVia(str, Enum):
    """How an attendance record was produced."""

    QR = "qr"
    MANUAL = "manual"


class PaymentType(str, Enum):
    """Payment record types.

    Only ADVANCE and PAYMENT affect the balance today; BONUS and DEDUCTION
    are accepted and stored for later use.
    """

    ADVANCE = "advance"
    PAYMENT = "payment"
    BONUS = "bonus"
    DEDUCTION = "deduction"


class WorkType(str, Enum):
    """Worker category tag."""

    CONSTRUCTION = "construction"
    FURNITURE = "furniture"
    DRIVER = "driver"
    FACTORY = "factory"
    FARM = "farm"
    HELPER = "helper"
    OTHER = "other"


class Role(str, Enum):
    """Role supplied by the identity collaborator."""

    OWNER = "owner"
    WORKER = "worker"


@dataclass(frozen=True)
class Worker:
    """A daily-wage worker owned by exactly one owner."""

    worker_id: UUID
    owner_id: UUID
    name: str
    work_type: WorkType
    daily_rate: Decimal
    qr_id: str
    created_at: datetime
    phone: str | None = None
    is_active: bool = True

    def with_changes(self, **changes: Any) -> Worker:
        return replace(self, **changes)


@dataclass(frozen=True)
class AttendanceRecord:
    """Attendance for (worker_id, date); at most one exists per key."""

    worker_id: UUID
    date: date
    status: AttendanceStatus
    marked_via: MarkedVia
    marked_at: datetime
    check_in_at: datetime | None = None
    check_out_at: datetime | None = None
    note: str | None = None
    created_at: datetime | None = None
    record_id: UUID | None = None

    @property
    def key(self) -> tuple[UUID, date]:
        return (self.worker_id, self.date)


@dataclass(frozen=True)
class PaymentRecord:
    """Append-only money movement between owner and worker."""

    worker_id: UUID
    amount: Decimal  # Always > 0
    payment_type: PaymentType
    date: date
    note: str | None = None
    created_at: datetime | None = None
    payment_id: UUID | None = None


@dataclass(frozen=True)
class DailyQRCode:
    """The single current check-in code for one owner."""

    owner_id: UUID
    code: str
    date: date
    valid_from: datetime
    valid_until: datetime
    created_at: datetime


@dataclass(frozen=True)
class Identity:
    """Verified caller identity handed over by the auth collaborator."""

    owner_id: UUID
    role: Role = Role.OWNER
    worker_id: UUID | None = None

    @property
    def is_owner(self) -> bool:
        return self.role == Role.OWNER


@dataclass(frozen=True)
class WorkerStats:
    """Ledger aggregates for one worker.

    `absent_days` counts explicit absent records only. A date with no
    record contributes nothing here.
    """

    worker_id: UUID
    present_days: int
    half_days: int
    absent_days: int
    total_earnings: Decimal
    total_advances: Decimal
    total_paid: Decimal
    balance: Decimal  # > 0: owner owes worker; < 0: worker overpaid

    @property
    def owes_worker(self) -> bool:
        return self.balance > 0

    @property
    def overpaid(self) -> bool:
        return self.balance < 0


@dataclass(frozen=True)
class TodayRollup:
    """Counts across the active workforce for a single day.

    `absent` is the implied count: active workers with no record at all.
    `explicit_absent` counts records marked absent; those workers are not
    part of `absent`.
    """

    present: int
    half_day: int
    absent: int
    explicit_absent: int
    total: int

    @property
    def marked(self) -> int:
        return self.total - self.absent


@dataclass
class PeriodTotals:
    """Running totals across workers for a report period."""

    present_days: int = 0
    half_days: int = 0
    total_earnings: Decimal = Decimal("0")
    total_advances: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")

    @property
    def balance(self) -> Decimal:
        return self.total_earnings - self.total_advances - self.total_paid


@dataclass
class PeriodReport:
    """Per-worker stats and totals for a date range."""

    start: date
    end: date
    workers: list[WorkerStats] = field(default_factory=list)
    totals: PeriodTotals = field(default_factory=PeriodTotals)


@dataclass(frozen=True)
class DashboardStats:
    """Owner dashboard headline figures."""

    total_workers: int
    present_today: int
    month_earnings: Decimal
    month_payments: Decimal
