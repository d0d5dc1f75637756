"""Read-side views: worker stats, today's rollup, dashboard and period reports.

Loads records from the stores and hands them to the pure calculators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, tzinfo
from enum import Enum
from uuid import UUID
from zoneinfo import ZoneInfo

from kaamtrack.calculators import (
    LedgerEngine,
    compute_dashboard,
    compute_period_report,
    month_range,
    week_range,
)
from kaamtrack.calculators.normalize import local_date, normalize_date
from kaamtrack.calculators.types import (
    AttendanceRecord,
    DashboardStats,
    PeriodReport,
    TodayRollup,
    Worker,
    WorkerStats,
)
from kaamtrack.config import DEFAULT_TIMEZONE
from kaamtrack.errors import ErrorKind, Failure, ValidationError
from kaamtrack.services.clock import Clock
from kaamtrack.services.worker_service import resolve_owned_worker, worker_not_found
from kaamtrack.stores.base import AttendanceStore, PaymentStore, WorkerDirectory

RECENT_ATTENDANCE_LIMIT = 7


class ReportPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ReportResult:
    report: PeriodReport | None
    names: dict[UUID, str] = field(default_factory=dict)
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class WorkerSummary:
    """What a worker sees about themselves: stats and their latest days."""

    worker: Worker | None
    stats: WorkerStats | None = None
    recent: list[AttendanceRecord] = field(default_factory=list)
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class ReportService:
    def __init__(
        self,
        directory: WorkerDirectory,
        attendance: AttendanceStore,
        payments: PaymentStore,
        clock: Clock,
        tz: tzinfo = ZoneInfo(DEFAULT_TIMEZONE),
    ):
        self.directory = directory
        self.attendance = attendance
        self.payments = payments
        self.clock = clock
        self.tz = tz

    def today(self) -> date:
        return local_date(self.clock.now(), self.tz)

    async def worker_stats(self, *, owner_id: UUID, worker_id: UUID) -> WorkerStats | None:
        """Lifetime stats for one of the owner's workers; None if unknown."""
        worker = await resolve_owned_worker(self.directory, owner_id, worker_id)
        if worker is None:
            return None
        attendance = await self.attendance.list_attendance(worker.worker_id)
        payments = await self.payments.list_payments(worker.worker_id)
        return LedgerEngine.compute_worker_stats(worker, attendance, payments)

    async def today_rollup(self, owner_id: UUID, on_date: date | None = None) -> TodayRollup:
        day = on_date or self.today()
        workers = await self.directory.list_active_workers(owner_id)
        records = await self.attendance.list_attendance_for_date(owner_id, day)
        return LedgerEngine.compute_today_rollup(workers, records)

    async def dashboard(self, owner_id: UUID) -> DashboardStats:
        today = self.today()
        month_start, month_end = month_range(today)
        workers = await self.directory.list_workers(owner_id)
        month_attendance = await self.attendance.list_attendance_for_owner(
            owner_id, month_start, month_end
        )
        month_payments = await self.payments.list_payments_for_owner(
            owner_id, month_start, month_end
        )
        today_attendance = [r for r in month_attendance if r.date == today]
        return compute_dashboard(workers, today_attendance, month_attendance, month_payments)

    async def period_report(
        self,
        *,
        owner_id: UUID,
        period: object = ReportPeriod.WEEK,
        start: object = None,
        end: object = None,
    ) -> ReportResult:
        """Report for the current week, the current month, or a custom range.

        A custom range needs both ends and `start <= end`.
        """
        try:
            try:
                kind = ReportPeriod(str(getattr(period, "value", period)).strip().lower())
            except ValueError:
                raise ValidationError(
                    ErrorKind.INVALID_INPUT, f"Unknown report period: {period!r}"
                ) from None
            if kind == ReportPeriod.CUSTOM:
                if start is None or end is None:
                    raise ValidationError(
                        ErrorKind.INVALID_INPUT, "Custom reports need a start and an end date"
                    )
                range_start, range_end = normalize_date(start), normalize_date(end)
                if range_end < range_start:
                    raise ValidationError(
                        ErrorKind.INVALID_INPUT, "Report end date is before its start date"
                    )
            elif kind == ReportPeriod.MONTH:
                range_start, range_end = month_range(self.today())
            else:
                range_start, range_end = week_range(self.today())
        except ValidationError as exc:
            return ReportResult(report=None, failure=exc.to_failure())

        workers = await self.directory.list_workers(owner_id)
        attendance = await self.attendance.list_attendance_for_owner(
            owner_id, range_start, range_end
        )
        payments = await self.payments.list_payments_for_owner(owner_id, range_start, range_end)
        report = compute_period_report(workers, attendance, payments, range_start, range_end)
        return ReportResult(report=report, names={w.worker_id: w.name for w in workers})

    async def worker_summary(self, *, owner_id: UUID, worker_id: UUID) -> WorkerSummary:
        worker = await resolve_owned_worker(self.directory, owner_id, worker_id)
        if worker is None:
            return WorkerSummary(worker=None, failure=worker_not_found(worker_id))
        attendance = await self.attendance.list_attendance(worker.worker_id)
        payments = await self.payments.list_payments(worker.worker_id)
        stats = LedgerEngine.compute_worker_stats(worker, attendance, payments)
        recent = sorted(attendance, key=lambda r: r.date, reverse=True)
        return WorkerSummary(
            worker=worker,
            stats=stats,
            recent=recent[:RECENT_ATTENDANCE_LIMIT],
        )
