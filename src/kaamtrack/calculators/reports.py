"""Period reports and dashboard figures built on the ledger engine."""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta

from kaamtrack.calculators.ledger import LedgerEngine
from kaamtrack.calculators.money import from_half_minor, from_minor, to_minor
from kaamtrack.calculators.types import (
    AttendanceRecord,
    AttendanceStatus,
    DashboardStats,
    PaymentRecord,
    PaymentType,
    PeriodReport,
    Worker,
)


def week_range(day: date) -> tuple[date, date]:
    """Monday..Sunday containing `day`."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def month_range(day: date) -> tuple[date, date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def _in_range(value: date, start: date, end: date) -> bool:
    return start <= value <= end


def compute_period_report(
    workers: Iterable[Worker],
    attendance: Iterable[AttendanceRecord],
    payments: Iterable[PaymentRecord],
    start: date,
    end: date,
) -> PeriodReport:
    """Per-worker stats for records dated within [start, end], plus totals.

    Active workers always appear. Inactive workers appear only when they
    have attendance or payments inside the range.
    """
    if end < start:
        raise ValueError(f"Report end {end} is before start {start}")

    attendance_by_worker: dict = defaultdict(list)
    for record in attendance:
        if _in_range(record.date, start, end):
            attendance_by_worker[record.worker_id].append(record)

    payments_by_worker: dict = defaultdict(list)
    for payment in payments:
        if _in_range(payment.date, start, end):
            payments_by_worker[payment.worker_id].append(payment)

    report = PeriodReport(start=start, end=end)
    for worker in sorted(workers, key=lambda w: (w.name.lower(), str(w.worker_id))):
        worker_attendance = attendance_by_worker.get(worker.worker_id, [])
        worker_payments = payments_by_worker.get(worker.worker_id, [])
        if not worker.is_active and not worker_attendance and not worker_payments:
            continue

        stats = LedgerEngine.compute_worker_stats(worker, worker_attendance, worker_payments)
        if stats is None:
            continue
        report.workers.append(stats)

        totals = report.totals
        totals.present_days += stats.present_days
        totals.half_days += stats.half_days
        totals.total_earnings += stats.total_earnings
        totals.total_advances += stats.total_advances
        totals.total_paid += stats.total_paid

    return report


def compute_dashboard(
    workers: Iterable[Worker],
    today_attendance: Iterable[AttendanceRecord],
    month_attendance: Iterable[AttendanceRecord],
    month_payments: Iterable[PaymentRecord],
) -> DashboardStats:
    """Headline numbers: headcount, present today, month wages and payouts.

    Month earnings use each worker's current daily rate, including
    workers deactivated since.
    """
    workers = list(workers)
    rates = {w.worker_id: to_minor(w.daily_rate) for w in workers}
    active_ids = {w.worker_id for w in workers if w.is_active}

    present_today = sum(
        1
        for r in today_attendance
        if r.worker_id in active_ids and r.status == AttendanceStatus.PRESENT
    )

    earnings_half_minor = 0
    for record in month_attendance:
        rate = rates.get(record.worker_id)
        if rate is None:
            continue
        if record.status == AttendanceStatus.PRESENT:
            earnings_half_minor += rate * 2
        elif record.status == AttendanceStatus.HALF_DAY:
            earnings_half_minor += rate

    payments_minor = sum(
        to_minor(p.amount)
        for p in month_payments
        if p.worker_id in rates
        and p.payment_type in (PaymentType.ADVANCE, PaymentType.PAYMENT)
    )

    return DashboardStats(
        total_workers=len(active_ids),
        present_today=present_today,
        month_earnings=from_half_minor(earnings_half_minor),
        month_payments=from_minor(payments_minor),
    )
