"""Ledger engine: attendance and payment streams to per-worker balances.

Pure functions over immutable inputs. Nothing here reads a clock, touches
storage or logs.

Sign convention (UI layers key colour and label on it):
- balance > 0: owner still owes the worker
- balance < 0: worker was paid more than earned
"""

from __future__ import annotations

from collections.abc import Iterable

from kaamtrack.calculators.money import from_half_minor, from_minor, to_minor
from kaamtrack.calculators.types import (
    AttendanceRecord,
    AttendanceStatus,
    PaymentRecord,
    PaymentType,
    TodayRollup,
    Worker,
    WorkerStats,
)


class LedgerEngine:
    """Computes worker stats and daily rollups.

    Money is summed as integer minor units. Earnings are summed in
    half-minor units because a half-day is worth half the daily rate.
    """

    @staticmethod
    def compute_worker_stats(
        worker: Worker | None,
        attendance_records: Iterable[AttendanceRecord],
        payment_records: Iterable[PaymentRecord],
    ) -> WorkerStats | None:
        """Derive attendance counts, earnings, payments and balance for a worker.

        Returns None when the worker could not be resolved. Records belonging
        to other workers are ignored. The worker's active flag is not
        consulted: deactivated workers keep their full history.
        """
        if worker is None:
            return None

        present_days = 0
        half_days = 0
        absent_days = 0
        for record in attendance_records:
            if record.worker_id != worker.worker_id:
                continue
            if record.status == AttendanceStatus.PRESENT:
                present_days += 1
            elif record.status == AttendanceStatus.HALF_DAY:
                half_days += 1
            elif record.status == AttendanceStatus.ABSENT:
                absent_days += 1

        advances_minor = 0
        paid_minor = 0
        for payment in payment_records:
            if payment.worker_id != worker.worker_id:
                continue
            if payment.payment_type == PaymentType.ADVANCE:
                advances_minor += to_minor(payment.amount)
            elif payment.payment_type == PaymentType.PAYMENT:
                paid_minor += to_minor(payment.amount)
            # bonus / deduction are stored but do not move the balance yet

        rate_minor = to_minor(worker.daily_rate)
        earnings_half_minor = present_days * rate_minor * 2 + half_days * rate_minor
        balance_half_minor = earnings_half_minor - 2 * (advances_minor + paid_minor)

        return WorkerStats(
            worker_id=worker.worker_id,
            present_days=present_days,
            half_days=half_days,
            absent_days=absent_days,
            total_earnings=from_half_minor(earnings_half_minor),
            total_advances=from_minor(advances_minor),
            total_paid=from_minor(paid_minor),
            balance=from_half_minor(balance_half_minor),
        )

    @staticmethod
    def compute_today_rollup(
        all_workers: Iterable[Worker],
        attendance_for_today: Iterable[AttendanceRecord],
    ) -> TodayRollup:
        """Count today's attendance across active workers.

        A worker with no record today is counted in `absent`. A worker with
        an explicit absent record is counted in `explicit_absent` only.
        Records for inactive or unknown workers are ignored.
        """
        active_ids = {w.worker_id for w in all_workers if w.is_active}

        present = 0
        half_day = 0
        explicit_absent = 0
        marked: set = set()
        for record in attendance_for_today:
            if record.worker_id not in active_ids:
                continue
            marked.add(record.worker_id)
            if record.status == AttendanceStatus.PRESENT:
                present += 1
            elif record.status == AttendanceStatus.HALF_DAY:
                half_day += 1
            elif record.status == AttendanceStatus.ABSENT:
                explicit_absent += 1

        total = len(active_ids)
        return TodayRollup(
            present=present,
            half_day=half_day,
            absent=total - len(marked),
            explicit_absent=explicit_absent,
            total=total,
        )
