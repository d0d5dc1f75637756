"""Tests for the ledger engine."""

from datetime import date, timedelta
from decimal import Decimal

from kaamtrack.calculators.ledger import LedgerEngine
from kaamtrack.calculators.types import AttendanceStatus, PaymentRecord, PaymentType

from tests.conftest import TODAY, make_record, make_worker


def payment(worker, amount: str, payment_type: PaymentType, day: date = TODAY) -> PaymentRecord:
    return PaymentRecord(
        worker_id=worker.worker_id,
        amount=Decimal(amount),
        payment_type=payment_type,
        date=day,
    )


class TestComputeWorkerStats:
    """Per-worker aggregates."""

    def test_mixed_attendance_with_advance(self):
        """2 present + 1 half-day at 500/day with a 200 advance."""
        worker = make_worker(daily_rate="500")
        attendance = [
            make_record(worker, TODAY, AttendanceStatus.PRESENT),
            make_record(worker, TODAY + timedelta(days=1), AttendanceStatus.PRESENT),
            make_record(worker, TODAY + timedelta(days=2), AttendanceStatus.HALF_DAY),
        ]
        payments = [payment(worker, "200", PaymentType.ADVANCE)]

        stats = LedgerEngine.compute_worker_stats(worker, attendance, payments)

        assert stats is not None
        assert stats.present_days == 2
        assert stats.half_days == 1
        assert stats.absent_days == 0
        assert stats.total_earnings == Decimal("1250")
        assert stats.total_advances == Decimal("200")
        assert stats.total_paid == Decimal("0")
        assert stats.balance == Decimal("1050")
        assert stats.owes_worker is True

    def test_unknown_worker_returns_none(self):
        assert LedgerEngine.compute_worker_stats(None, [], []) is None

    def test_no_records_gives_zero_balance(self):
        stats = LedgerEngine.compute_worker_stats(make_worker(), [], [])

        assert stats is not None
        assert stats.total_earnings == Decimal("0")
        assert stats.balance == Decimal("0")
        assert not stats.owes_worker and not stats.overpaid

    def test_zero_rate_earns_nothing(self):
        worker = make_worker(daily_rate="0")
        attendance = [
            make_record(worker, TODAY + timedelta(days=i), AttendanceStatus.PRESENT)
            for i in range(5)
        ]

        stats = LedgerEngine.compute_worker_stats(worker, attendance, [])

        assert stats is not None
        assert stats.present_days == 5
        assert stats.total_earnings == Decimal("0")

    def test_overpaid_worker_has_negative_balance(self):
        worker = make_worker(daily_rate="400")
        attendance = [make_record(worker, TODAY)]
        payments = [
            payment(worker, "300", PaymentType.ADVANCE),
            payment(worker, "250", PaymentType.PAYMENT),
        ]

        stats = LedgerEngine.compute_worker_stats(worker, attendance, payments)

        assert stats is not None
        assert stats.balance == Decimal("-150")
        assert stats.overpaid is True

    def test_absent_records_counted_but_earn_nothing(self):
        worker = make_worker(daily_rate="500")
        attendance = [
            make_record(worker, TODAY, AttendanceStatus.ABSENT),
            make_record(worker, TODAY + timedelta(days=1), AttendanceStatus.PRESENT),
        ]

        stats = LedgerEngine.compute_worker_stats(worker, attendance, [])

        assert stats is not None
        assert stats.absent_days == 1
        assert stats.total_earnings == Decimal("500")

    def test_bonus_and_deduction_do_not_move_balance(self):
        worker = make_worker(daily_rate="500")
        attendance = [make_record(worker, TODAY)]
        payments = [
            payment(worker, "100", PaymentType.BONUS),
            payment(worker, "50", PaymentType.DEDUCTION),
        ]

        stats = LedgerEngine.compute_worker_stats(worker, attendance, payments)

        assert stats is not None
        assert stats.balance == Decimal("500")

    def test_records_for_other_workers_are_ignored(self):
        worker = make_worker()
        other = make_worker("Suresh")
        attendance = [make_record(worker, TODAY), make_record(other, TODAY)]
        payments = [payment(other, "1000", PaymentType.PAYMENT)]

        stats = LedgerEngine.compute_worker_stats(worker, attendance, payments)

        assert stats is not None
        assert stats.present_days == 1
        assert stats.total_paid == Decimal("0")

    def test_half_day_on_odd_rate_keeps_half_paisa(self):
        """A half-day at 333.33 is 166.665; nothing is rounded away."""
        worker = make_worker(daily_rate="333.33")
        attendance = [make_record(worker, TODAY, AttendanceStatus.HALF_DAY)]

        stats = LedgerEngine.compute_worker_stats(worker, attendance, [])

        assert stats is not None
        assert stats.total_earnings == Decimal("166.665")
        assert stats.balance == stats.total_earnings

    def test_repeated_small_payments_do_not_drift(self):
        worker = make_worker(daily_rate="0")
        payments = [payment(worker, "0.10", PaymentType.PAYMENT) for _ in range(1000)]

        stats = LedgerEngine.compute_worker_stats(worker, [], payments)

        assert stats is not None
        assert stats.total_paid == Decimal("100.00")
        assert stats.balance == Decimal("-100.00")

    def test_pure_and_deterministic(self):
        worker = make_worker(daily_rate="650")
        attendance = [make_record(worker, TODAY), make_record(worker, TODAY + timedelta(days=1))]
        payments = [payment(worker, "120.50", PaymentType.ADVANCE)]

        first = LedgerEngine.compute_worker_stats(worker, attendance, payments)
        second = LedgerEngine.compute_worker_stats(worker, attendance, payments)

        assert first == second

    def test_deactivated_worker_keeps_history(self):
        worker = make_worker(daily_rate="500", is_active=False)
        attendance = [make_record(worker, TODAY)]

        stats = LedgerEngine.compute_worker_stats(worker, attendance, [])

        assert stats is not None
        assert stats.total_earnings == Decimal("500")


class TestComputeTodayRollup:
    """Counts across the active workforce for one day."""

    def test_unmarked_workers_count_as_absent(self):
        present = make_worker("A")
        half = make_worker("B")
        unmarked = make_worker("C")
        records = [
            make_record(present, TODAY, AttendanceStatus.PRESENT),
            make_record(half, TODAY, AttendanceStatus.HALF_DAY),
        ]

        rollup = LedgerEngine.compute_today_rollup([present, half, unmarked], records)

        assert rollup.total == 3
        assert rollup.present == 1
        assert rollup.half_day == 1
        assert rollup.absent == 1
        assert rollup.explicit_absent == 0
        assert rollup.marked == 2

    def test_explicit_absent_is_separate_from_implied(self):
        marked_absent = make_worker("A")
        unmarked = make_worker("B")
        records = [make_record(marked_absent, TODAY, AttendanceStatus.ABSENT)]

        rollup = LedgerEngine.compute_today_rollup([marked_absent, unmarked], records)

        assert rollup.absent == 1
        assert rollup.explicit_absent == 1
        assert rollup.total == 2

    def test_inactive_workers_are_left_out(self):
        active = make_worker("A")
        gone = make_worker("B", is_active=False)
        records = [make_record(gone, TODAY, AttendanceStatus.PRESENT)]

        rollup = LedgerEngine.compute_today_rollup([active, gone], records)

        assert rollup.total == 1
        assert rollup.present == 0
        assert rollup.absent == 1

    def test_no_workers(self):
        rollup = LedgerEngine.compute_today_rollup([], [])

        assert (rollup.present, rollup.half_day, rollup.absent, rollup.total) == (0, 0, 0, 0)
