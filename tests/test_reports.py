"""Tests for period reports, the dashboard and the report service."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from kaamtrack.calculators import compute_dashboard, compute_period_report, month_range, week_range
from kaamtrack.calculators.types import AttendanceStatus, PaymentRecord, PaymentType
from kaamtrack.errors import ErrorKind
from kaamtrack.services import AttendanceService, PaymentService, ReportService, WorkerService

from tests.conftest import OTHER_OWNER_ID, OWNER_ID, TODAY, make_record, make_worker


class TestRanges:
    def test_week_is_monday_to_sunday(self):
        assert week_range(date(2024, 6, 12)) == (date(2024, 6, 10), date(2024, 6, 16))
        assert week_range(date(2024, 6, 10)) == (date(2024, 6, 10), date(2024, 6, 16))

    def test_month_handles_leap_february(self):
        assert month_range(date(2024, 2, 14)) == (date(2024, 2, 1), date(2024, 2, 29))


class TestComputePeriodReport:
    def test_totals_across_workers(self):
        asha = make_worker("Asha", "400")
        bharat = make_worker("Bharat", "600")
        attendance = [
            make_record(asha, TODAY),
            make_record(asha, TODAY + timedelta(days=1), AttendanceStatus.HALF_DAY),
            make_record(bharat, TODAY),
            make_record(bharat, TODAY - timedelta(days=30)),
        ]
        payments = [
            PaymentRecord(bharat.worker_id, Decimal("100"), PaymentType.ADVANCE, TODAY),
        ]

        report = compute_period_report(
            [bharat, asha], attendance, payments, TODAY, TODAY + timedelta(days=6)
        )

        assert [s.worker_id for s in report.workers] == [asha.worker_id, bharat.worker_id]
        assert report.totals.present_days == 2
        assert report.totals.half_days == 1
        assert report.totals.total_earnings == Decimal("1200")
        assert report.totals.total_advances == Decimal("100")
        assert report.totals.balance == Decimal("1100")

    def test_inactive_worker_only_with_records_in_range(self):
        active = make_worker("Active")
        left_with_history = make_worker("Left", is_active=False)
        left_long_ago = make_worker("Gone", is_active=False)
        attendance = [
            make_record(left_with_history, TODAY),
            make_record(left_long_ago, TODAY - timedelta(days=60)),
        ]

        report = compute_period_report(
            [active, left_with_history, left_long_ago], attendance, [], TODAY, TODAY
        )

        ids = {s.worker_id for s in report.workers}
        assert ids == {active.worker_id, left_with_history.worker_id}

    def test_end_before_start(self):
        with pytest.raises(ValueError):
            compute_period_report([], [], [], TODAY, TODAY - timedelta(days=1))


class TestComputeDashboard:
    def test_headline_figures(self):
        asha = make_worker("Asha", "500")
        gone = make_worker("Gone", "300", is_active=False)
        month = [
            make_record(asha, TODAY),
            make_record(asha, TODAY - timedelta(days=1), AttendanceStatus.HALF_DAY),
            make_record(gone, TODAY - timedelta(days=2)),
        ]
        payments = [
            PaymentRecord(asha.worker_id, Decimal("200"), PaymentType.ADVANCE, TODAY),
            PaymentRecord(asha.worker_id, Decimal("50"), PaymentType.BONUS, TODAY),
        ]

        stats = compute_dashboard([asha, gone], [month[0]], month, payments)

        assert stats.total_workers == 1
        assert stats.present_today == 1
        assert stats.month_earnings == Decimal("1050")
        assert stats.month_payments == Decimal("200")


class TestReportService:
    async def test_today_rollup_counts_unmarked_as_absent(
        self,
        report_service: ReportService,
        worker_service: WorkerService,
        attendance_service: AttendanceService,
    ):
        marked = (await worker_service.create_worker(owner_id=OWNER_ID, name="Marked")).worker
        await worker_service.create_worker(owner_id=OWNER_ID, name="Unmarked")
        await attendance_service.mark_attendance(
            owner_id=OWNER_ID, worker_id=marked.worker_id, status="present"
        )

        rollup = await report_service.today_rollup(OWNER_ID)

        assert (rollup.present, rollup.absent, rollup.total) == (1, 1, 2)

    async def test_worker_stats_scoped_to_owner(self, report_service: ReportService, worker):
        assert await report_service.worker_stats(owner_id=OWNER_ID, worker_id=worker.worker_id)
        assert (
            await report_service.worker_stats(owner_id=OTHER_OWNER_ID, worker_id=worker.worker_id)
            is None
        )

    async def test_weekly_report(
        self,
        report_service: ReportService,
        attendance_service: AttendanceService,
        payment_service: PaymentService,
        worker,
    ):
        for offset in range(3):
            await attendance_service.mark_attendance(
                owner_id=OWNER_ID,
                worker_id=worker.worker_id,
                status="present",
                on_date=TODAY + timedelta(days=offset),
            )
        await attendance_service.mark_attendance(
            owner_id=OWNER_ID,
            worker_id=worker.worker_id,
            status="present",
            on_date=TODAY - timedelta(days=1),
        )
        await payment_service.record_payment(
            owner_id=OWNER_ID, worker_id=worker.worker_id, amount="300", payment_type="payment"
        )

        result = await report_service.period_report(owner_id=OWNER_ID, period="week")

        assert result.ok
        assert (result.report.start, result.report.end) == week_range(TODAY)
        assert result.report.totals.present_days == 3
        assert result.report.totals.balance == Decimal("1200")
        assert result.names[worker.worker_id] == worker.name

    async def test_custom_range_validation(self, report_service: ReportService):
        missing_end = await report_service.period_report(
            owner_id=OWNER_ID, period="custom", start="2024-06-01"
        )
        reversed_range = await report_service.period_report(
            owner_id=OWNER_ID, period="custom", start="2024-06-30", end="2024-06-01"
        )
        unknown = await report_service.period_report(owner_id=OWNER_ID, period="year")

        assert missing_end.failure.kind == ErrorKind.INVALID_INPUT
        assert reversed_range.failure.kind == ErrorKind.INVALID_INPUT
        assert unknown.failure.kind == ErrorKind.INVALID_INPUT

    async def test_worker_summary_has_last_seven_days(
        self, report_service: ReportService, attendance_service: AttendanceService, worker
    ):
        for offset in range(10):
            await attendance_service.mark_attendance(
                owner_id=OWNER_ID,
                worker_id=worker.worker_id,
                status="present",
                on_date=TODAY - timedelta(days=offset),
            )

        summary = await report_service.worker_summary(
            owner_id=OWNER_ID, worker_id=worker.worker_id
        )

        assert summary.ok
        assert len(summary.recent) == 7
        assert summary.recent[0].date == TODAY
        assert summary.stats.present_days == 10
