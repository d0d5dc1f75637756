"""Owner reporting endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query

from kaamtrack.api.dependencies import OwnerId, Reports
from kaamtrack.api.errors import require_result
from kaamtrack.api.schemas import (
    DashboardResponse,
    ErrorResponse,
    PeriodReportResponse,
    PeriodTotalsResponse,
    TodayRollupResponse,
    WorkerStatsResponse,
)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/today", response_model=TodayRollupResponse)
async def today_rollup(
    owner_id: OwnerId,
    reports: Reports,
    on_date: Annotated[date | None, Query(alias="date")] = None,
) -> TodayRollupResponse:
    """Present / half-day / absent counts across active workers."""
    day = on_date or reports.today()
    rollup = await reports.today_rollup(owner_id, day)
    return TodayRollupResponse(
        date=day,
        present=rollup.present,
        half_day=rollup.half_day,
        absent=rollup.absent,
        explicit_absent=rollup.explicit_absent,
        marked=rollup.marked,
        total=rollup.total,
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(owner_id: OwnerId, reports: Reports) -> DashboardResponse:
    stats = await reports.dashboard(owner_id)
    return DashboardResponse.model_validate(stats)


@router.get(
    "/period",
    response_model=PeriodReportResponse,
    responses={422: {"model": ErrorResponse}},
)
async def period_report(
    owner_id: OwnerId,
    reports: Reports,
    period: str = "week",
    start: Annotated[date | None, Query()] = None,
    end: Annotated[date | None, Query()] = None,
) -> PeriodReportResponse:
    """Weekly, monthly or custom-range report with per-worker balances."""
    result = await reports.period_report(owner_id=owner_id, period=period, start=start, end=end)
    report = require_result(result.report, result.failure)

    rows = []
    for stats in report.workers:
        row = WorkerStatsResponse.model_validate(stats)
        row.worker_name = result.names.get(stats.worker_id)
        rows.append(row)

    return PeriodReportResponse(
        start=report.start,
        end=report.end,
        workers=rows,
        totals=PeriodTotalsResponse.model_validate(report.totals),
    )
