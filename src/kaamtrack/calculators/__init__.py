"""Ledger and report calculations."""

from kaamtrack.calculators.ledger import LedgerEngine
from kaamtrack.calculators.reports import (
    compute_dashboard,
    compute_period_report,
    month_range,
    week_range,
)

__all__ = [
    "LedgerEngine",
    "compute_dashboard",
    "compute_period_report",
    "month_range",
    "week_range",
]
