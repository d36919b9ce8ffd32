"""Sales ledger KPI engine package."""

from .application import (
    DashboardFilters,
    ReportConfig,
    build_dashboard,
    build_report,
    calculate_period_metrics,
    resolve_periods,
    run_reporting_pipeline,
)
from .domain import effective_entries
from .ingestion import read_snapshot

__all__ = [
    "DashboardFilters",
    "ReportConfig",
    "build_dashboard",
    "build_report",
    "calculate_period_metrics",
    "effective_entries",
    "read_snapshot",
    "resolve_periods",
    "run_reporting_pipeline",
]
