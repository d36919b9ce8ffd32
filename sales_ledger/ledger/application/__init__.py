"""Application layer package."""

from .dashboard_service import DashboardData, DashboardFilters, build_dashboard, build_kpis
from .period_metrics import PeriodMetrics, calculate_period_metrics, compute_breakeven
from .periods import ComparisonMode, TimeFilter, resolve_periods
from .report_service import ReportConfig, ReportData, build_report, run_reporting_pipeline

__all__ = [
    "ComparisonMode",
    "DashboardData",
    "DashboardFilters",
    "PeriodMetrics",
    "ReportConfig",
    "ReportData",
    "TimeFilter",
    "build_dashboard",
    "build_kpis",
    "build_report",
    "calculate_period_metrics",
    "compute_breakeven",
    "resolve_periods",
    "run_reporting_pipeline",
]
