"""Report generation: aggregate snapshot plus per-product and per-campaign breakdowns."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from time import perf_counter
from typing import Any, Dict, List, Mapping, Sequence

import polars as pl

from ledger.application.breakdowns import (
    CampaignPerformance,
    ProductProfitability,
    campaign_performance,
    product_profitability,
)
from ledger.application.dashboard_service import OrderSizeShare, order_distribution
from ledger.application.period_metrics import (
    Breakeven,
    PeriodMetrics,
    calculate_period_metrics,
    compute_breakeven,
    entry_financials,
    product_index,
)
from ledger.application.periods import DateWindow
from ledger.application.reporting.rendering import breakeven_comment, report_overall_comment
from ledger.application.reporting.selectors import (
    SpendVsRevenueShare,
    champions_and_offenders,
    select_entries,
    share_deltas,
)
from ledger.config import PipelineConfig, load_config
from ledger.domain.consolidation import effective_entries
from ledger.domain.models import DailyEntry, Product, SeasonFilter, Settings, SourceFilter
from ledger.infrastructure.excel_repository import save_output_workbook
from ledger.infrastructure.report_exporter import save_summary_html, save_summary_json
from ledger.infrastructure.snapshot_repository import load_snapshot


class ReportSection(str, Enum):
    KPI_SUMMARY = "KPI_SUMMARY"
    SALES_CHART = "SALES_CHART"
    PRODUCT_PROFITABILITY = "PRODUCT_PROFITABILITY"
    CAMPAIGN_PERFORMANCE = "CAMPAIGN_PERFORMANCE"
    ORDER_DISTRIBUTION = "ORDER_DISTRIBUTION"


ALL_SECTIONS: tuple[ReportSection, ...] = tuple(ReportSection)


@dataclass(frozen=True)
class ReportConfig:
    """Frozen report request; stays stable after generation regardless of live filters."""

    start: date
    end: date
    product_ids: tuple[str, ...] = ()
    source: SourceFilter = SourceFilter.ALL
    season: SeasonFilter = SeasonFilter.ALL
    sections: tuple[ReportSection, ...] = ALL_SECTIONS

    @property
    def window(self) -> DateWindow:
        return DateWindow(
            datetime.combine(self.start, datetime.min.time()),
            datetime.combine(self.end, datetime.max.time()),
        )


@dataclass(frozen=True)
class SalesPoint:
    date: date
    total_sales: float


@dataclass(frozen=True)
class ReportData:
    config: ReportConfig
    metrics: PeriodMetrics
    breakeven: Breakeven
    spend_vs_revenue_share: SpendVsRevenueShare
    sales_chart: List[SalesPoint] = field(default_factory=list)
    product_profitability: List[ProductProfitability] = field(default_factory=list)
    campaign_performance: List[CampaignPerformance] = field(default_factory=list)
    order_distribution: List[OrderSizeShare] = field(default_factory=list)

    @property
    def total_orders(self) -> int:
        # Halves round up.
        return math.floor(self.metrics.total_orders_input + 0.5)


def sales_by_date(
    entries: Sequence[DailyEntry],
    product_map: Mapping[str, Product],
    settings: Settings,
) -> List[SalesPoint]:
    rows = [
        {"date": entry.date, "revenue": entry_financials(entry, product_map[entry.product_id], settings).revenue}
        for entry in entries
        if entry.product_id in product_map
    ]
    if not rows:
        return []
    frame = pl.DataFrame(rows).group_by("date").agg(pl.col("revenue").sum()).sort("date")
    return [SalesPoint(date=row["date"], total_sales=row["revenue"]) for row in frame.to_dicts()]


def build_report(
    entries: Sequence[DailyEntry],
    products: Sequence[Product],
    settings: Settings,
    config: ReportConfig,
) -> ReportData:
    product_map = product_index(products)
    window = config.window
    scoped = select_entries(
        effective_entries(entries, product_map),
        product_map,
        in_range=lambda entry: window.contains(entry.date),
        product_ids=config.product_ids,
        source=config.source,
        season=config.season,
    )
    metrics = calculate_period_metrics(scoped, product_map, settings)
    return ReportData(
        config=config,
        metrics=metrics,
        breakeven=compute_breakeven(metrics),
        spend_vs_revenue_share=champions_and_offenders(share_deltas(metrics, product_map)),
        sales_chart=sales_by_date(scoped, product_map, settings),
        product_profitability=product_profitability(scoped, products, settings, product_ids=config.product_ids),
        campaign_performance=campaign_performance(scoped, product_map, settings),
        order_distribution=order_distribution(settings),
    )


def _metrics_summary(report: ReportData) -> Dict[str, Any]:
    metrics = report.metrics
    return {
        "total_sales": metrics.total_sales,
        "gross_profit": metrics.gross_profit,
        "total_orders": report.total_orders,
        "total_units_sold": metrics.total_units_sold_input,
        "total_ad_spend": metrics.total_ad_spend,
        "total_investment": metrics.total_investment,
        "cpo": metrics.cpo,
        "cps": metrics.cps,
        "roas": metrics.roas,
        "roi": metrics.roi,
        "aov": metrics.aov,
        "upt": metrics.upt,
        "applied_delivery_rate": metrics.applied_delivery_rate,
    }


def _share_rows(rows: Sequence[Any]) -> List[Dict[str, Any]]:
    return [{"product_name": row.product_name, "delta": row.delta} for row in rows]


def build_report_summary(report: ReportData, currency: str) -> Dict[str, Any]:
    """JSON-ready summary limited to the configured sections."""
    sections = set(report.config.sections)
    config = report.config
    summary: Dict[str, Any] = {
        "config": {
            "start": config.start.isoformat(),
            "end": config.end.isoformat(),
            "product_ids": list(config.product_ids),
            "source": config.source.value,
            "season": config.season.value,
            "sections": [section.value for section in config.sections],
        },
        "currency": currency,
        "overall_comment": report_overall_comment(report.metrics, currency),
    }
    if ReportSection.KPI_SUMMARY in sections:
        summary["kpi_summary"] = _metrics_summary(report)
        summary["breakeven"] = {
            "unit_margin": report.breakeven.unit_margin,
            "units": report.breakeven.units,
            "achievable": report.breakeven.is_achievable,
            "gap_sales": report.breakeven.gap_sales,
            "gap_percent": report.breakeven.gap_percent,
            "comment": breakeven_comment(report.breakeven, currency),
        }
        summary["spend_vs_revenue_share"] = {
            "champions": _share_rows(report.spend_vs_revenue_share.champions),
            "offenders": _share_rows(report.spend_vs_revenue_share.offenders),
        }
    if ReportSection.SALES_CHART in sections:
        summary["sales_chart"] = [
            {"date": point.date.isoformat(), "total_sales": point.total_sales} for point in report.sales_chart
        ]
    if ReportSection.PRODUCT_PROFITABILITY in sections:
        summary["product_profitability"] = [asdict(row) for row in report.product_profitability]
    if ReportSection.CAMPAIGN_PERFORMANCE in sections:
        summary["campaign_performance"] = [asdict(row) for row in report.campaign_performance]
    if ReportSection.ORDER_DISTRIBUTION in sections:
        summary["order_distribution"] = [asdict(row) for row in report.order_distribution]
    return summary


def _frame(rows: List[Dict[str, Any]], columns: List[str]) -> pl.DataFrame:
    if not rows:
        return pl.DataFrame({col: [] for col in columns})
    return pl.DataFrame(rows).select(columns)


def report_sheets(report: ReportData) -> Dict[str, pl.DataFrame]:
    """One polars frame per workbook sheet."""
    kpi_rows = [{"metric": key, "value": float(value)} for key, value in _metrics_summary(report).items()]
    sheets = {"kpi_summary": _frame(kpi_rows, ["metric", "value"])}
    sheets["sales_chart"] = _frame(
        [{"date": point.date, "total_sales": point.total_sales} for point in report.sales_chart],
        ["date", "total_sales"],
    )
    sheets["product_profitability"] = _frame(
        [asdict(row) for row in report.product_profitability],
        list(ProductProfitability.__dataclass_fields__),
    )
    sheets["campaign_performance"] = _frame(
        [asdict(row) for row in report.campaign_performance],
        list(CampaignPerformance.__dataclass_fields__),
    )
    sheets["order_distribution"] = _frame(
        [asdict(row) for row in report.order_distribution],
        ["label", "value"],
    )
    return sheets


def report_config_from(pipeline_config: PipelineConfig) -> ReportConfig:
    return ReportConfig(
        start=pipeline_config.report_start,
        end=pipeline_config.report_end,
        product_ids=pipeline_config.product_ids,
        source=pipeline_config.source,
        season=pipeline_config.season,
    )


def run_reporting_pipeline(pipeline_config: PipelineConfig | None = None) -> ReportData:
    pipeline_start = perf_counter()
    stage_start = pipeline_start
    stage_timings: list[tuple[str, float]] = []

    def _mark(stage_name: str) -> None:
        nonlocal stage_start
        now = perf_counter()
        stage_timings.append((stage_name, now - stage_start))
        stage_start = now

    pipeline_config = pipeline_config or load_config()
    output_json_path = pipeline_config.output_dir / "summary.json"
    output_excel_path = pipeline_config.output_dir / "summary.xlsx"
    output_html_path = pipeline_config.output_dir / "summary.html"

    snapshot = load_snapshot(pipeline_config.input_path)
    _mark("load_snapshot")
    report = build_report(
        snapshot.entries,
        snapshot.products,
        snapshot.settings,
        report_config_from(pipeline_config),
    )
    _mark("build_report")
    summary = build_report_summary(report, pipeline_config.currency)
    _mark("build_summary")

    save_summary_json(output_json_path, summary)
    save_summary_html(output_html_path, summary)
    _mark("save_json_html")

    excel_saved, excel_error_message = save_output_workbook(output_excel_path, report_sheets(report))
    _mark("save_excel")
    total_elapsed = perf_counter() - pipeline_start

    print(
        "Report prepared: "
        f"entries={len(snapshot.entries)}, "
        f"products={len(report.product_profitability)}, "
        f"campaigns={len(report.campaign_performance)}"
    )
    stage_text = ", ".join([f"{name}={seconds:.3f}s" for name, seconds in stage_timings])
    print(f"Stage Timing: {stage_text}")
    print(f"Total Elapsed: {total_elapsed:.3f}s")
    print(f"Report Window: {report.config.start.isoformat()} .. {report.config.end.isoformat()}")
    print(f"Saved JSON: {output_json_path}")
    print(f"Saved HTML: {output_html_path}")
    if excel_saved:
        print(f"Saved Excel: {output_excel_path}")
    else:
        print(f"Excel save skipped (file may be open/locked): {excel_error_message}")
    return report
