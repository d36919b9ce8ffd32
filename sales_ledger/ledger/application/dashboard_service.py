"""Application service assembling KPI cards and dashboard summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, List, Mapping, Sequence

from ledger.application.breakdowns import (
    CampaignPerformance,
    ProductProfitability,
    campaign_performance,
    product_profitability,
)
from ledger.application.period_metrics import (
    Breakeven,
    PeriodMetrics,
    calculate_period_metrics,
    compute_breakeven,
    convert_ad_spend,
    delivery_rate_for,
    product_index,
)
from ledger.application.periods import ComparisonMode, PeriodSelection, TimeFilter, resolve_periods
from ledger.application.reporting.metrics import (
    Trend,
    compute_trend,
    fmt_count,
    fmt_money,
    fmt_pct,
    safe_divide,
)
from ledger.application.reporting.selectors import (
    ALL_PRODUCTS,
    SpendVsRevenueShare,
    champions_and_offenders,
    select_entries,
    share_deltas,
)
from ledger.domain.consolidation import effective_entries
from ledger.domain.models import DailyEntry, Product, SeasonFilter, Settings, SourceFilter

DEFAULT_CURRENCY = "LYD"


@dataclass(frozen=True)
class KPI:
    title: str
    value: str
    trend: Trend
    is_positive_good: bool
    sub_value: str | None = None


@dataclass(frozen=True)
class DashboardFilters:
    time_filter: TimeFilter = TimeFilter.MONTH
    comparison_mode: ComparisonMode = ComparisonMode.NONE
    custom_start: date | None = None
    custom_end: date | None = None
    source: SourceFilter = SourceFilter.ALL
    season: SeasonFilter = SeasonFilter.ALL
    product: str = ALL_PRODUCTS


@dataclass(frozen=True)
class AdEfficiency:
    roas: float
    ad_intensity: float
    profit_per_ad_spend: float
    spend_vs_revenue_share: SpendVsRevenueShare


@dataclass(frozen=True)
class Profitability:
    gross_profit_per_order: float
    gross_profit_per_unit: float
    breakeven: Breakeven


@dataclass(frozen=True)
class GoalProgress:
    current: float
    target: float

    @property
    def completion(self) -> float:
        return safe_divide(self.current, self.target) * 100


@dataclass(frozen=True)
class OrderSizeShare:
    label: str
    value: float


@dataclass(frozen=True)
class ProductSalesComparison:
    product_name: str
    current_sales: float
    previous_sales: float


@dataclass(frozen=True)
class CPOAlert:
    date: date
    product_name: str
    campaign_name: str
    cpo: float
    max_cpo: float


@dataclass(frozen=True)
class StockAlert:
    product_id: str
    product_name: str
    current_stock: float
    low_stock_threshold: int


@dataclass(frozen=True)
class DashboardData:
    periods: PeriodSelection
    current: PeriodMetrics
    previous: PeriodMetrics
    kpis: List[KPI]
    ad_efficiency: AdEfficiency
    profitability: Profitability
    goals: Dict[str, GoalProgress]
    order_distribution: List[OrderSizeShare]
    product_sales_comparison: List[ProductSalesComparison]
    product_profitability: List[ProductProfitability] = field(default_factory=list)
    campaign_performance: List[CampaignPerformance] = field(default_factory=list)
    cpo_alerts: List[CPOAlert] = field(default_factory=list)
    stock_alerts: List[StockAlert] = field(default_factory=list)
    window_entries: List[DailyEntry] = field(default_factory=list)


def build_kpis(current: PeriodMetrics, previous: PeriodMetrics, currency: str = DEFAULT_CURRENCY) -> List[KPI]:
    """KPI cards in display order, each trended against the comparison window."""

    def _roi_ratio(metrics: PeriodMetrics) -> float:
        return safe_divide(metrics.gross_profit, metrics.total_investment)

    def _delivery_ratio(metrics: PeriodMetrics) -> float:
        return safe_divide(metrics.effective_orders, metrics.total_orders_input)

    return [
        KPI(
            "Total Orders",
            fmt_count(current.total_orders_input),
            compute_trend(current.total_orders_input, previous.total_orders_input),
            True,
        ),
        KPI(
            "Total Units Sold",
            fmt_count(current.total_units_sold_input),
            compute_trend(current.total_units_sold_input, previous.total_units_sold_input),
            True,
        ),
        KPI(
            "Total Ad Spend",
            fmt_money(current.total_ad_spend, currency),
            compute_trend(current.total_ad_spend, previous.total_ad_spend),
            False,
        ),
        KPI(
            "Applied Delivery Rate",
            fmt_pct(current.applied_delivery_rate),
            compute_trend(_delivery_ratio(current), _delivery_ratio(previous)),
            True,
        ),
        KPI(
            "Total Sales (Revenue)",
            fmt_money(current.total_sales, currency),
            compute_trend(current.total_sales, previous.total_sales),
            True,
        ),
        KPI(
            "Gross Profit (GP)",
            fmt_money(current.gross_profit, currency),
            compute_trend(current.gross_profit, previous.gross_profit),
            True,
        ),
        KPI(
            "ROI %",
            fmt_pct(current.roi),
            compute_trend(_roi_ratio(current), _roi_ratio(previous)),
            True,
        ),
        KPI(
            "CPO",
            fmt_money(current.cpo, currency, digits=2),
            compute_trend(current.cpo, previous.cpo),
            False,
        ),
        KPI(
            "CPS",
            fmt_money(current.cps, currency, digits=2),
            compute_trend(current.cps, previous.cps),
            False,
        ),
        KPI(
            "AOV",
            fmt_money(current.aov, currency, digits=2),
            compute_trend(current.aov, previous.aov),
            True,
            sub_value=f"Avg Units/Order: {current.upt:.2f}",
        ),
    ]


def order_distribution(settings: Settings) -> List[OrderSizeShare]:
    buckets = [
        ("1 unit", settings.order_distribution_1_unit),
        ("2 units", settings.order_distribution_2_units),
        ("3 units", settings.order_distribution_3_units),
        ("More than 3 units", settings.order_distribution_more_than_3_units),
    ]
    total = sum(value for _, value in buckets)
    return [OrderSizeShare(label, safe_divide(value, total) * 100) for label, value in buckets]


def goal_progress(metrics: PeriodMetrics, settings: Settings) -> Dict[str, GoalProgress]:
    return {
        "revenue": GoalProgress(metrics.total_sales, settings.monthly_target_revenue),
        "units": GoalProgress(metrics.total_units_sold_input, settings.monthly_target_units_sold),
        "orders": GoalProgress(metrics.total_orders_input, settings.monthly_target_orders),
    }


def cpo_alerts(
    entries: Sequence[DailyEntry],
    product_map: Mapping[str, Product],
    settings: Settings,
) -> List[CPOAlert]:
    """Campaign lines whose cost per delivered order exceeds the product's max CPO."""
    alerts: List[CPOAlert] = []
    for entry in entries:
        product = product_map.get(entry.product_id)
        if product is None or product.max_cpo is None:
            continue
        rate = delivery_rate_for(product, settings)
        for campaign in entry.campaigns:
            if campaign.orders <= 0:
                continue
            cpo = safe_divide(convert_ad_spend(campaign.ad_spend, settings), campaign.orders * rate)
            if cpo > product.max_cpo:
                alerts.append(
                    CPOAlert(
                        date=entry.date,
                        product_name=product.name,
                        campaign_name=campaign.name,
                        cpo=cpo,
                        max_cpo=product.max_cpo,
                    )
                )
    return alerts


def stock_alerts(entries: Sequence[DailyEntry], products: Sequence[Product]) -> List[StockAlert]:
    sold: Dict[str, float] = {}
    for entry in entries:
        sold[entry.product_id] = sold.get(entry.product_id, 0.0) + entry.total_units_sold

    alerts: List[StockAlert] = []
    for product in products:
        if product.initial_stock is None or product.low_stock_threshold is None:
            continue
        current_stock = product.initial_stock - sold.get(product.id, 0.0)
        if current_stock <= product.low_stock_threshold:
            alerts.append(
                StockAlert(
                    product_id=product.id,
                    product_name=product.name,
                    current_stock=current_stock,
                    low_stock_threshold=product.low_stock_threshold,
                )
            )
    return alerts


def build_dashboard(
    entries: Sequence[DailyEntry],
    products: Sequence[Product],
    settings: Settings,
    filters: DashboardFilters,
    currency: str = DEFAULT_CURRENCY,
    now: datetime | None = None,
) -> DashboardData:
    """Compute every dashboard figure for the filter selection from one snapshot."""
    product_map = product_index(products)
    periods = resolve_periods(
        filters.time_filter,
        comparison_mode=filters.comparison_mode,
        custom_start=filters.custom_start,
        custom_end=filters.custom_end,
        now=now,
    )
    all_effective = effective_entries(entries, product_map)
    product_ids = () if filters.product == ALL_PRODUCTS else (filters.product,)

    def _scoped(window_contains: Callable[[date], bool]) -> List[DailyEntry]:
        return select_entries(
            all_effective,
            product_map,
            in_range=lambda entry: window_contains(entry.date),
            product_ids=product_ids,
            source=filters.source,
            season=filters.season,
            include_all_seasons=False,
        )

    current_entries = _scoped(periods.current.contains)
    comparison_entries = _scoped(periods.comparison.contains) if periods.comparison is not None else []

    current = calculate_period_metrics(current_entries, product_map, settings)
    previous = calculate_period_metrics(comparison_entries, product_map, settings)

    ad_efficiency = AdEfficiency(
        roas=current.roas,
        ad_intensity=current.ad_intensity,
        profit_per_ad_spend=current.profit_per_ad_spend,
        spend_vs_revenue_share=champions_and_offenders(share_deltas(current, product_map)),
    )
    profitability = Profitability(
        gross_profit_per_order=current.gross_profit_per_order,
        gross_profit_per_unit=current.unit_margin,
        breakeven=compute_breakeven(current),
    )
    sales_comparison = [
        ProductSalesComparison(
            product_name=product_map[product_id].name,
            current_sales=sales,
            previous_sales=previous.product_sales.get(product_id, 0.0),
        )
        for product_id, sales in current.product_sales.items()
    ]

    return DashboardData(
        periods=periods,
        current=current,
        previous=previous,
        kpis=build_kpis(current, previous, currency=currency),
        ad_efficiency=ad_efficiency,
        profitability=profitability,
        goals=goal_progress(current, settings),
        order_distribution=order_distribution(settings),
        product_sales_comparison=sales_comparison,
        product_profitability=product_profitability(current_entries, products, settings, product_ids=product_ids),
        campaign_performance=campaign_performance(current_entries, product_map, settings),
        cpo_alerts=cpo_alerts(current_entries, product_map, settings),
        stock_alerts=stock_alerts(all_effective, products),
        window_entries=[entry for entry in entries if periods.current.contains(entry.date)],
    )
