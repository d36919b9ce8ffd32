import math
from datetime import date, datetime

import pytest

from ledger.application.dashboard_service import (
    DashboardFilters,
    build_dashboard,
    build_kpis,
    order_distribution,
)
from ledger.application.period_metrics import PeriodMetrics
from ledger.application.periods import ComparisonMode, TimeFilter
from ledger.application.reporting.metrics import NEGATIVE, NEUTRAL, POSITIVE, Trend, compute_trend, fmt_trend
from ledger.domain.models import EntryType, Season, SeasonFilter, Settings, SourceFilter

NOW = datetime(2025, 3, 20, 12, 0)


def test_trend_from_zero_is_unbounded_positive():
    trend = compute_trend(100, 0)
    assert trend.value == math.inf
    assert trend.polarity == POSITIVE
    assert fmt_trend(trend) == "+∞"


def test_trend_zero_to_zero_is_neutral():
    assert compute_trend(0, 0).value == 0
    assert compute_trend(0, 0).polarity == NEUTRAL


def test_trend_unchanged_is_neutral():
    trend = compute_trend(100, 100)
    assert (trend.value, trend.polarity) == (0, NEUTRAL)


def test_trend_drop_is_negative():
    trend = compute_trend(50, 100)
    assert trend.value == pytest.approx(-50.0)
    assert trend.polarity == NEGATIVE


def test_trend_uses_absolute_previous():
    trend = compute_trend(-50, -100)
    assert trend.value == pytest.approx(50.0)
    assert trend.polarity == POSITIVE


def test_trend_non_finite_change_is_neutral():
    trend = compute_trend(1.7e308, -1e-10)
    assert trend == Trend(None, NEUTRAL)
    assert fmt_trend(trend) == "N/A"


def test_kpis_order_and_polarity_flags():
    current = PeriodMetrics(total_sales=900.0, total_cogs=360.0, total_ad_spend=40.0, total_orders_input=8,
                            total_units_sold_input=10, effective_orders=7.2, effective_units=9.0)
    kpis = build_kpis(current, PeriodMetrics(), currency="LYD")

    assert [kpi.title for kpi in kpis] == [
        "Total Orders",
        "Total Units Sold",
        "Total Ad Spend",
        "Applied Delivery Rate",
        "Total Sales (Revenue)",
        "Gross Profit (GP)",
        "ROI %",
        "CPO",
        "CPS",
        "AOV",
    ]
    not_good = {kpi.title for kpi in kpis if not kpi.is_positive_good}
    assert not_good == {"Total Ad Spend", "CPO", "CPS"}
    by_title = {kpi.title: kpi for kpi in kpis}
    assert by_title["Total Sales (Revenue)"].value == "LYD 900"
    assert by_title["CPO"].value == "LYD 5.56"
    assert by_title["Applied Delivery Rate"].value == "90.0%"
    assert by_title["AOV"].sub_value == "Avg Units/Order: 1.25"
    assert by_title["Total Orders"].trend.value == math.inf


def test_order_distribution_is_normalized():
    shares = order_distribution(Settings(
        order_distribution_1_unit=2,
        order_distribution_2_units=1,
        order_distribution_3_units=1,
        order_distribution_more_than_3_units=0,
    ))
    assert [share.value for share in shares] == pytest.approx([50.0, 25.0, 25.0, 0.0])


def test_order_distribution_empty_settings():
    shares = order_distribution(Settings(
        order_distribution_1_unit=0,
        order_distribution_2_units=0,
        order_distribution_3_units=0,
        order_distribution_more_than_3_units=0,
    ))
    assert all(share.value == 0.0 for share in shares)


def test_dashboard_compares_against_previous_period(make_product, make_entry, settings):
    product = make_product(delivery_rate=100.0)
    entries = [
        make_entry(day=date(2025, 3, 18), units=20, orders=10),
        make_entry(day=date(2025, 3, 8), units=10, orders=5),
        make_entry(day=date(2025, 2, 20), units=99, orders=99),
    ]
    filters = DashboardFilters(
        time_filter=TimeFilter.CUSTOM,
        custom_start=date(2025, 3, 11),
        custom_end=date(2025, 3, 20),
        comparison_mode=ComparisonMode.PREVIOUS_PERIOD,
    )

    data = build_dashboard(entries, [product], settings, filters, now=NOW)

    assert data.current.total_units_sold_input == 20
    assert data.previous.total_units_sold_input == 10
    orders_kpi = data.kpis[0]
    assert orders_kpi.trend.value == pytest.approx(100.0)
    assert orders_kpi.trend.polarity == POSITIVE
    assert data.product_sales_comparison[0].current_sales == pytest.approx(2000.0)
    assert data.product_sales_comparison[0].previous_sales == pytest.approx(1000.0)


def test_dashboard_applies_source_season_and_product_filters(make_product, make_entry, settings):
    products = [
        make_product("summer", season=Season.SUMMER),
        make_product("winter", season=Season.WINTER),
        make_product("any", season=Season.ALL_SEASONS),
    ]
    day = date(2025, 3, 15)
    entries = [
        make_entry(product_id="summer", day=day, units=1),
        make_entry(product_id="winter", day=day, units=2),
        make_entry(product_id="any", day=day, units=4),
        make_entry(product_id="any", day=day, units=8, source=SourceFilter.PAGE, entry_type=EntryType.FINAL),
    ]
    base = dict(time_filter=TimeFilter.MONTH)

    summer = build_dashboard(entries, products, settings, DashboardFilters(season=SeasonFilter.SUMMER, **base), now=NOW)
    page = build_dashboard(entries, products, settings, DashboardFilters(source=SourceFilter.PAGE, **base), now=NOW)
    single = build_dashboard(entries, products, settings, DashboardFilters(product="winter", **base), now=NOW)

    # ALL_SEASONS products stay out of a specific season on the dashboard
    assert summer.current.total_units_sold_input == 1
    assert page.current.total_units_sold_input == 8
    assert single.current.total_units_sold_input == 2


def test_dashboard_ad_efficiency_champions_and_offenders(make_product, make_entry):
    settings = Settings(global_delivery_rate=100.0, exchange_rate=1.0)
    products = [
        make_product("p1", price=1.0, cost=0.0),
        make_product("p2", price=1.0, cost=0.0),
        make_product("p3", price=1.0, cost=0.0),
    ]
    day = date(2025, 3, 15)
    entries = [
        make_entry(product_id="p1", day=day, units=30, orders=30, campaigns=[("c1", "Campaign 1", 10.0, 30)]),
        make_entry(product_id="p2", day=day, units=40, orders=40, campaigns=[("c1", "Campaign 1", 50.0, 40)]),
        make_entry(product_id="p3", day=day, units=30, orders=30, campaigns=[("c1", "Campaign 1", 40.0, 30)]),
    ]

    data = build_dashboard(entries, products, settings, DashboardFilters(time_filter=TimeFilter.MONTH), now=NOW)
    share = data.ad_efficiency.spend_vs_revenue_share

    assert [row.product_id for row in share.champions] == ["p1"]
    assert share.champions[0].delta == pytest.approx(20.0)
    assert {row.product_id for row in share.offenders} == {"p2", "p3"}
    assert share.offenders[0].delta == pytest.approx(-10.0)
    assert data.ad_efficiency.roas == pytest.approx(1.0)


def test_dashboard_goals_and_breakeven(make_product, make_entry):
    settings = Settings(global_delivery_rate=100.0, exchange_rate=1.0, monthly_target_revenue=2000.0,
                        monthly_target_units_sold=20.0, monthly_target_orders=10.0)
    product = make_product(price=100.0, cost=120.0)
    entries = [make_entry(day=date(2025, 3, 2), units=10, orders=5)]

    data = build_dashboard(entries, [product], settings, DashboardFilters(time_filter=TimeFilter.MONTH), now=NOW)

    assert data.goals["revenue"].completion == pytest.approx(50.0)
    assert data.goals["units"].current == 10
    assert data.goals["orders"].target == 10.0
    assert data.profitability.breakeven.units is None
    assert data.profitability.gross_profit_per_unit == pytest.approx(-20.0)


def test_dashboard_cpo_and_stock_alerts(make_product, make_entry):
    settings = Settings(global_delivery_rate=100.0, exchange_rate=2.0)
    product = make_product(max_cpo=10.0, initial_stock=50, low_stock_threshold=20)
    entries = [
        make_entry(day=date(2025, 3, 2), units=20, orders=10, campaigns=[("c1", "Campaign 1", 100.0, 4)]),
        make_entry(day=date(2025, 1, 5), units=15, orders=10, entry_type=EntryType.FINAL),
    ]

    data = build_dashboard(entries, [product], settings, DashboardFilters(time_filter=TimeFilter.MONTH), now=NOW)

    assert len(data.cpo_alerts) == 1
    assert data.cpo_alerts[0].cpo == pytest.approx(12.5)
    assert data.cpo_alerts[0].campaign_name == "Campaign 1"
    assert len(data.stock_alerts) == 1
    assert data.stock_alerts[0].current_stock == 15


def test_dashboard_window_entries_are_raw(make_product, make_entry, settings):
    product = make_product()
    entries = [
        make_entry(day=date(2025, 3, 2), time="10:00"),
        make_entry(day=date(2025, 3, 2), time="11:00"),
        make_entry(day=date(2025, 1, 2)),
    ]

    data = build_dashboard(entries, [product], settings, DashboardFilters(time_filter=TimeFilter.MONTH), now=NOW)

    assert [entry.id for entry in data.window_entries] == [entries[0].id, entries[1].id]


def test_dashboard_breakdown_tables_follow_window_and_product_filter(make_product, make_entry):
    settings = Settings(global_delivery_rate=100.0, exchange_rate=1.0)
    products = [
        make_product("p1", price=10.0, cost=4.0, campaigns=[("a", "Spring")]),
        make_product("p2", price=20.0, cost=5.0, campaigns=[("b", "Spring")]),
    ]
    entries = [
        make_entry(product_id="p1", day=date(2025, 3, 5), units=4, orders=4, campaigns=[("a", "Spring", 8.0, 4)]),
        make_entry(product_id="p2", day=date(2025, 3, 5), units=2, orders=2, campaigns=[("b", "Spring", 6.0, 2)]),
        make_entry(product_id="p1", day=date(2025, 2, 5), units=50, orders=50),
    ]

    data = build_dashboard(entries, products, settings, DashboardFilters(time_filter=TimeFilter.MONTH), now=NOW)
    single = build_dashboard(
        entries, products, settings, DashboardFilters(time_filter=TimeFilter.MONTH, product="p2"), now=NOW
    )

    assert [row.product_id for row in data.product_profitability] == ["p1", "p2"]
    assert data.product_profitability[0].units_sold == 4
    assert data.product_profitability[0].net_profit == pytest.approx(40.0 - 16.0 - 8.0)
    assert len(data.campaign_performance) == 1
    assert data.campaign_performance[0].name == "Spring"
    assert data.campaign_performance[0].total_sales == pytest.approx(80.0)
    assert data.campaign_performance[0].total_ad_spend == pytest.approx(14.0)

    assert [row.product_id for row in single.product_profitability] == ["p2"]
    assert single.campaign_performance[0].total_sales == pytest.approx(40.0)
