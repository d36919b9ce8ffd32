"""Aggregate financial totals and derived ratios for a set of effective entries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Sequence

from ledger.application.reporting.metrics import safe_divide
from ledger.domain.models import DailyEntry, Product, Settings


def product_index(products: Sequence[Product] | Mapping[str, Product]) -> Mapping[str, Product]:
    if isinstance(products, Mapping):
        return products
    return {product.id: product for product in products}


def delivery_rate_for(product: Product, settings: Settings) -> float:
    """Delivery success rate as a fraction; the product rate overrides the global one."""
    rate = product.product_delivery_rate
    if rate is None:
        rate = settings.global_delivery_rate
    return rate / 100


def convert_ad_spend(amount: float, settings: Settings) -> float:
    return safe_divide(amount, settings.exchange_rate)


@dataclass(frozen=True)
class EntryFinancials:
    delivery_rate: float
    effective_units: float
    effective_orders: float
    revenue: float
    cogs: float
    other_fixed: float
    ad_spend: float


def entry_financials(entry: DailyEntry, product: Product, settings: Settings) -> EntryFinancials:
    rate = delivery_rate_for(product, settings)
    effective_units = entry.total_units_sold * rate
    return EntryFinancials(
        delivery_rate=rate,
        effective_units=effective_units,
        effective_orders=entry.total_orders * rate,
        revenue=effective_units * product.selling_price_per_unit,
        cogs=effective_units * product.cost_per_unit,
        other_fixed=effective_units * (product.other_fixed_costs_per_unit or 0),
        ad_spend=convert_ad_spend(entry.total_ad_spend, settings),
    )


@dataclass(frozen=True)
class PeriodMetrics:
    """Totals for one window; every ratio uses safe division."""

    total_sales: float = 0.0
    total_cogs: float = 0.0
    total_other_fixed: float = 0.0
    total_ad_spend: float = 0.0
    total_orders_input: float = 0.0
    total_units_sold_input: float = 0.0
    effective_orders: float = 0.0
    effective_units: float = 0.0
    product_ad_spend: Mapping[str, float] = field(default_factory=dict)
    product_sales: Mapping[str, float] = field(default_factory=dict)

    @property
    def total_investment(self) -> float:
        return self.total_ad_spend + self.total_cogs + self.total_other_fixed

    @property
    def gross_profit(self) -> float:
        return self.total_sales - self.total_investment

    @property
    def roi(self) -> float:
        return safe_divide(self.gross_profit, self.total_investment) * 100

    @property
    def roas(self) -> float:
        return safe_divide(self.total_sales, self.total_ad_spend)

    @property
    def cpo(self) -> float:
        return safe_divide(self.total_ad_spend, self.effective_orders)

    @property
    def cps(self) -> float:
        return safe_divide(self.total_ad_spend, self.effective_units)

    @property
    def aov(self) -> float:
        return safe_divide(self.total_sales, self.effective_orders)

    @property
    def upt(self) -> float:
        return safe_divide(self.total_units_sold_input, self.total_orders_input)

    @property
    def applied_delivery_rate(self) -> float:
        return safe_divide(self.effective_orders, self.total_orders_input) * 100

    @property
    def ad_intensity(self) -> float:
        return safe_divide(self.total_ad_spend, self.total_sales)

    @property
    def profit_per_ad_spend(self) -> float:
        return safe_divide(self.gross_profit, self.total_ad_spend)

    @property
    def gross_profit_per_order(self) -> float:
        return safe_divide(self.gross_profit, self.effective_orders)

    @property
    def unit_margin(self) -> float:
        return safe_divide(self.gross_profit, self.effective_units)


def calculate_period_metrics(
    entries: Iterable[DailyEntry],
    products: Sequence[Product] | Mapping[str, Product],
    settings: Settings,
) -> PeriodMetrics:
    """Sum per-entry financials; entries whose product is unknown are skipped."""
    product_map = product_index(products)

    total_sales = total_cogs = total_other_fixed = total_ad_spend = 0.0
    total_orders_input = total_units_sold_input = 0.0
    effective_orders = effective_units = 0.0
    product_ad_spend: Dict[str, float] = {}
    product_sales: Dict[str, float] = {}

    for entry in entries:
        product = product_map.get(entry.product_id)
        if product is None:
            continue
        figures = entry_financials(entry, product, settings)

        total_orders_input += entry.total_orders
        total_units_sold_input += entry.total_units_sold
        effective_units += figures.effective_units
        effective_orders += figures.effective_orders
        total_sales += figures.revenue
        total_cogs += figures.cogs
        total_other_fixed += figures.other_fixed
        total_ad_spend += figures.ad_spend

        product_sales[product.id] = product_sales.get(product.id, 0.0) + figures.revenue
        if entry.campaigns:
            product_ad_spend[product.id] = product_ad_spend.get(product.id, 0.0) + figures.ad_spend

    return PeriodMetrics(
        total_sales=total_sales,
        total_cogs=total_cogs,
        total_other_fixed=total_other_fixed,
        total_ad_spend=total_ad_spend,
        total_orders_input=total_orders_input,
        total_units_sold_input=total_units_sold_input,
        effective_orders=effective_orders,
        effective_units=effective_units,
        product_ad_spend=product_ad_spend,
        product_sales=product_sales,
    )


@dataclass(frozen=True)
class Breakeven:
    """Breakeven position for a window; ``units`` is None when breakeven is not achievable."""

    unit_margin: float
    units: int | None
    gap_sales: float
    gap_percent: float

    @property
    def is_achievable(self) -> bool:
        return self.units is not None


def compute_breakeven(metrics: PeriodMetrics) -> Breakeven:
    unit_margin = metrics.unit_margin
    units: int | None = None
    if unit_margin > 0 and math.isfinite(unit_margin):
        raw_units = safe_divide(metrics.total_investment, unit_margin)
        if math.isfinite(raw_units):
            units = math.ceil(raw_units)
    gap_sales = metrics.total_investment - metrics.total_sales
    return Breakeven(
        unit_margin=unit_margin,
        units=units,
        gap_sales=gap_sales,
        gap_percent=safe_divide(gap_sales, metrics.total_investment) * 100,
    )
