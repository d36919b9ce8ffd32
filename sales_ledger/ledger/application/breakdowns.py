"""Per-product and per-campaign breakdown tables shared by the dashboard and reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from ledger.application.period_metrics import calculate_period_metrics, convert_ad_spend, entry_financials
from ledger.application.reporting.metrics import safe_divide
from ledger.domain.models import DailyEntry, Product, Settings


@dataclass(frozen=True)
class ProductProfitability:
    product_id: str
    product_name: str
    cost_per_unit: float
    units_sold: float
    total_revenue: float
    total_cost: float
    total_ad_spend: float
    net_profit: float
    profit_margin: float


@dataclass
class _CampaignAccumulator:
    name: str
    total_sales: float = 0.0
    total_ad_spend: float = 0.0
    total_orders: float = 0.0
    total_cost: float = 0.0
    total_other_fixed: float = 0.0


@dataclass(frozen=True)
class CampaignPerformance:
    name: str
    total_sales: float
    total_ad_spend: float
    total_orders: float
    total_cost: float
    net_profit: float
    roi: float
    roas: float
    cpo: float


def product_profitability(
    entries: Sequence[DailyEntry],
    products: Sequence[Product],
    settings: Settings,
    product_ids: Sequence[str] = (),
) -> List[ProductProfitability]:
    """Per-product profit for the selected products; products without sales are omitted."""
    by_product: Dict[str, List[DailyEntry]] = {}
    for entry in entries:
        by_product.setdefault(entry.product_id, []).append(entry)

    rows: List[ProductProfitability] = []
    for product in products:
        if product_ids and product.id not in product_ids:
            continue
        scoped = calculate_period_metrics(by_product.get(product.id, []), {product.id: product}, settings)
        if scoped.total_units_sold_input <= 0:
            continue
        net_profit = scoped.gross_profit
        rows.append(
            ProductProfitability(
                product_id=product.id,
                product_name=product.name,
                cost_per_unit=product.cost_per_unit,
                units_sold=scoped.total_units_sold_input,
                total_revenue=scoped.total_sales,
                total_cost=scoped.total_cogs,
                total_ad_spend=scoped.total_ad_spend,
                net_profit=net_profit,
                profit_margin=safe_divide(net_profit, scoped.total_sales) * 100,
            )
        )
    return rows


def campaign_performance(
    entries: Sequence[DailyEntry],
    product_map: Mapping[str, Product],
    settings: Settings,
) -> List[CampaignPerformance]:
    """Campaign results merged by name; units are allocated by each campaign's order share."""
    accumulators: Dict[str, _CampaignAccumulator] = {}
    for entry in entries:
        product = product_map.get(entry.product_id)
        if product is None:
            continue
        figures = entry_financials(entry, product, settings)
        for campaign in entry.campaigns:
            data = accumulators.setdefault(campaign.name, _CampaignAccumulator(name=campaign.name))
            order_share = safe_divide(campaign.orders, entry.total_orders)
            allocated_units = order_share * entry.total_units_sold * figures.delivery_rate

            data.total_sales += allocated_units * product.selling_price_per_unit
            data.total_cost += allocated_units * product.cost_per_unit
            data.total_other_fixed += allocated_units * (product.other_fixed_costs_per_unit or 0)
            data.total_ad_spend += convert_ad_spend(campaign.ad_spend, settings)
            data.total_orders += campaign.orders * figures.delivery_rate

    rows: List[CampaignPerformance] = []
    for data in accumulators.values():
        investment = data.total_cost + data.total_ad_spend + data.total_other_fixed
        net_profit = data.total_sales - investment
        rows.append(
            CampaignPerformance(
                name=data.name,
                total_sales=data.total_sales,
                total_ad_spend=data.total_ad_spend,
                total_orders=data.total_orders,
                total_cost=data.total_cost,
                net_profit=net_profit,
                roi=safe_divide(net_profit, investment) * 100,
                roas=safe_divide(data.total_sales, data.total_ad_spend),
                cpo=safe_divide(data.total_ad_spend, data.total_orders),
            )
        )
    return rows
