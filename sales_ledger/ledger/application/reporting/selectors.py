"""Entry scoping and ad-efficiency ranking helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Collection, Iterable, List, Mapping

from ledger.application.period_metrics import PeriodMetrics
from ledger.application.reporting.metrics import safe_divide
from ledger.domain.models import DailyEntry, Product, Season, SeasonFilter, SourceFilter

ALL_PRODUCTS = "ALL"
RANKING_LIMIT = 3


def matches_season(product: Product, season_filter: SeasonFilter, include_all_seasons: bool = True) -> bool:
    """ALL_SEASONS products match a specific season only when ``include_all_seasons`` is set."""
    if season_filter == SeasonFilter.ALL:
        return True
    if include_all_seasons and product.season == Season.ALL_SEASONS:
        return True
    return product.season.value == season_filter.value


def matches_source(entry: DailyEntry, source_filter: SourceFilter) -> bool:
    return source_filter == SourceFilter.ALL or entry.source == source_filter


def select_entries(
    entries: Iterable[DailyEntry],
    product_map: Mapping[str, Product],
    in_range: Callable[[DailyEntry], bool],
    product_ids: Collection[str] = (),
    source: SourceFilter = SourceFilter.ALL,
    season: SeasonFilter = SeasonFilter.ALL,
    include_all_seasons: bool = True,
) -> List[DailyEntry]:
    """Keep entries inside the range whose product exists and passes every filter.

    An empty ``product_ids`` collection means all products.
    """
    selected: List[DailyEntry] = []
    for entry in entries:
        product = product_map.get(entry.product_id)
        if product is None:
            continue
        if not in_range(entry):
            continue
        if product_ids and entry.product_id not in product_ids:
            continue
        if not matches_source(entry, source) or not matches_season(product, season, include_all_seasons):
            continue
        selected.append(entry)
    return selected


@dataclass(frozen=True)
class ShareDelta:
    product_id: str
    product_name: str
    spend_share: float
    revenue_share: float

    @property
    def delta(self) -> float:
        return (self.revenue_share - self.spend_share) * 100


@dataclass(frozen=True)
class SpendVsRevenueShare:
    champions: List[ShareDelta]
    offenders: List[ShareDelta]


def share_deltas(metrics: PeriodMetrics, product_map: Mapping[str, Product]) -> List[ShareDelta]:
    """Revenue share minus ad-spend share per advertised product, best first."""
    rows: List[ShareDelta] = []
    for product_id, ad_spend in metrics.product_ad_spend.items():
        product = product_map.get(product_id)
        if product is None:
            continue
        rows.append(
            ShareDelta(
                product_id=product_id,
                product_name=product.name,
                spend_share=safe_divide(ad_spend, metrics.total_ad_spend),
                revenue_share=safe_divide(metrics.product_sales.get(product_id, 0.0), metrics.total_sales),
            )
        )
    rows.sort(key=lambda row: row.delta, reverse=True)
    return rows


def champions_and_offenders(rows: List[ShareDelta], limit: int = RANKING_LIMIT) -> SpendVsRevenueShare:
    champions = [row for row in rows if row.delta > 0][:limit]
    offenders = [row for row in reversed(rows) if row.delta < 0][:limit]
    return SpendVsRevenueShare(champions=champions, offenders=offenders)
