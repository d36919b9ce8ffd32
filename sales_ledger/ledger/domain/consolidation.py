"""Domain policy resolving same-day records into one effective entry per product-day."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from ledger.domain.models import CampaignEntry, DailyEntry, EntryType, Product


@dataclass
class _DayGroup:
    finals: List[DailyEntry] = field(default_factory=list)
    subs: List[DailyEntry] = field(default_factory=list)


def _group_by_product_day(entries: Iterable[DailyEntry]) -> Dict[Tuple[str, date], _DayGroup]:
    groups: Dict[Tuple[str, date], _DayGroup] = {}
    for entry in entries:
        group = groups.setdefault((entry.product_id, entry.date), _DayGroup())
        if entry.entry_type == EntryType.FINAL:
            group.finals.append(entry)
        else:
            group.subs.append(entry)
    return groups


def latest_sub_entry(subs: Sequence[DailyEntry]) -> DailyEntry:
    """Pick the sub entry with the greatest HH:MM string; first seen wins ties."""
    return max(subs, key=lambda entry: entry.time)


def sum_campaign_totals(subs: Iterable[DailyEntry]) -> Dict[str, Tuple[float, float]]:
    totals: Dict[str, Tuple[float, float]] = {}
    for sub in subs:
        for campaign in sub.campaigns:
            spend, orders = totals.get(campaign.id, (0.0, 0.0))
            totals[campaign.id] = (spend + campaign.ad_spend, orders + campaign.orders)
    return totals


def consolidate_subs(subs: Sequence[DailyEntry], product: Product | None) -> DailyEntry:
    base = latest_sub_entry(subs)
    if product is None:
        return base.with_campaigns(())

    totals = sum_campaign_totals(subs)
    campaigns: List[CampaignEntry] = []
    for roster_campaign in product.campaigns:
        spend, orders = totals.get(roster_campaign.id, (0.0, 0.0))
        if spend > 0 or orders > 0:
            campaigns.append(
                CampaignEntry(id=roster_campaign.id, name=roster_campaign.name, ad_spend=spend, orders=orders)
            )
    return base.with_campaigns(campaigns)


def effective_entries(
    entries: Iterable[DailyEntry],
    products: Sequence[Product] | Mapping[str, Product],
) -> List[DailyEntry]:
    """Reduce raw entries to effective entries, one per (product, date).

    A FINAL entry is authoritative and passed through verbatim. Several FINAL
    entries for the same product-day are all emitted. Without a FINAL, the
    latest SUB supplies the dimension fields and campaign figures are summed
    across every SUB of the day, restricted to the product's current roster.
    """
    if isinstance(products, Mapping):
        product_map = products
    else:
        product_map = {product.id: product for product in products}

    effective: List[DailyEntry] = []
    for (product_id, _), group in _group_by_product_day(entries).items():
        if group.finals:
            effective.extend(group.finals)
        elif group.subs:
            effective.append(consolidate_subs(group.subs, product_map.get(product_id)))
    return effective
