from datetime import date

import pytest

from ledger.domain.models import (
    Campaign,
    CampaignEntry,
    DailyEntry,
    EntryType,
    Product,
    Season,
    Settings,
    SourceFilter,
)


@pytest.fixture
def make_product():
    def _make(
        product_id="p1",
        name=None,
        price=100.0,
        cost=40.0,
        delivery_rate=None,
        other_fixed=None,
        campaigns=(("c1", "Campaign 1"),),
        season=Season.ALL_SEASONS,
        **extra,
    ):
        return Product(
            id=product_id,
            name=name or product_id.upper(),
            selling_price_per_unit=price,
            cost_per_unit=cost,
            season=season,
            campaigns=tuple(Campaign(id=cid, name=cname) for cid, cname in campaigns),
            product_delivery_rate=delivery_rate,
            other_fixed_costs_per_unit=other_fixed,
            **extra,
        )

    return _make


@pytest.fixture
def make_entry():
    counter = {"n": 0}

    def _make(
        product_id="p1",
        day=date(2025, 3, 10),
        time="12:00",
        entry_type=EntryType.SUB,
        units=10,
        orders=8,
        campaigns=(),
        source=SourceFilter.WEBSITE,
    ):
        counter["n"] += 1
        return DailyEntry(
            id=f"e{counter['n']}",
            date=day,
            time=time,
            entry_type=entry_type,
            product_id=product_id,
            source=source,
            total_units_sold=units,
            total_orders=orders,
            campaigns=tuple(
                CampaignEntry(id=cid, name=cname, ad_spend=spend, orders=corders)
                for cid, cname, spend, corders in campaigns
            ),
        )

    return _make


@pytest.fixture
def settings():
    return Settings(global_delivery_rate=90.0, exchange_rate=5.0)
