"""Domain models for products, daily entries and global settings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Mapping, Sequence


class EntryType(str, Enum):
    SUB = "SUB"
    FINAL = "FINAL"


class SourceFilter(str, Enum):
    ALL = "ALL"
    WEBSITE = "WEBSITE"
    PAGE = "PAGE"


class Season(str, Enum):
    SUMMER = "SUMMER"
    WINTER = "WINTER"
    ALL_SEASONS = "ALL_SEASONS"


class SeasonFilter(str, Enum):
    ALL = "ALL"
    SUMMER = "SUMMER"
    WINTER = "WINTER"


class Gender(str, Enum):
    WOMEN = "WOMEN"
    MEN = "MEN"
    KIDS = "KIDS"


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_optional_int(value: Any) -> int | None:
    number = _to_optional_float(value)
    if number is None:
        return None
    return int(number)


def _to_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValueError(f"Invalid entry date: {value!r}") from exc


def _to_enum(enum_cls: type[Enum], value: Any, default: Enum) -> Any:
    text = str(value or "").strip().upper()
    try:
        return enum_cls(text)
    except ValueError:
        return default


@dataclass(frozen=True)
class Campaign:
    id: str
    name: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Campaign":
        return cls(id=str(row.get("id", "")), name=str(row.get("name", "") or ""))


@dataclass(frozen=True)
class Product:
    """Catalog item; owns its campaign roster."""

    id: str
    name: str
    selling_price_per_unit: float
    cost_per_unit: float
    season: Season = Season.ALL_SEASONS
    category_id: str = ""
    gender: Gender = Gender.WOMEN
    campaigns: tuple[Campaign, ...] = ()
    product_delivery_rate: float | None = None
    other_fixed_costs_per_unit: float | None = None
    max_cpo: float | None = None
    initial_stock: int | None = None
    low_stock_threshold: int | None = None
    selling_price_1_unit_offer: float | None = None
    selling_price_2_units_offer: float | None = None
    selling_price_3_units_offer: float | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Product":
        campaigns = row.get("campaigns") or []
        return cls(
            id=str(row.get("id", "")),
            name=str(row.get("name", "") or ""),
            selling_price_per_unit=_to_float(row.get("sellingPricePerUnit")),
            cost_per_unit=_to_float(row.get("costPerUnit")),
            season=_to_enum(Season, row.get("season"), Season.ALL_SEASONS),
            category_id=str(row.get("categoryId", "") or ""),
            gender=_to_enum(Gender, row.get("gender"), Gender.WOMEN),
            campaigns=tuple(Campaign.from_row(item) for item in campaigns if isinstance(item, Mapping)),
            product_delivery_rate=_to_optional_float(row.get("productDeliveryRate")),
            other_fixed_costs_per_unit=_to_optional_float(row.get("otherFixedCostsPerUnit")),
            max_cpo=_to_optional_float(row.get("maxCpo")),
            initial_stock=_to_optional_int(row.get("initialStock")),
            low_stock_threshold=_to_optional_int(row.get("lowStockThreshold")),
            selling_price_1_unit_offer=_to_optional_float(row.get("sellingPrice1UnitOffer")),
            selling_price_2_units_offer=_to_optional_float(row.get("sellingPrice2UnitsOffer")),
            selling_price_3_units_offer=_to_optional_float(row.get("sellingPrice3UnitsOffer")),
        )


@dataclass(frozen=True)
class CampaignEntry:
    """Ad spend (secondary currency) and orders attributed to one campaign."""

    id: str
    name: str
    ad_spend: float = 0.0
    orders: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CampaignEntry":
        return cls(
            id=str(row.get("id", "")),
            name=str(row.get("name", "") or ""),
            ad_spend=_to_float(row.get("adSpend")),
            orders=_to_float(row.get("orders")),
        )


@dataclass(frozen=True)
class DailyEntry:
    id: str
    date: date
    time: str
    entry_type: EntryType
    product_id: str
    source: SourceFilter
    total_units_sold: float
    total_orders: float
    campaigns: tuple[CampaignEntry, ...] = ()

    @property
    def total_ad_spend(self) -> float:
        return sum(campaign.ad_spend for campaign in self.campaigns)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DailyEntry":
        campaigns = row.get("campaigns") or []
        return cls(
            id=str(row.get("id", "")),
            date=_to_date(row.get("date")),
            time=str(row.get("time", "") or ""),
            entry_type=_to_enum(EntryType, row.get("entryType"), EntryType.SUB),
            product_id=str(row.get("productId", "")),
            source=_to_enum(SourceFilter, row.get("source"), SourceFilter.WEBSITE),
            total_units_sold=_to_float(row.get("totalUnitsSold")),
            total_orders=_to_float(row.get("totalOrders")),
            campaigns=tuple(CampaignEntry.from_row(item) for item in campaigns if isinstance(item, Mapping)),
        )

    def with_campaigns(self, campaigns: Sequence[CampaignEntry]) -> "DailyEntry":
        return replace(self, campaigns=tuple(campaigns))


@dataclass(frozen=True)
class Settings:
    """Global settings singleton supplied by the record store."""

    global_delivery_rate: float = 90.0
    exchange_rate: float = 6.5
    order_distribution_1_unit: float = 58.6
    order_distribution_2_units: float = 30.4
    order_distribution_3_units: float = 8.5
    order_distribution_more_than_3_units: float = 2.5
    monthly_target_revenue: float = 50000.0
    monthly_target_units_sold: float = 400.0
    monthly_target_orders: float = 350.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Settings":
        defaults = cls()
        exchange_rate = row.get("exchangeRate", row.get("libyanDinarExchangeRate"))
        return cls(
            global_delivery_rate=_to_float(row.get("globalDeliveryRate"), defaults.global_delivery_rate),
            exchange_rate=_to_float(exchange_rate, defaults.exchange_rate),
            order_distribution_1_unit=_to_float(
                row.get("orderDistribution1Unit"), defaults.order_distribution_1_unit
            ),
            order_distribution_2_units=_to_float(
                row.get("orderDistribution2Units"), defaults.order_distribution_2_units
            ),
            order_distribution_3_units=_to_float(
                row.get("orderDistribution3Units"), defaults.order_distribution_3_units
            ),
            order_distribution_more_than_3_units=_to_float(
                row.get("orderDistributionMoreThan3Units"), defaults.order_distribution_more_than_3_units
            ),
            monthly_target_revenue=_to_float(row.get("monthlyTargetRevenue"), defaults.monthly_target_revenue),
            monthly_target_units_sold=_to_float(
                row.get("monthlyTargetUnitsSold"), defaults.monthly_target_units_sold
            ),
            monthly_target_orders=_to_float(row.get("monthlyTargetOrders"), defaults.monthly_target_orders),
        )


@dataclass(frozen=True)
class Snapshot:
    """Consistent view of the record store for one computation."""

    products: tuple[Product, ...] = ()
    entries: tuple[DailyEntry, ...] = ()
    settings: Settings = field(default_factory=Settings)
