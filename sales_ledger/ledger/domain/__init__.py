"""Domain layer package."""

from .consolidation import effective_entries
from .models import (
    Campaign,
    CampaignEntry,
    DailyEntry,
    EntryType,
    Gender,
    Product,
    Season,
    SeasonFilter,
    Settings,
    Snapshot,
    SourceFilter,
)

__all__ = [
    "Campaign",
    "CampaignEntry",
    "DailyEntry",
    "EntryType",
    "Gender",
    "Product",
    "Season",
    "SeasonFilter",
    "Settings",
    "Snapshot",
    "SourceFilter",
    "effective_entries",
]
