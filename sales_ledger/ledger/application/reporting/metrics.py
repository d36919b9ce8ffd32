"""Shared numeric/formatting utilities for dashboard and reporting."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def safe_divide(num: float, den: float) -> float:
    if den == 0 or not math.isfinite(den):
        return 0.0
    return num / den


@dataclass(frozen=True)
class Trend:
    value: float | None
    polarity: str

    @property
    def is_unbounded(self) -> bool:
        return self.value is not None and math.isinf(self.value)


def compute_trend(current: float, previous: float) -> Trend:
    """Percentage change of current vs previous with a display polarity."""
    if previous == 0:
        if current > 0:
            return Trend(math.inf, POSITIVE)
        return Trend(0.0, NEUTRAL)
    if current == previous:
        return Trend(0.0, NEUTRAL)
    change = (current - previous) / abs(previous) * 100
    if not math.isfinite(change):
        return Trend(None, NEUTRAL)
    return Trend(change, POSITIVE if change > 0 else NEGATIVE)


def fmt_money(value: float | None, currency: str, digits: int = 0) -> str:
    if value is None:
        return f"{currency} 0"
    return f"{currency} {value:,.{digits}f}"


def fmt_count(value: float | None) -> str:
    if value is None:
        return "0"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def fmt_pct(value: float | None, digits: int = 1) -> str:
    if value is None:
        return "N/A"
    return f"{value:.{digits}f}%"


def fmt_ratio(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.2f}"


def fmt_trend(trend: Trend) -> str:
    if trend.value is None:
        return "N/A"
    if trend.is_unbounded:
        return "+∞"
    return f"{trend.value:+.1f}%"
