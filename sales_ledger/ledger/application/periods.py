"""Resolve time-range selectors into concrete current/comparison windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum


class TimeFilter(str, Enum):
    ALL = "ALL"
    TODAY = "TODAY"
    WEEK = "WEEK"
    MONTH = "MONTH"
    QUARTER = "QUARTER"
    YEAR = "YEAR"
    CUSTOM = "CUSTOM"


class ComparisonMode(str, Enum):
    NONE = "NONE"
    PREVIOUS_PERIOD = "PREVIOUS_PERIOD"
    PREVIOUS_YEAR = "PREVIOUS_YEAR"


EPOCH = datetime(1970, 1, 1)


@dataclass(frozen=True)
class DateWindow:
    start: datetime
    end: datetime

    @property
    def duration_days(self) -> int:
        return (self.end - self.start).days

    def contains(self, day: date) -> bool:
        moment = datetime.combine(day, time.min)
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class PeriodSelection:
    current: DateWindow
    comparison: DateWindow | None = None


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def _month_end(year: int, month: int) -> date:
    if month == 12:
        return date(year, 12, 31)
    return date(year, month + 1, 1) - timedelta(days=1)


def shift_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # Feb 29 into a non-leap year.
        return moment.replace(year=moment.year + years, day=28)


def resolve_window(
    time_filter: TimeFilter,
    custom_start: date | None = None,
    custom_end: date | None = None,
    now: datetime | None = None,
) -> DateWindow:
    now = now or datetime.now()
    today = now.date()

    if time_filter == TimeFilter.TODAY:
        return DateWindow(_start_of_day(today), _end_of_day(today))
    if time_filter == TimeFilter.WEEK:
        # Weeks start on Sunday.
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)
        return DateWindow(_start_of_day(week_start), _end_of_day(week_start + timedelta(days=6)))
    if time_filter == TimeFilter.MONTH:
        return DateWindow(
            _start_of_day(today.replace(day=1)),
            _end_of_day(_month_end(today.year, today.month)),
        )
    if time_filter == TimeFilter.QUARTER:
        first_month = 3 * ((today.month - 1) // 3) + 1
        return DateWindow(
            _start_of_day(date(today.year, first_month, 1)),
            _end_of_day(_month_end(today.year, first_month + 2)),
        )
    if time_filter == TimeFilter.YEAR:
        return DateWindow(_start_of_day(date(today.year, 1, 1)), _end_of_day(date(today.year, 12, 31)))
    if time_filter == TimeFilter.CUSTOM:
        if custom_start is None or custom_end is None:
            return DateWindow(now, now)
        return DateWindow(_start_of_day(custom_start), _end_of_day(custom_end))
    return DateWindow(EPOCH, now)


def comparison_window(window: DateWindow, mode: ComparisonMode) -> DateWindow | None:
    if mode == ComparisonMode.PREVIOUS_PERIOD:
        shift = timedelta(days=window.duration_days + 1)
        return DateWindow(window.start - shift, window.end - shift)
    if mode == ComparisonMode.PREVIOUS_YEAR:
        return DateWindow(shift_years(window.start, -1), shift_years(window.end, -1))
    return None


def resolve_periods(
    time_filter: TimeFilter,
    comparison_mode: ComparisonMode = ComparisonMode.NONE,
    custom_start: date | None = None,
    custom_end: date | None = None,
    now: datetime | None = None,
) -> PeriodSelection:
    current = resolve_window(time_filter, custom_start=custom_start, custom_end=custom_end, now=now)
    return PeriodSelection(current=current, comparison=comparison_window(current, comparison_mode))
