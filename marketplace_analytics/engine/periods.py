"""
Time Windows and Buckets

Supported revenue periods, the window each one covers, the equal-length
window immediately preceding it, and the calendar buckets used for trend
charts. All datetimes are naive UTC, matching the stored ``created_at``.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import List, Optional, Union

from marketplace_analytics.errors import InvalidFilterError


class RevenuePeriod(str, Enum):
    """Revenue period selector"""
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    LAST_YEAR = "1y"


class Granularity(str, Enum):
    DAY = "day"
    MONTH = "month"


_PERIOD_SPANS = {
    RevenuePeriod.LAST_7_DAYS: (Granularity.DAY, 7),
    RevenuePeriod.LAST_30_DAYS: (Granularity.DAY, 30),
    RevenuePeriod.LAST_90_DAYS: (Granularity.DAY, 90),
    RevenuePeriod.LAST_YEAR: (Granularity.MONTH, 12),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_period(value: Union[str, RevenuePeriod, None]) -> RevenuePeriod:
    """
    Validate a period selector.

    Raises:
        InvalidFilterError: If the value is not one of the supported periods
    """
    if isinstance(value, RevenuePeriod):
        return value
    try:
        return RevenuePeriod(value)
    except ValueError:
        raise InvalidFilterError(
            f"Unsupported period '{value}'",
            {"allowed": [p.value for p in RevenuePeriod]},
        ) from None


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval ``[start, end)``"""
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True)
class Bucket:
    key: str
    label: str
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _add_months(day: date, months: int) -> date:
    """First day of the month ``months`` away from ``day``'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def day_buckets(last_day: date, days: int) -> List[Bucket]:
    """``days`` consecutive calendar days ending with ``last_day``, oldest first."""
    first = last_day - timedelta(days=days - 1)
    buckets = []
    for offset in range(days):
        day = first + timedelta(days=offset)
        buckets.append(
            Bucket(
                key=day.isoformat(),
                label=day.strftime("%b %d"),
                start=_midnight(day),
                end=_midnight(day + timedelta(days=1)),
            )
        )
    return buckets


def month_buckets(last_day: date, months: int) -> List[Bucket]:
    """``months`` consecutive calendar months ending with ``last_day``'s month."""
    first = _add_months(last_day, -(months - 1))
    buckets = []
    for offset in range(months):
        month_start = _add_months(first, offset)
        buckets.append(
            Bucket(
                key=month_start.strftime("%Y-%m"),
                label=month_start.strftime("%b %Y"),
                start=_midnight(month_start),
                end=_midnight(_add_months(month_start, 1)),
            )
        )
    return buckets


def window_of(buckets: List[Bucket]) -> TimeWindow:
    return TimeWindow(start=buckets[0].start, end=buckets[-1].end)


def period_buckets(period: RevenuePeriod, now: Optional[datetime] = None) -> List[Bucket]:
    """Trend buckets for the period: days up to 90 days, months for a year."""
    today = (now or utcnow()).date()
    granularity, span = _PERIOD_SPANS[parse_period(period)]
    if granularity == Granularity.DAY:
        return day_buckets(today, span)
    return month_buckets(today, span)


def period_window(period: RevenuePeriod, now: Optional[datetime] = None) -> TimeWindow:
    return window_of(period_buckets(period, now))


def previous_window(period: RevenuePeriod, now: Optional[datetime] = None) -> TimeWindow:
    """The window of equal calendar length immediately before ``period_window``."""
    current = period_window(period, now)
    granularity, span = _PERIOD_SPANS[parse_period(period)]
    last_day = (current.start - timedelta(days=1)).date()
    if granularity == Granularity.DAY:
        return window_of(day_buckets(last_day, span))
    return window_of(month_buckets(last_day, span))


def trailing_days(days: int, now: Optional[datetime] = None) -> TimeWindow:
    """Window of the last ``days`` calendar days including today."""
    return window_of(day_buckets((now or utcnow()).date(), days))


def preceding_days(window: TimeWindow, days: int) -> TimeWindow:
    last_day = (window.start - timedelta(days=1)).date()
    return window_of(day_buckets(last_day, days))
