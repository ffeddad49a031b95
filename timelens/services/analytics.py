"""
Time analytics aggregation.

Turns a list of calendar events into the AnalyticsSnapshot consumed by the
dashboard: hours per category, a sparse per-day breakdown, and summary
metrics. Pure functions only; events are never modified.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo
import math

from ..models.enums import Category, CATEGORY_COLORS
from ..models.schemas import AnalyticsMetrics, AnalyticsSnapshot, TimeAllocationEntry
from ..utils.datetime_utils import ensure_utc, utc_now

WEEKDAYS = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')
# Display order of the weekly histogram
HISTOGRAM_DAYS = ('Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat')


@dataclass(frozen=True)
class AnalyticsWindow:
    """
    Lower bound of the analytics range and the timezone used for day names.

    The bound documents what the caller queried; aggregate() does not filter.
    """
    since: datetime
    timezone: str = 'UTC'

    @classmethod
    def trailing(cls, days: int = 7, now: Optional[datetime] = None, timezone: str = 'UTC') -> "AnalyticsWindow":
        now = ensure_utc(now) if now else utc_now()
        return cls(since=now - timedelta(days=days), timezone=timezone)


def round_hours(value: float) -> float:
    """Round half up to one decimal place (1.05 -> 1.1, 1.04 -> 1.0)"""
    return math.floor(value * 10 + 0.5) / 10


def event_hours(event) -> float:
    """Duration in hours. Not validated: malformed events may go negative."""
    return (ensure_utc(event.end_time) - ensure_utc(event.start_time)).total_seconds() / 3600


def local_day_name(moment: datetime, tz: ZoneInfo) -> str:
    return WEEKDAYS[ensure_utc(moment).astimezone(tz).weekday()]


def aggregate(events: Iterable, window: Optional[AnalyticsWindow] = None) -> AnalyticsSnapshot:
    """
    Aggregate event durations by category and by day.

    Args:
        events: Objects with start_time, end_time and category attributes,
            already limited to the window by the caller
        window: Analytics window; only its timezone is used here

    Returns:
        AnalyticsSnapshot
    """
    tz = ZoneInfo(window.timezone if window else 'UTC')

    category_totals: Dict[Category, float] = {}
    daily_totals: Dict[str, Dict[Category, float]] = {}
    count = 0

    for event in events:
        count += 1
        category = Category.parse(event.category)
        hours = event_hours(event)
        day = local_day_name(event.start_time, tz)

        category_totals[category] = category_totals.get(category, 0.0) + hours

        day_totals = daily_totals.setdefault(day, {})
        day_totals[category] = day_totals.get(category, 0.0) + hours

    time_allocation = [
        TimeAllocationEntry(category=category, hours=round_hours(hours), color=CATEGORY_COLORS[category])
        for category, hours in category_totals.items()
    ]

    trends: List[Dict[str, Any]] = []
    for day, totals in daily_totals.items():
        entry: Dict[str, Any] = {'date': day}
        for category, hours in totals.items():
            entry[category.value] = round_hours(hours)
        trends.append(entry)

    # max() keeps the first of equal totals, i.e. the day seen first
    most_productive_day = 'N/A'
    if daily_totals:
        most_productive_day = max(daily_totals, key=lambda d: sum(daily_totals[d].values()))

    return AnalyticsSnapshot(
        time_allocation=time_allocation,
        trends=trends,
        metrics=AnalyticsMetrics(
            total_hours=round_hours(sum(category_totals.values())),
            events_count=count,
            most_productive_day=most_productive_day,
        ),
    )


def weekly_breakdown(trends: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Zero-fill sparse trends into a Sun..Sat grid with every category"""
    by_day = {entry.get('date'): entry for entry in trends}
    grid = []
    for day in HISTOGRAM_DAYS:
        source = by_day.get(day, {})
        row: Dict[str, Any] = {'day': day}
        for category in Category:
            row[category.value] = round_hours(source.get(category.value, 0) or 0)
        grid.append(row)
    return grid
