"""
Datetime helpers shared by the store, the API and the Google import:
- utc_now: current time as an aware UTC datetime
- ensure_utc: attach or convert to UTC
- to_db_datetime: normalise to the naive-UTC form kept in the database
- parse_google_datetime: parse a Google Calendar start/end object
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Return dt as an aware UTC datetime. Naive values are taken to be UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_db_datetime(dt: Optional[datetime]) -> Optional[datetime]:
    """Naive UTC, the form SQLite round-trips without loss"""
    if dt is None:
        return None
    return ensure_utc(dt).replace(tzinfo=None)


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as e:
        raise ValueError(f"unknown time zone {name!r}") from e


def parse_google_datetime(value: Dict[str, Any], tz_name: str = 'UTC') -> Tuple[Optional[datetime], bool]:
    """
    Parse a Google Calendar ``start``/``end`` object.

    Args:
        value: Either ``{"dateTime": ...}`` or ``{"date": "YYYY-MM-DD"}``
        tz_name: Timezone for all-day dates, which carry none

    Returns:
        (aware UTC datetime or None, is_all_day)

    Raises:
        ValueError: the event or tz_name names an unknown time zone
    """
    if not value:
        return None, False

    if value.get('dateTime'):
        dt = parser.isoparse(value['dateTime'])
        if dt.tzinfo is None and value.get('timeZone'):
            dt = dt.replace(tzinfo=_zone(value['timeZone']))
        return ensure_utc(dt), False

    if value.get('date'):
        day = parser.isoparse(value['date'])
        local_midnight = day.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=_zone(tz_name))
        return ensure_utc(local_midnight), True

    return None, False
