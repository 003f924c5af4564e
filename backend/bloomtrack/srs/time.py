"""Time helpers for SRS scheduling.

Timestamps handled by the engine are integer milliseconds since the Unix epoch.
Day arithmetic is done on calendar days in a configurable timezone.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from bloomtrack.constants import ONE_DAY_MS

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MILLISECOND = timedelta(milliseconds=1)


def resolve_timezone(name: str) -> tzinfo:
    """Return a tzinfo for an IANA name. 'UTC' never needs the tz database."""
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def utc_now_ms() -> int:
    """Return current time as milliseconds since the epoch."""
    return datetime_to_ms(datetime.now(timezone.utc))


def datetime_to_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds. Naive datetimes are treated as UTC.

    Sub-millisecond parts are floored in integer arithmetic.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // ONE_MILLISECOND


def ms_to_datetime(ms: int, tz: tzinfo = timezone.utc) -> datetime:
    return (EPOCH + ms * ONE_MILLISECOND).astimezone(tz)


def add_days_ms(ms: int, days: int | float) -> int:
    return ms + int(days * ONE_DAY_MS)


def calendar_days_between(earlier_ms: int, later_ms: int, tz: tzinfo = timezone.utc) -> int:
    """Number of calendar-day boundaries between two timestamps in the given timezone.

    Both timestamps are reduced to their local date first, so 23:59 and 00:01 on
    the following day are one day apart. Negative when ``later_ms`` is earlier.
    """
    earlier = ms_to_datetime(earlier_ms, tz).date()
    later = ms_to_datetime(later_ms, tz).date()
    return (later - earlier).days
