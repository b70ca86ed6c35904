# app/utils/timezones.py
from datetime import datetime, timedelta, timezone, date
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

log = logging.getLogger(__name__)

UTC = timezone.utc


def get_zone(name: str):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        log.warning("unknown timezone %r, falling back to UTC", name)
        return UTC


def utcnow() -> datetime:
    """Naive UTC, the format every DateTime column is stored in."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(UTC).replace(tzinfo=None)


def to_local(dt: datetime, tz) -> datetime:
    """Stored naive-UTC timestamp -> aware local time."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(tz)


def local_midnight(d: date, tz) -> datetime:
    return datetime(d.year, d.month, d.day, tzinfo=tz)


def month_start(d: date, tz) -> datetime:
    return datetime(d.year, d.month, 1, tzinfo=tz)


def previous_month_start(d: date, tz) -> datetime:
    first = d.replace(day=1)
    last_of_prev = first - timedelta(days=1)
    return datetime(last_of_prev.year, last_of_prev.month, 1, tzinfo=tz)
