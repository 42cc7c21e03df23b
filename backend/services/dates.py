"""
dates.py — Canonical calendar dates.
Everything downstream buckets by plain `date` values: no time of day, no tz.
"Today" is resolved once, in the viewer's timezone, and then passed along.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config import APP_TIMEZONE


def resolve_timezone(name: str | None = None):
    """ZoneInfo for `name` (or APP_TIMEZONE); unknown names fall back to UTC."""
    try:
        return ZoneInfo(name or APP_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def today(tz_name: str | None = None, now: datetime | None = None) -> date:
    """Viewer-local calendar date. `now` is injectable for tests."""
    tz = resolve_timezone(tz_name)
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current.astimezone(tz).date()


def parse_day(value) -> date:
    """Accept a date, a datetime or a 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def shift(day: date, delta_days: int) -> date:
    return day + timedelta(days=delta_days)


def week_start(day: date) -> date:
    """Monday of the week containing `day` (Sunday rolls back six days)."""
    return day - timedelta(days=day.weekday())


def trailing_days(reference: date, count: int = 7) -> list[date]:
    """`count` consecutive days, oldest first, ending at `reference`."""
    return [reference - timedelta(days=i) for i in range(count - 1, -1, -1)]
