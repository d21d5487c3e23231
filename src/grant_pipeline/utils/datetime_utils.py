from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from dateutil import parser


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime_utc(value: Any) -> datetime | None:
    """Parse a backend timestamp or calendar date into an aware UTC datetime.

    Bare dates (``2026-03-30``) resolve to midnight UTC. Only ISO 8601 text is
    accepted; free text such as ``"Friday"`` yields ``None`` instead of a date
    filled in from today.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return to_utc(parser.isoparse(value))
        except (ValueError, TypeError, OverflowError):
            return None

    return None


def window_bounds(now: datetime, window_days: int) -> tuple[datetime, datetime]:
    start = to_utc(now)
    return start, start + timedelta(days=window_days)


def format_datetime(value: datetime | None) -> str:
    if value is None:
        return "unknown"
    return to_utc(value).strftime("%Y-%m-%d %H:%M UTC")
