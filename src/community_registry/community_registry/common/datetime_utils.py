from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Union

from ..core.constants import EVENT_TIMEZONE


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date.

    Full ISO timestamps (``2024-03-05T00:00:00.000Z``) are accepted too; only
    the calendar date part is kept.
    """
    return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()


def parse_time_of_day(value: str) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a time."""
    parts = value.strip().split(":")
    if len(parts) < 2 or len(parts) > 3:
        raise ValueError(f"Invalid time string: {value!r}")
    hours = int(parts[0])
    minutes = int(parts[1])
    seconds = int(parts[2]) if len(parts) == 3 and parts[2] else 0
    return time(hour=hours, minute=minutes, second=seconds)


def as_date(value: Union[date, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


def as_time(value: Union[time, str, None]) -> Optional[time]:
    if value is None:
        return None
    if isinstance(value, time):
        return value
    if not value.strip():
        return None
    return parse_time_of_day(value)


def now_local() -> datetime:
    """Current wall-clock time in the event timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(EVENT_TIMEZONE)


def to_event_timezone(moment: datetime) -> datetime:
    """Naive datetimes are read as event-timezone wall clock."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=EVENT_TIMEZONE)
    return moment.astimezone(EVENT_TIMEZONE)
