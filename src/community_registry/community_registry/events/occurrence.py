"""Derivation of occurrence instants in the event timezone.

Display and eligibility code both go through these functions so they can never
disagree on where an occurrence starts or ends.
"""

from __future__ import annotations

from datetime import date, datetime, time

from ..common.datetime_utils import as_date, as_time
from ..common.validators import parse_flag
from ..core.constants import EVENT_TIMEZONE
from ..core.exceptions import InvalidEventWindowError
from .model import DateLike, EventOccurrence, TimeLike


def _parse_day(value: DateLike) -> date:
    if value is None:
        raise InvalidEventWindowError("Event date is missing")
    try:
        return as_date(value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidEventWindowError(f"Invalid event date: {value!r}") from exc


def _parse_time(value: TimeLike):
    try:
        return as_time(value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidEventWindowError(f"Invalid event time: {value!r}") from exc


def resolve_instant(day: DateLike, time_of_day: TimeLike = None) -> datetime:
    """Combine a calendar day and a wall-clock time at UTC+8 (midnight if no time)."""
    return datetime.combine(_parse_day(day), _parse_time(time_of_day) or time(0, 0), tzinfo=EVENT_TIMEZONE)


def is_recurring(event: EventOccurrence) -> bool:
    """Strictly parsed recurrence flag; an unreadable flag makes the event unusable."""
    try:
        return parse_flag(event.is_recurring)
    except ValueError as exc:
        raise InvalidEventWindowError(f"Invalid recurrence flag: {event.is_recurring!r}") from exc


def occurrence_start(event: EventOccurrence) -> datetime:
    return resolve_instant(event.start_date, event.start_time)


def occurrence_end(event: EventOccurrence) -> datetime:
    """End of this occurrence.

    Recurring templates are edited in place, so their stored end date can
    point anywhere; the occurrence is always the start day.
    """
    end_time = event.end_time if event.end_time else event.start_time
    if is_recurring(event):
        return resolve_instant(event.start_date, end_time)
    return resolve_instant(event.end_date, end_time)
