from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Mapping, Optional, Union

from ..core.enums import DisplayStatus, WindowState

DateLike = Union[date, str]
TimeLike = Union[time, str, None]
FlagLike = Union[bool, int, str]


@dataclass(frozen=True)
class EventOccurrence:
    """Domain entity: one event (or recurring template) as seen by check-in.

    Dates, times and the recurrence flag are kept as supplied (``date``/``time``
    or their ISO text, ``"true"``/``"false"``) and parsed when a window is
    computed, so a malformed record can still be listed.
    """

    start_date: DateLike
    end_date: DateLike
    start_time: TimeLike = None
    end_time: TimeLike = None
    is_recurring: FlagLike = False
    category: Optional[str] = None
    event_id: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EventOccurrence":
        """Build from the scheduling layer's payload (camelCase or snake_case keys)."""

        def pick(*keys: str, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        start_date = pick("startDate", "start_date")
        return cls(
            start_date=start_date,
            end_date=pick("endDate", "end_date", default=start_date),
            start_time=pick("startTime", "start_time"),
            end_time=pick("endTime", "end_time"),
            is_recurring=pick("isRecurring", "is_recurring", default=False),
            category=pick("category"),
            event_id=pick("id", "eventId", "event_id"),
            title=pick("title"),
        )


@dataclass(frozen=True)
class CheckInWindow:
    """Resolved instants for one occurrence, all in the event timezone."""

    occurrence_start: datetime
    occurrence_end: datetime
    window_start: datetime
    window_end: datetime


@dataclass(frozen=True)
class CheckInEvaluation:
    """Read-model returned to the UI layer."""

    state: WindowState
    can_check_in: bool
    display_status: Optional[DisplayStatus]
    window: Optional[CheckInWindow] = None
    error: Optional[str] = None
