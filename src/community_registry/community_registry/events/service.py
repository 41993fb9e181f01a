from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from ..common.datetime_utils import now_local, to_event_timezone
from ..core.constants import LEGACY_CATEGORY_NAMES, PAST_EVENT_CATEGORIES
from ..core.enums import DisplayStatus, WindowState
from ..core.exceptions import InvalidEventWindowError
from .model import CheckInEvaluation, CheckInWindow, EventOccurrence
from .policies.factory import WindowPolicyFactory

logger = logging.getLogger(__name__)

_ELIGIBLE_STATES = (WindowState.IN_WINDOW, WindowState.RECENTLY_CLOSED)


def is_past_event_category(category: Optional[str]) -> bool:
    """Whether events of this category may be picked from past-event searches."""
    if not category or not isinstance(category, str):
        return False
    normalized = LEGACY_CATEGORY_NAMES.get(category, category)
    return normalized in PAST_EVENT_CATEGORIES


class CheckInWindowEvaluator:
    """Use case: decide whether an event can be checked into right now.

    Window: 2 hours before the occurrence starts until 2 hours after it ends.
    Recurring events stay open for 7 more days after that. Malformed event data
    never raises here; it is reported as closed.
    """

    def __init__(self, *, policy_factory: Optional[WindowPolicyFactory] = None):
        self._factory = policy_factory or WindowPolicyFactory()

    def _now(self, now: Optional[datetime]) -> datetime:
        return to_event_timezone(now) if now is not None else now_local()

    def window(self, event: EventOccurrence) -> CheckInWindow:
        """Resolved window; raises `InvalidEventWindowError` for malformed events."""
        return self._factory.for_event(event).window_for(event)

    def window_start(self, event: EventOccurrence) -> datetime:
        return self.window(event).window_start

    def window_end(self, event: EventOccurrence) -> datetime:
        return self.window(event).window_end

    def classify(self, event: EventOccurrence, now: Optional[datetime] = None) -> WindowState:
        return self.evaluate(event, now).state

    def can_check_in(self, event: EventOccurrence, now: Optional[datetime] = None) -> bool:
        return self.evaluate(event, now).can_check_in

    def display_status(self, event: EventOccurrence, now: Optional[datetime] = None) -> Optional[DisplayStatus]:
        return self.evaluate(event, now).display_status

    def evaluate(self, event: EventOccurrence, now: Optional[datetime] = None) -> CheckInEvaluation:
        now = self._now(now)
        try:
            policy = self._factory.for_event(event)
            window = policy.window_for(event)
        except InvalidEventWindowError as exc:
            logger.warning("Event %s has an unusable schedule: %s", event.event_id or "<unsaved>", exc)
            return CheckInEvaluation(
                state=WindowState.CLOSED,
                can_check_in=False,
                display_status=None,
                error=str(exc),
            )

        state = policy.classify(window, now)
        return CheckInEvaluation(
            state=state,
            can_check_in=state in _ELIGIBLE_STATES,
            display_status=self._display_status(window, now),
            window=window,
        )

    @staticmethod
    def _display_status(window: CheckInWindow, now: datetime) -> DisplayStatus:
        # "Ongoing" ends at the occurrence end; check-in keeps its trailing buffer.
        if now < window.window_start:
            return DisplayStatus.UPCOMING
        if now <= window.occurrence_end:
            return DisplayStatus.ONGOING
        return DisplayStatus.COMPLETED

    def sort_for_check_in(
        self,
        events: Iterable[EventOccurrence],
        now: Optional[datetime] = None,
    ) -> List[EventOccurrence]:
        """In-window events first, then by window end, most recent first.

        Events whose window cannot be computed go last, in input order.
        """
        now = self._now(now)
        keyed: List[Tuple[int, float, int, EventOccurrence]] = []
        for index, event in enumerate(events):
            evaluation = self.evaluate(event, now)
            if evaluation.window is None:
                keyed.append((2, 0.0, index, event))
                continue
            bucket = 0 if evaluation.state == WindowState.IN_WINDOW else 1
            keyed.append((bucket, -evaluation.window.window_end.timestamp(), index, event))

        keyed.sort(key=lambda item: item[:3])
        return [item[3] for item in keyed]

    def eligible_events(
        self,
        events: Sequence[EventOccurrence],
        now: Optional[datetime] = None,
    ) -> List[EventOccurrence]:
        now = self._now(now)
        return [e for e in self.sort_for_check_in(events, now) if self.can_check_in(e, now)]
