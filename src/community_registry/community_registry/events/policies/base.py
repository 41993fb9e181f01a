from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ...core.constants import CHECKIN_BUFFER
from ...core.enums import WindowState
from ..model import CheckInWindow, EventOccurrence
from ..occurrence import occurrence_end, occurrence_start


class WindowPolicy(ABC):
    """Strategy Pattern: how a kind of event turns into a check-in window."""

    buffer = CHECKIN_BUFFER

    def window_for(self, event: EventOccurrence) -> CheckInWindow:
        start = occurrence_start(event)
        end = occurrence_end(event)
        return CheckInWindow(
            occurrence_start=start,
            occurrence_end=end,
            window_start=start - self.buffer,
            window_end=end + self.buffer,
        )

    def classify(self, window: CheckInWindow, now: datetime) -> WindowState:
        if now < window.window_start:
            return WindowState.UPCOMING
        if now <= window.window_end:
            return WindowState.IN_WINDOW
        return self.classify_after_window(window, now)

    @abstractmethod
    def classify_after_window(self, window: CheckInWindow, now: datetime) -> WindowState:
        raise NotImplementedError
