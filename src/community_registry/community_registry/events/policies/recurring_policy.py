from __future__ import annotations

from datetime import datetime

from ...core.constants import RECURRING_GRACE_PERIOD
from ...core.enums import WindowState
from ..model import CheckInWindow
from .base import WindowPolicy


class RecurringPolicy(WindowPolicy):
    """Recurring occurrences stay checkable for a grace period after the window."""

    grace_period = RECURRING_GRACE_PERIOD

    def classify_after_window(self, window: CheckInWindow, now: datetime) -> WindowState:
        if now - window.window_end <= self.grace_period:
            return WindowState.RECENTLY_CLOSED
        return WindowState.CLOSED
