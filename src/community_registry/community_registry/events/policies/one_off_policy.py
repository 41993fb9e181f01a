from __future__ import annotations

from datetime import datetime

from ...core.enums import WindowState
from ..model import CheckInWindow
from .base import WindowPolicy


class OneOffPolicy(WindowPolicy):
    """Single events close for good once the trailing buffer has passed."""

    def classify_after_window(self, window: CheckInWindow, now: datetime) -> WindowState:
        return WindowState.CLOSED
