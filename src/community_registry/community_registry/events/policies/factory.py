from __future__ import annotations

from dataclasses import dataclass, field

from ..model import EventOccurrence
from ..occurrence import is_recurring
from .base import WindowPolicy
from .one_off_policy import OneOffPolicy
from .recurring_policy import RecurringPolicy


@dataclass
class WindowPolicyFactory:
    """Factory Pattern: choose the window policy for an event."""

    one_off: WindowPolicy = field(default_factory=OneOffPolicy)
    recurring: WindowPolicy = field(default_factory=RecurringPolicy)

    def for_event(self, event: EventOccurrence) -> WindowPolicy:
        return self.recurring if is_recurring(event) else self.one_off
