from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account privilege tiers, lowest first."""

    MEMBER = "MEMBER"
    CLASS_SHEPHERD = "CLASS_SHEPHERD"
    MINISTRY_COORDINATOR = "MINISTRY_COORDINATOR"
    DCS = "DCS"
    ADMINISTRATOR = "ADMINISTRATOR"
    SUPER_USER = "SUPER_USER"


class WindowState(str, Enum):
    """Where `now` falls relative to an occurrence's check-in window."""

    UPCOMING = "UPCOMING"
    IN_WINDOW = "IN_WINDOW"
    RECENTLY_CLOSED = "RECENTLY_CLOSED"
    CLOSED = "CLOSED"


class DisplayStatus(str, Enum):
    """Badge shown next to an event in listings."""

    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
