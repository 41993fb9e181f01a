"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import timedelta, timezone

# All event times are civil times at UTC+8 (no daylight saving).
EVENT_TIMEZONE = timezone(timedelta(hours=8), name="UTC+08:00")

CHECKIN_BUFFER = timedelta(hours=2)
RECURRING_GRACE_PERIOD = timedelta(days=7)

MIN_CLASS_NUMBER = 1
MAX_CLASS_NUMBER = 999
# Widest class number the two-digit class field of a community id can carry.
MAX_ENCODABLE_CLASS_NUMBER = 99
MAX_SEQUENCE = 99

DEFAULT_REGISTRATION_MAX_ATTEMPTS = 5
MIN_PASSWORD_LENGTH = 6

COMMUNITY_ID_PATTERN = r"^[A-Z]{3}-[A-Z]{2,4}\d{2}\d{2}$"

PAST_EVENT_CATEGORIES = ("Community Worship", "Word Sharing Circle")
LEGACY_CATEGORY_NAMES = {
    "Corporate Worship": "Community Worship",
    "Corporate Worship (Weekly Recurring)": "Community Worship",
}
