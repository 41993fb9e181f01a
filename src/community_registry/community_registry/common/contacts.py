"""Normalization of contact identifiers (email, mobile number).

Accounts are matched on the normalized forms, so every write and every lookup
must go through these helpers.
"""

from __future__ import annotations

import re
from typing import Optional

_PHONE_SEPARATORS = re.compile(r"[\s\-().]")
_PHONE_EDGE_JUNK = re.compile(r"^[^\d+]+|[^\d]+$")


def normalize_email(email: Optional[str]) -> Optional[str]:
    if not email or not email.strip():
        return None
    return email.strip().lower()


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Normalize a Philippine mobile number to ``+639XXXXXXXXX``.

    Numbers that do not look like a local mobile number are returned cleaned
    but otherwise untouched.
    """
    if not phone or not phone.strip():
        return None

    cleaned = _PHONE_SEPARATORS.sub("", phone)
    cleaned = _PHONE_EDGE_JUNK.sub("", cleaned)
    if not cleaned:
        return None

    if cleaned.startswith("09") and len(cleaned) == 11:
        return "+63" + cleaned[1:]
    if cleaned.startswith("9") and len(cleaned) == 10:
        return "+63" + cleaned
    if cleaned.startswith("63") and len(cleaned) == 12:
        return "+" + cleaned
    return cleaned
