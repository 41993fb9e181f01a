from __future__ import annotations

from typing import Optional

from ..core.constants import MAX_CLASS_NUMBER, MIN_CLASS_NUMBER
from ..core.exceptions import InvalidClassNumberError, ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_class_number(value) -> int:
    """Parse a class number given as an int or a string of digits (``"07"``)."""
    if isinstance(value, bool):
        raise InvalidClassNumberError("Class number must be a number")
    if isinstance(value, int):
        number = value
    else:
        text = str(value or "").strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidClassNumberError("Class number must be a number")
        number = int(text)

    if number < MIN_CLASS_NUMBER or number > MAX_CLASS_NUMBER:
        raise InvalidClassNumberError(
            f"Class number must be between {MIN_CLASS_NUMBER:02d} and {MAX_CLASS_NUMBER}"
        )
    return number


_TRUE_WORDS = ("true", "1", "yes")
_FALSE_WORDS = ("false", "0", "no")


def parse_flag(value) -> bool:
    """Strict boolean: real bools, 0/1, or true/false words. Raises ValueError otherwise."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"Not a boolean: {value!r}")
