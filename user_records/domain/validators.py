"""Pure predicates for user field constraints."""

from __future__ import annotations

import re
from typing import Any

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
MIN_AGE = 0
MAX_AGE = 150


def is_blank(value: Any) -> bool:
    """True for None, empty strings and whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())


def is_valid_email(value: Any) -> bool:
    if is_blank(value) or not isinstance(value, str):
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_age(value: Any) -> bool:
    # bool is an int subclass; True is not an age.
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_AGE <= value <= MAX_AGE


__all__ = ["EMAIL_PATTERN", "MIN_AGE", "MAX_AGE", "is_blank", "is_valid_email", "is_valid_age"]
