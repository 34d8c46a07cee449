"""Validation and normalization of request input. No I/O happens here."""

from typing import Any
import re

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
CODE_PATTERN = re.compile(r'[0-9]{6}')

MAX_EMAIL_LENGTH = 254
MAX_LOCAL_PART_LENGTH = 64
MIN_PASSWORD_LENGTH = 6


def normalize_email(value: Any) -> Any:
    """Trim and lower-case an e-mail address; non-strings pass through."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


def is_missing(value: Any) -> bool:
    """A field is missing when it is absent, null, or an empty string."""
    return value is None or value == ''


def validate_email(value: Any) -> bool:
    """Check that ``value`` looks like ``local@domain.tld``."""
    if not value or not isinstance(value, str):
        return False
    if not EMAIL_PATTERN.match(value):
        return False
    if len(value) > MAX_EMAIL_LENGTH:
        return False
    return len(value.split('@')[0]) <= MAX_LOCAL_PART_LENGTH


def validate_password(value: Any) -> bool:
    """Passwords must be strings of at least six characters."""
    return isinstance(value, str) and len(value) >= MIN_PASSWORD_LENGTH


def validate_code_format(value: Any) -> bool:
    """Codes are exactly six ASCII digits, once surrounding space is trimmed."""
    if not isinstance(value, str):
        return False
    return bool(CODE_PATTERN.fullmatch(value.strip()))
