"""Input validation and log-safe formatting for email addresses."""

import re
from typing import Any

from .errors import ValidationError

# local@domain.tld, no whitespace and exactly one "@"
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value))


def normalize_email(value: Any) -> str:
    """
    Strip surrounding whitespace and check the address syntax.

    Raises:
        ValidationError: missing or malformed address
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Missing email")
    if not isinstance(value, str):
        raise ValidationError("Invalid email format")
    email = value.strip()
    if not is_valid_email(email):
        raise ValidationError("Invalid email format")
    return email


def mask_email(email: str) -> str:
    """Mask the local part for logs: ``alice@example.com`` -> ``a***@example.com``."""
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"
