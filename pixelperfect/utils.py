"""Shared utilities used across the studio booking core."""

import re
import uuid


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(555) 123-4567")
        '5551234567'
        >>> normalize_phone("+1 555 123 4567")
        '+15551234567'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def new_reference(prefix: str, length: int = 8) -> str:
    """Generate a short upper-case reference such as ``BK-1A2B3C4D``."""
    return f"{prefix}-{uuid.uuid4().hex[:length].upper()}"
