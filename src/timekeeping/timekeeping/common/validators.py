from __future__ import annotations

from datetime import time
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value, field_name: str, *, max_length: Optional[int] = None) -> Optional[str]:
    """Stripped text or None for blank input; non-strings are rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return value or None


def require_present(value, field_name: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    return value


def require_clock_order(clock_in: Optional[time], clock_out: Optional[time]) -> None:
    """clock_out may not precede clock_in on the same day."""
    if clock_out is None:
        return
    if clock_in is None:
        raise ValidationError("clock_out cannot be set without clock_in")
    if clock_out < clock_in:
        raise ValidationError("clock_out cannot be earlier than clock_in")


def optional_int(value, field_name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
