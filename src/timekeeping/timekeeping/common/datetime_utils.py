from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Union

from ..core.exceptions import ValidationError

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def parse_iso_date(value: Union[str, date], field_name: str = "date") -> date:
    """Parse YYYY-MM-DD string into date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def parse_optional_date(value: Union[str, date, None], field_name: str) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_iso_date(value, field_name)


def parse_clock_time(value: Union[str, time, None], field_name: str) -> Optional[time]:
    """Parse HH:MM or HH:MM:SS into a time of day. Blank means None."""
    if value is None:
        return None
    if isinstance(value, time):
        return value.replace(microsecond=0)
    v = str(value).strip()
    if not v:
        return None
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} must be a time (HH:MM or HH:MM:SS)")


def format_time(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now().replace(microsecond=0)
