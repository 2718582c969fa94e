from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Any, Optional

from ..common.datetime_utils import parse_clock_time
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_STANDARD_WORK_HOURS, DEFAULT_WORK_START
from ..core.exceptions import ValidationError


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class AttendancePolicy:
    """Attendance rules fed from settings.

    ``work_start`` + ``grace_minutes`` is the late threshold used at clock-in
    (only when ``late_detection_enabled``). ``half_day_threshold_hours`` of
    None disables half-day detection at clock-out.
    """

    work_start: Optional[time] = time(9, 0)
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    late_detection_enabled: bool = True
    break_minutes: int = 0
    standard_work_hours: float = DEFAULT_STANDARD_WORK_HOURS
    overtime_enabled: bool = False
    half_day_threshold_hours: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Any) -> "AttendancePolicy":
        work_start_raw = getattr(settings, "WORK_START_TIME", DEFAULT_WORK_START)
        threshold = getattr(settings, "HALF_DAY_THRESHOLD_HOURS", None)
        try:
            work_start = parse_clock_time(work_start_raw, "WORK_START_TIME")
        except ValidationError as e:
            raise ValueError(str(e)) from e

        policy = cls(
            work_start=work_start,
            grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
            late_detection_enabled=_as_bool(getattr(settings, "LATE_DETECTION_ENABLED", True)),
            break_minutes=int(getattr(settings, "BREAK_MINUTES", 0)),
            standard_work_hours=float(getattr(settings, "STANDARD_WORK_HOURS", DEFAULT_STANDARD_WORK_HOURS)),
            overtime_enabled=_as_bool(getattr(settings, "OVERTIME_ENABLED", False)),
            half_day_threshold_hours=float(threshold) if threshold not in (None, "") else None,
        )
        if policy.grace_minutes < 0 or policy.break_minutes < 0:
            raise ValueError("LATE_GRACE_MINUTES and BREAK_MINUTES must be >= 0")
        return policy
