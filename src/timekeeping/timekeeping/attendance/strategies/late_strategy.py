from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..policy import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Clock-in after the grace threshold."""

    def decide_clock_in(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE)

    def decide_clock_out(self, *, work_hours: Optional[float], current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
