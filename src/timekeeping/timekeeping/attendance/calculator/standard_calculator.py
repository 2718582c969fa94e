from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..policy import AttendancePolicy
from .base import WorkedHours, WorkHoursCalculator


class StandardWorkHoursCalculator(WorkHoursCalculator):
    """Standard rule: (out - in) - break_minutes, not below 0, in hours with 2 decimals.

    Overtime is the excess over the standard day, recorded only when enabled.
    """

    def __init__(self, policy: Optional[AttendancePolicy] = None):
        self._policy = policy or AttendancePolicy()

    def worked_minutes(self, clock_in: time, clock_out: time) -> int:
        anchor = date(2000, 1, 1)
        minutes = int((datetime.combine(anchor, clock_out) - datetime.combine(anchor, clock_in)).total_seconds() // 60)
        minutes -= int(self._policy.break_minutes or 0)
        return max(minutes, 0)

    def compute(self, clock_in: Optional[time], clock_out: Optional[time]) -> WorkedHours:
        if clock_in is None or clock_out is None:
            return WorkedHours(work_hours=None, overtime_hours=None)

        hours = round(self.worked_minutes(clock_in, clock_out) / 60, 2)
        overtime = None
        if self._policy.overtime_enabled:
            overtime = round(max(hours - float(self._policy.standard_work_hours), 0.0), 2)
        return WorkedHours(work_hours=hours, overtime_hours=overtime)
