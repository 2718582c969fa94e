from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.enums import AttendanceStatus
from .policy import AttendancePolicy
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on policy rules."""

    def for_clock_in(self, *, now: datetime, policy: AttendancePolicy) -> AttendanceStrategy:
        if not policy.late_detection_enabled or policy.work_start is None:
            return NormalStrategy()

        threshold = datetime.combine(now.date(), policy.work_start) + timedelta(minutes=policy.grace_minutes)
        if now <= threshold:
            return NormalStrategy()
        return LateStrategy()

    def for_clock_out(
        self,
        *,
        work_hours: Optional[float],
        policy: AttendancePolicy,
        current_status: AttendanceStatus,
    ) -> AttendanceStrategy:
        if policy.half_day_threshold_hours is None or work_hours is None:
            return NormalStrategy()

        if current_status == AttendanceStatus.PRESENT and work_hours < policy.half_day_threshold_hours:
            return HalfDayStrategy()
        return NormalStrategy()
