from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class WorkedHours:
    work_hours: Optional[float]
    overtime_hours: Optional[float] = None


class WorkHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for derived hours)."""

    @abstractmethod
    def compute(self, clock_in: Optional[time], clock_out: Optional[time]) -> WorkedHours:
        raise NotImplementedError
