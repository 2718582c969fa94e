from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import format_time
from ..core.enums import RegularizationStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class RegularizationRequest:
    """Employee-submitted correction of one day's clock times.

    ``original_*`` is a snapshot of the attendance record at submission time
    (None when the day had no record).
    ``submitted_by`` is the submitting user; ``submitted_by_employee`` is that
    user's employee id, None for staff without an employee profile.
    """

    request_id: int
    employee_id: int
    work_date: date
    original_clock_in: Optional[time]
    original_clock_out: Optional[time]
    requested_clock_in: time
    requested_clock_out: time
    reason: str
    status: RegularizationStatus
    submitted_by: int
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    decision_note: Optional[str] = None
    submitted_by_employee: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "original_clock_in": format_time(self.original_clock_in),
            "original_clock_out": format_time(self.original_clock_out),
            "requested_clock_in": format_time(self.requested_clock_in),
            "requested_clock_out": format_time(self.requested_clock_out),
            "reason": self.reason,
            "status": self.status.value,
            "submitted_by": self.submitted_by,
            "submitted_by_employee": self.submitted_by_employee,
            "created_at": self.created_at.isoformat(),
            "decided_by": self.decided_by,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
            "decision_note": self.decision_note,
        }


@dataclass(frozen=True)
class RegularizationFilter:
    """Query filter; date bounds are inclusive."""

    employee_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[RegularizationStatus] = None


def parse_request_status(value, field_name: str = "status") -> RegularizationStatus:
    if isinstance(value, RegularizationStatus):
        return value
    try:
        return RegularizationStatus(str(value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in RegularizationStatus)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def parse_decision(value) -> RegularizationStatus:
    """A decision is a terminal status: approved or rejected."""
    status = parse_request_status(value)
    if not status.is_terminal:
        raise ValidationError("status must be 'approved' or 'rejected'")
    return status
