from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceFilter, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(
        self,
        employee_id: int,
        work_date: date,
        *,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        clock_in: Optional[time],
        clock_out: Optional[time],
        status: AttendanceStatus,
        work_hours: Optional[float],
        overtime_hours: Optional[float],
        notes: Optional[str],
        created_at: datetime,
    ) -> int:
        """Insert a row. Raises DuplicateRecord if (employee_id, work_date) exists
        or a concurrent insert of the same day wins.
        """

        raise NotImplementedError

    def update(
        self,
        *,
        attendance_id: int,
        clock_in: Optional[time],
        clock_out: Optional[time],
        status: AttendanceStatus,
        work_hours: Optional[float],
        overtime_hours: Optional[float],
        notes: Optional[str],
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def count(self, criteria: AttendanceFilter) -> int:
        raise NotImplementedError

    def find(self, criteria: AttendanceFilter, *, limit: int, offset: int) -> Sequence[AttendanceRecord]:
        """Ordered by work_date DESC, employee_id ASC, attendance_id DESC."""

        raise NotImplementedError
