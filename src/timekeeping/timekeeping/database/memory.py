"""In-process storage implementing the repository Protocols.

Used by the ``memory`` storage profile (testing, demos). One re-entrant lock
guards both tables; ``transaction()`` holds it for the whole block and
restores the previous table contents if the block raises.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, time
from typing import Iterable, Iterator, Optional, Sequence

from ..attendance.model import AttendanceFilter, AttendanceRecord
from ..core.enums import AttendanceStatus, RegularizationStatus
from ..core.exceptions import DuplicatePendingRequest, DuplicateRecord
from ..directory.model import Employee
from ..regularization.model import RegularizationFilter, RegularizationRequest


class InMemoryStore:
    def __init__(self):
        self.lock = threading.RLock()
        self.attendance: dict[int, AttendanceRecord] = {}
        self.requests: dict[int, RegularizationRequest] = {}
        self._next_attendance_id = 1
        self._next_request_id = 1
        self._depth = 0

    def next_attendance_id(self) -> int:
        value = self._next_attendance_id
        self._next_attendance_id += 1
        return value

    def next_request_id(self) -> int:
        value = self._next_request_id
        self._next_request_id += 1
        return value

    @contextmanager
    def transaction(self) -> Iterator[object]:
        with self.lock:
            outermost = self._depth == 0
            saved = (dict(self.attendance), dict(self.requests)) if outermost else None
            self._depth += 1
            try:
                yield self
            except Exception:
                if outermost:
                    self.attendance, self.requests = saved
                raise
            finally:
                self._depth -= 1


def _in_range(work_date: date, start: Optional[date], end: Optional[date]) -> bool:
    if start and work_date < start:
        return False
    if end and work_date > end:
        return False
    return True


class InMemoryAttendanceRepository:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        with self._store.lock:
            return self._store.attendance.get(int(attendance_id))

    def get_for_employee_and_date(
        self,
        employee_id: int,
        work_date: date,
        *,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        with self._store.lock:
            for r in self._store.attendance.values():
                if r.employee_id == int(employee_id) and r.work_date == work_date:
                    return r
            return None

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
        with self._store.lock:
            if self.get_for_employee_and_date(employee_id, work_date):
                raise DuplicateRecord("An attendance record already exists for this employee and date")
            attendance_id = self._store.next_attendance_id()
            self._store.attendance[attendance_id] = AttendanceRecord(
                attendance_id=attendance_id,
                employee_id=int(employee_id),
                work_date=work_date,
                clock_in=clock_in,
                clock_out=clock_out,
                status=status,
                work_hours=work_hours,
                overtime_hours=overtime_hours,
                notes=notes,
                created_at=created_at,
            )
            return attendance_id

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
        with self._store.lock:
            current = self._store.attendance.get(int(attendance_id))
            if not current:
                return False
            self._store.attendance[current.attendance_id] = replace(
                current,
                clock_in=clock_in,
                clock_out=clock_out,
                status=status,
                work_hours=work_hours,
                overtime_hours=overtime_hours,
                notes=notes,
                updated_at=updated_at,
            )
            return True

    def delete(self, attendance_id: int) -> bool:
        with self._store.lock:
            return self._store.attendance.pop(int(attendance_id), None) is not None

    def _matching(self, criteria: AttendanceFilter) -> list[AttendanceRecord]:
        rows = [
            r
            for r in self._store.attendance.values()
            if (criteria.employee_id is None or r.employee_id == int(criteria.employee_id))
            and (criteria.status is None or r.status == criteria.status)
            and _in_range(r.work_date, criteria.start_date, criteria.end_date)
        ]
        rows.sort(key=lambda r: r.attendance_id, reverse=True)
        rows.sort(key=lambda r: r.employee_id)
        rows.sort(key=lambda r: r.work_date, reverse=True)
        return rows

    def count(self, criteria: AttendanceFilter) -> int:
        with self._store.lock:
            return len(self._matching(criteria))

    def find(self, criteria: AttendanceFilter, *, limit: int, offset: int) -> Sequence[AttendanceRecord]:
        with self._store.lock:
            return self._matching(criteria)[int(offset) : int(offset) + int(limit)]


class InMemoryRegularizationRepository:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        original_clock_in: Optional[time],
        original_clock_out: Optional[time],
        requested_clock_in: time,
        requested_clock_out: time,
        reason: str,
        submitted_by: int,
        created_at: datetime,
        submitted_by_employee: Optional[int] = None,
    ) -> int:
        with self._store.lock:
            if self.find_pending_for_day(employee_id, work_date):
                raise DuplicatePendingRequest("A pending request already exists for this date")
            request_id = self._store.next_request_id()
            self._store.requests[request_id] = RegularizationRequest(
                request_id=request_id,
                employee_id=int(employee_id),
                work_date=work_date,
                original_clock_in=original_clock_in,
                original_clock_out=original_clock_out,
                requested_clock_in=requested_clock_in,
                requested_clock_out=requested_clock_out,
                reason=reason,
                status=RegularizationStatus.PENDING,
                submitted_by=int(submitted_by),
                submitted_by_employee=submitted_by_employee,
                created_at=created_at,
            )
            return request_id

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[RegularizationRequest]:
        with self._store.lock:
            return self._store.requests.get(int(request_id))

    def find_pending_for_day(self, employee_id: int, work_date: date) -> Optional[RegularizationRequest]:
        with self._store.lock:
            for r in self._store.requests.values():
                if (
                    r.employee_id == int(employee_id)
                    and r.work_date == work_date
                    and r.status == RegularizationStatus.PENDING
                ):
                    return r
            return None

    def mark_decided(
        self,
        *,
        request_id: int,
        status: RegularizationStatus,
        decided_by: int,
        decided_at: datetime,
        decision_note: Optional[str] = None,
    ) -> bool:
        with self._store.lock:
            current = self._store.requests.get(int(request_id))
            if not current or current.status != RegularizationStatus.PENDING:
                return False
            self._store.requests[current.request_id] = replace(
                current,
                status=status,
                decided_by=int(decided_by),
                decided_at=decided_at,
                decision_note=decision_note,
            )
            return True

    def _matching(self, criteria: RegularizationFilter) -> list[RegularizationRequest]:
        rows = [
            r
            for r in self._store.requests.values()
            if (criteria.employee_id is None or r.employee_id == int(criteria.employee_id))
            and (criteria.status is None or r.status == criteria.status)
            and _in_range(r.work_date, criteria.start_date, criteria.end_date)
        ]
        rows.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return rows

    def count(self, criteria: RegularizationFilter) -> int:
        with self._store.lock:
            return len(self._matching(criteria))

    def find(self, criteria: RegularizationFilter, *, limit: int, offset: int) -> Sequence[RegularizationRequest]:
        with self._store.lock:
            return self._matching(criteria)[int(offset) : int(offset) + int(limit)]


class InMemoryEmployeeDirectory:
    """Identity + directory collaborator backed by a fixed employee list."""

    def __init__(self, employees: Iterable[Employee] = ()):
        self._employees = {e.employee_id: e for e in employees}

    def resolve_employee_for_user(self, user_id: int) -> Optional[int]:
        for e in self._employees.values():
            if e.user_id is not None and int(e.user_id) == int(user_id):
                return e.employee_id
        return None

    def list_employees(self, *, employee_ids: Optional[Sequence[int]] = None) -> Sequence[Employee]:
        if employee_ids is None:
            return sorted(self._employees.values(), key=lambda e: e.employee_id)
        wanted = {int(i) for i in employee_ids}
        return [e for e in sorted(self._employees.values(), key=lambda e: e.employee_id) if e.employee_id in wanted]
