"""Read side: filtered, paginated, role-scoped views of both stores.

Ordering is fixed so pages are stable:
- attendance: work date newest first, then employee id, then record id newest first
- regularization requests: newest submission first, then request id newest first
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional, Sequence

from ..attendance.model import AttendanceFilter, parse_attendance_status
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import parse_optional_date
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_int
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import Action, Caller, is_allowed, scope_employee_id
from ..directory.repository import EmployeeDirectory
from ..regularization.model import RegularizationFilter, parse_request_status
from ..regularization.repository import RegularizationRepository


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def build_attendance_filter(
    *,
    employee_id: Any = None,
    start_date: Any = None,
    end_date: Any = None,
    status: Any = None,
) -> AttendanceFilter:
    return AttendanceFilter(
        employee_id=optional_int(employee_id, "employee_id"),
        start_date=parse_optional_date(start_date, "start_date"),
        end_date=parse_optional_date(end_date, "end_date"),
        status=None if _blank(status) else parse_attendance_status(status),
    )


def build_regularization_filter(
    *,
    employee_id: Any = None,
    start_date: Any = None,
    end_date: Any = None,
    status: Any = None,
) -> RegularizationFilter:
    return RegularizationFilter(
        employee_id=optional_int(employee_id, "employee_id"),
        start_date=parse_optional_date(start_date, "start_date"),
        end_date=parse_optional_date(end_date, "end_date"),
        status=None if _blank(status) else parse_request_status(status),
    )


def _check_range(criteria) -> None:
    if criteria.start_date and criteria.end_date and criteria.end_date < criteria.start_date:
        raise ValidationError("end_date must be on or after start_date")


class RecordQueryService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        requests: RegularizationRepository,
        directory: Optional[EmployeeDirectory] = None,
        *,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
    ):
        self._attendance = attendance
        self._requests = requests
        self._directory = directory
        self._default_limit = int(default_limit)
        self._max_limit = int(max_limit)

    def page_request(self, page: Any = None, limit: Any = None) -> PageRequest:
        return PageRequest.from_args(page, limit, default_limit=self._default_limit, max_limit=self._max_limit)

    def _employee_names(self, employee_ids: Sequence[int]) -> dict[int, str]:
        if not self._directory or not employee_ids:
            return {}
        employees = self._directory.list_employees(employee_ids=sorted(set(employee_ids)))
        return {e.employee_id: e.full_name for e in employees}

    def _rows(self, items) -> list[dict]:
        names = self._employee_names([i.employee_id for i in items])
        out: list[dict] = []
        for item in items:
            row = item.to_dict()
            row["employee_name"] = names.get(item.employee_id)
            out.append(row)
        return out

    def list_attendance(self, criteria: AttendanceFilter, page: PageRequest, *, caller: Caller) -> Page[dict]:
        scoped = scope_employee_id(caller, criteria.employee_id, view_all=Action.VIEW_ALL_ATTENDANCE)
        criteria = replace(criteria, employee_id=scoped)
        _check_range(criteria)

        total = self._attendance.count(criteria)
        items = self._attendance.find(criteria, limit=page.limit, offset=page.offset) if page.offset < total else []
        return Page(items=self._rows(items), page=page.page, limit=page.limit, total_items=total)

    def get_attendance(self, attendance_id: int, *, caller: Caller) -> dict:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record or not self._visible(caller, record.employee_id, Action.VIEW_ALL_ATTENDANCE):
            raise NotFoundError("Attendance record not found")
        return self._rows([record])[0]

    def list_regularizations(self, criteria: RegularizationFilter, page: PageRequest, *, caller: Caller) -> Page[dict]:
        scoped = scope_employee_id(caller, criteria.employee_id, view_all=Action.VIEW_ALL_REGULARIZATIONS)
        criteria = replace(criteria, employee_id=scoped)
        _check_range(criteria)

        total = self._requests.count(criteria)
        items = self._requests.find(criteria, limit=page.limit, offset=page.offset) if page.offset < total else []
        return Page(items=self._rows(items), page=page.page, limit=page.limit, total_items=total)

    def get_regularization(self, request_id: int, *, caller: Caller) -> dict:
        request = self._requests.get(int(request_id))
        if not request or not self._visible(caller, request.employee_id, Action.VIEW_ALL_REGULARIZATIONS):
            raise NotFoundError("Regularization request not found")
        return self._rows([request])[0]

    @staticmethod
    def _visible(caller: Caller, employee_id: int, view_all: Action) -> bool:
        if is_allowed(caller.role, view_all):
            return True
        return caller.employee_id is not None and int(caller.employee_id) == int(employee_id)
