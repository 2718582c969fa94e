from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional

import structlog

from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local, parse_clock_time, parse_iso_date
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_int, optional_text, require_non_empty, require_present
from ..core.constants import MAX_NOTES_LENGTH
from ..core.enums import RegularizationStatus
from ..core.exceptions import DuplicatePendingRequest, InvalidTransition, NotFoundError, ValidationError
from ..core.permissions import Action, Caller, authorize, resolve_target_employee
from ..database.transaction import TransactionManager
from ..queries.service import RecordQueryService
from .model import RegularizationFilter, RegularizationRequest, parse_decision
from .repository import RegularizationRepository

log = structlog.get_logger(__name__)


class RegularizationService:
    """Workflow engine for regularization requests.

    pending -> approved | rejected. Terminal states never change. Approval and
    the attendance write it triggers run in one transaction.
    """

    def __init__(
        self,
        requests: RegularizationRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        transactions: TransactionManager,
        queries: RecordQueryService,
    ):
        self._requests = requests
        self._attendance = attendance
        self._attendance_service = attendance_service
        self._tx = transactions
        self._queries = queries

    def submit(
        self,
        *,
        caller: Caller,
        employee_id: Any,
        work_date: date | str,
        requested_clock_in: time | str,
        requested_clock_out: time | str,
        reason: str,
        now: datetime | None = None,
    ) -> RegularizationRequest:
        authorize(caller, Action.SUBMIT_REGULARIZATION)
        employee_id = resolve_target_employee(caller, optional_int(employee_id, "employee_id"))

        work_date = parse_iso_date(require_present(work_date, "date"))
        clock_in = parse_clock_time(require_present(requested_clock_in, "requested_clock_in"), "requested_clock_in")
        clock_out = parse_clock_time(require_present(requested_clock_out, "requested_clock_out"), "requested_clock_out")
        reason = require_non_empty(reason, "reason")
        if clock_out < clock_in:
            raise ValidationError("requested_clock_out cannot be earlier than requested_clock_in")

        now = now or now_local()
        with self._tx.transaction():
            if self._requests.find_pending_for_day(employee_id, work_date):
                raise DuplicatePendingRequest("A pending request already exists for this date")

            # Snapshot now: later edits to the record must not change what was being corrected.
            record = self._attendance.get_for_employee_and_date(employee_id, work_date)
            request_id = self._requests.create(
                employee_id=employee_id,
                work_date=work_date,
                original_clock_in=record.clock_in if record else None,
                original_clock_out=record.clock_out if record else None,
                requested_clock_in=clock_in,
                requested_clock_out=clock_out,
                reason=reason,
                submitted_by=caller.user_id,
                submitted_by_employee=caller.employee_id,
                created_at=now,
            )
            request = self._requests.get(request_id)

        log.info(
            "regularization.submitted",
            request_id=request_id,
            employee_id=employee_id,
            work_date=work_date.isoformat(),
            **caller.describe(),
        )
        return request

    def decide(
        self,
        request_id: int,
        decision: RegularizationStatus | str,
        *,
        caller: Caller,
        note: Optional[str] = None,
        now: datetime | None = None,
    ) -> RegularizationRequest:
        authorize(caller, Action.DECIDE_REGULARIZATION)
        status = parse_decision(decision)
        note = optional_text(note, "note", max_length=MAX_NOTES_LENGTH)
        now = now or now_local()

        with self._tx.transaction():
            request = self._requests.get(int(request_id), for_update=True)
            if not request:
                raise NotFoundError("Regularization request not found")
            if request.status.is_terminal:
                raise InvalidTransition(f"Request is already {request.status.value}")

            decided = self._requests.mark_decided(
                request_id=request.request_id,
                status=status,
                decided_by=caller.user_id,
                decided_at=now,
                decision_note=note,
            )
            if not decided:
                raise InvalidTransition("Request was already decided")

            if status is RegularizationStatus.APPROVED:
                self._attendance_service.apply_regularization(
                    employee_id=request.employee_id,
                    work_date=request.work_date,
                    clock_in=request.requested_clock_in,
                    clock_out=request.requested_clock_out,
                    now=now,
                )
            request = self._requests.get(request.request_id)

        log.info(
            "regularization.decided",
            request_id=request.request_id,
            decision=status.value,
            employee_id=request.employee_id,
            **caller.describe(),
        )
        return request

    def list_requests(self, criteria: RegularizationFilter, page: PageRequest, *, caller: Caller) -> Page[dict]:
        """Employees only ever see their own requests; admin/manager see all matching ``criteria``."""
        return self._queries.list_regularizations(criteria, page, caller=caller)
