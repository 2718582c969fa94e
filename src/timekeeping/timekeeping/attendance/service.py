from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Mapping, Optional

import structlog

from ..common.datetime_utils import now_local, parse_clock_time, parse_iso_date
from ..common.validators import optional_text, require_clock_order, require_present
from ..core.constants import MAX_NOTES_LENGTH, REGULARIZED_NOTE
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadyClockedIn,
    ConflictError,
    DuplicateRecord,
    NoOpenSession,
    NotFoundError,
    ValidationError,
)
from ..core.permissions import Action, Caller, authorize, resolve_target_employee
from ..database.transaction import TransactionManager
from .calculator.base import WorkHoursCalculator
from .calculator.standard_calculator import StandardWorkHoursCalculator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, parse_attendance_status
from .policy import AttendancePolicy
from .repository import AttendanceRepository

log = structlog.get_logger(__name__)


def regularized_notes(notes: Optional[str]) -> str:
    """Tag existing notes as regularized, trimming them so the result fits the column."""
    if not notes:
        return REGULARIZED_NOTE
    if REGULARIZED_NOTE in notes:
        return notes[:MAX_NOTES_LENGTH]
    suffix = f" ({REGULARIZED_NOTE})"
    return notes[: MAX_NOTES_LENGTH - len(suffix)] + suffix


class AttendanceService:
    """Owns writes to the attendance record store."""

    UPDATABLE_FIELDS = frozenset({"clock_in", "clock_out", "status", "notes"})

    def __init__(
        self,
        attendance: AttendanceRepository,
        transactions: TransactionManager,
        *,
        policy: AttendancePolicy | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        calculator: WorkHoursCalculator | None = None,
    ):
        self._attendance = attendance
        self._tx = transactions
        self._policy = policy or AttendancePolicy()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = calculator or StandardWorkHoursCalculator(self._policy)

    def _reload(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def clock_in(self, employee_id: Optional[int], *, caller: Caller, now: datetime | None = None) -> AttendanceRecord:
        authorize(caller, Action.CLOCK)
        employee_id = resolve_target_employee(caller, employee_id)
        now = now or now_local()
        today = now.date()

        strategy = self._factory.for_clock_in(now=now, policy=self._policy)
        decision = strategy.decide_clock_in(now=now, policy=self._policy)

        with self._tx.transaction():
            existing = self._attendance.get_for_employee_and_date(employee_id, today, for_update=True)
            if existing and existing.is_open:
                raise AlreadyClockedIn("Already clocked in today")
            if existing and existing.clock_in is not None:
                raise AlreadyClockedIn("Attendance for today is already complete")

            if existing:
                # Day created manually without clock times (e.g. a placeholder); start its session.
                self._attendance.update(
                    attendance_id=existing.attendance_id,
                    clock_in=now.time(),
                    clock_out=None,
                    status=decision.status,
                    work_hours=None,
                    overtime_hours=None,
                    notes=existing.notes,
                    updated_at=now,
                )
                attendance_id = existing.attendance_id
            else:
                try:
                    attendance_id = self._attendance.create(
                        employee_id=employee_id,
                        work_date=today,
                        clock_in=now.time(),
                        clock_out=None,
                        status=decision.status,
                        work_hours=None,
                        overtime_hours=None,
                        notes=decision.note,
                        created_at=now,
                    )
                except DuplicateRecord:
                    raise AlreadyClockedIn("Already clocked in today")
            record = self._reload(attendance_id)

        log.info(
            "attendance.clock_in",
            attendance_id=record.attendance_id,
            employee_id=employee_id,
            status=record.status.value,
            **caller.describe(),
        )
        return record

    def clock_out(self, employee_id: Optional[int], *, caller: Caller, now: datetime | None = None) -> AttendanceRecord:
        authorize(caller, Action.CLOCK)
        employee_id = resolve_target_employee(caller, employee_id)
        now = now or now_local()
        today = now.date()

        with self._tx.transaction():
            record = self._attendance.get_for_employee_and_date(employee_id, today, for_update=True)
            if not record or not record.is_open:
                raise NoOpenSession("No open clock-in found for today")

            clock_out = now.time()
            require_clock_order(record.clock_in, clock_out)
            hours = self._calculator.compute(record.clock_in, clock_out)
            strategy = self._factory.for_clock_out(
                work_hours=hours.work_hours,
                policy=self._policy,
                current_status=record.status,
            )
            decision = strategy.decide_clock_out(work_hours=hours.work_hours, current=record.status)

            self._attendance.update(
                attendance_id=record.attendance_id,
                clock_in=record.clock_in,
                clock_out=clock_out,
                status=decision.status,
                work_hours=hours.work_hours,
                overtime_hours=hours.overtime_hours,
                notes=decision.note or record.notes,
                updated_at=now,
            )
            record = self._reload(record.attendance_id)

        log.info(
            "attendance.clock_out",
            attendance_id=record.attendance_id,
            employee_id=employee_id,
            work_hours=record.work_hours,
            status=record.status.value,
            **caller.describe(),
        )
        return record

    def create_record(
        self,
        *,
        caller: Caller,
        employee_id: Any,
        work_date: date | str,
        clock_in: time | str | None = None,
        clock_out: time | str | None = None,
        status: AttendanceStatus | str | None = None,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        authorize(caller, Action.CREATE_RECORD)
        try:
            employee_id = int(require_present(employee_id, "employee_id"))
        except (TypeError, ValueError):
            raise ValidationError("employee_id must be an integer")
        work_date = parse_iso_date(require_present(work_date, "date"))
        clock_in_t = parse_clock_time(clock_in, "clock_in")
        clock_out_t = parse_clock_time(clock_out, "clock_out")
        require_clock_order(clock_in_t, clock_out_t)
        notes = optional_text(notes, "notes", max_length=MAX_NOTES_LENGTH)

        if status is None or (isinstance(status, str) and not status.strip()):
            status_v = AttendanceStatus.PRESENT if clock_in_t else AttendanceStatus.ABSENT
        else:
            status_v = parse_attendance_status(status)

        hours = self._calculator.compute(clock_in_t, clock_out_t)
        now = now or now_local()

        with self._tx.transaction():
            if self._attendance.get_for_employee_and_date(employee_id, work_date, for_update=True):
                raise DuplicateRecord("An attendance record already exists for this employee and date")
            attendance_id = self._attendance.create(
                employee_id=employee_id,
                work_date=work_date,
                clock_in=clock_in_t,
                clock_out=clock_out_t,
                status=status_v,
                work_hours=hours.work_hours,
                overtime_hours=hours.overtime_hours,
                notes=notes,
                created_at=now,
            )
            record = self._reload(attendance_id)

        log.info("attendance.created", attendance_id=attendance_id, employee_id=employee_id, **caller.describe())
        return record

    def update_record(
        self,
        attendance_id: int,
        fields: Mapping[str, Any],
        *,
        caller: Caller,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        authorize(caller, Action.UPDATE_RECORD)
        unknown = set(fields) - self.UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        now = now or now_local()
        with self._tx.transaction():
            current = self._attendance.get_by_id(int(attendance_id), for_update=True)
            if not current:
                raise NotFoundError("Attendance record not found")

            clock_in = parse_clock_time(fields["clock_in"], "clock_in") if "clock_in" in fields else current.clock_in
            clock_out = parse_clock_time(fields["clock_out"], "clock_out") if "clock_out" in fields else current.clock_out
            status = parse_attendance_status(fields["status"]) if "status" in fields else current.status
            notes = current.notes
            if "notes" in fields:
                notes = optional_text(fields["notes"], "notes", max_length=MAX_NOTES_LENGTH)

            require_clock_order(clock_in, clock_out)
            hours = self._calculator.compute(clock_in, clock_out)

            self._attendance.update(
                attendance_id=current.attendance_id,
                clock_in=clock_in,
                clock_out=clock_out,
                status=status,
                work_hours=hours.work_hours,
                overtime_hours=hours.overtime_hours,
                notes=notes,
                updated_at=now,
            )
            record = self._reload(current.attendance_id)

        log.info(
            "attendance.updated",
            attendance_id=record.attendance_id,
            fields=sorted(fields),
            **caller.describe(),
        )
        return record

    def delete_record(self, attendance_id: int, *, caller: Caller) -> None:
        authorize(caller, Action.DELETE_RECORD)
        with self._tx.transaction():
            if not self._attendance.delete(int(attendance_id)):
                raise NotFoundError("Attendance record not found")
        log.info("attendance.deleted", attendance_id=int(attendance_id), **caller.describe())

    def apply_regularization(
        self,
        *,
        employee_id: int,
        work_date: date,
        clock_in: time,
        clock_out: time,
        now: datetime,
    ) -> AttendanceRecord:
        """Upsert the day with approved clock times.

        Called by the regularization workflow inside its decision transaction;
        authorization has already happened there.
        """

        require_clock_order(clock_in, clock_out)
        hours = self._calculator.compute(clock_in, clock_out)

        with self._tx.transaction():
            existing = self._attendance.get_for_employee_and_date(employee_id, work_date, for_update=True)
            if existing:
                self._attendance.update(
                    attendance_id=existing.attendance_id,
                    clock_in=clock_in,
                    clock_out=clock_out,
                    status=AttendanceStatus.PRESENT,
                    work_hours=hours.work_hours,
                    overtime_hours=hours.overtime_hours,
                    notes=regularized_notes(existing.notes),
                    updated_at=now,
                )
                attendance_id = existing.attendance_id
            else:
                try:
                    attendance_id = self._attendance.create(
                        employee_id=employee_id,
                        work_date=work_date,
                        clock_in=clock_in,
                        clock_out=clock_out,
                        status=AttendanceStatus.PRESENT,
                        work_hours=hours.work_hours,
                        overtime_hours=hours.overtime_hours,
                        notes=REGULARIZED_NOTE,
                        created_at=now,
                    )
                except DuplicateRecord:
                    raise ConflictError("Attendance for this day changed while the request was decided; retry")
            return self._reload(attendance_id)
