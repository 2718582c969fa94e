from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.timekeeping.timekeeping.attendance.model import AttendanceFilter
from src.timekeeping.timekeeping.attendance.policy import AttendancePolicy
from src.timekeeping.timekeeping.container import build_memory_container
from src.timekeeping.timekeeping.core.enums import AttendanceStatus
from src.timekeeping.timekeeping.core.exceptions import (
    AlreadyClockedIn,
    AuthorizationError,
    ConflictError,
    DuplicateRecord,
    NoOpenSession,
    NotFoundError,
    ValidationError,
)


def _count(container) -> int:
    return container.attendance_repo.count(AttendanceFilter())


def test_clock_in_on_time_marks_present(container, employee):
    record = container.attendance_service.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 3))

    assert record.employee_id == 2
    assert record.work_date == date(2026, 2, 2)
    assert record.clock_in == time(9, 3)
    assert record.clock_out is None
    assert record.status == AttendanceStatus.PRESENT


def test_clock_in_after_grace_marks_late(container, employee):
    record = container.attendance_service.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 6))
    assert record.status == AttendanceStatus.LATE


def test_second_clock_in_same_day_fails(container, employee):
    svc = container.attendance_service
    svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 0))

    with pytest.raises(AlreadyClockedIn):
        svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 30))
    assert _count(container) == 1


def test_clock_in_after_completed_day_fails(container, employee):
    svc = container.attendance_service
    svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 0))
    svc.clock_out(None, caller=employee, now=datetime(2026, 2, 2, 17, 0))

    with pytest.raises(AlreadyClockedIn):
        svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 18, 0))


def test_clock_out_without_clock_in_fails(container, employee):
    with pytest.raises(NoOpenSession):
        container.attendance_service.clock_out(None, caller=employee, now=datetime(2026, 2, 2, 17, 0))


def test_clock_out_twice_fails(container, employee):
    svc = container.attendance_service
    svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 0))
    svc.clock_out(None, caller=employee, now=datetime(2026, 2, 2, 17, 0))

    with pytest.raises(NoOpenSession):
        svc.clock_out(None, caller=employee, now=datetime(2026, 2, 2, 17, 5))


def test_clock_out_computes_work_hours(container, employee):
    svc = container.attendance_service
    svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 0))
    record = svc.clock_out(None, caller=employee, now=datetime(2026, 2, 2, 17, 30))

    assert record.clock_out == time(17, 30)
    assert record.work_hours == 8.5
    assert record.status == AttendanceStatus.PRESENT


def test_clock_out_keeps_late_status(container, employee):
    svc = container.attendance_service
    svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 10, 0))
    record = svc.clock_out(None, caller=employee, now=datetime(2026, 2, 2, 18, 0))
    assert record.status == AttendanceStatus.LATE


def test_short_day_becomes_half_day_when_threshold_set(employees, employee):
    container = build_memory_container(employees=employees, policy=AttendancePolicy(half_day_threshold_hours=4))
    svc = container.attendance_service
    svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 0))
    record = svc.clock_out(None, caller=employee, now=datetime(2026, 2, 2, 12, 0))

    assert record.status == AttendanceStatus.HALF_DAY
    assert record.work_hours == 3.0


def test_overtime_recorded_when_enabled(employees, employee):
    container = build_memory_container(employees=employees, policy=AttendancePolicy(overtime_enabled=True))
    svc = container.attendance_service
    svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 8, 0))
    record = svc.clock_out(None, caller=employee, now=datetime(2026, 2, 2, 18, 30))

    assert record.work_hours == 10.5
    assert record.overtime_hours == 2.5


def test_employee_cannot_clock_for_someone_else(container, employee):
    with pytest.raises(AuthorizationError):
        container.attendance_service.clock_in(3, caller=employee, now=datetime(2026, 2, 2, 9, 0))


def test_employee_may_name_themself(container, employee):
    record = container.attendance_service.clock_in(2, caller=employee, now=datetime(2026, 2, 2, 9, 0))
    assert record.employee_id == 2


def test_manager_clocks_in_for_employee(container, manager):
    record = container.attendance_service.clock_in(3, caller=manager, now=datetime(2026, 2, 2, 9, 0))
    assert record.employee_id == 3


def test_unlinked_manager_cannot_clock_for_self(container, manager):
    with pytest.raises(AuthorizationError):
        container.attendance_service.clock_in(None, caller=manager, now=datetime(2026, 2, 2, 9, 0))


def test_clock_in_starts_session_on_placeholder_day(container, admin, employee):
    svc = container.attendance_service
    placeholder = svc.create_record(caller=admin, employee_id=2, work_date="2026-02-02")
    assert placeholder.status == AttendanceStatus.ABSENT

    record = svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 0))

    assert record.attendance_id == placeholder.attendance_id
    assert record.status == AttendanceStatus.PRESENT
    assert _count(container) == 1


def test_create_record_computes_hours_and_defaults_status(container, admin):
    record = container.attendance_service.create_record(
        caller=admin,
        employee_id="3",
        work_date="2026-02-03",
        clock_in="08:30",
        clock_out="17:00",
        notes="  entered from paper log  ",
    )

    assert record.status == AttendanceStatus.PRESENT
    assert record.work_hours == 8.5
    assert record.notes == "entered from paper log"


def test_create_record_rejects_duplicate_day(container, admin):
    svc = container.attendance_service
    svc.create_record(caller=admin, employee_id=3, work_date="2026-02-03", status="leave")

    with pytest.raises(DuplicateRecord):
        svc.create_record(caller=admin, employee_id=3, work_date="2026-02-03", status="absent")
    assert _count(container) == 1


def test_create_record_validates_input(container, admin):
    svc = container.attendance_service
    with pytest.raises(ValidationError):
        svc.create_record(caller=admin, employee_id=None, work_date="2026-02-03")
    with pytest.raises(ValidationError):
        svc.create_record(caller=admin, employee_id=3, work_date="03/02/2026")
    with pytest.raises(ValidationError):
        svc.create_record(caller=admin, employee_id=3, work_date="2026-02-03", clock_in="18:00", clock_out="09:00")
    with pytest.raises(ValidationError):
        svc.create_record(caller=admin, employee_id=3, work_date="2026-02-03", clock_out="17:00")
    with pytest.raises(ValidationError):
        svc.create_record(caller=admin, employee_id=3, work_date="2026-02-03", status="sick")


def test_employee_cannot_create_update_or_delete(container, admin, employee):
    svc = container.attendance_service
    record = svc.create_record(caller=admin, employee_id=2, work_date="2026-02-03", clock_in="09:00")

    with pytest.raises(AuthorizationError):
        svc.create_record(caller=employee, employee_id=2, work_date="2026-02-04")
    with pytest.raises(AuthorizationError):
        svc.update_record(record.attendance_id, {"status": "present"}, caller=employee)
    with pytest.raises(AuthorizationError):
        svc.delete_record(record.attendance_id, caller=employee)


def test_update_record_recomputes_hours(container, manager, admin):
    svc = container.attendance_service
    record = svc.create_record(caller=admin, employee_id=2, work_date="2026-02-03", clock_in="09:00")

    updated = svc.update_record(
        record.attendance_id,
        {"clock_out": "13:00", "notes": "left early"},
        caller=manager,
        now=datetime(2026, 2, 4, 8, 0),
    )

    assert updated.clock_in == time(9, 0)
    assert updated.clock_out == time(13, 0)
    assert updated.work_hours == 4.0
    assert updated.notes == "left early"
    assert updated.updated_at == datetime(2026, 2, 4, 8, 0)


def test_update_record_rejects_unknown_fields_and_bad_order(container, admin):
    svc = container.attendance_service
    record = svc.create_record(caller=admin, employee_id=2, work_date="2026-02-03", clock_in="09:00")

    with pytest.raises(ValidationError):
        svc.update_record(record.attendance_id, {"employee_id": 3}, caller=admin)
    with pytest.raises(ValidationError):
        svc.update_record(record.attendance_id, {"clock_out": "08:00"}, caller=admin)


def test_update_unknown_record_is_not_found(container, admin):
    with pytest.raises(NotFoundError):
        container.attendance_service.update_record(999, {"status": "present"}, caller=admin)


def test_delete_record(container, admin, manager):
    svc = container.attendance_service
    record = svc.create_record(caller=admin, employee_id=2, work_date="2026-02-03")

    svc.delete_record(record.attendance_id, caller=manager)

    assert _count(container) == 0
    with pytest.raises(NotFoundError):
        svc.delete_record(record.attendance_id, caller=manager)


def test_one_record_per_employee_and_day(container, admin, employee):
    svc = container.attendance_service
    svc.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 0))
    with pytest.raises(DuplicateRecord):
        svc.create_record(caller=admin, employee_id=2, work_date="2026-02-02")

    days = [(r.employee_id, r.work_date) for r in container.attendance_repo.find(AttendanceFilter(), limit=100, offset=0)]
    assert len(days) == len(set(days))


@pytest.mark.parametrize("notes", [123, ["x"], {"a": 1}])
def test_notes_must_be_text(container, admin, notes):
    svc = container.attendance_service
    with pytest.raises(ValidationError):
        svc.create_record(caller=admin, employee_id=2, work_date="2026-02-03", notes=notes)

    record = svc.create_record(caller=admin, employee_id=2, work_date="2026-02-03", notes="ok")
    with pytest.raises(ValidationError):
        svc.update_record(record.attendance_id, {"notes": notes}, caller=admin)
    assert container.attendance_repo.get_by_id(record.attendance_id).notes == "ok"


def test_notes_longer_than_column_are_rejected(container, admin):
    svc = container.attendance_service
    with pytest.raises(ValidationError):
        svc.create_record(caller=admin, employee_id=2, work_date="2026-02-03", notes="x" * 501)

    record = svc.create_record(caller=admin, employee_id=2, work_date="2026-02-03", notes="x" * 500)
    assert len(record.notes) == 500


def test_regularized_suffix_fits_full_notes(container, admin):
    svc = container.attendance_service
    svc.create_record(caller=admin, employee_id=2, work_date="2026-02-03", clock_in="10:00", notes="n" * 500)

    record = svc.apply_regularization(
        employee_id=2,
        work_date=date(2026, 2, 3),
        clock_in=time(9, 0),
        clock_out=time(17, 0),
        now=datetime(2026, 2, 4, 8, 0),
    )

    assert len(record.notes) == 500
    assert record.notes.endswith(" (Regularized)")


def test_lost_insert_race_on_clock_in_is_already_clocked_in(container, employee, monkeypatch):
    def taken(**_kwargs):
        raise DuplicateRecord("An attendance record already exists for this employee and date")

    monkeypatch.setattr(container.attendance_repo, "create", taken)

    with pytest.raises(AlreadyClockedIn):
        container.attendance_service.clock_in(None, caller=employee, now=datetime(2026, 2, 2, 9, 0))


def test_lost_insert_race_on_regularization_is_conflict(container, monkeypatch):
    def taken(**_kwargs):
        raise DuplicateRecord("An attendance record already exists for this employee and date")

    monkeypatch.setattr(container.attendance_repo, "create", taken)

    with pytest.raises(ConflictError):
        container.attendance_service.apply_regularization(
            employee_id=2,
            work_date=date(2026, 2, 3),
            clock_in=time(9, 0),
            clock_out=time(17, 0),
            now=datetime(2026, 2, 4, 8, 0),
        )
