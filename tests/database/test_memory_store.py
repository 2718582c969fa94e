from datetime import date, datetime, time

import pytest

from src.timekeeping.timekeeping.attendance.model import AttendanceFilter
from src.timekeeping.timekeeping.core.enums import AttendanceStatus, RegularizationStatus
from src.timekeeping.timekeeping.core.exceptions import DuplicateRecord
from src.timekeeping.timekeeping.database.memory import (
    InMemoryAttendanceRepository,
    InMemoryEmployeeDirectory,
    InMemoryRegularizationRepository,
    InMemoryStore,
)
from src.timekeeping.timekeeping.directory.model import Employee


def _create(repo, employee_id=1, work_date=date(2026, 3, 2)):
    return repo.create(
        employee_id=employee_id,
        work_date=work_date,
        clock_in=time(9, 0),
        clock_out=None,
        status=AttendanceStatus.PRESENT,
        work_hours=None,
        overtime_hours=None,
        notes=None,
        created_at=datetime(2026, 3, 2, 9, 0),
    )


def test_create_rejects_second_record_for_same_day():
    repo = InMemoryAttendanceRepository(InMemoryStore())
    _create(repo)
    with pytest.raises(DuplicateRecord):
        _create(repo)


def test_transaction_rolls_back_on_error():
    store = InMemoryStore()
    repo = InMemoryAttendanceRepository(store)
    kept = _create(repo)

    with pytest.raises(RuntimeError):
        with store.transaction():
            _create(repo, employee_id=2)
            repo.delete(kept)
            raise RuntimeError("abort")

    assert repo.count(AttendanceFilter()) == 1
    assert repo.get_by_id(kept) is not None


def test_nested_transaction_joins_outer():
    store = InMemoryStore()
    repo = InMemoryAttendanceRepository(store)

    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                _create(repo)
            raise RuntimeError("outer fails after inner succeeded")

    assert repo.count(AttendanceFilter()) == 0


def test_mark_decided_only_moves_pending_requests():
    repo = InMemoryRegularizationRepository(InMemoryStore())
    request_id = repo.create(
        employee_id=1,
        work_date=date(2026, 3, 2),
        original_clock_in=None,
        original_clock_out=None,
        requested_clock_in=time(9, 0),
        requested_clock_out=time(17, 0),
        reason="forgot",
        submitted_by=10,
        created_at=datetime(2026, 3, 3, 8, 0),
    )
    decided_at = datetime(2026, 3, 3, 9, 0)

    assert repo.mark_decided(request_id=request_id, status=RegularizationStatus.APPROVED, decided_by=40, decided_at=decided_at)
    assert not repo.mark_decided(request_id=request_id, status=RegularizationStatus.REJECTED, decided_by=40, decided_at=decided_at)
    assert repo.get(request_id).status == RegularizationStatus.APPROVED
    assert repo.find_pending_for_day(1, date(2026, 3, 2)) is None


def test_directory_resolves_users_and_names():
    directory = InMemoryEmployeeDirectory(
        [Employee(employee_id=2, full_name="Bao Le", user_id=20), Employee(employee_id=3, full_name="Chi Pham")]
    )

    assert directory.resolve_employee_for_user(20) == 2
    assert directory.resolve_employee_for_user(30) is None
    assert [e.full_name for e in directory.list_employees(employee_ids=[3])] == ["Chi Pham"]
    assert len(directory.list_employees()) == 2
