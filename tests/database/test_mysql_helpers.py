from datetime import date, datetime, time, timedelta

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.timekeeping.timekeeping.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.timekeeping.timekeeping.core.enums import AttendanceStatus
from src.timekeeping.timekeeping.core.exceptions import DuplicatePendingRequest, DuplicateRecord
from src.timekeeping.timekeeping.database.bootstrap import iter_sql_statements
from src.timekeeping.timekeeping.database.mysql_base import (
    is_deadlock,
    is_duplicate_key,
    lost_insert_race,
    normalize_mysql_time,
    optional_float,
)
from src.timekeeping.timekeeping.regularization.mysql_regularization_repository import MySQLRegularizationRepository


class FailingCursor:
    def __init__(self, error):
        self._error = error

    def execute(self, sql, params=None):
        raise self._error

    def close(self):
        pass


class PinnedConnection:
    """Stands in for a connection pinned by DatabaseConnection.transaction()."""

    def __init__(self, error):
        self._error = error

    def pinned(self):
        return self

    def cursor(self, dictionary=True):
        return FailingCursor(self._error)


def _deadlock():
    return mysql.connector.DatabaseError(msg="Deadlock found when trying to get lock", errno=errorcode.ER_LOCK_DEADLOCK)


def _duplicate():
    return mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        (time(8, 30), time(8, 30)),
        (timedelta(hours=17, minutes=45, seconds=5), time(17, 45, 5)),
        ("09:15", time(9, 15)),
        ("09:15:30", time(9, 15, 30)),
    ],
)
def test_normalize_mysql_time(raw, expected):
    assert normalize_mysql_time(raw) == expected


def test_normalize_mysql_time_rejects_garbage():
    with pytest.raises(ValueError):
        normalize_mysql_time("9")
    with pytest.raises(TypeError):
        normalize_mysql_time(3.5)


def test_optional_float_keeps_null():
    assert optional_float(None) is None
    assert optional_float("8.50") == 8.5


def test_is_duplicate_key():
    dup = mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    fk = mysql.connector.IntegrityError(msg="FK", errno=errorcode.ER_NO_REFERENCED_ROW_2)

    assert is_duplicate_key(dup)
    assert not is_duplicate_key(fk)
    assert not is_duplicate_key(ValueError("x"))


def test_iter_sql_statements_respects_quotes_and_comments():
    sql = """
    -- leading comment; ignored
    CREATE TABLE a (id INT);
    INSERT INTO a VALUES ('x;y');
    INSERT INTO a VALUES ("it's")
    """

    assert list(iter_sql_statements(sql)) == [
        "CREATE TABLE a (id INT)",
        "INSERT INTO a VALUES ('x;y')",
        "INSERT INTO a VALUES (\"it's\")",
    ]


def test_is_deadlock():
    assert is_deadlock(_deadlock())
    assert not is_deadlock(_duplicate())
    assert lost_insert_race(_deadlock())
    assert lost_insert_race(_duplicate())
    assert not lost_insert_race(mysql.connector.DatabaseError(msg="gone away", errno=2006))


def _create_attendance(repo):
    return repo.create(
        employee_id=2,
        work_date=date(2026, 2, 2),
        clock_in=time(9, 0),
        clock_out=None,
        status=AttendanceStatus.PRESENT,
        work_hours=None,
        overtime_hours=None,
        notes=None,
        created_at=datetime(2026, 2, 2, 9, 0),
    )


@pytest.mark.parametrize("error", [_deadlock(), _duplicate()])
def test_attendance_insert_race_maps_to_duplicate_record(error):
    repo = MySQLAttendanceRepository(PinnedConnection(error))
    with pytest.raises(DuplicateRecord):
        _create_attendance(repo)


def test_attendance_insert_other_errors_propagate():
    error = mysql.connector.IntegrityError(msg="FK", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    repo = MySQLAttendanceRepository(PinnedConnection(error))
    with pytest.raises(mysql.connector.IntegrityError):
        _create_attendance(repo)


@pytest.mark.parametrize("error", [_deadlock(), _duplicate()])
def test_regularization_insert_race_maps_to_duplicate_pending(error):
    repo = MySQLRegularizationRepository(PinnedConnection(error))
    with pytest.raises(DuplicatePendingRequest):
        repo.create(
            employee_id=2,
            work_date=date(2024, 1, 10),
            original_clock_in=None,
            original_clock_out=None,
            requested_clock_in=time(9, 0),
            requested_clock_out=time(18, 0),
            reason="forgot badge",
            submitted_by=20,
            submitted_by_employee=2,
            created_at=datetime(2024, 1, 11, 8, 0),
        )
