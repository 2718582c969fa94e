from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateRecord
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, lost_insert_race, normalize_mysql_time, optional_float
from .model import AttendanceFilter, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, clock_in, clock_out, status,
    work_hours, overtime_hours, notes, created_at, updated_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=normalize_mysql_time(r.get("clock_in")),
        clock_out=normalize_mysql_time(r.get("clock_out")),
        status=AttendanceStatus(r["status"]),
        work_hours=optional_float(r.get("work_hours")),
        overtime_hours=optional_float(r.get("overtime_hours")),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _where(criteria: AttendanceFilter) -> tuple[str, list[object]]:
    clauses = ["1=1"]
    params: list[object] = []

    if criteria.employee_id is not None:
        clauses.append("employee_id=%s")
        params.append(int(criteria.employee_id))
    if criteria.start_date is not None:
        clauses.append("work_date >= %s")
        params.append(criteria.start_date)
    if criteria.end_date is not None:
        clauses.append("work_date <= %s")
        params.append(criteria.end_date)
    if criteria.status is not None:
        clauses.append("status=%s")
        params.append(criteria.status.value)

    return " AND ".join(clauses), params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s{lock}",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(
        self,
        employee_id: int,
        work_date: date,
        *,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s{lock}",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, clock_in, clock_out, status,
                        work_hours, overtime_hours, notes, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        work_date,
                        clock_in,
                        clock_out,
                        status.value,
                        work_hours,
                        overtime_hours,
                        notes,
                        created_at,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.Error as e:
            if lost_insert_race(e):
                raise DuplicateRecord("An attendance record already exists for this employee and date") from e
            raise

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_in=%s, clock_out=%s, status=%s,
                    work_hours=%s, overtime_hours=%s, notes=%s, updated_at=%s
                WHERE attendance_id=%s
                """,
                (
                    clock_in,
                    clock_out,
                    status.value,
                    work_hours,
                    overtime_hours,
                    notes,
                    updated_at,
                    int(attendance_id),
                ),
            )
            # rowcount is 0 when the values did not change, so check existence instead.
            cur.execute("SELECT 1 AS found FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return fetchone(cur) is not None

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def count(self, criteria: AttendanceFilter) -> int:
        where, params = _where(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def find(self, criteria: AttendanceFilter, *, limit: int, offset: int) -> Sequence[AttendanceRecord]:
        where, params = _where(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, employee_id ASC, attendance_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_record(r) for r in fetchall(cur)]
