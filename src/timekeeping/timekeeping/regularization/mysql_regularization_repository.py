from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import RegularizationStatus
from ..core.exceptions import DuplicatePendingRequest
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, lost_insert_race, normalize_mysql_time
from .model import RegularizationFilter, RegularizationRequest
from .repository import RegularizationRepository

_COLUMNS = """
    request_id, employee_id, work_date,
    original_clock_in, original_clock_out, requested_clock_in, requested_clock_out,
    reason, status, submitted_by, submitted_by_employee, created_at, decided_by, decided_at, decision_note
"""


def _to_request(r: dict) -> RegularizationRequest:
    return RegularizationRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        original_clock_in=normalize_mysql_time(r.get("original_clock_in")),
        original_clock_out=normalize_mysql_time(r.get("original_clock_out")),
        requested_clock_in=normalize_mysql_time(r["requested_clock_in"]),
        requested_clock_out=normalize_mysql_time(r["requested_clock_out"]),
        reason=r["reason"],
        status=RegularizationStatus(r["status"]),
        submitted_by=int(r["submitted_by"]),
        submitted_by_employee=r.get("submitted_by_employee"),
        created_at=r["created_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        decision_note=r.get("decision_note"),
    )


def _where(criteria: RegularizationFilter) -> tuple[str, list[object]]:
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


class MySQLRegularizationRepository(RegularizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_regularizations(
                        employee_id, work_date, original_clock_in, original_clock_out,
                        requested_clock_in, requested_clock_out, reason, status,
                        submitted_by, submitted_by_employee, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        work_date,
                        original_clock_in,
                        original_clock_out,
                        requested_clock_in,
                        requested_clock_out,
                        reason,
                        RegularizationStatus.PENDING.value,
                        int(submitted_by),
                        submitted_by_employee,
                        created_at,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.Error as e:
            # uq_regularization_pending, or the deadlock two first submits for a day run into.
            if lost_insert_race(e):
                raise DuplicatePendingRequest("A pending request already exists for this date") from e
            raise

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[RegularizationRequest]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_regularizations WHERE request_id=%s{lock}",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def find_pending_for_day(self, employee_id: int, work_date: date) -> Optional[RegularizationRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_regularizations
                WHERE employee_id=%s AND work_date=%s AND status=%s
                LIMIT 1
                FOR UPDATE
                """,
                (int(employee_id), work_date, RegularizationStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def mark_decided(
        self,
        *,
        request_id: int,
        status: RegularizationStatus,
        decided_by: int,
        decided_at: datetime,
        decision_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_regularizations
                SET status=%s, decided_by=%s, decided_at=%s, decision_note=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    decided_at,
                    decision_note,
                    int(request_id),
                    RegularizationStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def count(self, criteria: RegularizationFilter) -> int:
        where, params = _where(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_regularizations WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def find(self, criteria: RegularizationFilter, *, limit: int, offset: int) -> Sequence[RegularizationRequest]:
        where, params = _where(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_regularizations
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_request(r) for r in fetchall(cur)]
