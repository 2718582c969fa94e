from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeDirectory, IdentityProvider


class MySQLEmployeeDirectory(IdentityProvider, EmployeeDirectory):
    """Read-only adapter over the HR suite's ``employees``/``departments`` tables."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def resolve_employee_for_user(self, user_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM employees WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return int(row["employee_id"]) if row else None

    def list_employees(self, *, employee_ids: Optional[Sequence[int]] = None) -> Sequence[Employee]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_ids is not None:
            if not employee_ids:
                return []
            placeholders = ",".join(["%s"] * len(employee_ids))
            clauses.append(f"e.employee_id IN ({placeholders})")
            params.extend(int(i) for i in employee_ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT e.employee_id, e.user_id,
                       CONCAT(e.first_name, ' ', e.last_name) AS full_name,
                       d.department_name
                FROM employees e
                LEFT JOIN departments d ON d.department_id = e.department_id
                WHERE {where}
                ORDER BY e.employee_id ASC
                """,
                tuple(params),
            )
            return [
                Employee(
                    employee_id=int(r["employee_id"]),
                    full_name=r["full_name"],
                    user_id=r.get("user_id"),
                    department_name=r.get("department_name"),
                )
                for r in fetchall(cur)
            ]
