"""Example: driving the service layer directly (no Flask, no database).

Controllers are thin; the workflow lives in the services. This walks one
regularization from submission to approval against the in-memory store.
"""

from datetime import datetime

from src.timekeeping.timekeeping.container import build_memory_container
from src.timekeeping.timekeeping.core.enums import Role
from src.timekeeping.timekeeping.core.logging import setup_logging
from src.timekeeping.timekeeping.core.permissions import Caller
from src.timekeeping.timekeeping.directory.model import Employee
from src.timekeeping.timekeeping.queries.service import build_attendance_filter


def main():
    setup_logging(level="INFO")
    container = build_memory_container(
        employees=[
            Employee(employee_id=7, full_name="Lan Nguyen", user_id=70),
            Employee(employee_id=8, full_name="Minh Tran", user_id=80),
        ]
    )
    employee = Caller(user_id=70, role=Role.EMPLOYEE, employee_id=7)
    manager = Caller(user_id=80, role=Role.MANAGER, employee_id=8)

    req = container.regularization_service.submit(
        caller=employee,
        employee_id=None,
        work_date="2024-01-10",
        requested_clock_in="09:00",
        requested_clock_out="18:00",
        reason="forgot badge",
        now=datetime(2024, 1, 11, 8, 0),
    )
    print("submitted:", req.to_dict())

    req = container.regularization_service.decide(req.request_id, "approved", caller=manager)
    print("decided:", req.to_dict())

    query = container.query_service
    page = query.list_attendance(build_attendance_filter(), query.page_request(1, 10), caller=employee)
    print("attendance:", list(page.items), page.pagination())


if __name__ == "__main__":
    main()
