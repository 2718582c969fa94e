from __future__ import annotations

import pytest

from src.timekeeping.timekeeping.container import build_memory_container
from src.timekeeping.timekeeping.core.enums import Role
from src.timekeeping.timekeeping.core.permissions import Caller
from src.timekeeping.timekeeping.directory.model import Employee

EMPLOYEES = [
    Employee(employee_id=1, full_name="Alice Admin", user_id=10, department_name="Human Resources"),
    Employee(employee_id=2, full_name="Bao Le", user_id=20, department_name="Engineering"),
    Employee(employee_id=3, full_name="Chi Pham", user_id=30, department_name="Engineering"),
]


@pytest.fixture
def container():
    return build_memory_container(employees=EMPLOYEES)


@pytest.fixture
def admin():
    return Caller(user_id=10, role=Role.ADMIN, employee_id=1)


@pytest.fixture
def manager():
    # Managers need not be employees themselves.
    return Caller(user_id=40, role=Role.MANAGER, employee_id=None)


@pytest.fixture
def employee():
    return Caller(user_id=20, role=Role.EMPLOYEE, employee_id=2)


@pytest.fixture
def other_employee():
    return Caller(user_id=30, role=Role.EMPLOYEE, employee_id=3)


@pytest.fixture
def employees():
    return list(EMPLOYEES)
