import pytest

from src.timekeeping.timekeeping.core.enums import Role
from src.timekeeping.timekeeping.core.exceptions import AuthorizationError
from src.timekeeping.timekeeping.core.permissions import (
    Action,
    Caller,
    authorize,
    is_allowed,
    resolve_target_employee,
    scope_employee_id,
)


@pytest.mark.parametrize("role", [Role.ADMIN, Role.MANAGER])
def test_supervisors_hold_every_capability(role):
    assert all(is_allowed(role, action) for action in Action)


def test_employee_capabilities():
    allowed = {action for action in Action if is_allowed(Role.EMPLOYEE, action)}
    assert allowed == {Action.CLOCK, Action.SUBMIT_REGULARIZATION}


def test_authorize_raises_forbidden():
    caller = Caller(user_id=5, role=Role.EMPLOYEE, employee_id=5)
    with pytest.raises(AuthorizationError):
        authorize(caller, Action.DECIDE_REGULARIZATION)
    authorize(caller, Action.CLOCK)


def test_scope_employee_id():
    employee = Caller(user_id=5, role=Role.EMPLOYEE, employee_id=7)
    manager = Caller(user_id=6, role=Role.MANAGER)

    assert scope_employee_id(employee, 99, view_all=Action.VIEW_ALL_ATTENDANCE) == 7
    assert scope_employee_id(employee, None, view_all=Action.VIEW_ALL_ATTENDANCE) == 7
    assert scope_employee_id(manager, 99, view_all=Action.VIEW_ALL_ATTENDANCE) == 99
    assert scope_employee_id(manager, None, view_all=Action.VIEW_ALL_ATTENDANCE) is None


def test_resolve_target_employee():
    employee = Caller(user_id=5, role=Role.EMPLOYEE, employee_id=7)
    admin = Caller(user_id=1, role=Role.ADMIN, employee_id=1)

    assert resolve_target_employee(employee, None) == 7
    assert resolve_target_employee(employee, 7) == 7
    assert resolve_target_employee(admin, 7) == 7
    with pytest.raises(AuthorizationError):
        resolve_target_employee(employee, 8)


def test_caller_describe_for_audit_events():
    caller = Caller(user_id=5, role=Role.MANAGER, employee_id=None)
    assert caller.describe() == {"caller_user_id": 5, "caller_role": "manager", "caller_employee_id": None}
