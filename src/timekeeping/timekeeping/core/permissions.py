"""Capability-based authorization.

Every service operation asks one question, ``authorize(caller, action)``,
instead of comparing role strings at each call site.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .enums import Role
from .exceptions import AuthorizationError


class Action(str, Enum):
    CLOCK = "clock"
    ACT_FOR_OTHERS = "act_for_others"
    CREATE_RECORD = "create_record"
    UPDATE_RECORD = "update_record"
    DELETE_RECORD = "delete_record"
    VIEW_ALL_ATTENDANCE = "view_all_attendance"
    SUBMIT_REGULARIZATION = "submit_regularization"
    DECIDE_REGULARIZATION = "decide_regularization"
    VIEW_ALL_REGULARIZATIONS = "view_all_regularizations"


_SUPERVISOR_ACTIONS = frozenset(Action)

_POLICY: dict[Role, frozenset[Action]] = {
    Role.ADMIN: _SUPERVISOR_ACTIONS,
    Role.MANAGER: _SUPERVISOR_ACTIONS,
    Role.EMPLOYEE: frozenset({Action.CLOCK, Action.SUBMIT_REGULARIZATION}),
}


@dataclass(frozen=True)
class Caller:
    """Who is calling: resolved once per request from the session and identity service."""

    user_id: int
    role: Role
    employee_id: Optional[int] = None

    def describe(self) -> dict:
        return {"caller_user_id": self.user_id, "caller_role": self.role.value, "caller_employee_id": self.employee_id}


def is_allowed(role: Role, action: Action) -> bool:
    return action in _POLICY.get(role, frozenset())


def authorize(caller: Caller, action: Action) -> None:
    if not is_allowed(caller.role, action):
        raise AuthorizationError("You do not have permission to perform this action")


def scope_employee_id(caller: Caller, requested: Optional[int], *, view_all: Action) -> Optional[int]:
    """Apply role scoping to a caller-supplied employee filter.

    Callers holding ``view_all`` keep whatever they asked for (None = everyone).
    Everyone else is pinned to their own employee id, whatever they requested.
    """

    if is_allowed(caller.role, view_all):
        return requested
    return own_employee_id(caller)


def own_employee_id(caller: Caller) -> int:
    if caller.employee_id is None:
        raise AuthorizationError("Your account is not linked to an employee")
    return int(caller.employee_id)


def resolve_target_employee(caller: Caller, requested: Optional[int]) -> int:
    """Employee a mutating call acts on.

    Omitted means the caller themself. Acting on anybody else requires ACT_FOR_OTHERS.
    """

    if requested is None:
        return own_employee_id(caller)
    if caller.employee_id is not None and int(requested) == int(caller.employee_id):
        return int(requested)
    authorize(caller, Action.ACT_FOR_OTHERS)
    return int(requested)
