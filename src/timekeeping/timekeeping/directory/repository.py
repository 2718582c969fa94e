from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class IdentityProvider(Protocol):
    """Maps an authenticated user to the employee they are.

    Note: authentication itself lives outside this package; we only read its result.
    """

    def resolve_employee_for_user(self, user_id: int) -> Optional[int]:
        raise NotImplementedError


class EmployeeDirectory(Protocol):
    """Employee lookups used for display names."""

    def list_employees(self, *, employee_ids: Optional[Sequence[int]] = None) -> Sequence[Employee]:
        raise NotImplementedError
