from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Read-only view of an employee owned by the employee directory."""

    employee_id: int
    full_name: str
    user_id: Optional[int] = None
    department_name: Optional[str] = None
