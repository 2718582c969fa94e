from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from ..core.enums import RegularizationStatus
from .model import RegularizationFilter, RegularizationRequest


class RegularizationRepository(Protocol):
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
        """Insert a pending request. Raises DuplicatePendingRequest if the day
        already has one.
        """

        raise NotImplementedError

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[RegularizationRequest]:
        raise NotImplementedError

    def find_pending_for_day(self, employee_id: int, work_date: date) -> Optional[RegularizationRequest]:
        raise NotImplementedError

    def mark_decided(
        self,
        *,
        request_id: int,
        status: RegularizationStatus,
        decided_by: int,
        decided_at: datetime,
        decision_note: Optional[str] = None,
    ) -> bool:
        """Compare-and-swap: only a PENDING request transitions. False otherwise."""

        raise NotImplementedError

    def count(self, criteria: RegularizationFilter) -> int:
        raise NotImplementedError

    def find(self, criteria: RegularizationFilter, *, limit: int, offset: int) -> Sequence[RegularizationRequest]:
        """Ordered by created_at DESC, request_id DESC."""

        raise NotImplementedError
