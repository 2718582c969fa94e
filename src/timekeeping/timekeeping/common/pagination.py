from __future__ import annotations

from dataclasses import dataclass
from math import ceil
from typing import Any, Generic, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class PageRequest:
    """1-based page number and page size, already clamped."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_args(
        cls,
        page: Any = None,
        limit: Any = None,
        *,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
    ) -> "PageRequest":
        page_num = max(1, _to_int(page, 1))
        limit_num = _to_int(limit, default_limit) or default_limit
        limit_num = min(max_limit, max(1, limit_num))
        return cls(page=page_num, limit=limit_num)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    page: int
    limit: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return ceil(self.total_items / self.limit) if self.total_items else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def pagination(self) -> dict:
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            "total_items": self.total_items,
            "items_per_page": self.limit,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }
