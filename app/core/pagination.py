"""Pagination helpers for list endpoints."""

from __future__ import annotations

import copy
import math
from typing import Any

from fastapi import Query

from app.core.config import settings
from app.core.sorting import SortSpec

MAX_PER_PAGE = 100


class PaginationState:
    """Page metadata derived from ``current_page``, ``per_page`` and ``total_items``.

    The three inputs are clamped on assignment and every derived value is
    recomputed whenever one of them changes, so the object never carries
    stale offsets or bounds.
    """

    def __init__(self, current_page: int = 1, per_page: int = 20, total_items: int = 0):
        self._current_page = max(1, int(current_page))
        self._per_page = max(1, min(MAX_PER_PAGE, int(per_page)))
        self._total_items = max(0, int(total_items))
        self.links: dict[str, str] = {}
        self._calculate()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def current_page(self) -> int:
        return self._current_page

    @current_page.setter
    def current_page(self, value: int) -> None:
        self._current_page = max(1, int(value))
        self._calculate()

    @property
    def per_page(self) -> int:
        return self._per_page

    @per_page.setter
    def per_page(self, value: int) -> None:
        self._per_page = max(1, min(MAX_PER_PAGE, int(value)))
        self._calculate()

    @property
    def total_items(self) -> int:
        return self._total_items

    @total_items.setter
    def total_items(self, value: int) -> None:
        self._total_items = max(0, int(value))
        self._calculate()

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def _calculate(self) -> None:
        self.total_pages = (
            math.ceil(self._total_items / self._per_page) if self._per_page > 0 else 0
        )
        self.offset = (self._current_page - 1) * self._per_page

        self.has_previous_page = self._current_page > 1
        self.has_next_page = self._current_page < self.total_pages
        self.previous_page = self._current_page - 1 if self.has_previous_page else None
        self.next_page = self._current_page + 1 if self.has_next_page else None

        if self._total_items > 0:
            self.from_item = self.offset + 1
            self.to_item = min(self.offset + self._per_page, self._total_items)
        else:
            self.from_item = 0
            self.to_item = 0

        self.summary = {
            "showing": (
                f"Showing {self.from_item} - {self.to_item} of {self._total_items} items"
                if self._total_items > 0
                else "No items"
            ),
            "current_page_info": f"Page {self._current_page} of {self.total_pages}",
            "items_per_page": f"{self._per_page} items per page",
            "total_items": f"{self._total_items} items in total",
        }

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_valid_page(self, page: int) -> bool:
        return 1 <= page <= self.total_pages

    def has_items(self) -> bool:
        return self._total_items > 0

    def is_first_page(self) -> bool:
        return self._current_page == 1

    def is_last_page(self) -> bool:
        return self._current_page == self.total_pages or self.total_pages == 0

    def page_range(self, radius: int = 5) -> list[int]:
        """Inclusive window of page numbers around the current page."""
        if self.total_pages == 0:
            return []
        start = max(1, self._current_page - radius)
        end = min(self.total_pages, self._current_page + radius)
        return list(range(start, end + 1))

    def add_link(self, rel: str, url: str) -> PaginationState:
        self.links[rel] = url
        return self

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def with_page(self, page: int) -> PaginationState:
        clone = copy.deepcopy(self)
        clone.current_page = page
        return clone

    def with_per_page(self, per_page: int) -> PaginationState:
        clone = copy.deepcopy(self)
        clone.per_page = per_page
        return clone

    # ------------------------------------------------------------------
    # Output formats
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentPage": self._current_page,
            "perPage": self._per_page,
            "totalItems": self._total_items,
            "totalPages": self.total_pages,
            "hasPreviousPage": self.has_previous_page,
            "hasNextPage": self.has_next_page,
            "previousPage": self.previous_page,
            "nextPage": self.next_page,
            "from": self.from_item,
            "to": self.to_item,
            "offset": self.offset,
            "links": dict(self.links),
            "summary": dict(self.summary),
        }

    def to_simple_dict(self) -> dict[str, int]:
        return {
            "current_page": self._current_page,
            "per_page": self._per_page,
            "total": self._total_items,
            "last_page": self.total_pages,
            "from": self.from_item,
            "to": self.to_item,
        }

    def to_link_dict(self, data: list | None = None) -> dict[str, Any]:
        """Link-augmented form; URLs come from ``links``, rows from the caller."""
        return {
            "current_page": self._current_page,
            "data": data if data is not None else [],
            "first_page_url": self.links.get("first"),
            "from": self.from_item,
            "last_page": self.total_pages,
            "last_page_url": self.links.get("last"),
            "next_page_url": self.links.get("next") if self.has_next_page else None,
            "path": self.links.get("self"),
            "per_page": self._per_page,
            "prev_page_url": self.links.get("prev") if self.has_previous_page else None,
            "to": self.to_item,
            "total": self._total_items,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PaginationState:
        state = cls(
            data.get("currentPage", 1),
            data.get("perPage", 20),
            data.get("totalItems", 0),
        )
        if data.get("links"):
            state.links = dict(data["links"])
        return state

    @classmethod
    def from_total(cls, total_items: int, current_page: int = 1, per_page: int = 20) -> PaginationState:
        return cls(current_page, per_page, total_items)

    @classmethod
    def empty(cls, current_page: int = 1, per_page: int = 20) -> PaginationState:
        return cls(current_page, per_page, 0)

    def __repr__(self) -> str:
        return (
            f"PaginationState(current_page={self._current_page}, "
            f"per_page={self._per_page}, total_items={self._total_items})"
        )


def compute_pagination(current_page: int, per_page: int, total_items: int) -> PaginationState:
    return PaginationState(current_page, per_page, total_items)


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=created_at:desc`.

    ``perPage`` is accepted as a synonym of ``limit``. Out-of-range values are
    clamped rather than rejected.
    """

    def __init__(
        self,
        page: int = Query(default=1, description="Page number (1-based)"),
        limit: int | None = Query(default=None, description="Items per page (max 100)"),
        per_page: int | None = Query(default=None, alias="perPage", description="Alias of limit"),
        sort: str | None = Query(default=None, description="field[:asc|desc], comma-separated"),
    ):
        size = limit if limit is not None else per_page
        if size is None:
            size = settings.default_page_size
        self.page = max(1, page)
        self.limit = max(1, min(settings.max_page_size, size))
        self.sort = sort

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def sort_specs(
        self, default: str, available_fields: list[str], aliases: dict[str, str] | None = None
    ) -> list[SortSpec]:
        """Parse ``sort`` (or ``default``); ``aliases`` maps public names to columns."""
        specs = SortSpec.parse_many(self.sort or default, available_fields)
        for spec in specs:
            if aliases and spec.field in aliases:
                spec.alias = aliases[spec.field]
        return specs

    def state(self, total: int) -> PaginationState:
        return PaginationState(self.page, self.limit, total)
