"""Paginated list envelope shared by every list endpoint."""


import math
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed to show *total* items, *limit* per page."""
    if limit <= 0:
        return 0
    return math.ceil(total / limit) if total else 0


# ── Pydantic response models ───────────────────────────────────────

class Page(BaseModel, Generic[T]):
    """Standard envelope: ``{"page", "limit", "total", "totalPages", "items"}``."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = Field(default=0, alias="totalPages")
    items: list[T] = Field(default_factory=list)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @classmethod
    def empty(cls, *, page: int = 1, limit: int = 10) -> "Page[T]":
        return cls(page=page, limit=limit, total=0, total_pages=0, items=[])


def to_page(
    payload: Any,
    parse_item: Callable[[dict], T],
    *,
    page: int = 1,
    limit: int = 10,
) -> Optional[Page[T]]:
    """
    Adapt a list response into a ``Page``.

    Accepts items under ``items`` or ``data``. Missing counters fall back to
    the request's *page*/*limit* and the item count; ``totalPages`` is
    recomputed from ``total`` and ``limit`` when the server omits it.
    Returns ``None`` when *payload* carries no list at all.
    """
    if not isinstance(payload, dict):
        return None
    raw_items = payload.get("items")
    if not isinstance(raw_items, list):
        raw_items = payload.get("data")
    if not isinstance(raw_items, list):
        return None

    items = [parse_item(raw) for raw in raw_items]
    resolved_limit = int(payload.get("limit") or limit)
    total = int(payload.get("total") or len(items))
    pages = payload.get("totalPages")
    return Page(
        page=int(payload.get("page") or page),
        limit=resolved_limit,
        total=total,
        total_pages=int(pages) if pages else total_pages(total, resolved_limit),
        items=items,
    )
