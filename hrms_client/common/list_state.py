"""Fetch / filter / pagination state shared by every list page.

State machine::

    idle ──reload──▶ loading ──▶ success | error
                       ▲               │
                       └─filter/page───┘

Each fetch carries a ``FetchToken``. Starting a new fetch cancels the token
of the one in flight, and a cancelled fetch never writes its result (or its
error) into the controller — the list always reflects the latest filters.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from hrms_client.common.exceptions import ApiError
from hrms_client.common.pagination import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[dict[str, Any], int, int], Awaitable[Page[T]]]


class LoadState(str, enum.Enum):
    idle = "idle"
    loading = "loading"
    success = "success"
    error = "error"


class FetchToken:
    """Cancellation flag for one fetch."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ListController(Generic[T]):
    """Owns filters, current page and the last fetched ``Page``.

    *fetch* receives ``(filters, page, limit)`` and returns a ``Page``.
    """

    def __init__(
        self,
        fetch: Fetcher,
        *,
        error_message: str = "Failed to load data",
        limit: int = 10,
        filters: Optional[dict[str, Any]] = None,
    ) -> None:
        self._fetch = fetch
        self.error_message = error_message
        self.limit = limit
        self.filters: dict[str, Any] = dict(filters or {})
        self.page = 1
        self.state = LoadState.idle
        self.result: Optional[Page[T]] = None
        self.error: Optional[str] = None
        self._token: Optional[FetchToken] = None

    # ── Read-only view ──────────────────────────────────────────────

    @property
    def items(self) -> list[T]:
        return list(self.result.items) if self.result else []

    @property
    def total(self) -> int:
        return self.result.total if self.result else 0

    @property
    def total_pages(self) -> int:
        return self.result.total_pages if self.result else 0

    @property
    def is_loading(self) -> bool:
        return self.state is LoadState.loading

    @property
    def is_empty(self) -> bool:
        """Success with zero items (render the empty-state message)."""
        return self.state is LoadState.success and not self.items

    # ── Transitions ─────────────────────────────────────────────────

    async def set_filters(self, **changes: Any) -> bool:
        """Update filters, go back to page 1 and refetch."""
        self.filters.update(changes)
        self.page = 1
        return await self.reload()

    async def reset(self, filters: Optional[dict[str, Any]] = None) -> bool:
        self.filters = dict(filters or {})
        self.page = 1
        return await self.reload()

    async def set_page(self, page: int) -> bool:
        self.page = max(1, page)
        return await self.reload()

    async def next_page(self) -> bool:
        if self.page >= self.total_pages:
            return False
        return await self.set_page(self.page + 1)

    async def prev_page(self) -> bool:
        if self.page <= 1:
            return False
        return await self.set_page(self.page - 1)

    async def reload(self) -> bool:
        """Fetch the current page; returns False if failed or superseded."""
        if self._token is not None:
            self._token.cancel()
        token = FetchToken()
        self._token = token
        self.state = LoadState.loading

        filters, page = dict(self.filters), self.page
        try:
            result = await self._fetch(filters, page, self.limit)
        except (ApiError, ValueError) as exc:
            if token.cancelled:
                logger.debug("Discarding error of superseded fetch: %r", exc)
                return False
            if isinstance(exc, ApiError) and exc.session_invalidated:
                logger.info("Session ended during fetch; list cleared without error")
                self.result = None
                self.error = None
                self.state = LoadState.idle
                return False
            logger.error("%s: %r", self.error_message, exc)
            self.result = None
            self.error = self.error_message
            self.state = LoadState.error
            return False

        if token.cancelled:
            logger.debug("Discarding superseded fetch (page=%d, filters=%s)", page, filters)
            return False
        self.result = result
        self.error = None
        self.state = LoadState.success
        return True
