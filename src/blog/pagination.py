"""Cursor-driven "load more" pagination.

The controller owns the loaded posts and the next-page cursor.  It is a
two-state machine, ``IDLE -> LOADING -> IDLE``: a load requested while
another is in flight is rejected instead of issuing a second fetch, so
rapid repeated requests can never append the same page twice.
"""

from __future__ import annotations

import logging
import threading
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from spacetraveling.cms.client import ContentClient
from spacetraveling.cms.models import ContentDocument, QueryResponse
from spacetraveling.errors import LoadInProgressError

logger = logging.getLogger(__name__)


class LoadState(StrEnum):
    """Pagination controller state."""

    IDLE = "idle"
    LOADING = "loading"


class PaginationState(BaseModel):
    """Immutable snapshot of the loaded posts.

    ``version`` increases by one with every appended page.
    """

    model_config = ConfigDict(frozen=True)

    results: tuple[ContentDocument, ...] = ()
    next_page: str | None = None
    version: int = 0

    @property
    def has_more(self) -> bool:
        return self.next_page is not None


class PaginationController:
    """Appends successive result pages in CMS order."""

    def __init__(self, client: ContentClient, first_page: QueryResponse) -> None:
        self._client = client
        self._lock = threading.Lock()
        self._load_state = LoadState.IDLE
        self._state = PaginationState(
            results=tuple(first_page.results), next_page=first_page.next_page
        )

    @property
    def state(self) -> PaginationState:
        return self._state

    @property
    def load_state(self) -> LoadState:
        return self._load_state

    @property
    def has_more(self) -> bool:
        return self._state.has_more

    def load_more(self) -> QueryResponse | None:
        """Fetch the page behind the cursor and append it.

        Returns:
            The fetched page, or None when there was no cursor to follow.

        Raises:
            LoadInProgressError: If a load is already running.
            CMSFetchError: If the fetch failed. The loaded posts and the
                cursor are left unchanged so the caller may retry.
        """
        if not self._lock.acquire(blocking=False):
            raise LoadInProgressError("A page is already loading")
        try:
            cursor = self._state.next_page
            if cursor is None:
                return None
            self._load_state = LoadState.LOADING
            page = self._client.fetch_page(cursor)
            self._state = PaginationState(
                results=self._state.results + tuple(page.results),
                next_page=page.next_page,
                version=self._state.version + 1,
            )
            logger.debug(
                "Loaded %d more post(s), %d total", len(page.results), len(self._state.results)
            )
            return page
        finally:
            self._load_state = LoadState.IDLE
            self._lock.release()

    def load_all(self) -> PaginationState:
        """Follow the cursor until the last page has been appended."""
        while self.has_more:
            self.load_more()
        return self._state
