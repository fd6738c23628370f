"""Error taxonomy and per-build failure reporting.

Every error raised on purpose by spacetraveling derives from
``SpacetravelingError`` so callers (the CLI, the live server) can
report it without catching unrelated exceptions.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class SpacetravelingError(Exception):
    """Base error for spacetraveling."""


class ConfigError(SpacetravelingError):
    """Configuration is missing or invalid."""


class CMSFetchError(SpacetravelingError):
    """A request to the content API failed.

    Covers network errors, timeouts, non-2xx responses and bodies that
    are not valid JSON.
    """

    def __init__(self, message: str, *, url: str = "", status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class DocumentNotFoundError(SpacetravelingError):
    """No document matches the requested type and uid (or id)."""

    def __init__(self, doc_type: str, uid: str) -> None:
        super().__init__(f"No {doc_type!r} document with uid {uid!r}")
        self.doc_type = doc_type
        self.uid = uid


class LoadInProgressError(SpacetravelingError):
    """A pagination load was requested while another one is running."""


class PageFailure(BaseModel):
    """A single page that could not be rendered."""

    route: str
    error: str
    error_type: str


class BuildReport(BaseModel):
    """Outcome of a static build: what was written and what failed."""

    pages_written: list[str] = Field(default_factory=list)
    failures: list[PageFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def record_page(self, route: str) -> None:
        self.pages_written.append(route)

    def record_failure(self, route: str, exc: Exception) -> None:
        """Record a page failure; the build carries on with other pages."""
        logger.warning("Failed to render %s: %s", route, exc)
        self.failures.append(
            PageFailure(route=route, error=str(exc), error_type=type(exc).__name__)
        )
