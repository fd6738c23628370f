"""Render context passed explicitly into every page render."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RenderContext(BaseModel):
    """Whether to render draft content, and which content ref to query.

    ``ref`` is None for published content; the client then resolves the
    master ref itself.
    """

    model_config = ConfigDict(frozen=True)

    preview: bool = False
    ref: str | None = None

    @classmethod
    def published(cls) -> RenderContext:
        return cls()

    @classmethod
    def for_preview(cls, ref: str) -> RenderContext:
        return cls(preview=True, ref=ref)
