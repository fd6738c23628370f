"""CMS document models: pure Pydantic v2 data types.

These mirror the JSON the content API returns for post documents and
search pages.  They are read-only to the rest of the application.
Malformed optional fields (a null body, a missing heading, a banner
that is not an object) degrade to empty values instead of failing
validation, so one bad field never takes a whole page down.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Span(BaseModel):
    """Inline formatting applied to a range of a rich text block."""

    start: int
    end: int
    type: str
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class RichTextBlock(BaseModel):
    """One block of structured text (paragraph, heading, list item, image...)."""

    model_config = ConfigDict(extra="allow")

    type: str = "paragraph"
    text: str = ""
    spans: list[Span] = Field(default_factory=list)
    url: str = ""
    alt: str = ""
    oembed: dict[str, Any] = Field(default_factory=dict)

    @field_validator("text", "url", "alt", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("spans", mode="before")
    @classmethod
    def _coerce_spans(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @field_validator("oembed", mode="before")
    @classmethod
    def _coerce_oembed(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class ContentSection(BaseModel):
    """A heading followed by an ordered list of rich text blocks."""

    heading: str = ""
    body: list[RichTextBlock] = Field(default_factory=list)

    @field_validator("heading", mode="before")
    @classmethod
    def _heading_str(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("body", mode="before")
    @classmethod
    def _body_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [b for b in value if isinstance(b, dict)]


class ImageField(BaseModel):
    """Image reference (banner)."""

    url: str = ""
    alt: str = ""
    dimensions: dict[str, int] = Field(default_factory=dict)

    @field_validator("url", "alt", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("dimensions", mode="before")
    @classmethod
    def _coerce_dimensions(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class PostData(BaseModel):
    """Domain fields of a post document."""

    model_config = ConfigDict(extra="allow")

    title: str = ""
    subtitle: str = ""
    author: str = ""
    banner: ImageField = Field(default_factory=ImageField)
    content: list[ContentSection] = Field(default_factory=list)

    @field_validator("title", "subtitle", "author", mode="before")
    @classmethod
    def _text_field(cls, value: Any) -> Any:
        # Title fields sometimes arrive as rich text arrays.
        if value is None:
            return ""
        if isinstance(value, list):
            return " ".join(
                str(b.get("text", "")) for b in value if isinstance(b, dict)
            ).strip()
        return value

    @field_validator("banner", mode="before")
    @classmethod
    def _banner_obj(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("content", mode="before")
    @classmethod
    def _content_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [s for s in value if isinstance(s, dict)]


class ContentDocument(BaseModel):
    """A document as returned by the content API."""

    model_config = ConfigDict(extra="ignore")

    id: str
    uid: str | None = None
    type: str = ""
    href: str = ""
    tags: list[str] = Field(default_factory=list)
    lang: str = ""
    first_publication_date: str | None = None
    last_publication_date: str | None = None
    data: PostData = Field(default_factory=PostData)

    @field_validator("data", mode="before")
    @classmethod
    def _data_obj(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @property
    def route(self) -> str:
        """Site path of this document."""
        return f"/post/{self.uid or '404'}"


class QueryResponse(BaseModel):
    """One page of search results plus the cursor for the next page."""

    model_config = ConfigDict(extra="ignore")

    page: int = 1
    results_per_page: int = 0
    results_size: int = 0
    total_results_size: int = 0
    total_pages: int = 0
    next_page: str | None = None
    prev_page: str | None = None
    results: list[ContentDocument] = Field(default_factory=list)


class Ref(BaseModel):
    """A content release pointer; the master ref is the published content."""

    model_config = ConfigDict(extra="ignore")

    id: str
    ref: str
    label: str = ""
    is_master_ref: bool = Field(default=False, alias="isMasterRef")


class ApiInfo(BaseModel):
    """Entry point response of the content API."""

    model_config = ConfigDict(extra="ignore")

    refs: list[Ref] = Field(default_factory=list)

    @property
    def master_ref(self) -> str | None:
        for ref in self.refs:
            if ref.is_master_ref:
                return ref.ref
        return None
