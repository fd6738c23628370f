"""Content API access: client, document models, predicates, rich text."""

from spacetraveling.cms.client import ContentClient, PrismicClient
from spacetraveling.cms.models import (
    ContentDocument,
    ContentSection,
    ImageField,
    PostData,
    QueryResponse,
    RichTextBlock,
    Span,
)
from spacetraveling.cms.richtext import as_html, as_text

__all__ = [
    "ContentClient",
    "ContentDocument",
    "ContentSection",
    "ImageField",
    "PostData",
    "PrismicClient",
    "QueryResponse",
    "RichTextBlock",
    "Span",
    "as_html",
    "as_text",
]
