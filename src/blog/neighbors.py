"""Previous/next post lookup for the navigation at the bottom of a post."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from pydantic import BaseModel

from spacetraveling.blog.context import RenderContext
from spacetraveling.cms.client import ContentClient
from spacetraveling.cms.models import ContentDocument
from spacetraveling.cms.predicates import at

logger = logging.getLogger(__name__)

ORDER_OLDEST_FIRST = "[document.first_publication_date]"
ORDER_NEWEST_FIRST = "[document.first_publication_date desc]"


class AdjacentPosts(BaseModel):
    """The posts published right before and right after a given post."""

    previous: ContentDocument | None = None
    next: ContentDocument | None = None


def summary_fields(doc_type: str) -> list[str]:
    """Fields needed to render a post link or card."""
    return [f"{doc_type}.title", f"{doc_type}.subtitle", f"{doc_type}.author"]


def _first_after(
    client: ContentClient,
    document_id: str,
    doc_type: str,
    orderings: str,
    ref: str | None,
) -> ContentDocument | None:
    response = client.query(
        at("document.type", doc_type),
        fetch=summary_fields(doc_type),
        page_size=1,
        orderings=orderings,
        ref=ref,
        after=document_id,
    )
    return response.results[0] if response.results else None


def resolve_adjacent_posts(
    client: ContentClient,
    document_id: str,
    context: RenderContext,
    *,
    doc_type: str = "post",
) -> AdjacentPosts:
    """Find the next-older and next-newer posts around ``document_id``.

    The position is given by the content API's ``after`` cursor over a
    publication-date ordering; the two lookups are independent and run
    concurrently.  Either side is None at the ends of the timeline.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        newer = pool.submit(
            _first_after, client, document_id, doc_type, ORDER_OLDEST_FIRST, context.ref
        )
        older = pool.submit(
            _first_after, client, document_id, doc_type, ORDER_NEWEST_FIRST, context.ref
        )
        adjacent = AdjacentPosts(previous=older.result(), next=newer.result())

    logger.debug(
        "Neighbors of %s: previous=%s next=%s",
        document_id,
        adjacent.previous.id if adjacent.previous else None,
        adjacent.next.id if adjacent.next else None,
    )
    return adjacent
