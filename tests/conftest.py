"""Shared fixtures: an in-memory content API and post factories."""

from __future__ import annotations

import re
import urllib.parse
from typing import Any

import pytest

from spacetraveling.cms.client import ContentClient
from spacetraveling.cms.models import ContentDocument, QueryResponse
from spacetraveling.config import SpacetravelingConfig
from spacetraveling.errors import CMSFetchError

_AT_RE = re.compile(r'\[at\(([\w.]+), "([^"]*)"\)\]')

FAKE_API = "https://fake.cdn.prismic.io/api/v2"
PREVIEW_REF = "preview-ref"


def make_post(
    n: int,
    *,
    uid: str | None = None,
    first: str | None = None,
    last: str | None = None,
    sections: list[dict[str, Any]] | None = None,
    title: str | None = None,
) -> ContentDocument:
    first = first or f"2021-01-{n:02d}T12:00:00+0000"
    return ContentDocument.model_validate(
        {
            "id": f"id-{n}",
            "uid": uid if uid is not None else f"post-{n}",
            "type": "post",
            "first_publication_date": first,
            "last_publication_date": last or first,
            "data": {
                "title": title or f"Post {n}",
                "subtitle": f"Subtitle {n}",
                "author": "Ana Souza",
                "banner": {"url": f"https://images.example/{n}.png", "alt": "banner"},
                "content": sections
                if sections is not None
                else [
                    {
                        "heading": "Intro",
                        "body": [{"type": "paragraph", "text": "Hello world", "spans": []}],
                    }
                ],
            },
        }
    )


class InMemoryCMS(ContentClient):
    """Content client over a list of documents, with real cursor paging.

    ``drafts`` are only visible when querying with ``PREVIEW_REF``.
    ``fail_fetches`` makes the next N ``fetch_page`` calls raise.
    """

    def __init__(
        self,
        documents: list[ContentDocument],
        drafts: list[ContentDocument] | None = None,
    ) -> None:
        self.documents = list(documents)
        self.drafts = list(drafts or [])
        self.calls: list[dict[str, Any]] = []
        self.fetches: list[str] = []
        self.fail_fetches = 0
        self.fail_queries = False

    def _visible(self, ref: str | None) -> list[ContentDocument]:
        if ref == PREVIEW_REF:
            return self.documents + self.drafts
        return list(self.documents)

    def _search(self, params: dict[str, Any]) -> QueryResponse:
        docs = self._visible(params.get("ref"))
        for field, value in _AT_RE.findall(params["q"]):
            if field == "document.type":
                docs = [d for d in docs if d.type == value]
            elif field == "document.id":
                docs = [d for d in docs if d.id == value]
            elif field.endswith(".uid"):
                docs = [d for d in docs if d.uid == value]

        orderings = params.get("orderings")
        if orderings:
            docs.sort(
                key=lambda d: d.first_publication_date or "",
                reverse=orderings.endswith("desc]"),
            )
        after = params.get("after")
        if after:
            ids = [d.id for d in docs]
            docs = docs[ids.index(after) + 1 :] if after in ids else docs

        size = params["pageSize"]
        page = params.get("page") or 1
        total = len(docs)
        total_pages = max(1, -(-total // size))
        chunk = docs[(page - 1) * size : page * size]
        next_page = None
        if page < total_pages:
            query = dict(params, page=page + 1)
            next_page = f"{FAKE_API}/documents/search?{urllib.parse.urlencode(query)}"
        return QueryResponse(
            page=page,
            results_per_page=size,
            results_size=len(chunk),
            total_results_size=total,
            total_pages=total_pages,
            next_page=next_page,
            results=chunk,
        )

    def query(
        self,
        predicates: str | list[str],
        *,
        fetch: list[str] | None = None,
        page_size: int = 20,
        orderings: str | None = None,
        ref: str | None = None,
        after: str | None = None,
        page: int | None = None,
    ) -> QueryResponse:
        if self.fail_queries:
            raise CMSFetchError("content API down", url=FAKE_API, status=503)
        q = predicates if isinstance(predicates, str) else "".join(predicates)
        params: dict[str, Any] = {"q": q, "pageSize": page_size}
        for key, value in (("orderings", orderings), ("ref", ref), ("after", after), ("page", page)):
            if value is not None:
                params[key] = value
        self.calls.append(dict(params, fetch=fetch))
        return self._search(params)

    def fetch_page(self, cursor: str) -> QueryResponse:
        self.fetches.append(cursor)
        if self.fail_fetches:
            self.fail_fetches -= 1
            raise CMSFetchError("timed out", url=cursor)
        raw = dict(urllib.parse.parse_qsl(urllib.parse.urlsplit(cursor).query))
        params: dict[str, Any] = dict(raw, pageSize=int(raw["pageSize"]), page=int(raw["page"]))
        return self._search(params)


@pytest.fixture
def post_factory():
    return make_post


@pytest.fixture
def seven_posts() -> list[ContentDocument]:
    return [make_post(n) for n in range(1, 8)]


@pytest.fixture
def cms(seven_posts) -> InMemoryCMS:
    return InMemoryCMS(seven_posts)


@pytest.fixture
def cms_factory():
    return InMemoryCMS


@pytest.fixture
def config() -> SpacetravelingConfig:
    return SpacetravelingConfig.model_validate(
        {
            "cms": {"api_endpoint": "https://fake.cdn.prismic.io"},
            "site": {"timezone": "UTC"},
            "comments": {"repo": "spacetraveling/comments"},
            "preview": {"secret": "test-secret"},
        }
    )


@pytest.fixture
def preview_ref() -> str:
    return PREVIEW_REF
