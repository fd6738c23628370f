"""Static export: enumerate post routes and write the site to disk.

Each page is rendered independently.  A page that fails (content API
error, unknown uid) is recorded in the ``BuildReport`` and the build
moves on to the next one.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel

from spacetraveling.blog.context import RenderContext
from spacetraveling.blog.neighbors import ORDER_NEWEST_FIRST, resolve_adjacent_posts, summary_fields
from spacetraveling.blog.pages import load_more_payload, render_home, render_not_found, render_post
from spacetraveling.blog.pagination import PaginationController
from spacetraveling.cms.client import ContentClient
from spacetraveling.cms.models import ContentDocument, QueryResponse
from spacetraveling.cms.predicates import at
from spacetraveling.config import SpacetravelingConfig
from spacetraveling.errors import BuildReport, CMSFetchError, DocumentNotFoundError

logger = logging.getLogger(__name__)

PATHS_PAGE_SIZE = 100


class StaticPath(BaseModel):
    """A post known at build time and the route it is served under."""

    uid: str
    route: str


def fragment_url(page: int) -> str:
    """URL of the pre-rendered "load more" fragment for ``page``."""
    return f"/api/posts/{page}.json"


def home_query(
    client: ContentClient, config: SpacetravelingConfig, context: RenderContext
) -> QueryResponse:
    """First page of the home listing, newest first."""
    doc_type = config.cms.document_type
    return client.query(
        at("document.type", doc_type),
        fetch=summary_fields(doc_type),
        page_size=config.site.page_size,
        orderings=ORDER_NEWEST_FIRST,
        ref=context.ref,
    )


def generate_static_paths(client: ContentClient, config: SpacetravelingConfig) -> list[StaticPath]:
    """Every post uid in the CMS, following the cursor across all pages."""
    doc_type = config.cms.document_type
    first = client.query(
        at("document.type", doc_type),
        fetch=[f"{doc_type}.title"],
        page_size=PATHS_PAGE_SIZE,
        orderings=ORDER_NEWEST_FIRST,
    )
    state = PaginationController(client, first).load_all()

    seen: set[str] = set()
    paths: list[StaticPath] = []
    for document in state.results:
        if not document.uid or document.uid in seen:
            continue
        seen.add(document.uid)
        paths.append(StaticPath(uid=document.uid, route=document.route))
    logger.info("Found %d post(s) to pre-render", len(paths))
    return paths


def render_post_page(
    client: ContentClient, uid: str, context: RenderContext, config: SpacetravelingConfig
) -> str:
    """Fetch a post and its neighbors and render the post page.

    Raises:
        DocumentNotFoundError: If no post has this uid.
        CMSFetchError: If the content API could not be reached.
    """
    doc_type = config.cms.document_type
    document = client.get_by_uid(doc_type, uid, ref=context.ref)
    adjacent = resolve_adjacent_posts(client, document.id, context, doc_type=doc_type)
    return render_post(document, adjacent, context, config)


def build_site(
    client: ContentClient, config: SpacetravelingConfig, output_dir: Path
) -> BuildReport:
    """Render the whole site into ``output_dir``.

    Writes ``index.html``, one ``post/<uid>/index.html`` per post,
    ``api/posts/<n>.json`` load-more fragments and ``404.html``.
    """
    report = BuildReport()
    context = RenderContext.published()
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        _build_home(client, config, context, output_dir, report)
    except CMSFetchError as exc:
        report.record_failure("/", exc)

    try:
        paths = generate_static_paths(client, config)
    except CMSFetchError as exc:
        report.record_failure("/post/", exc)
        paths = []

    for path in paths:
        try:
            html = render_post_page(client, path.uid, context, config)
        except (CMSFetchError, DocumentNotFoundError) as exc:
            report.record_failure(path.route, exc)
            continue
        _atomic_write(output_dir / "post" / path.uid / "index.html", html)
        report.record_page(path.route)

    _atomic_write(output_dir / "404.html", render_not_found(context, config))
    report.record_page("/404")

    logger.info(
        "Built %d page(s) into %s, %d failure(s)",
        len(report.pages_written),
        output_dir,
        len(report.failures),
    )
    return report


def _build_home(
    client: ContentClient,
    config: SpacetravelingConfig,
    context: RenderContext,
    output_dir: Path,
    report: BuildReport,
) -> None:
    """Write the home page and one fragment per following listing page.

    All listing pages are fetched before anything is written, so a
    failure never leaves a home page pointing at a missing fragment.
    """
    controller = PaginationController(client, home_query(client, config, context))
    pages: list[list[ContentDocument]] = [list(controller.state.results)]
    while controller.has_more:
        page = controller.load_more()
        if page is not None:
            pages.append(list(page.results))

    for number, documents in enumerate(pages, start=1):
        next_url = fragment_url(number + 1) if number < len(pages) else None
        if number == 1:
            _atomic_write(
                output_dir / "index.html", render_home(documents, next_url, context, config)
            )
            report.record_page("/")
        else:
            payload = load_more_payload(documents, next_url, config)
            route = fragment_url(number)
            _atomic_write(output_dir / route.lstrip("/"), json.dumps(payload, ensure_ascii=False))
            report.record_page(route)


def _atomic_write(path: Path, content: str) -> None:
    """Write via a temp file and rename so readers never see partial pages."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(content, encoding="utf-8")
    os.replace(tmp, path)
