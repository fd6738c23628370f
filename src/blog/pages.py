"""Page renderers: fetched documents → HTML.

Documents are first mapped to small view models (cards, post view) with
every derived value computed, then rendered with Jinja2 templates.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup
from pydantic import BaseModel, Field

from spacetraveling.blog.comments import render_widget
from spacetraveling.blog.context import RenderContext
from spacetraveling.blog.derive import is_edited, reading_time
from spacetraveling.blog.formatting import DATE_PATTERN, EDITED_PATTERN, display_date
from spacetraveling.blog.neighbors import AdjacentPosts
from spacetraveling.cms.models import ContentDocument
from spacetraveling.cms.richtext import as_html
from spacetraveling.config import SpacetravelingConfig

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

EXIT_PREVIEW_PATH = "/api/exit-preview"


@lru_cache(maxsize=1)
def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


class PostCard(BaseModel):
    """A post as listed on the home page or in the navigation."""

    uid: str | None = None
    route: str
    title: str
    subtitle: str = ""
    author: str = ""
    published: str = ""


class SectionView(BaseModel):
    heading: str
    html: str


class PostView(BaseModel):
    """Everything the post template shows, already derived and formatted."""

    uid: str | None = None
    title: str
    author: str = ""
    banner_url: str = ""
    banner_alt: str = ""
    published: str = ""
    reading_minutes: int = 0
    edited: bool = False
    edited_at: str = ""
    sections: list[SectionView] = Field(default_factory=list)
    previous: PostCard | None = None
    next: PostCard | None = None


def _format(value: str | None, config: SpacetravelingConfig, pattern: str = DATE_PATTERN) -> str:
    return display_date(value, pattern, locale=config.site.locale, tz=config.site.timezone)


def to_card(document: ContentDocument, config: SpacetravelingConfig) -> PostCard:
    return PostCard(
        uid=document.uid,
        route=document.route,
        title=document.data.title,
        subtitle=document.data.subtitle,
        author=document.data.author,
        published=_format(document.first_publication_date, config),
    )


def build_post_view(
    document: ContentDocument,
    adjacent: AdjacentPosts,
    config: SpacetravelingConfig,
) -> PostView:
    """Derive the reading time, edit note and section HTML of a post."""
    data = document.data
    edited = is_edited(document.first_publication_date, document.last_publication_date)
    return PostView(
        uid=document.uid,
        title=data.title,
        author=data.author,
        banner_url=data.banner.url,
        banner_alt=data.banner.alt,
        published=_format(document.first_publication_date, config),
        reading_minutes=reading_time(data.content),
        edited=edited,
        edited_at=_format(document.last_publication_date, config, EDITED_PATTERN) if edited else "",
        sections=[
            SectionView(heading=section.heading, html=as_html(section.body))
            for section in data.content
        ],
        previous=to_card(adjacent.previous, config) if adjacent.previous else None,
        next=to_card(adjacent.next, config) if adjacent.next else None,
    )


def _render(template: str, context: RenderContext, config: SpacetravelingConfig, **values: Any) -> str:
    return _get_env().get_template(template).render(
        site=config.site,
        preview=context.preview,
        exit_preview_url=EXIT_PREVIEW_PATH,
        **values,
    )


def render_cards(documents: list[ContentDocument], config: SpacetravelingConfig) -> str:
    """Card list items only, for appending to an already rendered home page."""
    cards = [to_card(d, config) for d in documents]
    return _get_env().get_template("_cards.html").render(cards=cards)


def render_home(
    documents: list[ContentDocument],
    next_url: str | None,
    context: RenderContext,
    config: SpacetravelingConfig,
) -> str:
    """Home page with the first page of posts.

    Args:
        documents: Posts of the first page, newest first.
        next_url: Where the "load more" button fetches the next fragment
            from, or None when every post is already listed.
        context: Preview state.
        config: Site configuration.
    """
    return _render(
        "home.html",
        context,
        config,
        cards_html=Markup(render_cards(documents, config)),
        next_url=next_url,
    )


def render_post(
    document: ContentDocument,
    adjacent: AdjacentPosts,
    context: RenderContext,
    config: SpacetravelingConfig,
) -> str:
    view = build_post_view(document, adjacent, config)
    return _render(
        "post.html",
        context,
        config,
        post=view,
        sections=[(s.heading, Markup(s.html)) for s in view.sections],
        comments=render_widget(config.comments),
    )


def render_not_found(context: RenderContext, config: SpacetravelingConfig) -> str:
    return _render("404.html", context, config)


def render_error(
    status_code: int, message: str, context: RenderContext, config: SpacetravelingConfig
) -> str:
    return _render("error.html", context, config, status_code=status_code, message=message)


def load_more_payload(
    documents: list[ContentDocument],
    next_url: str | None,
    config: SpacetravelingConfig,
) -> dict[str, str | None]:
    """JSON body answering a "load more" click."""
    return {"html": render_cards(documents, config), "next": next_url}
