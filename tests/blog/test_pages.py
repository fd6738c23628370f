"""Tests for the page renderers."""

from __future__ import annotations

import pytest

from spacetraveling.blog.context import RenderContext
from spacetraveling.blog.neighbors import AdjacentPosts
from spacetraveling.blog.pages import (
    build_post_view,
    load_more_payload,
    render_home,
    render_not_found,
    render_post,
    to_card,
)


def _long_post(post_factory):
    return post_factory(
        4,
        first="2021-03-25T19:25:28+0000",
        last="2021-03-26T10:05:00+0000",
        sections=[
            {
                "heading": "Proin et varius",
                "body": [
                    {
                        "type": "paragraph",
                        "text": "Nullam dolor sapien " * 100,
                        "spans": [{"start": 0, "end": 6, "type": "strong"}],
                    }
                ],
            },
            {"heading": "Cras laoreet", "body": [{"type": "paragraph", "text": "Fim.", "spans": []}]},
        ],
    )


class TestPostView:
    def test_derived_values(self, post_factory, config):
        view = build_post_view(_long_post(post_factory), AdjacentPosts(), config)
        assert view.reading_minutes == 2  # 3 + 300 + 2 + 1 words
        assert view.edited is True
        assert view.edited_at == "26 mar 2021, às 10:05"
        assert view.published == "25 mar 2021"
        assert [s.heading for s in view.sections] == ["Proin et varius", "Cras laoreet"]
        assert view.sections[0].html.startswith("<p><strong>Nullam</strong>")

    def test_unedited_post_has_no_edit_note(self, post_factory, config):
        view = build_post_view(post_factory(1), AdjacentPosts(), config)
        assert view.edited is False
        assert view.edited_at == ""

    def test_neighbors_become_cards(self, post_factory, config):
        adjacent = AdjacentPosts(previous=post_factory(3), next=post_factory(5))
        view = build_post_view(post_factory(4), adjacent, config)
        assert view.previous.route == "/post/post-3"
        assert view.next.title == "Post 5"

    def test_bad_date_degrades_to_empty(self, post_factory, config):
        view = build_post_view(post_factory(1, first="not a date"), AdjacentPosts(), config)
        assert view.published == ""


class TestRenderPost:
    def test_contains_post_parts(self, post_factory, config):
        adjacent = AdjacentPosts(previous=post_factory(3), next=post_factory(5))
        html = render_post(_long_post(post_factory), adjacent, RenderContext.published(), config)

        assert "<title>Post 4 | spacetraveling</title>" in html
        assert 'src="https://images.example/4.png"' in html
        assert "2 min" in html
        assert "* editado em 26 mar 2021, às 10:05." in html
        assert "<h2>Proin et varius</h2>" in html
        assert "<strong>Nullam</strong>" in html
        assert 'href="/post/post-3"' in html and "Post anterior" in html
        assert 'href="/post/post-5"' in html and "Próximo post" in html
        assert "utteranc.es/client.js" in html

    def test_exit_preview_link_only_in_preview(self, post_factory, config):
        doc = post_factory(1)
        live = render_post(doc, AdjacentPosts(), RenderContext.published(), config)
        preview = render_post(doc, AdjacentPosts(), RenderContext.for_preview("r"), config)
        assert "/api/exit-preview" not in live
        assert "/api/exit-preview" in preview

    def test_title_is_escaped(self, post_factory, config):
        doc = post_factory(1, title="<b>bold</b>")
        html = render_post(doc, AdjacentPosts(), RenderContext.published(), config)
        assert "&lt;b&gt;bold&lt;/b&gt;" in html

    def test_missing_content_renders_empty_post(self, config):
        from spacetraveling.cms.models import ContentDocument

        doc = ContentDocument.model_validate(
            {"id": "x", "uid": "x", "data": {"title": "Bare", "content": None, "banner": None}}
        )
        html = render_post(doc, AdjacentPosts(), RenderContext.published(), config)
        assert "0 min" in html
        assert 'class="banner"' not in html


class TestRenderHome:
    def test_cards_and_load_more(self, seven_posts, config):
        html = render_home(seven_posts[:5], "/api/posts/2.json", RenderContext.published(), config)
        assert html.count('class="post-card"') == 5
        assert "Carregar mais posts" in html
        assert 'data-next="/api/posts/2.json"' in html
        assert "01 jan 2021" in html

    def test_no_button_without_next(self, seven_posts, config):
        html = render_home(seven_posts, None, RenderContext.published(), config)
        assert "Carregar mais posts" not in html

    def test_post_without_uid_links_to_404(self, post_factory, config):
        card = to_card(post_factory(1, uid=""), config)
        assert card.route == "/post/404"


class TestFragments:
    @pytest.mark.parametrize("next_url", [None, "/api/posts/3.json"])
    def test_payload(self, seven_posts, config, next_url):
        payload = load_more_payload(seven_posts[5:], next_url, config)
        assert payload["next"] == next_url
        assert payload["html"].count('class="post-card"') == 2


def test_not_found_page(config):
    html = render_not_found(RenderContext.published(), config)
    assert "404" in html
