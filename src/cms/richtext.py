"""Structured rich text → plain text and HTML.

``as_text`` feeds the reading-time estimate, so it must produce a single
space-joined, whitespace-normalised string.  ``as_html`` renders the
block types the content API emits, with inline spans nested properly.
"""

from __future__ import annotations

import html
from collections.abc import Callable, Sequence
from typing import Any

from spacetraveling.cms.models import RichTextBlock, Span

LinkResolver = Callable[[dict[str, Any]], str]

_HEADINGS = {f"heading{n}": f"h{n}" for n in range(1, 7)}
_LIST_TAGS = {"list-item": "ul", "o-list-item": "ol"}


def default_link_resolver(link: dict[str, Any]) -> str:
    """Resolve a link span's data to a URL."""
    if link.get("link_type") == "Document":
        uid = link.get("uid")
        return f"/post/{uid}" if uid else "/"
    return str(link.get("url", ""))


def as_text(blocks: Sequence[RichTextBlock] | None) -> str:
    """Plain text of ``blocks``, joined by single spaces."""
    if not blocks:
        return ""
    return " ".join(" ".join(block.text for block in blocks if block.text).split())


def as_html(
    blocks: Sequence[RichTextBlock] | None,
    link_resolver: LinkResolver = default_link_resolver,
) -> str:
    """Render ``blocks`` as an HTML fragment."""
    if not blocks:
        return ""

    parts: list[str] = []
    open_list: str | None = None
    for block in blocks:
        list_tag = _LIST_TAGS.get(block.type)
        if list_tag != open_list:
            if open_list:
                parts.append(f"</{open_list}>")
            if list_tag:
                parts.append(f"<{list_tag}>")
            open_list = list_tag
        parts.append(_render_block(block, link_resolver))
    if open_list:
        parts.append(f"</{open_list}>")
    return "".join(parts)


def _render_block(block: RichTextBlock, link_resolver: LinkResolver) -> str:
    if block.type == "image":
        src = html.escape(block.url)
        alt = html.escape(block.alt)
        return f'<p class="block-img"><img src="{src}" alt="{alt}" /></p>'
    if block.type == "embed":
        return _render_embed(block.oembed)

    inner = _serialize_spans(block.text, block.spans, link_resolver)
    if block.type in _HEADINGS:
        tag = _HEADINGS[block.type]
        return f"<{tag}>{inner}</{tag}>"
    if block.type == "preformatted":
        return f"<pre>{inner}</pre>"
    if block.type in _LIST_TAGS:
        return f"<li>{inner}</li>"
    return f"<p>{inner}</p>"


def _render_embed(oembed: dict[str, Any]) -> str:
    attrs = (
        f'data-oembed="{html.escape(str(oembed.get("embed_url", "")))}" '
        f'data-oembed-type="{html.escape(str(oembed.get("type", "")))}" '
        f'data-oembed-provider="{html.escape(str(oembed.get("provider_name", "")))}"'
    )
    # oembed markup comes from the CMS provider and is trusted as-is
    return f"<div {attrs}>{oembed.get('html', '')}</div>"


def _escape(text: str) -> str:
    return html.escape(text).replace("\n", "<br />")


def _open_tag(span: Span, link_resolver: LinkResolver) -> str:
    if span.type == "strong":
        return "<strong>"
    if span.type == "em":
        return "<em>"
    if span.type == "hyperlink":
        href = html.escape(link_resolver(span.data))
        target = span.data.get("target")
        if target:
            return f'<a href="{href}" target="{html.escape(str(target))}" rel="noopener">'
        return f'<a href="{href}">'
    if span.type == "label":
        label = html.escape(str(span.data.get("label", "")))
        return f'<span class="{label}">'
    return "<span>"


def _close_tag(span: Span) -> str:
    return {"strong": "</strong>", "em": "</em>", "hyperlink": "</a>"}.get(
        span.type, "</span>"
    )


def _serialize_spans(text: str, spans: Sequence[Span], link_resolver: LinkResolver) -> str:
    """Wrap ``text`` in its spans, keeping the tags properly nested.

    The text is cut at every span boundary; for each segment the set of
    covering spans is computed, and only the tags that differ from the
    previous segment are closed and reopened.
    """
    length = len(text)
    valid = [
        s for s in spans if 0 <= s.start < s.end and s.start < length
    ]
    if not valid:
        return _escape(text)

    bounds = sorted({0, length, *(s.start for s in valid), *(min(s.end, length) for s in valid)})
    out: list[str] = []
    stack: list[Span] = []
    for start, end in zip(bounds, bounds[1:]):
        active = sorted(
            (s for s in valid if s.start <= start and s.end >= end),
            key=lambda s: (s.start, -s.end),
        )
        keep = 0
        while keep < len(stack) and keep < len(active) and stack[keep] is active[keep]:
            keep += 1
        out.extend(_close_tag(s) for s in reversed(stack[keep:]))
        out.extend(_open_tag(s, link_resolver) for s in active[keep:])
        stack = active
        out.append(_escape(text[start:end]))
    out.extend(_close_tag(s) for s in reversed(stack))
    return "".join(out)
