"""utterances comment widget: the script tag and its mount point."""

from __future__ import annotations

from markupsafe import Markup, escape

from spacetraveling.config import CommentsSectionConfig

UTTERANCES_SCRIPT = "https://utteranc.es/client.js"
MOUNT_ID = "inject-comments-for-uterances"


def widget_attributes(config: CommentsSectionConfig) -> dict[str, str]:
    """Attributes of the injected ``<script>`` tag."""
    return {
        "src": UTTERANCES_SCRIPT,
        "repo": config.repo,
        "issue-term": config.issue_term,
        "theme": config.theme,
        "crossorigin": "anonymous",
        "async": "true",
    }


def render_widget(config: CommentsSectionConfig) -> Markup:
    """Markup for the comment section, or nothing when no repo is set."""
    if not config.is_configured:
        return Markup("")
    attrs = " ".join(f'{name}="{escape(value)}"' for name, value in widget_attributes(config).items())
    return Markup(f'<div id="{MOUNT_ID}"><script {attrs}></script></div>')
