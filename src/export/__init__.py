"""Static export and render caching."""

from spacetraveling.export.builder import (
    StaticPath,
    build_site,
    generate_static_paths,
    render_post_page,
)
from spacetraveling.export.cache import PageCache

__all__ = [
    "PageCache",
    "StaticPath",
    "build_site",
    "generate_static_paths",
    "render_post_page",
]
