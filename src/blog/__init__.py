"""Blog front-end: derived post values, pagination, navigation, rendering.

Sits on top of the CMS client: documents fetched from the content API
are turned into reading-time estimates, edit notes, previous/next
links and HTML pages.
"""

from spacetraveling.blog.context import RenderContext
from spacetraveling.blog.derive import WORDS_PER_MINUTE, count_words, is_edited, reading_time
from spacetraveling.blog.neighbors import AdjacentPosts, resolve_adjacent_posts
from spacetraveling.blog.pagination import LoadState, PaginationController, PaginationState

__all__ = [
    "AdjacentPosts",
    "LoadState",
    "PaginationController",
    "PaginationState",
    "RenderContext",
    "WORDS_PER_MINUTE",
    "count_words",
    "is_edited",
    "reading_time",
    "resolve_adjacent_posts",
]
