"""Values derived from a fetched post: reading time and edit status.

Pure functions over already-fetched data; no I/O.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

from spacetraveling.cms.models import ContentSection, RichTextBlock
from spacetraveling.cms.richtext import as_text

WORDS_PER_MINUTE = 200


def post_text(
    sections: Sequence[ContentSection],
    to_text: Callable[[Sequence[RichTextBlock]], str] = as_text,
) -> str:
    """Headings and body text of every section, in order, space-separated."""
    return " ".join(f"{section.heading} {to_text(section.body)}" for section in sections)


def count_words(text: str) -> int:
    """Number of whitespace-separated tokens; empty text has none."""
    return len(text.split())


def reading_time(
    sections: Sequence[ContentSection],
    to_text: Callable[[Sequence[RichTextBlock]], str] = as_text,
) -> int:
    """Estimated minutes to read ``sections`` at 200 words per minute.

    Raises:
        TypeError: If ``sections`` is None. An empty sequence is fine and
            reads in 0 minutes.
    """
    if sections is None:
        raise TypeError("reading_time() requires a sequence of sections, got None")
    words = count_words(post_text(sections, to_text))
    return math.ceil(words / WORDS_PER_MINUTE)


def is_edited(first_publication_date: str | None, last_publication_date: str | None) -> bool:
    """True when the post changed after it was first published."""
    return first_publication_date != last_publication_date
