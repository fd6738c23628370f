"""Date formatting for post cards and headers.

Patterns use the date-fns/Unicode tokens the templates need
(``dd``, ``MMM``, ``MMMM``, ``MM``, ``yyyy``, ``HH``, ``mm``); text in
single quotes is copied verbatim and ``''`` is a literal quote.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

DATE_PATTERN = "dd MMM yyyy"
EDITED_PATTERN = "dd MMM yyyy', às' HH:mm"

_MONTHS_ABBR = {
    "pt-BR": ["jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"],
    "en-US": ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
}
_MONTHS_FULL = {
    "pt-BR": [
        "janeiro", "fevereiro", "março", "abril", "maio", "junho",
        "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
    ],
    "en-US": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
}

_TOKEN_RE = re.compile(r"'(?:[^']|'')*'|''|yyyy|MMMM|MMM|MM|dd|HH|mm")
_COMPACT_OFFSET_RE = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_timestamp(value: str) -> datetime:
    """Parse an API timestamp such as ``2021-03-25T19:25:28+0000``.

    Naive values are taken as UTC.

    Raises:
        ValueError: If ``value`` is not an ISO 8601 date or datetime.
    """
    text = value.strip()
    if "T" in text:
        text = _COMPACT_OFFSET_RE.sub(r"\1:\2", text.replace("Z", "+00:00"))
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_date(
    value: str | datetime | None,
    pattern: str = DATE_PATTERN,
    *,
    locale: str = "pt-BR",
    tz: str = "America/Sao_Paulo",
) -> str:
    """Render ``value`` with ``pattern`` in the given locale and timezone.

    Returns an empty string for a missing value.
    """
    if value is None or value == "":
        return ""
    moment = value if isinstance(value, datetime) else parse_timestamp(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(ZoneInfo(tz))

    abbr = _MONTHS_ABBR.get(locale, _MONTHS_ABBR["en-US"])
    full = _MONTHS_FULL.get(locale, _MONTHS_FULL["en-US"])

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "''":
            return "'"
        if token.startswith("'"):
            return token[1:-1].replace("''", "'")
        return {
            "yyyy": f"{moment.year:04d}",
            "MMMM": full[moment.month - 1],
            "MMM": abbr[moment.month - 1],
            "MM": f"{moment.month:02d}",
            "dd": f"{moment.day:02d}",
            "HH": f"{moment.hour:02d}",
            "mm": f"{moment.minute:02d}",
        }[token]

    return _TOKEN_RE.sub(_replace, pattern)


def display_date(
    value: str | datetime | None,
    pattern: str = DATE_PATTERN,
    *,
    locale: str = "pt-BR",
    tz: str = "America/Sao_Paulo",
) -> str:
    """Like ``format_date``, but an unparseable timestamp renders as ``""``."""
    try:
        return format_date(value, pattern, locale=locale, tz=tz)
    except ValueError:
        logger.warning("Unparseable publication date %r", value)
        return ""
