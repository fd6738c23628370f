"""Query predicate builders for the content search API.

Predicates are plain strings in the API's query language, e.g.
``[at(document.type, "post")]``.  A query is the predicates wrapped
in one more pair of brackets.
"""

from __future__ import annotations

import json


def _value(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_value(v) for v in value) + "]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(str(value))


def at(path: str, value: object) -> str:
    """Match documents whose ``path`` equals ``value``."""
    return f"[at({path}, {_value(value)})]"


def not_(path: str, value: object) -> str:
    """Match documents whose ``path`` does not equal ``value``."""
    return f"[not({path}, {_value(value)})]"


def any_(path: str, values: list[object]) -> str:
    """Match documents whose ``path`` equals any of ``values``."""
    return f"[any({path}, {_value(list(values))})]"


def fulltext(path: str, text: str) -> str:
    """Match documents containing ``text`` in ``path``."""
    return f"[fulltext({path}, {_value(text)})]"


def build_query(predicates: str | list[str]) -> str:
    """Combine predicates into a single ``q`` parameter value."""
    if isinstance(predicates, str):
        predicates = [predicates]
    return "[" + "".join(predicates) + "]"
