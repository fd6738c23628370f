"""Signed preview cookie.

The preview ref is stored in an HS256 JWT so a visitor cannot switch
the site into draft mode by forging a cookie.  Anything that does not
verify (missing, tampered, expired, wrong secret) reads as published
content.
"""

from __future__ import annotations

import logging
import time

import jwt

from spacetraveling.blog.context import RenderContext
from spacetraveling.errors import ConfigError

logger = logging.getLogger(__name__)

_AUDIENCE = "spacetraveling:preview"


def encode_preview_token(ref: str, secret: str, max_age: int = 3600) -> str:
    """Sign ``ref`` into a preview token valid for ``max_age`` seconds."""
    if not secret:
        raise ConfigError("preview.secret is not set (or SPACETRAVELING_PREVIEW_SECRET)")
    iat = int(time.time())
    payload = {
        "ref": ref,
        "iat": iat,
        "exp": iat + max_age,
        "aud": _AUDIENCE,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def decode_preview_token(token: str | None, secret: str) -> RenderContext:
    """Return the render context a preview cookie grants."""
    if not token or not secret:
        return RenderContext.published()
    try:
        payload = jwt.decode(token, secret, algorithms=["HS256"], audience=_AUDIENCE)
    except jwt.InvalidTokenError as exc:
        logger.info("Ignoring invalid preview token: %s", exc)
        return RenderContext.published()
    ref = payload.get("ref")
    if not isinstance(ref, str) or not ref:
        return RenderContext.published()
    return RenderContext.for_preview(ref)
