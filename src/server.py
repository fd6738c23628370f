"""Live server: on-demand rendering, preview mode and "load more".

Pages are rendered on first request, including posts that did not
exist at build time, and cached for ``site.revalidate_seconds``.
Preview requests read draft content and always bypass the cache.
"""

from __future__ import annotations

import logging
import urllib.parse

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from spacetraveling.blog.context import RenderContext
from spacetraveling.blog.pages import load_more_payload, render_error, render_home, render_not_found
from spacetraveling.cms.client import ContentClient, PrismicClient
from spacetraveling.config import SpacetravelingConfig
from spacetraveling.errors import CMSFetchError, ConfigError, DocumentNotFoundError
from spacetraveling.export.builder import home_query, render_post_page
from spacetraveling.export.cache import PageCache
from spacetraveling.preview import decode_preview_token, encode_preview_token

logger = logging.getLogger(__name__)


def load_more_url(cursor: str | None) -> str | None:
    if cursor is None:
        return None
    return "/api/posts?" + urllib.parse.urlencode({"cursor": cursor})


def create_app(
    config: SpacetravelingConfig,
    client: ContentClient | None = None,
    cache: PageCache | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Site configuration.
        client: Content client; a ``PrismicClient`` built from
            ``config.cms`` when omitted.
        cache: Rendered page cache; one with ``site.revalidate_seconds``
            time to live when omitted.
    """
    if client is None:
        client = PrismicClient(config.cms)
    if cache is None:
        cache = PageCache(config.site.revalidate_seconds)

    app = FastAPI(title=config.site.title, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.cache = cache

    def render_context(request: Request) -> RenderContext:
        token = request.cookies.get(config.preview.cookie_name)
        return decode_preview_token(token, config.preview.secret)

    @app.exception_handler(CMSFetchError)
    async def cms_fetch_error_handler(request: Request, exc: CMSFetchError):
        logger.error(
            "Content API failure on %s %s: %s (url=%s status=%s)",
            request.method,
            request.url.path,
            exc,
            exc.url,
            exc.status,
        )
        if request.url.path.startswith("/api/"):
            return JSONResponse(status_code=502, content={"error": "content_unavailable"})
        html = render_error(
            502, "Não foi possível carregar o conteúdo.", render_context(request), config
        )
        return HTMLResponse(html, status_code=502)

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError):
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "misconfigured"})

    @app.exception_handler(DocumentNotFoundError)
    async def not_found_handler(request: Request, exc: DocumentNotFoundError):
        logger.info("Not found: %s", exc)
        return HTMLResponse(render_not_found(render_context(request), config), status_code=404)

    def cached_page(request: Request, render) -> HTMLResponse:
        context = render_context(request)
        path = request.url.path
        if not context.preview:
            html = cache.get(path)
            if html is not None:
                return HTMLResponse(html)
        html = render(context)
        if not context.preview:
            cache.put(path, html)
        return HTMLResponse(html)

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request) -> HTMLResponse:
        def render(context: RenderContext) -> str:
            first = home_query(client, config, context)
            return render_home(first.results, load_more_url(first.next_page), context, config)

        return cached_page(request, render)

    @app.get("/post/{slug}", response_class=HTMLResponse)
    def post(request: Request, slug: str) -> HTMLResponse:
        return cached_page(
            request, lambda context: render_post_page(client, slug, context, config)
        )

    @app.get("/api/posts")
    def more_posts(cursor: str) -> JSONResponse:
        page = client.fetch_page(cursor)
        return JSONResponse(
            load_more_payload(page.results, load_more_url(page.next_page), config)
        )

    @app.get("/api/preview")
    def enter_preview(token: str, documentId: str | None = None) -> RedirectResponse:  # noqa: N803
        location = "/"
        if documentId:
            try:
                location = client.get_by_id(documentId, ref=token).route
            except DocumentNotFoundError:
                logger.info("Preview document %s not found, redirecting home", documentId)
        response = RedirectResponse(location, status_code=307)
        response.set_cookie(
            config.preview.cookie_name,
            encode_preview_token(token, config.preview.secret, config.preview.max_age),
            max_age=config.preview.max_age,
            httponly=True,
            samesite="lax",
        )
        return response

    @app.get("/api/exit-preview")
    def exit_preview() -> RedirectResponse:
        response = RedirectResponse("/", status_code=307)
        response.delete_cookie(config.preview.cookie_name)
        return response

    return app
