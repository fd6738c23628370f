"""Content API client: the single data-access boundary of the site.

``ContentClient`` is the shape every page renderer depends on;
``PrismicClient`` implements it against the Prismic REST API v2 via
urllib.  All failures surface as ``CMSFetchError`` (network, HTTP,
timeout, bad JSON) or ``DocumentNotFoundError``.
"""

from __future__ import annotations

import json
import logging
import re
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod

from pydantic import ValidationError

from spacetraveling.cms.models import ApiInfo, ContentDocument, QueryResponse
from spacetraveling.cms.predicates import at, build_query
from spacetraveling.config import CMSSectionConfig
from spacetraveling.errors import CMSFetchError, ConfigError, DocumentNotFoundError

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"(access_token=)[^&]+")


class ContentClient(ABC):
    """Read-only access to CMS documents."""

    @abstractmethod
    def query(
        self,
        predicates: str | list[str],
        *,
        fetch: list[str] | None = None,
        page_size: int = 20,
        orderings: str | None = None,
        ref: str | None = None,
        after: str | None = None,
        page: int | None = None,
    ) -> QueryResponse:
        """Run a search and return one page of results."""

    @abstractmethod
    def fetch_page(self, cursor: str) -> QueryResponse:
        """Follow a ``next_page`` cursor returned by a previous query."""

    def get_by_uid(self, doc_type: str, uid: str, *, ref: str | None = None) -> ContentDocument:
        """Return the document of ``doc_type`` whose uid is ``uid``.

        Raises:
            DocumentNotFoundError: If no such document exists.
        """
        response = self.query(at(f"my.{doc_type}.uid", uid), page_size=1, ref=ref)
        if not response.results:
            raise DocumentNotFoundError(doc_type, uid)
        return response.results[0]

    def get_by_id(self, document_id: str, *, ref: str | None = None) -> ContentDocument:
        """Return the document with the given id."""
        response = self.query(at("document.id", document_id), page_size=1, ref=ref)
        if not response.results:
            raise DocumentNotFoundError("document", document_id)
        return response.results[0]


class PrismicClient(ContentClient):
    """Client for the Prismic REST API v2.

    Every request carries a timeout; expiry is reported as a
    ``CMSFetchError`` like any other transport failure.
    """

    def __init__(self, config: CMSSectionConfig) -> None:
        if not config.is_configured:
            raise ConfigError("cms.api_endpoint is not set (or PRISMIC_API_ENDPOINT)")
        self.config = config
        self.api_url = _normalize_endpoint(config.api_endpoint)

    def _with_token(self, url: str) -> str:
        if not self.config.access_token or "access_token=" in url:
            return url
        sep = "&" if "?" in url else "?"
        token = urllib.parse.quote(self.config.access_token, safe="")
        return f"{url}{sep}access_token={token}"

    def _request(self, url: str) -> dict:
        """GET ``url`` and decode the JSON body."""
        url = self._with_token(url)
        safe_url = _TOKEN_RE.sub(r"\1***", url)
        logger.debug("GET %s", safe_url)

        req = urllib.request.Request(url, headers={"Accept": "application/json"})
        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as exc:
            raise CMSFetchError(
                f"Content API returned HTTP {exc.code}", url=safe_url, status=exc.code
            ) from exc
        except (urllib.error.URLError, TimeoutError, OSError) as exc:
            raise CMSFetchError(f"Content API request failed: {exc}", url=safe_url) from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CMSFetchError("Content API returned invalid JSON", url=safe_url) from exc

    def master_ref(self) -> str:
        """Return the ref of the currently published content."""
        data = self._request(self.api_url)
        try:
            info = ApiInfo.model_validate(data)
        except ValidationError as exc:
            raise CMSFetchError("Unexpected API entry point response", url=self.api_url) from exc
        ref = info.master_ref
        if ref is None:
            raise CMSFetchError("Content API exposes no master ref", url=self.api_url)
        return ref

    def query(
        self,
        predicates: str | list[str],
        *,
        fetch: list[str] | None = None,
        page_size: int = 20,
        orderings: str | None = None,
        ref: str | None = None,
        after: str | None = None,
        page: int | None = None,
    ) -> QueryResponse:
        params: dict[str, str | int] = {
            "ref": ref or self.master_ref(),
            "q": build_query(predicates),
            "pageSize": page_size,
        }
        if orderings:
            params["orderings"] = orderings
        if fetch:
            params["fetch"] = ",".join(fetch)
        if after:
            params["after"] = after
        if page:
            params["page"] = page

        url = f"{self.api_url}/documents/search?{urllib.parse.urlencode(params)}"
        return self._parse_page(self._request(url), url)

    def fetch_page(self, cursor: str) -> QueryResponse:
        """Follow a cursor; it must point at this client's API host.

        Raises:
            CMSFetchError: If the cursor belongs to another host.
        """
        if urllib.parse.urlsplit(cursor).netloc != urllib.parse.urlsplit(self.api_url).netloc:
            raise CMSFetchError(
                "Cursor does not belong to the content API", url=_TOKEN_RE.sub(r"\1***", cursor)
            )
        return self._parse_page(self._request(cursor), cursor)

    @staticmethod
    def _parse_page(data: dict, url: str) -> QueryResponse:
        try:
            return QueryResponse.model_validate(data)
        except ValidationError as exc:
            raise CMSFetchError(
                "Unexpected search response shape", url=_TOKEN_RE.sub(r"\1***", url)
            ) from exc


def _normalize_endpoint(endpoint: str) -> str:
    """Accept ``https://repo.cdn.prismic.io`` or the full ``.../api/v2``."""
    endpoint = endpoint.rstrip("/")
    if endpoint.endswith("/api/v2"):
        return endpoint
    if endpoint.endswith("/api"):
        return endpoint + "/v2"
    return endpoint + "/api/v2"
