"""Single-page fetch and readable-text extraction.

Architectural role:
    Turns one search-result URL into `ExtractedContent`. The fan-out coordinator in
    `askinternet.retrieval.web.search` runs one `extract` call per result
    concurrently and treats every error raised here as local to that URL.

Retrieval strategy:
    1. Validate the URL (absolute http/https).
    2. Fetch once through the shared `httpx.AsyncClient` (no retries).
    3. Extract plain text via `trafilatura` in a worker thread.

Failure model:
    - `InvalidURLError`: malformed URL, no network call is made.
    - `FetchError`: transport failure, timeout, or HTTP status >= 400.
    - `ExtractionError`: the extractor raised.
    - `PipelineCancelledError`: the request context was cancelled before or
      during the fetch/extraction.
    An extractor that finds no main content is not an error; the result simply
    carries empty text.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable
from urllib.parse import urlparse

import httpx
import trafilatura

from askinternet.config import WebConfig
from askinternet.core.context import RequestContext
from askinternet.errors import ExtractionError, FetchError, InvalidURLError
from askinternet.types import ExtractedContent


logger = logging.getLogger(__name__)

TextExtractor = Callable[[bytes, str], str]


def trafilatura_extract(body: bytes, url: str) -> str:
    """Extract the main readable text of an HTML document.

    Args:
        body: Raw response body. `trafilatura` detects the encoding itself.
        url: Originating URL, used by `trafilatura` for metadata heuristics.

    Returns:
        Plain text, or `""` when no main content was found.
    """
    extracted = trafilatura.extract(
        body,
        url=url,
        include_comments=False,
        include_tables=False,
        include_images=False,
        include_links=False,
        output_format="txt",
    )
    return extracted or ""


def build_http_client(config: WebConfig) -> httpx.AsyncClient:
    """Build the shared page-fetch client from immutable web settings."""
    return httpx.AsyncClient(
        timeout=config.timeout_seconds,
        follow_redirects=True,
        headers={
            "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
            "User-Agent": config.user_agent,
        },
    )


def is_absolute_http_url(url: str) -> bool:
    """Return whether `url` is an absolute http(s) URI that httpx can request."""
    try:
        parsed = urlparse(url)
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL):
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


class ContentExtractor:
    """Fetches pages and extracts their readable text.

    The HTTP client is created once from `WebConfig` (or injected) and shared by
    every concurrent `extract` call.
    """

    def __init__(
        self,
        config: WebConfig,
        client: httpx.AsyncClient | None = None,
        extract_text: TextExtractor = trafilatura_extract,
    ) -> None:
        self.config = config
        self._client = client or build_http_client(config)
        self._extract_text = extract_text

    async def aclose(self) -> None:
        await self._client.aclose()

    async def extract(self, url: str, ctx: RequestContext) -> ExtractedContent:
        """Fetch `url` and return its extracted text.

        Args:
            url: Page URL from a search hit.
            ctx: Request context, checked before any work and raced against I/O.

        Returns:
            `ExtractedContent` whose `length` is the UTF-8 byte length of the text.
        """
        ctx.raise_if_cancelled()

        if not is_absolute_http_url(url):
            raise InvalidURLError(url)

        body = await self._fetch(url, ctx)
        text = await ctx.run(asyncio.to_thread(self._run_extractor, body, url))

        logger.debug("Extracted %d chars from %s", len(text), url)
        return ExtractedContent.from_text(url, text)

    async def _fetch(self, url: str, ctx: RequestContext) -> bytes:
        try:
            response = await ctx.run(self._client.get(url))
            response.raise_for_status()
        except httpx.InvalidURL as exc:
            raise InvalidURLError(url) from exc
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
        return response.content

    def _run_extractor(self, body: bytes, url: str) -> str:
        try:
            return self._extract_text(body, url) or ""
        except Exception as exc:
            raise ExtractionError(url, str(exc) or type(exc).__name__) from exc
