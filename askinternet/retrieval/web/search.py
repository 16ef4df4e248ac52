"""Web search and concurrent extraction fan-out.

Architectural role:
    Issues one search request, extracts every returned page concurrently, and hands
    the successful extractions to the embedding stage in
    `askinternet.core.engine`.

Retrieval strategy:
    1. SearxNG JSON API call (`format=json`) with a fixed result ceiling.
    2. One extraction task per hit; fan-out degree equals the hit count.
    3. Join barrier: every task finishes before aggregation.
    4. Keep successful, non-empty extractions only.
    5. Re-check the request context; a cancelled run returns nothing.

Failure model:
    Two distinct policies apply:
    - Per-URL errors (`AskInternetError` raised by the extractor) are swallowed
      and only debug-logged. The run degrades to fewer sources.
    - Search transport/decode errors and cancellation observed after the join
      abort the run, even when every extraction succeeded.

Ordering:
    Result order follows the search hits, but callers must not rely on it; the
    ranker is the only ordering guarantee downstream.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import httpx

from askinternet.config import WebConfig
from askinternet.core.context import RequestContext
from askinternet.errors import AskInternetError, DecodeError, SearchError
from askinternet.retrieval.web.fetcher import ContentExtractor
from askinternet.types import ExtractedContent, SearchHit


logger = logging.getLogger(__name__)


class SearchClient(Protocol):
    async def search(self, query: str, ctx: RequestContext) -> list[SearchHit]:
        ...


class Extractor(Protocol):
    async def extract(self, url: str, ctx: RequestContext) -> ExtractedContent:
        ...


class SearxngSearchClient:
    """Search collaborator backed by a SearxNG instance's JSON API."""

    def __init__(self, config: WebConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client or httpx.AsyncClient(
            timeout=config.timeout_seconds,
            headers={"Accept": "application/json", "User-Agent": config.user_agent},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search(self, query: str, ctx: RequestContext) -> list[SearchHit]:
        """Search for `query` and return at most `max_results` hits.

        Raises:
            SearchError: Transport failure or HTTP error status.
            DecodeError: Response body is not the expected JSON document.

        Edge cases:
            A blank query returns `[]` without a network call.
        """
        if not query or not query.strip():
            return []

        params = {"q": self.config.query_prefix + query, "format": "json"}
        try:
            response = await ctx.run(self._client.get(self.config.search_url, params=params))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SearchError(f"search failed: HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise SearchError(f"search failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise DecodeError(f"search response is not JSON: {exc}") from exc

        hits = self._parse_results(data)
        logger.info("Search returned %d hits for %r", len(hits), query)
        return hits[: self.config.max_results]

    @staticmethod
    def _parse_results(data: Any) -> list[SearchHit]:
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise DecodeError("search response has no 'results' list")

        hits = []
        for item in data["results"]:
            if not isinstance(item, dict):
                continue
            hits.append(
                SearchHit(
                    url=str(item.get("url", "")),
                    title=str(item.get("title", "")),
                    snippet=str(item.get("snippet") or item.get("content") or ""),
                    site_name=str(item.get("site_name", "")),
                    icon_url=str(item.get("icon_url", "")),
                )
            )
        return hits


class WebRetriever:
    """Search fan-out coordinator."""

    def __init__(self, searcher: SearchClient, extractor: Extractor, config: WebConfig) -> None:
        self.searcher = searcher
        self.extractor = extractor
        self.config = config

    @classmethod
    def from_config(cls, config: WebConfig) -> "WebRetriever":
        return cls(SearxngSearchClient(config), ContentExtractor(config), config)

    async def aclose(self) -> None:
        for collaborator in (self.searcher, self.extractor):
            close = getattr(collaborator, "aclose", None)
            if close is not None:
                await close()

    def retrieve(self, query: str) -> list[ExtractedContent]:
        """Synchronous wrapper for `search_and_extract` with a fresh context."""
        return asyncio.run(self.search_and_extract(query, RequestContext()))

    async def search_and_extract(self, query: str, ctx: RequestContext) -> list[ExtractedContent]:
        """Search for `query` and extract every hit concurrently.

        Args:
            query: Search term.
            ctx: Request context shared with every extraction task.

        Returns:
            Successful, non-empty extractions.

        Raises:
            SearchError / DecodeError: The search itself failed.
            PipelineCancelledError: `ctx` was cancelled by the time all tasks
                finished. Collected content is discarded.
        """
        hits = await self.searcher.search(query, ctx)
        hits = hits[: self.config.max_results]

        tasks = [self._extract_quietly(hit.url, ctx) for hit in hits]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        contents: list[ExtractedContent] = []
        for item in results:
            if isinstance(item, BaseException):
                raise item
            if item is not None and item.text:
                contents.append(item)

        ctx.raise_if_cancelled()

        logger.info("Extracted %d of %d search results", len(contents), len(hits))
        return contents

    async def _extract_quietly(self, url: str, ctx: RequestContext) -> ExtractedContent | None:
        try:
            return await self.extractor.extract(url, ctx)
        except AskInternetError as exc:
            logger.debug("Skipping %s: %s", url, exc)
            return None
