"""OpenAI-compatible embedding transport.

Architectural role:
    Implements the embedding collaborator used twice per pipeline run: once for
    the chunk batch and once for the query. Any endpoint that speaks the OpenAI
    `/embeddings` schema works (`LLM_API_URL`).

Retry behavior:
    None. Each call is attempted once; failures raise `EmbeddingError`.

Ordering:
    Vectors are returned in input order, using the `index` field of each response
    item when present.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import httpx

from askinternet.config import EmbeddingConfig
from askinternet.core.context import RequestContext
from askinternet.errors import EmbeddingError


logger = logging.getLogger(__name__)


class EmbeddingClient(Protocol):
    async def embed(self, texts: Sequence[str], ctx: RequestContext) -> list[list[float]]:
        ...


class OpenAIEmbeddingClient:
    """Embeds strings through an OpenAI-compatible HTTP API."""

    def __init__(self, config: EmbeddingConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def embed(self, texts: Sequence[str], ctx: RequestContext) -> list[list[float]]:
        """Return one vector per input string, position-aligned.

        Raises:
            ValueError: If the batch exceeds `max_items`; no request is sent.
            EmbeddingError: Transport, HTTP, or response-shape failure.
            PipelineCancelledError: `ctx` was cancelled before the response.
        """
        texts = list(texts)
        if not texts:
            return []
        if len(texts) > self.config.max_items:
            raise ValueError(
                f"embedding batch of {len(texts)} exceeds limit {self.config.max_items}"
            )

        url = self.config.api_url.rstrip("/") + "/embeddings"
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        try:
            response = await ctx.run(
                self._client.post(
                    url,
                    headers=headers,
                    json={"model": self.config.model, "input": texts},
                )
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise EmbeddingError(f"embedding request failed: HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise EmbeddingError(f"embedding request failed: {exc}") from exc

        vectors = self._parse_vectors(response)
        if len(vectors) != len(texts):
            raise EmbeddingError(f"sent {len(texts)} inputs, got {len(vectors)} embeddings")

        logger.debug("Embedded %d inputs with %s", len(texts), self.config.model)
        return vectors

    @staticmethod
    def _parse_vectors(response: httpx.Response) -> list[list[float]]:
        try:
            items = response.json()["data"]
            items = sorted(enumerate(items), key=lambda pair: pair[1].get("index", pair[0]))
            return [[float(value) for value in item["embedding"]] for _, item in items]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise EmbeddingError(f"malformed embedding response: {exc}") from exc
