"""
Shared test fixtures for the askinternet test suite.

Provides: immutable configs, httpx mock-transport clients, fake embedding and
chat collaborators
Dependencies: pytest, pytest-asyncio, httpx
System role: Test infrastructure and fixture management
"""

from typing import Callable

import httpx
import pytest

from askinternet.config import ChatConfig, EmbeddingConfig, PipelineConfig, WebConfig
from askinternet.core.context import RequestContext
from askinternet.errors import EmbeddingError


class FakeEmbedder:
    """Embedding collaborator returning fixed vectors per text.

    Unknown texts get `default`. Every call is recorded in `calls`.
    """

    def __init__(self, vectors=None, default=(1.0, 1.0), fail=False):
        self.vectors = dict(vectors or {})
        self.default = list(default)
        self.fail = fail
        self.calls = []

    async def embed(self, texts, ctx):
        self.calls.append(list(texts))
        ctx.raise_if_cancelled()
        if self.fail:
            raise EmbeddingError("embedding provider unavailable")
        return [list(self.vectors.get(text, self.default)) for text in texts]


class FakeChat:
    """Chat collaborator replaying scripted replies in order."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.histories = []
        self.closed = False

    def prompt(self, history, query):
        asked = history.append("user", query)
        self.histories.append(asked)
        reply = self.replies.pop(0)
        return reply, asked.append("assistant", reply)

    def close(self):
        self.closed = True


@pytest.fixture
def web_config() -> WebConfig:
    """Provide web settings pointing at a fake search host."""
    return WebConfig(
        search_url="http://search.test/",
        query_prefix=":all !general ",
        max_results=10,
        timeout_seconds=5.0,
        user_agent="askinternet-tests/1.0",
    )


@pytest.fixture
def embedding_config() -> EmbeddingConfig:
    """Provide embedding settings with a fake provider URL and key."""
    return EmbeddingConfig(
        provider="openai",
        api_url="http://llm.test/v1",
        api_key="test-key",
        model="text-embedding-3-large",
        local_model="intfloat/multilingual-e5-small",
        max_items=2048,
        chunk_bytes=1500,
        timeout_seconds=5.0,
    )


@pytest.fixture
def chat_config() -> ChatConfig:
    return ChatConfig(
        api_url="http://llm.test/v1",
        api_key="test-key",
        model="gpt-4-turbo",
        temperature=0.3,
        timeout_seconds=5.0,
    )


@pytest.fixture
def pipeline_config(web_config, embedding_config, chat_config) -> PipelineConfig:
    return PipelineConfig(web=web_config, embedding=embedding_config, chat=chat_config, top_n=10)


@pytest.fixture
def ctx() -> RequestContext:
    """Provide a fresh, uncancelled request context."""
    return RequestContext()


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Provide a factory building an AsyncClient served by a request handler."""

    def _factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)

    return _factory


@pytest.fixture
def fake_embedder() -> Callable[..., FakeEmbedder]:
    return FakeEmbedder


@pytest.fixture
def fake_chat() -> Callable[..., FakeChat]:
    return FakeChat
