"""
Test suite for embedding provider adapters.

The OpenAI-compatible adapter is exercised through httpx.MockTransport; the local
adapter runs against a stand-in model so no weights are downloaded.
"""

import json
import sys
import types
from dataclasses import replace

import httpx
import numpy as np
import pytest

from askinternet.embedding import (
    LocalEmbeddingClient,
    OpenAIEmbeddingClient,
    build_embedding_client,
)
from askinternet.embedding import local
from askinternet.errors import EmbeddingError


def embeddings_response(vectors, order=None):
    order = order if order is not None else range(len(vectors))
    return {
        "object": "list",
        "data": [{"object": "embedding", "index": i, "embedding": vectors[i]} for i in order],
    }


class TestOpenAIEmbeddingClient:
    """Test suite for the OpenAI-compatible embeddings adapter."""

    @pytest.mark.asyncio
    async def test_embed_should_post_model_and_inputs(self, embedding_config, mock_client, ctx) -> None:
        # Arrange
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=embeddings_response([[0.1, 0.2], [0.3, 0.4]]))

        client = OpenAIEmbeddingClient(embedding_config, client=mock_client(handler))

        # Act
        vectors = await client.embed(["first", "second"], ctx)

        # Assert
        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        request = seen[0]
        assert str(request.url) == "http://llm.test/v1/embeddings"
        assert request.headers["Authorization"] == "Bearer test-key"
        assert json.loads(request.content) == {
            "model": "text-embedding-3-large",
            "input": ["first", "second"],
        }

    @pytest.mark.asyncio
    async def test_out_of_order_response_should_be_realigned_by_index(
        self, embedding_config, mock_client, ctx
    ) -> None:
        payload = embeddings_response([[1.0], [2.0], [3.0]], order=[2, 0, 1])
        client = OpenAIEmbeddingClient(
            embedding_config, client=mock_client(lambda request: httpx.Response(200, json=payload))
        )

        assert await client.embed(["a", "b", "c"], ctx) == [[1.0], [2.0], [3.0]]

    @pytest.mark.asyncio
    async def test_empty_input_should_not_call_provider(self, embedding_config, mock_client, ctx) -> None:
        def handler(request):
            raise AssertionError("provider must not be called")

        client = OpenAIEmbeddingClient(embedding_config, client=mock_client(handler))

        assert await client.embed([], ctx) == []

    @pytest.mark.asyncio
    async def test_oversized_batch_should_be_rejected_before_sending(
        self, embedding_config, mock_client, ctx
    ) -> None:
        def handler(request):
            raise AssertionError("provider must not be called")

        client = OpenAIEmbeddingClient(replace(embedding_config, max_items=2), client=mock_client(handler))

        with pytest.raises(ValueError, match="exceeds limit"):
            await client.embed(["a", "b", "c"], ctx)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, text="server error"),
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"data": [{"index": 0}]}),
            httpx.Response(200, json=embeddings_response([[1.0]])),
        ],
    )
    async def test_bad_responses_should_raise_embedding_error(
        self, embedding_config, mock_client, ctx, response
    ) -> None:
        # The last case returns one vector for two inputs.
        client = OpenAIEmbeddingClient(embedding_config, client=mock_client(lambda request: response))

        with pytest.raises(EmbeddingError):
            await client.embed(["a", "b"], ctx)

    @pytest.mark.asyncio
    async def test_transport_error_should_raise_embedding_error(self, embedding_config, mock_client, ctx) -> None:
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = OpenAIEmbeddingClient(embedding_config, client=mock_client(handler))

        with pytest.raises(EmbeddingError):
            await client.embed(["a"], ctx)


class StubModel:
    def __init__(self):
        self.encoded = []

    def encode(self, texts, **kwargs):
        self.encoded.append(list(texts))
        return np.array([[float(len(text)), 1.0] for text in texts])


class TestLocalEmbeddingClient:
    @pytest.mark.asyncio
    async def test_embed_should_encode_with_shared_model(self, monkeypatch, ctx) -> None:
        model = StubModel()
        monkeypatch.setattr(local, "get_model", lambda name: model)

        vectors = await LocalEmbeddingClient("stub-model").embed(["ab", "abcd"], ctx)

        assert vectors == [[2.0, 1.0], [4.0, 1.0]]
        assert model.encoded == [["ab", "abcd"]]

    @pytest.mark.asyncio
    async def test_model_load_failure_should_raise_embedding_error(self, monkeypatch, ctx) -> None:
        def missing(name):
            raise OSError("model not found")

        monkeypatch.setattr(local, "get_model", missing)

        with pytest.raises(EmbeddingError):
            await LocalEmbeddingClient("missing-model").embed(["text"], ctx)

    def test_get_model_should_cache_per_name(self, monkeypatch) -> None:
        # Arrange
        loads = []

        class FakeSentenceTransformer:
            def __init__(self, name, device):
                loads.append((name, device))

        fake_module = types.ModuleType("sentence_transformers")
        fake_module.SentenceTransformer = FakeSentenceTransformer
        monkeypatch.setitem(sys.modules, "sentence_transformers", fake_module)
        monkeypatch.setattr(local, "has_enough_vram", lambda: False)
        monkeypatch.setattr(local, "_models", {})
        monkeypatch.setenv("CUDA_VISIBLE_DEVICES", "0")

        # Act
        first = local.get_model("cached-model")
        second = local.get_model("cached-model")

        # Assert
        assert first is second
        assert loads == [("cached-model", "cpu")]


class TestBuildEmbeddingClient:
    def test_openai_provider(self, embedding_config) -> None:
        assert isinstance(build_embedding_client(embedding_config), OpenAIEmbeddingClient)

    def test_local_provider(self, embedding_config) -> None:
        client = build_embedding_client(replace(embedding_config, provider="local"))

        assert isinstance(client, LocalEmbeddingClient)
        assert client.model_name == "intfloat/multilingual-e5-small"

    def test_unknown_provider_should_raise(self, embedding_config) -> None:
        with pytest.raises(ValueError, match="Unsupported"):
            build_embedding_client(replace(embedding_config, provider="carrier-pigeon"))
