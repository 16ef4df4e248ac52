"""Embedding provider adapters.

Module split:
    - `client`: OpenAI-compatible `/embeddings` HTTP adapter (default).
    - `local`: in-process `sentence-transformers` adapter.

`build_embedding_client` selects one from `EmbeddingConfig.provider`.
"""

from askinternet.config import EmbeddingConfig
from askinternet.embedding.client import EmbeddingClient, OpenAIEmbeddingClient
from askinternet.embedding.local import LocalEmbeddingClient


def build_embedding_client(config: EmbeddingConfig) -> EmbeddingClient:
    """Return the embedding adapter named by `config.provider`.

    Raises:
        ValueError: For unsupported provider values.
    """
    if config.provider == "openai":
        return OpenAIEmbeddingClient(config)
    if config.provider == "local":
        return LocalEmbeddingClient(config.local_model)
    raise ValueError(f"Unsupported EMBEDDING_PROVIDER: {config.provider}")


__all__ = [
    "EmbeddingClient",
    "LocalEmbeddingClient",
    "OpenAIEmbeddingClient",
    "build_embedding_client",
]
