"""Runtime configuration for the askinternet pipeline.

Architectural role:
    Centralizes search, embedding, and chat settings for the adapters in
    `askinternet.retrieval.web`, `askinternet.embedding`, and `askinternet.llm`.

Resolution:
    Every field is read from the process environment when the config object is
    created. A `.env` file in the working directory is loaded once at import time.
    Config objects are frozen; adapters receive them at construction and never
    mutate them.

Relevant environment variables:
    - `SEARCH_URL`, `SEARCH_QUERY_PREFIX`, `WEB_MAX_RESULTS`,
      `WEB_TIMEOUT_SECONDS`, `WEB_USER_AGENT`
    - `EMBEDDING_PROVIDER`, `EMBEDDING_MODEL`, `EMBEDDING_MAX_ITEMS`,
      `EMBEDDING_CHUNK_BYTES`, `EMBEDDING_TIMEOUT_SECONDS`, `LOCAL_EMBED_MODEL`
    - `LLM_API_URL`, `LLM_API_KEY` (or `LLM_API_KEY_FILE`), `MODEL_NAME`,
      `LLM_TEMPERATURE`, `LLM_TIMEOUT_SECONDS`
    - `CONTEXT_TOP_N`
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env_str(name: str, default: str) -> str:
    return os.getenv(name, default).strip()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def load_key(env_name: str = "LLM_API_KEY", file_env_name: str = "LLM_API_KEY_FILE"):
    """Load an API key from the environment or a key file.

    Resolution order:
        1. Environment variable `env_name`.
        2. Contents of the file named by `file_env_name`.

    Returns:
        Key string, or `""` when neither source is available.
    """
    value = os.getenv(env_name, "").strip()
    if value:
        return value

    path = os.getenv(file_env_name, "").strip()
    if not path or not os.path.exists(path):
        return ""
    with open(path, "r") as f:
        return f.read().strip()


@dataclass(frozen=True)
class WebConfig:
    """Search endpoint and page-fetch settings."""

    search_url: str = field(default_factory=lambda: _env_str("SEARCH_URL", "http://localhost:8080"))
    # SearxNG bang syntax: all languages, general category.
    query_prefix: str = field(default_factory=lambda: os.getenv("SEARCH_QUERY_PREFIX", ":all !general "))
    max_results: int = field(default_factory=lambda: _env_int("WEB_MAX_RESULTS", 10))
    timeout_seconds: float = field(default_factory=lambda: _env_float("WEB_TIMEOUT_SECONDS", 30.0))
    user_agent: str = field(default_factory=lambda: _env_str("WEB_USER_AGENT", "askinternet/1.0"))


@dataclass(frozen=True)
class EmbeddingConfig:
    """Embedding provider and batch settings.

    `max_items` is the provider's per-request input ceiling. `chunk_bytes` bounds
    each input string (1500 bytes is roughly 500 tokens).
    """

    provider: str = field(default_factory=lambda: _env_str("EMBEDDING_PROVIDER", "openai").lower())
    api_url: str = field(default_factory=lambda: _env_str("LLM_API_URL", "https://api.openai.com/v1"))
    api_key: str = field(default_factory=load_key, repr=False)
    model: str = field(default_factory=lambda: _env_str("EMBEDDING_MODEL", "text-embedding-3-large"))
    local_model: str = field(default_factory=lambda: _env_str("LOCAL_EMBED_MODEL", "intfloat/multilingual-e5-small"))
    max_items: int = field(default_factory=lambda: _env_int("EMBEDDING_MAX_ITEMS", 2048))
    chunk_bytes: int = field(default_factory=lambda: _env_int("EMBEDDING_CHUNK_BYTES", 1500))
    timeout_seconds: float = field(default_factory=lambda: _env_float("EMBEDDING_TIMEOUT_SECONDS", 60.0))


@dataclass(frozen=True)
class ChatConfig:
    """Chat-completion provider settings."""

    api_url: str = field(default_factory=lambda: _env_str("LLM_API_URL", "https://api.openai.com/v1"))
    api_key: str = field(default_factory=load_key, repr=False)
    model: str = field(default_factory=lambda: _env_str("MODEL_NAME", "gpt-4-turbo"))
    temperature: float = field(default_factory=lambda: _env_float("LLM_TEMPERATURE", 0.3))
    timeout_seconds: float = field(default_factory=lambda: _env_float("LLM_TIMEOUT_SECONDS", 120.0))


@dataclass(frozen=True)
class PipelineConfig:
    web: WebConfig = field(default_factory=WebConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    top_n: int = field(default_factory=lambda: _env_int("CONTEXT_TOP_N", 10))

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build a config from the current process environment."""
        return cls()
