"""
Test suite for environment-driven configuration.
"""

import dataclasses

import pytest

from askinternet.config import ChatConfig, EmbeddingConfig, PipelineConfig, WebConfig, load_key


class TestConfigFromEnvironment:
    def test_defaults_should_match_pipeline_constants(self, monkeypatch) -> None:
        for name in (
            "SEARCH_URL",
            "SEARCH_QUERY_PREFIX",
            "WEB_MAX_RESULTS",
            "WEB_TIMEOUT_SECONDS",
            "EMBEDDING_MAX_ITEMS",
            "EMBEDDING_CHUNK_BYTES",
            "EMBEDDING_MODEL",
            "EMBEDDING_PROVIDER",
            "MODEL_NAME",
            "LLM_TEMPERATURE",
            "CONTEXT_TOP_N",
        ):
            monkeypatch.delenv(name, raising=False)

        config = PipelineConfig.from_env()

        assert config.web.search_url == "http://localhost:8080"
        assert config.web.query_prefix == ":all !general "
        assert config.web.max_results == 10
        assert config.web.timeout_seconds == 30.0
        assert config.embedding.provider == "openai"
        assert config.embedding.model == "text-embedding-3-large"
        assert config.embedding.max_items == 2048
        assert config.embedding.chunk_bytes == 1500
        assert config.chat.model == "gpt-4-turbo"
        assert config.chat.temperature == 0.3
        assert config.top_n == 10

    def test_environment_should_override_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("SEARCH_URL", "http://searx.internal:8888")
        monkeypatch.setenv("WEB_MAX_RESULTS", "5")
        monkeypatch.setenv("EMBEDDING_PROVIDER", " LOCAL ")
        monkeypatch.setenv("LLM_TEMPERATURE", "0.7")
        monkeypatch.setenv("CONTEXT_TOP_N", "3")

        config = PipelineConfig.from_env()

        assert config.web.search_url == "http://searx.internal:8888"
        assert config.web.max_results == 5
        assert config.embedding.provider == "local"
        assert config.chat.temperature == 0.7
        assert config.top_n == 3

    def test_configs_should_be_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            WebConfig().max_results = 99

    def test_api_key_should_not_appear_in_repr(self, monkeypatch) -> None:
        monkeypatch.setenv("LLM_API_KEY", "sk-secret")

        assert "sk-secret" not in repr(ChatConfig())
        assert "sk-secret" not in repr(EmbeddingConfig())
        assert ChatConfig().api_key == "sk-secret"


class TestLoadKey:
    def test_environment_should_win(self, monkeypatch, tmp_path) -> None:
        key_file = tmp_path / "llm.key"
        key_file.write_text("from-file\n")
        monkeypatch.setenv("LLM_API_KEY", "from-env")
        monkeypatch.setenv("LLM_API_KEY_FILE", str(key_file))

        assert load_key() == "from-env"

    def test_key_file_should_be_used_without_environment(self, monkeypatch, tmp_path) -> None:
        key_file = tmp_path / "llm.key"
        key_file.write_text("  from-file\n")
        monkeypatch.delenv("LLM_API_KEY", raising=False)
        monkeypatch.setenv("LLM_API_KEY_FILE", str(key_file))

        assert load_key() == "from-file"

    def test_missing_sources_should_give_empty_key(self, monkeypatch, tmp_path) -> None:
        monkeypatch.delenv("LLM_API_KEY", raising=False)
        monkeypatch.setenv("LLM_API_KEY_FILE", str(tmp_path / "absent.key"))

        assert load_key() == ""
