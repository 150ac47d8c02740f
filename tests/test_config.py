"""Unit tests for configuration with pydantic-settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from inbox_triage.config import DEFAULT_CORPUS_PATH, TriageConfig, get_config, reset_config


class TestTriageConfig:
    """TriageConfig defaults, env overrides and validation."""

    def test_defaults(self):
        config = TriageConfig(_env_file=None)

        assert config.llm_provider == "openai"
        assert config.openai_model == "gpt-4o-mini"
        assert config.openai_api_key is None
        assert config.llm_temperature == 0.3
        assert config.embedding_model == "text-embedding-3-small"
        assert config.embeddings_enabled is True
        assert config.similar_examples_k == 3
        assert config.max_message_length == 5000
        assert config.corpus_path == DEFAULT_CORPUS_PATH
        assert config.log_level == "INFO"
        assert config.log_format == "json"
        assert config.port == 3000

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "Claude")
        monkeypatch.setenv("SIMILAR_EXAMPLES_K", "5")
        monkeypatch.setenv("EMBEDDINGS_ENABLED", "false")
        monkeypatch.setenv("CORPUS_PATH", "/tmp/corpus.json")

        config = TriageConfig(_env_file=None)

        assert config.llm_provider == "claude"
        assert config.similar_examples_k == 5
        assert config.embeddings_enabled is False
        assert config.corpus_path == Path("/tmp/corpus.json")

    def test_api_key_is_secret(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")

        config = TriageConfig(_env_file=None)

        assert config.openai_api_key.get_secret_value() == "sk-secret"
        assert "sk-secret" not in repr(config)

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("OPENAI_MODEL=gpt-4o\nPORT=8080\n", encoding="utf-8")

        config = TriageConfig(_env_file=env_file)

        assert config.openai_model == "gpt-4o"
        assert config.port == 8080

    def test_log_level_uppercased(self):
        assert TriageConfig(_env_file=None, log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"llm_provider": "ollama"},
            {"similar_examples_k": -1},
            {"similar_examples_k": 21},
            {"llm_temperature": 3.0},
            {"log_format": "xml"},
            {"log_level": "VERBOSE"},
            {"port": 0},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            TriageConfig(_env_file=None, **overrides)

    def test_frozen(self):
        config = TriageConfig(_env_file=None)
        with pytest.raises(ValidationError):
            config.port = 9000


class TestGetConfig:
    def test_singleton(self):
        assert get_config() is get_config()

    def test_reset(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("PORT", "4000")
        reset_config()

        second = get_config()

        assert second is not first
        assert second.port == 4000
