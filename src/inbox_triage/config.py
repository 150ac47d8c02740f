"""Configuration management with pydantic-settings for inbox-triage.

- pydantic-settings for type-safe configuration
- Automatic .env file loading (environment variables take precedence)
- Validation with clear error messages
- SecretStr for API keys
- Frozen config (immutable after load, safe to share across requests)
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("inbox_triage.config")

__all__ = [
    "DEFAULT_CORPUS_PATH",
    "LLM_PROVIDERS",
    "TriageConfig",
    "get_config",
    "reset_config",
]

LLM_PROVIDERS = ("openai", "claude")

# Artifact produced by scripts/generate_embeddings.py
DEFAULT_CORPUS_PATH = Path("data") / "examples_with_embeddings.json"


class TriageConfig(BaseSettings):
    """Configuration for the inbox-triage service.

    Loads from (in order of precedence):
    1. Environment variables (highest priority)
    2. .env file in the working directory
    3. Default values (lowest priority)

    Attributes:
        llm_provider: Generative model backend used for escalation (openai, claude)
        openai_api_key: API key for the OpenAI chat and embedding endpoints
        openai_base_url: Base URL of the OpenAI-compatible API
        openai_model: Chat model used for escalation
        anthropic_api_key: API key for the Claude provider
        anthropic_model: Claude model used for escalation
        llm_temperature: Sampling temperature for the escalation call
        max_output_tokens: Upper bound on tokens generated by the model
        llm_timeout: Timeout in seconds for the model call
        max_input_chars: Messages longer than this are truncated in prompts
        embeddings_enabled: Turn nearest-neighbour retrieval on or off
        embedding_base_url: Base URL of the OpenAI-compatible embedding API
        embedding_model: Embedding model (must match the corpus artifact)
        embedding_timeout: Timeout in seconds for the embedding call
        corpus_path: Path to the precomputed example corpus artifact
        similar_examples_k: Number of few-shot examples per escalation
        max_message_length: Longest accepted inbound message
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json for production, text for development)
        host: Bind address for the HTTP server
        port: Bind port for the HTTP server
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    # Generative model
    llm_provider: str = Field(
        default="openai", description="Escalation backend: openai or claude"
    )

    openai_api_key: SecretStr | None = Field(
        default=None, description="OpenAI API key (chat completions and embeddings)"
    )

    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL for the OpenAI-compatible API",
    )

    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI chat model")

    anthropic_api_key: SecretStr | None = Field(
        default=None, description="Anthropic API key for the claude provider"
    )

    anthropic_model: str = Field(
        default="claude-3-5-haiku-20241022", description="Claude model"
    )

    llm_temperature: float = Field(default=0.3, ge=0.0, le=2.0)

    max_output_tokens: int = Field(default=300, ge=50, le=4000)

    llm_timeout: float = Field(
        default=30.0, gt=0.0, le=300.0, description="Model call timeout in seconds"
    )

    max_input_chars: int = Field(
        default=4000,
        ge=100,
        le=100000,
        description="Message text beyond this length is truncated in the prompt",
    )

    # Embeddings / retrieval
    embeddings_enabled: bool = Field(
        default=True, description="Use nearest-neighbour examples when escalating"
    )

    embedding_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL for the OpenAI-compatible embeddings endpoint",
    )

    embedding_model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model; must match the model used to build the corpus",
    )

    embedding_timeout: float = Field(default=10.0, gt=0.0, le=120.0)

    corpus_path: Path = Field(
        default=DEFAULT_CORPUS_PATH,
        description="Precomputed example corpus (message, classification, embedding)",
    )

    similar_examples_k: int = Field(default=3, ge=0, le=20)

    # Input bounds
    max_message_length: int = Field(default=5000, ge=1, le=100000)

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    log_format: str = Field(
        default="json",
        pattern="^(json|text)$",
        description="Log format: json (production), text (development)",
    )

    # HTTP server
    host: str = Field(default="0.0.0.0", description="HTTP bind address")

    port: int = Field(default=3000, ge=1, le=65535, description="HTTP bind port")

    @field_validator("llm_provider")
    @classmethod
    def validate_llm_provider(cls, v: str) -> str:
        """Normalize and check the provider name."""
        v = v.strip().lower()
        if v not in LLM_PROVIDERS:
            raise ValueError(
                f"llm_provider must be one of: {', '.join(LLM_PROVIDERS)} (got '{v}')"
            )
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


@lru_cache(maxsize=1)
def get_config() -> TriageConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        ValidationError: If configuration values are invalid.
    """
    config = TriageConfig()
    logger.debug(
        "config_loaded",
        extra={
            "llm_provider": config.llm_provider,
            "embeddings_enabled": config.embeddings_enabled,
            "corpus_path": str(config.corpus_path),
        },
    )
    return config


def reset_config() -> None:
    """Clear the cached configuration.

    Warning:
        Only use in test code.
    """
    get_config.cache_clear()
