# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for provider endpoints, credentials, cache sizing,
prompt persistence and logging. Field names map to upper-case env vars
(OLLAMA_ENDPOINT, OPENAI_API_KEY, API_TIMEOUT, CACHE_MAX_SIZE, ...).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arlo.core.errors import ConfigError
from arlo.llm.models import Provider, ProviderSettings


class ConfigurationError(ConfigError):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDERS ===
    default_ai_provider: str = "ollama"

    ollama_endpoint: str = "http://localhost:11434"
    ollama_default_model: str = "codellama:7b-code"

    openai_endpoint: str = "https://api.openai.com/v1"
    openai_default_model: str = "gpt-4"
    openai_api_key: str = ""

    anthropic_endpoint: str = "https://api.anthropic.com"
    anthropic_default_model: str = "claude-3-sonnet-20240229"
    anthropic_api_key: str = ""

    # Request timeout in milliseconds
    api_timeout: int = 120_000

    # Per-agent LLM assignment, "provider:model" or "provider"
    llm_admin: str = ""
    llm_config: str = ""
    llm_developer: str = ""
    llm_validator: str = ""
    llm_git: str = ""

    # === Cache ===
    cache_max_size: int = 1000
    cache_expiry_ms: int = 60 * 60 * 1000
    cache_prompt_prefix_length: int = 100

    # === Persistence ===
    prompts_dir: Path = Path("data/prompts")
    tasks_dir: Path = Path("data/tasks")

    # === Integration ===
    pr_repository_url: str = "https://github.com/example/repo"
    pr_base_branch: str = "main"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("api_timeout", "cache_max_size", "cache_expiry_ms")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator("cache_prompt_prefix_length")
    @classmethod
    def validate_prefix_length(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("cache_prompt_prefix_length must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        if Provider.parse(self.default_ai_provider) is None:
            raise ConfigurationError(
                f"DEFAULT_AI_PROVIDER {self.default_ai_provider!r} is not one of: "
                f"{', '.join(p.value for p in Provider)}",
                details={"default_ai_provider": self.default_ai_provider},
            )
        return self

    # --- Helpers ---

    @property
    def default_provider(self) -> Provider:
        return Provider.parse(self.default_ai_provider)  # type: ignore[return-value]

    @property
    def api_timeout_s(self) -> float:
        return self.api_timeout / 1000.0

    def provider_settings(self, provider: Provider) -> ProviderSettings:
        """Connection settings for one provider."""
        if provider is Provider.OPENAI:
            return ProviderSettings(
                provider=provider,
                endpoint=self.openai_endpoint,
                default_model=self.openai_default_model,
                api_key=self.openai_api_key or None,
                timeout_s=self.api_timeout_s,
            )
        if provider is Provider.ANTHROPIC:
            return ProviderSettings(
                provider=provider,
                endpoint=self.anthropic_endpoint,
                default_model=self.anthropic_default_model,
                api_key=self.anthropic_api_key or None,
                timeout_s=self.api_timeout_s,
            )
        return ProviderSettings(
            provider=Provider.OLLAMA,
            endpoint=self.ollama_endpoint,
            default_model=self.ollama_default_model,
            timeout_s=self.api_timeout_s,
        )

    def is_set(self, field_name: str) -> bool:
        """Whether a field was explicitly provided (env, .env or kwargs)."""
        return field_name in self.model_fields_set


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or scripted runs).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
