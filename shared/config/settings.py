"""
Centralized configuration management for DevBytes.
Uses Pydantic Settings for validation and type safety.
"""

from functools import lru_cache
from urllib.parse import urlparse

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppBaseSettings(BaseSettings):
    """Base settings with shared configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class NewsApiSettings(AppBaseSettings):
    """GNews search API configuration settings."""

    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GNEWS_API_KEY", "VITE_GNEWS_API_KEY"),
    )
    base_url: str = Field(
        default="https://gnews.io/api/v4",
        validation_alias="GNEWS_BASE_URL",
    )
    language: str = Field(
        default="en",
        validation_alias="NEWS_LANGUAGE",
    )
    country: str = Field(
        default="us",
        validation_alias="NEWS_COUNTRY",
    )
    cache_ttl_seconds: float = Field(
        default=5 * 60,
        validation_alias="NEWS_CACHE_TTL_SECONDS",
    )
    cooldown_seconds: float = Field(
        default=10,
        validation_alias="NEWS_COOLDOWN_SECONDS",
    )
    throttle_capacity: int = Field(
        default=1024,
        ge=1,
        validation_alias="NEWS_THROTTLE_CAPACITY",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        """Validate that the news endpoint is an HTTP(S) URL."""
        parsed = urlparse(v)
        if parsed.scheme not in ["http", "https"] or not parsed.netloc:
            raise ValueError(f"GNews base URL must use HTTP or HTTPS: {v}")
        return v.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


class LLMSettings(AppBaseSettings):
    """Chat-completion API configuration settings (Mistral, OpenAI-compatible)."""

    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("MISTRAL_API_KEY", "VITE_MISTRAL_API_KEY"),
    )
    base_url: str = Field(
        default="https://api.mistral.ai/v1",
        validation_alias="MISTRAL_BASE_URL",
    )
    model: str = Field(
        default="mistral-tiny",
        validation_alias="LLM_MODEL",
    )
    summary_max_tokens: int = Field(
        default=200,
        validation_alias="LLM_SUMMARY_MAX_TOKENS",
    )
    summary_temperature: float = Field(
        default=0.3,
        validation_alias="LLM_SUMMARY_TEMPERATURE",
    )
    chat_max_tokens: int = Field(
        default=500,
        validation_alias="LLM_CHAT_MAX_TOKENS",
    )
    chat_temperature: float = Field(
        default=0.7,
        validation_alias="LLM_CHAT_TEMPERATURE",
    )
    max_retries: int = Field(
        default=1,
        ge=0,
        validation_alias="LLM_MAX_RETRIES",
    )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


class StorageSettings(AppBaseSettings):
    """Storage backend configuration settings."""

    backend: str = Field(
        default="memory",
        validation_alias="STORAGE_BACKEND",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias="REDIS_URL",
    )
    redis_key_prefix: str = Field(
        default="devbytes",
        validation_alias="REDIS_KEY_PREFIX",
    )
    database_url: str = Field(
        default="sqlite:///./devbytes.db",
        validation_alias="DATABASE_URL",
    )

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v):
        """Only the known storage backends are accepted."""
        v = v.strip().lower()
        if v not in ["memory", "redis", "sql"]:
            raise ValueError(f"Unknown storage backend: {v}")
        return v


class ServiceSettings(AppBaseSettings):
    """Service-specific configuration settings."""

    page_size: int = Field(
        default=20,
        validation_alias="PAGE_SIZE",
    )
    search_debounce_ms: int = Field(
        default=500,
        validation_alias="SEARCH_DEBOUNCE_MS",
    )
    max_retries: int = Field(
        default=3,
        validation_alias="MAX_RETRIES",
    )
    retry_delay: float = Field(
        default=1.0,
        validation_alias="RETRY_DELAY",
    )
    retry_backoff_factor: float = Field(
        default=2.0,
        validation_alias="RETRY_BACKOFF_FACTOR",
    )
    http_timeout: float = Field(
        default=30.0,
        validation_alias="HTTP_TIMEOUT",
    )
    redis_timeout: float = Field(
        default=5.0,
        validation_alias="REDIS_TIMEOUT",
    )


class LoggingSettings(AppBaseSettings):
    """Logging configuration settings."""

    level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
    )
    include_correlation_id: bool = Field(
        default=True,
        validation_alias="LOG_INCLUDE_CORRELATION_ID",
    )
    json_logs: bool = Field(
        default=False,
        validation_alias="JSON_LOGS",
    )


class Settings(AppBaseSettings):
    """Main settings class that combines all configuration sections."""

    news: NewsApiSettings = Field(default_factory=NewsApiSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    service_name: str = Field(
        default="devbytes",
        validation_alias="SERVICE_NAME",
    )
    environment: str = Field(
        default="development",
        validation_alias="ENVIRONMENT",
    )
    version: str = Field(
        default="1.0.0",
        validation_alias="SERVICE_VERSION",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

