"""Application settings loaded from environment variables and .env.

Hey future me - nested settings use "__" as delimiter, so PROVIDER__NAME=deezer sets
settings.provider.name and RETRY__MAX_RETRIES=5 sets settings.retry.max_retries.
get_settings() is cached - tests that need different values build Settings() directly
and pass it to create_app().
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseModel):
    """Upstream catalog provider selection."""

    name: Literal["itunes", "deezer", "spotify"] = Field(
        default="itunes", description="Which catalog to proxy"
    )
    default_country: str = Field(default="us", min_length=2, max_length=2)
    user_agent: str = "Riffus-Music-App/1.0"
    base_url: str | None = Field(
        default=None, description="Override the provider API base URL"
    )
    spotify_client_id: str = ""
    spotify_client_secret: str = ""


class RetrySettings(BaseModel):
    """Resilient fetch client configuration."""

    max_retries: int = Field(default=3, ge=1, le=10)
    retry_delay_ms: int = Field(default=1000, ge=0)
    timeout_ms: int = Field(default=10000, gt=0)


class CacheSettings(BaseModel):
    """Local track cache configuration."""

    backend: Literal["none", "memory", "database"] = "none"
    ttl_seconds: int = Field(default=3600, gt=0)


class DatabaseSettings(BaseModel):
    """Database configuration (only used by the database cache backend)."""

    url: str = "sqlite+aiosqlite:///./riffus.db"
    echo: bool = False
    pool_pre_ping: bool = True


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = "riffus"
    environment: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"
    log_json: bool = False
    host: str = "0.0.0.0"  # nosec B104 - container default
    port: int = 4000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    @property
    def is_development(self) -> bool:
        """Error details are only exposed to clients in development."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
