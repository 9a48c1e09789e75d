"""Application configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults for development.
"""

from functools import lru_cache
from typing import Literal
from urllib.parse import quote

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========== Cache (Redis + RediSearch) ==========
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, ge=1, le=65535)
    redis_password: str = Field(default="", description="Redis password (empty for none)")
    redis_db: int = Field(default=0, ge=0, le=15, description="Logical database index")
    redis_key_prefix: str = Field(default="tg:", description="Prefix applied to every key")
    redis_socket_timeout: float = Field(default=5.0, gt=0)
    redis_max_connections: int = Field(default=50, ge=1, le=1000)
    cache_default_ttl: int = Field(default=3600, ge=1, description="Default TTL in seconds")

    # ========== Vector index ==========
    vector_index_name: str = Field(default="idx:vectors")
    vector_dimension: int = Field(default=1536, ge=1, le=32768)

    # ========== Application ==========
    app_name: str = "TG Context Store"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # ========== Computed Properties ==========
    @computed_field
    @property
    def redis_url(self) -> str:
        """Build a redis:// URL from the connection fields."""
        auth = f":{quote(self.redis_password, safe='')}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
