"""
Configuration and settings for the Toilet Map API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Database (any SQLAlchemy URL; Postgres in production)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)
    seed_sample_data: bool = Field(default=True)

    # Auth
    jwt_secret: str = Field(default="dev_secret")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_minutes: int = Field(default=7 * 24 * 60)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # Geo
    duplicate_threshold_meters: float = Field(default=20.0, gt=0)
    default_search_radius_meters: float = Field(default=500.0, gt=0)

    # HTTP
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4000)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
