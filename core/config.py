"""
Application configuration using Pydantic settings.

Usage:
    from core.config import get_settings
    settings = get_settings()

For constants, import from core.constants:
    from core.constants import ISSUE_FILTER_FIELDS, ISSUE_UPDATE_FIELDS
"""

import os
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import ISSUE_EXPIRE_AFTER_SECONDS


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    Required for production:
        - DATABASE_URL (defaults to a local SQLite file)
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "Issue Tracker"
    api_prefix: str = "/api"
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # Database
    database_url: str = Field(default="sqlite:///issue_tracker.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")

    # CORS
    cors_allowed_origins: str = Field(default="*", validation_alias="CORS_ALLOWED_ORIGINS")

    # Issue expiry (time-to-live index)
    issue_expire_after_seconds: int = Field(
        default=ISSUE_EXPIRE_AFTER_SECONDS, validation_alias="ISSUE_EXPIRE_AFTER_SECONDS"
    )
    enable_expiry_purge: bool = Field(default=True, validation_alias="ENABLE_EXPIRY_PURGE")
    expiry_purge_interval_seconds: int = Field(
        default=60, validation_alias="EXPIRY_PURGE_INTERVAL_SECONDS"
    )

    # Bootstrap
    seed_sample_issues: bool = Field(default=True, validation_alias="SEED_SAMPLE_ISSUES")

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Accept the legacy postgres:// scheme some hosts still hand out."""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator("issue_expire_after_seconds", "expiry_purge_interval_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive number of seconds")
        return v

    @property
    def is_production(self) -> bool:
        return os.getenv("ENV", "development").lower() in ("production", "prod")

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
