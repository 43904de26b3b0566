"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="Async SQLAlchemy connection string (postgresql+asyncpg or sqlite+aiosqlite)",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema for isolated environments (e.g., staging)",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not re.match(r"^[a-z_][a-z0-9_]{0,62}$", v):
            msg = "Invalid database_schema: must match ^[a-z_][a-z0-9_]{0,62}$"
            raise ValueError(msg)
        return v

    # Geocoding: Google Maps
    google_maps_api_key: str | None = Field(
        default=None,
        description="Google Maps Geocoding API key",
    )
    geocoder_google_timeout: float = Field(
        default=10.0,
        description="Google Maps request timeout in seconds",
        gt=0,
    )

    # Geocode cache
    geocode_cache_prune_days: int = Field(
        default=90,
        description="Entries unused for longer than this many days are pruned",
        ge=0,
    )
    geocode_cache_recent_days: int = Field(
        default=7,
        description="Trailing window in days used to count recently used entries",
        gt=0,
    )

    # Address fix workflow
    address_fix_batch_size: int = Field(
        default=10,
        description="Laundromats fetched per address-fix batch",
        gt=0,
    )
    address_fix_request_delay: float = Field(
        default=0.5,
        description="Seconds to wait between individual geocoding requests",
        ge=0,
    )
    address_fix_batch_delay: float = Field(
        default=2.0,
        description="Seconds to wait between batches",
        ge=0,
    )
    address_fix_retry_delay: float = Field(
        default=5.0,
        description="Seconds to wait before retrying a failed batch",
        ge=0,
    )
    address_fix_max_retries: int = Field(
        default=5,
        description="Consecutive failed batches tolerated before giving up",
        ge=0,
    )
    address_fix_progress_file: str = Field(
        default="./geocoding-progress.json",
        description="Checkpoint file used to resume the address-fix workflow",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()  # type: ignore[call-arg]
