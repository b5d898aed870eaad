"""Application configuration via pydantic-settings."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import List, Literal, Optional

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

    # Application
    app_name: str = "Homestay Settlement"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "homestay"
    postgres_password: str = Field(default="homestay_secret")
    postgres_db: str = "homestay"
    db_pool_size: int = 20
    db_max_overflow: int = 10
    database_url_override: Optional[str] = None  # Any SQLAlchemy async URL

    @computed_field
    @property
    def database_url(self) -> str:
        """Async database connection URL."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field
    @property
    def sync_database_url(self) -> str:
        """Sync PostgreSQL connection URL for Alembic."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    @computed_field
    @property
    def redis_url(self) -> str:
        """Redis connection URL."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # JWT verification (tokens are issued by the identity service)
    jwt_secret_key: str = Field(default="your-super-secret-key-change-in-production")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Encryption (payout account numbers)
    encryption_key: str = Field(default="your-32-byte-encryption-key-here")

    # Rate Limiting
    rate_limit_per_minute: int = 100

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8080"]

    # Currency
    currency: str = "INR"

    # Default rate policy, used only to seed the first settings version
    default_commission_rate: Decimal = Decimal("10")
    default_commission_on_cleaning_fee: bool = True
    default_commission_on_extra_guests: bool = True
    default_gst_enabled: bool = False
    default_gst_rate: Decimal = Decimal("18")
    default_gst_on_commission: bool = False
    default_gst_inclusive: bool = True
    default_tcs_enabled: bool = False
    default_tcs_rate: Decimal = Decimal("1")
    default_tcs_threshold: Decimal = Decimal("7000")  # INR 7000 per Indian tax rules
    default_platform_fee_enabled: bool = False
    default_platform_fee_rate: Decimal = Decimal("2")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
