"""
Application Settings for GradHelper

Centralized configuration using Pydantic Settings with .env support.
All environment variables are validated at startup.
"""

from functools import lru_cache
from typing import Literal, Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    STORAGE_BACKEND controls where messages live between requests:
    - memory: process-local list (default, demo-grade, lost on restart)
    - database: PostgreSQL via SQLModel (requires DATABASE_URL)
    """

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # CORS Configuration
    allowed_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # Identity (bearer JWT issued by the auth backend)
    jwt_secret: Optional[str] = None
    jwt_jwks_url: Optional[str] = None
    jwt_audience: str = "authenticated"
    jwt_issuer: Optional[str] = None

    # Messaging
    storage_backend: Literal["memory", "database"] = "memory"
    search_min_length: int = 0

    # Retry Configuration (persistence boundary)
    persistence_timeout: float = 10.0
    max_retries: int = 3
    retry_base_delay: float = 0.5
    retry_max_delay: float = 5.0

    # Database Configuration (SQLModel/SQLAlchemy)
    database_url: Optional[str] = None
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_echo: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Validate settings that depend on each other."""
        if self.storage_backend == "database" and not self.database_url:
            raise ValueError(
                "DATABASE_URL required when STORAGE_BACKEND=database"
            )

        if self.is_production and not (self.jwt_secret or self.jwt_jwks_url):
            raise ValueError(
                "JWT_SECRET or JWT_JWKS_URL required in production"
            )

        if self.max_retries < 1:
            raise ValueError("MAX_RETRIES must be at least 1")

        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export for direct import
settings = get_settings()
