"""
Application Configuration Module
================================

Centralized, environment-driven configuration for ReportFlow.

Features:
- Environment variable and .env file support
- Database provider selection (sqlite / mysql / postgres)
- Session cookie and password hashing settings
- CORS and rate limiting configuration

Usage:
    from reportflow.core.config import settings

    if settings.DEBUG:
        ...
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_PROVIDERS = ("sqlite", "mysql", "postgres")


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Every field can be overridden by an environment variable of the
    same (uppercase) name, or through a local .env file.
    """

    # ==========================
    # Application Metadata
    # ==========================
    APP_NAME: str = "ReportFlow"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # ==========================
    # Logging
    # ==========================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="console", description="json or console")

    # ==========================
    # Database
    # ==========================
    DATABASE_PROVIDER: str = "sqlite"
    DATABASE_URL: Optional[str] = None
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: Optional[int] = None
    DATABASE_USERNAME: Optional[str] = None
    DATABASE_PASSWORD: Optional[str] = None
    DATABASE_NAME: Optional[str] = None
    DATABASE_SSL: bool = False
    DATABASE_AUTO_INIT: bool = True

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # ==========================
    # Security
    # ==========================
    SECRET_KEY: str = "change-me-in-production-please-use-32-chars"
    ALGORITHM: str = "HS256"
    ISSUER: str = "reportflow"
    AUDIENCE: str = "reportflow-console"

    SESSION_COOKIE_NAME: str = "auth-token"
    SESSION_MAX_AGE_SECONDS: int = 86400

    # PBKDF2-SHA512 iteration count. 1000 matches hashes created by the
    # legacy admin scripts.
    PASSWORD_HASH_ITERATIONS: int = 1000

    MAX_LOGIN_ATTEMPTS: int = 5
    DEFAULT_ROLE_NAME: str = "User"

    # ==========================
    # Rate Limiting
    # ==========================
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: int = 10  # requests per minute per IP

    # ==========================
    # CORS
    # ==========================
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_METHODS: str = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
    CORS_HEADERS: str = "Content-Type,Authorization,X-Request-ID"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("DATABASE_PROVIDER")
    @classmethod
    def validate_provider(cls, value: str) -> str:
        """Normalise the provider name and reject unknown providers."""
        normalized = (value or "sqlite").strip().lower()
        if normalized == "postgresql":
            normalized = "postgres"
        if normalized not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Unsupported database provider '{value}'. "
                f"Expected one of: {', '.join(SUPPORTED_PROVIDERS)}"
            )
        return normalized

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        return value.lower() if value.lower() in ("json", "console") else "console"

    # ==========================
    # Derived Values
    # ==========================

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        return _split_csv(self.CORS_ORIGINS)

    @property
    def cors_methods_list(self) -> List[str]:
        return _split_csv(self.CORS_METHODS)

    @property
    def cors_headers_list(self) -> List[str]:
        return _split_csv(self.CORS_HEADERS)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


settings = get_settings()
