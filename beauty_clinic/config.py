"""
Application configuration settings loaded from environment variables.
Uses pydantic_settings for validation and type conversion.
"""
from functools import lru_cache
from typing import List, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings class with environment variable validation.

    Attributes:
        database_url: SQLAlchemy connection string (DATABASE_URL)
        jwt_secret: Secret used to sign access tokens (JWT_SECRET)
        jwt_refresh_secret: Secret used to sign refresh tokens (JWT_REFRESH_SECRET)
        jwt_algorithm: Algorithm used for JWT encoding
        jwt_expires_in: Access token lifetime, e.g. "1h" (JWT_EXPIRES_IN)
        jwt_refresh_expires_in: Refresh token lifetime, e.g. "7d" (JWT_REFRESH_EXPIRES_IN)
        port: HTTP port the server binds to (PORT)

        # Runtime
        environment: Deployment environment name
        debug: Include exception details in error responses
        log_level: Root logging level
        cors_origins: Allowed CORS origins

        # Rate limiting
        rate_limit_enabled: Whether the process-wide limiter is installed
        rate_limit_requests: Requests allowed per client per window
        rate_limit_window_seconds: Window length in seconds

        # Feature table
        feature_vip / feature_consents / feature_loyalty / feature_dashboard:
            Capability flags resolved once at startup
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Database settings
    database_url: str
    auto_create_tables: bool = False

    # JWT settings
    jwt_secret: str
    jwt_refresh_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_in: str = "1h"
    jwt_refresh_expires_in: str = "7d"

    # Server settings
    port: int = 8000
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: Union[str, List[str]] = Field(
        default=["http://localhost:3000", "http://localhost:8081"]
    )

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60

    # Feature flags
    feature_vip: bool = True
    feature_consents: bool = True
    feature_loyalty: bool = True
    feature_dashboard: bool = True

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL is required")
        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self):
        if self.jwt_secret == self.jwt_refresh_secret:
            raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must be different")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
