"""
Configuration Management for Personal Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The token secret is process-wide and immutable for the life of the
process. Rotating it invalidates every outstanding token.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Backing store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        default="sqlite:///./ledger.db",
        description="SQLAlchemy database URL"
    )
    connect_timeout: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Seconds to wait for a connection before failing the request"
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements (debugging only)"
    )


class AuthSettings(BaseSettings):
    """Token signing and password hashing configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    secret_key: str = Field(
        ...,
        min_length=16,
        description="Process-wide HMAC secret used to sign identity tokens"
    )
    algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=15,
        description="bcrypt cost factor for password hashes"
    )

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        """Only HMAC algorithms make sense with a shared secret."""
        v = v.upper()
        if v not in ("HS256", "HS384", "HS512"):
            raise ValueError(f"Unsupported signing algorithm: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for the structured log"
    )

    # Transport
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so a missing secret only fails
    # the component that needs it.

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("database", "auth", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
