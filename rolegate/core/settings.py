"""Application settings using Pydantic Settings for typed configuration.

This module centralizes all configuration and provides type-safe access to settings.
Settings are loaded from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env_name: str = Field(default="development", alias="ENV_NAME")

    # Database (admin registry + user profiles)
    database_url: str = Field(default="sqlite:///./rolegate.db", alias="DATABASE_URL")

    # CORS
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Role resolution
    allowed_admin_domain: str = Field(
        default="somos.tech", alias="ALLOWED_ADMIN_DOMAIN"
    )
    role_lookup_timeout_seconds: float = Field(
        default=2.0, alias="ROLE_LOOKUP_TIMEOUT_SECONDS", gt=0
    )

    # Moderation pipeline
    moderation_api_url: str | None = Field(default=None, alias="MODERATION_API_URL")
    moderation_api_key: str | None = Field(default=None, alias="MODERATION_API_KEY")
    moderation_timeout_seconds: float = Field(
        default=10.0, alias="MODERATION_TIMEOUT_SECONDS", gt=0
    )

    # Lifecycle
    shutdown_grace_seconds: float = Field(
        default=5.0, alias="SHUTDOWN_GRACE_SECONDS", ge=0
    )

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        origins = []
        for o in self.cors_origins.split(","):
            trimmed = o.strip()
            if trimmed:
                origins.append(trimmed)
        return origins

    @computed_field
    @property
    def trusted_email_suffix(self) -> str:
        """Email suffix a principal must carry to be considered for admin roles."""
        return f"@{self.allowed_admin_domain.strip().lower()}"

    @computed_field
    @property
    def moderation_enabled(self) -> bool:
        return bool(self.moderation_api_url and self.moderation_api_url.strip())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
