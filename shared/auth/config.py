"""
Authentication configuration.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Bearer token settings for the processing API."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    jwt_secret_key: str = Field(
        default="change-me",
        description="HMAC signing key; set a strong random value outside development",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=60, ge=1, description="Lifetime of issued tokens"
    )
    jwt_issuer: str = Field(default="focusqueue", description="Expected token issuer")
    jwt_leeway_seconds: int = Field(
        default=0, ge=0, le=300, description="Clock skew tolerated on expiry"
    )


@lru_cache
def get_auth_settings() -> AuthSettings:
    """Get cached authentication settings."""
    return AuthSettings()
