"""
Configuration for the processing service.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProcessingServiceSettings(BaseSettings):
    """Settings for the processing service."""

    model_config = SettingsConfigDict(
        env_prefix="PROCESSING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service info
    service_name: str = Field("processing", description="Service name")
    service_version: str = Field("0.1.0", description="Service version")
    environment: str = Field("development", description="Environment")
    debug: bool = Field(False, description="Debug mode")
    log_level: str = Field("INFO", description="Logging level")
    json_logs: bool = Field(True, description="Render logs as JSON")

    # HTTP
    host: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(8010, ge=1, le=65535, description="Bind port")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed origins")


@lru_cache
def get_settings() -> ProcessingServiceSettings:
    """
    Get service settings singleton.

    Returns:
        Configured settings instance
    """
    return ProcessingServiceSettings()
