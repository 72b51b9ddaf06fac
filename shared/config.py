"""
Shared configuration management for the repository access services.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="GRANTS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment name")
    log_level: str = Field(default="info", description="Root log level")

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # Storage
    postgres_dsn: str = Field(default="postgres://localhost:5432/grants")


def split_csv(value: str) -> tuple:
    """Split a comma separated setting into a tuple of stripped entries."""
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(","))
