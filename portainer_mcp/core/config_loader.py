"""Configuration management for Portainer MCP."""

import os
from urllib.parse import urlparse

import structlog
from dotenv import load_dotenv
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import (
    ENV_FASTMCP_HOST,
    ENV_FASTMCP_PORT,
    ENV_LOG_LEVEL,
    ENV_PORTAINER_API_TOKEN,
    ENV_PORTAINER_ENVIRONMENT_ID,
    ENV_PORTAINER_URL,
    REDEPLOY_SETTLE_SECONDS,
)
from .exceptions import ConfigurationError

logger = structlog.get_logger()


class PortainerConfig(BaseSettings):
    """Main configuration for the Portainer client and MCP server."""

    portainer_url: str = Field(default="http://localhost:9000", alias=ENV_PORTAINER_URL)
    api_token: str = Field(default="", alias=ENV_PORTAINER_API_TOKEN, repr=False)
    environment_id: int | None = Field(
        default=None, gt=0, alias=ENV_PORTAINER_ENVIRONMENT_ID, description="Default environment"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, alias="PORTAINER_REQUEST_TIMEOUT", description="HTTP timeout in seconds"
    )
    verify_ssl: bool = Field(default=True, alias="PORTAINER_VERIFY_SSL")
    redeploy_settle_seconds: float = Field(
        default=REDEPLOY_SETTLE_SECONDS, ge=0, alias="PORTAINER_REDEPLOY_SETTLE_SECONDS"
    )

    server_host: str = Field(default="127.0.0.1", alias=ENV_FASTMCP_HOST)
    server_port: int = Field(default=8000, ge=1, le=65535, alias=ENV_FASTMCP_PORT)
    log_level: str = Field(default="INFO", alias=ENV_LOG_LEVEL)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def _validate_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Invalid Portainer URL '{url}': expected http(s)://host[:port]")


def load_config(**overrides) -> PortainerConfig:
    """Load configuration from the environment and an optional .env file.

    The .env file is only consulted when PORTAINER_URL is not already set,
    so an explicitly exported environment always wins.

    Args:
        **overrides: Field values that take precedence over the environment

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If a value fails validation or the URL is malformed
    """
    if not os.getenv(ENV_PORTAINER_URL):
        load_dotenv()

    try:
        config = PortainerConfig(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    _validate_url(config.portainer_url)

    logger.debug(
        "Configuration loaded",
        portainer_url=config.portainer_url,
        environment_id=config.environment_id,
        verify_ssl=config.verify_ssl,
        token_configured=bool(config.api_token),
    )
    return config
