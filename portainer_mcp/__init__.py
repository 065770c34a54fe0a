"""
Portainer MCP - FastMCP server and async client for Portainer stack and container control
"""

__version__ = "0.1.0"
__author__ = "Portainer MCP Contributors"

from .client import PortainerClient  # noqa: F401
from .core.config_loader import PortainerConfig, load_config  # noqa: F401
from .core.exceptions import (  # noqa: F401
    ConfigurationError,
    PortainerAuthError,
    PortainerMCPError,
    PortainerRequestError,
)
from .core.session import PortainerResponse, PortainerSession  # noqa: F401

__all__ = [
    "PortainerClient",
    "PortainerConfig",
    "PortainerResponse",
    "PortainerSession",
    "load_config",
    "ConfigurationError",
    "PortainerAuthError",
    "PortainerMCPError",
    "PortainerRequestError",
]
