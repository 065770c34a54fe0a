"""Core exceptions for Portainer MCP operations."""


class PortainerMCPError(Exception):
    """Base exception for Portainer MCP operations."""


class PortainerRequestError(PortainerMCPError):
    """Portainer API request failed."""

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        path: str | None = None,
        status: int | None = None,
    ):
        super().__init__(message)
        self.method = method
        self.path = path
        self.status = status


class PortainerAuthError(PortainerRequestError):
    """Portainer rejected the API token (401/403)."""


class ConfigurationError(PortainerMCPError):
    """Configuration validation or loading failed."""
