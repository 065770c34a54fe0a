"""FastMCP middleware for the Portainer MCP server."""

from .logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
