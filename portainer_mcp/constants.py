"""Centralized constants for Portainer MCP to eliminate duplicate strings."""

# Portainer API paths
API_STACKS = "/api/stacks"
API_STACK = "/api/stacks/{stack_id}"
API_ENDPOINTS = "/api/endpoints"
API_ENDPOINT = "/api/endpoints/{environment_id}"
API_SYSTEM_STATUS = "/api/system/status"
API_DOCKER_CONTAINERS = "/api/endpoints/{environment_id}/docker/containers"
API_DOCKER_IMAGES = "/api/endpoints/{environment_id}/docker/images/json"

# Request headers
API_KEY_HEADER = "X-API-Key"
CONTENT_TYPE_JSON = "application/json"

# Container defaults
DEFAULT_KILL_SIGNAL = "SIGKILL"
CONTAINER_STATE_RUNNING = "running"

# Stack redeploy quiescence delay between stop and start
REDEPLOY_SETTLE_SECONDS = 2.0

# Environment Variables
ENV_PORTAINER_URL = "PORTAINER_URL"
ENV_PORTAINER_API_TOKEN = "PORTAINER_API_TOKEN"
ENV_PORTAINER_ENVIRONMENT_ID = "PORTAINER_ENVIRONMENT_ID"
ENV_FASTMCP_HOST = "FASTMCP_HOST"
ENV_FASTMCP_PORT = "FASTMCP_PORT"
ENV_LOG_LEVEL = "LOG_LEVEL"

# Logging
LOG_INIT_MESSAGE = "Logging system initialized"
SERVER_LOG_FILE = "portainer_mcp.log"
MIDDLEWARE_LOG_FILE = "middleware.log"

# Error Messages
NO_ENVIRONMENT_MESSAGE = "No Portainer environments found"
SESSION_NOT_VALIDATED = "Authentication not validated"

# Security-related field names for filtering
SECURITY_FIELDS = [
    "password",
    "passwd",
    "pwd",
    "token",
    "access_token",
    "api_token",
    "key",
    "api_key",
    "secret",
    "credential",
    "auth",
    "authorization",
]
