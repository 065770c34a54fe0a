"""Shared pytest fixtures for Portainer MCP tests."""

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from portainer_mcp.core.config_loader import PortainerConfig
from portainer_mcp.core.exceptions import PortainerRequestError
from portainer_mcp.core.session import PortainerResponse
from portainer_mcp.middleware import LoggingMiddleware
from portainer_mcp.services import (
    ContainerControls,
    EnvironmentService,
    ResourceDeletion,
    ResourceReader,
    StackControls,
)

ENVIRONMENTS = [
    {"Id": 1, "Name": "local", "URL": "unix:///var/run/docker.sock", "Status": 1},
    {"Id": 2, "Name": "edge", "URL": "tcp://10.0.0.5:2375", "Status": 2},
]

STACKS = [
    {"Id": 5, "Name": "web", "EndpointId": 1, "Status": 1},
    {"Id": 7, "Name": "db", "EndpointId": 1, "Status": 2},
]

CONTAINERS = [
    {"Id": "abc123", "Names": ["/web-app"], "State": "running", "Image": "nginx:latest"},
    {"Id": "def456", "Names": ["/worker"], "State": "exited", "Image": "python:3.12"},
]


def ok(data: Any = None, status: int = 200) -> PortainerResponse:
    return PortainerResponse(status=status, data=data)


def request_error(status: int = 500, path: str = "/api") -> PortainerRequestError:
    return PortainerRequestError(f"request returned {status}", method="GET", path=path, status=status)


@pytest.fixture
def mock_session() -> MagicMock:
    """Validated session whose verbs return empty successful responses."""
    session = MagicMock()
    session.is_validated = True
    session.get = AsyncMock(return_value=ok())
    session.post = AsyncMock(return_value=ok())
    session.put = AsyncMock(return_value=ok())
    session.delete = AsyncMock(return_value=ok())
    session.validate = AsyncMock(return_value=True)
    session.close = AsyncMock()
    return session


@pytest.fixture
def mock_environments() -> MagicMock:
    """Environment resolver that always resolves to environment 1."""
    environments = MagicMock(spec=EnvironmentService)
    environments.ensure_environment = AsyncMock(return_value=1)
    return environments


@pytest.fixture
def mock_reader() -> MagicMock:
    reader = MagicMock(spec=ResourceReader)
    reader.get_stacks = AsyncMock(return_value=list(STACKS))
    reader.get_stack_by_id = AsyncMock(
        side_effect=lambda stack_id: next((s for s in STACKS if s["Id"] == stack_id), None)
    )
    reader.get_stack_by_name = AsyncMock(
        side_effect=lambda name: next((s for s in STACKS if s["Name"] == name), None)
    )
    reader.get_containers = AsyncMock(return_value=list(CONTAINERS))
    return reader


@pytest.fixture
def environment_service(mock_session) -> EnvironmentService:
    return EnvironmentService(mock_session)


@pytest.fixture
def reader(mock_session, mock_environments) -> ResourceReader:
    return ResourceReader(mock_session, mock_environments)


@pytest.fixture
def container_controls(mock_session, mock_environments) -> ContainerControls:
    return ContainerControls(mock_session, mock_environments)


@pytest.fixture
def deletion(mock_session, mock_environments, mock_reader) -> ResourceDeletion:
    return ResourceDeletion(mock_session, mock_environments, mock_reader)


@pytest.fixture
def stack_controls(mock_session, mock_environments, mock_reader) -> StackControls:
    return StackControls(mock_session, mock_environments, mock_reader, settle_seconds=0)


@pytest.fixture
def config() -> PortainerConfig:
    return PortainerConfig(
        PORTAINER_URL="https://portainer.example.com",
        PORTAINER_API_TOKEN="ptr_test_token",
        PORTAINER_ENVIRONMENT_ID=1,
    )


@pytest.fixture
def logging_middleware() -> LoggingMiddleware:
    return LoggingMiddleware(include_payloads=True, max_payload_length=100)


@pytest.fixture
def mock_context() -> MagicMock:
    """Mock MiddlewareContext for unit tests."""
    context = MagicMock()
    context.method = "tools/call"
    context.source = "client"
    context.type = "request"
    context.message = SimpleNamespace(
        name="portainer_stack",
        arguments={"action": "list", "environment_id": 1},
    )
    return context


class MockCall:
    """Mock call_next function for middleware testing."""

    def __init__(self, return_value=None, exception=None):
        self.return_value = return_value or {"status": "success"}
        self.exception = exception
        self.call_count = 0

    async def __call__(self, context):
        self.call_count += 1
        if self.exception:
            raise self.exception
        return self.return_value
