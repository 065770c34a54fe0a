"""Enum definitions for Portainer MCP tools."""

from enum import Enum


class ContainerAction(Enum):
    """Single lifecycle actions the container dispatcher can issue."""

    START = "start"
    STOP = "stop"
    KILL = "kill"
    PAUSE = "pause"
    UNPAUSE = "unpause"
    RESTART = "restart"
    REMOVE = "remove"


class StackAction(Enum):
    """Actions for the portainer_stack tool."""

    LIST = "list"
    START = "start"
    STOP = "stop"
    UPDATE = "update"
    REDEPLOY = "redeploy"
    DELETE = "delete"


class EnvironmentAction(Enum):
    """Actions for the portainer_environment tool."""

    LIST = "list"
    INFO = "info"
    STATUS = "status"
    IMAGES = "images"
    TEST_CONNECTION = "test_connection"


# Container tool actions that are not dispatcher actions
CONTAINER_QUERY_ACTIONS = ("list", "info", "cleanup")
