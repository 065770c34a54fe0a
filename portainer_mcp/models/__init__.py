"""Data models for Portainer MCP."""

from .container import (  # noqa: F401
    ContainerActionOptions,
    ContainerActionRequest,
    ContainerSummary,
    EnvironmentSummary,
    PortainerModel,
    StackSummary,
)
from .enums import ContainerAction, EnvironmentAction, StackAction  # noqa: F401
from .refs import StackById, StackByName, StackRef  # noqa: F401

__all__ = [
    # Resource models
    "ContainerSummary",
    "EnvironmentSummary",
    "PortainerModel",
    "StackSummary",
    # Request models
    "ContainerActionOptions",
    "ContainerActionRequest",
    # Enums
    "ContainerAction",
    "EnvironmentAction",
    "StackAction",
    # Stack references
    "StackById",
    "StackByName",
    "StackRef",
]
