"""
Portainer MCP Services

One service per capability, each taking only the collaborators it needs.
"""

from .cleanup import ResourceDeletion  # noqa: F401
from .container import ContainerControls  # noqa: F401
from .environment import EnvironmentService  # noqa: F401
from .resources import ResourceReader  # noqa: F401
from .stack import StackControls  # noqa: F401

__all__ = [
    "EnvironmentService",
    "ResourceReader",
    "ContainerControls",
    "ResourceDeletion",
    "StackControls",
]
