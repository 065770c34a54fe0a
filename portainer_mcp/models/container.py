"""Portainer resource and request models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import ContainerAction


class PortainerModel(BaseModel):
    """Base model with common settings.

    Resource snapshots are immutable and accept the PascalCase keys the
    Portainer and Docker APIs return.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def model_dump(self, **kwargs) -> dict[str, Any]:
        """Convert to dict with exclude_none by default."""
        kwargs.setdefault("exclude_none", True)
        return super().model_dump(**kwargs)


class ContainerSummary(PortainerModel):
    """One entry of the Docker container list."""

    id: str = Field(alias="Id")
    names: list[str] = Field(default_factory=list, alias="Names")
    state: str | None = Field(default=None, alias="State")
    image: str | None = Field(default=None, alias="Image")
    labels: dict[str, str] = Field(default_factory=dict, alias="Labels")
    status: str | None = Field(default=None, alias="Status")

    def matches_name(self, name: str) -> bool:
        """True when an alias contains ``name`` or is exactly ``/name``."""
        return any(name in alias or alias == f"/{name}" for alias in self.names)


class StackSummary(PortainerModel):
    """One entry of the Portainer stack list."""

    id: int = Field(alias="Id")
    name: str = Field(default="", alias="Name")
    environment_id: int | None = Field(default=None, alias="EndpointId")
    status: int | None = Field(default=None, alias="Status")


class EnvironmentSummary(PortainerModel):
    """One Portainer environment (endpoint)."""

    id: int = Field(alias="Id")
    name: str = Field(default="", alias="Name")
    url: str | None = Field(default=None, alias="URL")
    status: int | None = Field(default=None, alias="Status")


class ContainerActionOptions(PortainerModel):
    """Per-action options; only the fields relevant to the action are used."""

    force: bool | None = None
    remove_volumes: bool | None = None
    signal: str | None = None
    timeout_ms: float | None = None


class ContainerActionRequest(PortainerModel):
    """A validated request for one container lifecycle action."""

    action: ContainerAction
    container_id: str
    environment_id: int | None = None
    options: ContainerActionOptions = Field(default_factory=ContainerActionOptions)
