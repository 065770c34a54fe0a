"""
Portainer Client

Composes the capability services around one explicitly constructed session.
Shared state (the session and the default environment) is wired once here.
"""

from collections.abc import Mapping
from typing import Any

from .constants import REDEPLOY_SETTLE_SECONDS
from .core.config_loader import PortainerConfig
from .core.session import PortainerSession
from .models.container import ContainerActionRequest
from .services import (
    ContainerControls,
    EnvironmentService,
    ResourceDeletion,
    ResourceReader,
    StackControls,
)


class PortainerClient:
    """Facade over the environment, reader, container, deletion and stack services."""

    def __init__(
        self,
        session: PortainerSession,
        environment_id: int | None = None,
        settle_seconds: float = REDEPLOY_SETTLE_SECONDS,
    ):
        self.session = session
        self.environments = EnvironmentService(session, environment_id)
        self.reader = ResourceReader(session, self.environments)
        self.containers = ContainerControls(session, self.environments)
        self.deletion = ResourceDeletion(session, self.environments, self.reader)
        self.stacks = StackControls(
            session, self.environments, self.reader, settle_seconds=settle_seconds
        )

    @classmethod
    def from_config(cls, config: PortainerConfig) -> "PortainerClient":
        session = PortainerSession(
            config.portainer_url,
            config.api_token,
            timeout=config.request_timeout,
            verify_ssl=config.verify_ssl,
        )
        return cls(
            session,
            environment_id=config.environment_id,
            settle_seconds=config.redeploy_settle_seconds,
        )

    async def __aenter__(self) -> "PortainerClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def environment_id(self) -> int | None:
        """Default environment used when a call names none."""
        return self.environments.environment_id

    async def connect(self) -> bool:
        """Validate the session token; reads return None until this succeeds."""
        return await self.session.validate()

    async def close(self) -> None:
        await self.session.close()

    # Environments

    async def ensure_environment(self, explicit: int | None = None) -> int | None:
        return await self.environments.ensure_environment(explicit)

    async def get_environments(self) -> list[dict[str, Any]] | None:
        return await self.environments.get_environments()

    async def get_environment_details(
        self, environment_id: int | None = None
    ) -> dict[str, Any] | None:
        return await self.environments.get_environment_details(environment_id)

    async def get_first_environment_id(self) -> int | None:
        return await self.environments.get_first_environment_id()

    # Reads

    async def get_status(self) -> dict[str, Any] | None:
        return await self.reader.get_status()

    async def test_connection(self) -> bool:
        return await self.reader.test_connection()

    async def get_stacks(self) -> list[dict[str, Any]] | None:
        return await self.reader.get_stacks()

    async def get_stack_by_id(self, stack_id: int) -> dict[str, Any] | None:
        return await self.reader.get_stack_by_id(stack_id)

    async def get_stack_by_name(self, name: str) -> dict[str, Any] | None:
        return await self.reader.get_stack_by_name(name)

    async def get_containers(
        self, environment_id: int | None = None, include_stopped: bool = True
    ) -> list[dict[str, Any]] | None:
        return await self.reader.get_containers(environment_id, include_stopped)

    async def get_container_details(
        self, container_id: str, environment_id: int | None = None
    ) -> dict[str, Any] | None:
        return await self.reader.get_container_details(container_id, environment_id)

    async def get_images(self, environment_id: int | None = None) -> list[dict[str, Any]] | None:
        return await self.reader.get_images(environment_id)

    # Container controls

    async def handle_container(
        self, request: ContainerActionRequest | Mapping[str, Any]
    ) -> bool:
        return await self.containers.handle_container(request)

    # Deletion

    async def cleanup_existing_container(
        self, name: str, environment_id: int | None = None
    ) -> bool:
        return await self.deletion.cleanup_existing_container(name, environment_id)

    async def delete_stack(
        self, stack_id_or_name: int | str, environment_id: int | None = None
    ) -> Any | None:
        return await self.deletion.delete_stack(stack_id_or_name, environment_id)

    # Stack controls

    async def start_stack(self, stack_id: int, environment_id: int | None = None) -> bool:
        return await self.stacks.start_stack(stack_id, environment_id)

    async def stop_stack(self, stack_id: int, environment_id: int | None = None) -> bool:
        return await self.stacks.stop_stack(stack_id, environment_id)

    async def update_stack(
        self,
        stack_id: int,
        compose_content: str,
        environment_id: int | None = None,
        pull_image: bool = True,
    ) -> bool:
        return await self.stacks.update_stack(stack_id, compose_content, environment_id, pull_image)

    async def redeploy_stack(self, stack_id: int, environment_id: int | None = None) -> bool:
        return await self.stacks.redeploy_stack(stack_id, environment_id)
