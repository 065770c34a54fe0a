"""
Resource Reader

Read-only fetches over stacks, containers, images and system status. Each
read requires a validated session and returns the parsed payload, or None
when the session is not validated or the call fails.
"""

from typing import Any

import structlog

from ..constants import (
    API_DOCKER_CONTAINERS,
    API_DOCKER_IMAGES,
    API_STACKS,
    API_SYSTEM_STATUS,
    NO_ENVIRONMENT_MESSAGE,
    SESSION_NOT_VALIDATED,
)
from ..core.session import PortainerSession
from ..core.validation import (
    as_record_list,
    is_non_empty_string,
    is_optional_environment_id,
    is_positive_id,
)
from .container import container_path
from .environment import EnvironmentService


class ResourceReader:
    """Read-only Portainer resource access."""

    def __init__(self, session: PortainerSession, environments: EnvironmentService):
        self.session = session
        self.environments = environments
        self.logger = structlog.get_logger()

    def _ensure_validated(self, operation: str) -> bool:
        if not self.session.is_validated:
            self.logger.error(SESSION_NOT_VALIDATED, operation=operation)
            return False
        return True

    async def _resolve_environment(self, environment_id: Any, operation: str) -> int | None:
        if not is_optional_environment_id(environment_id):
            self.logger.error(
                "Invalid environment_id: must be a positive integer or None", operation=operation
            )
            return None
        if environment_id is not None:
            return int(environment_id)

        resolved = await self.environments.ensure_environment()
        if resolved is None:
            self.logger.error(NO_ENVIRONMENT_MESSAGE, operation=operation)
        return resolved

    async def get_status(self) -> dict[str, Any] | None:
        """Portainer system status (version, instance id)."""
        if not self._ensure_validated("get_status"):
            return None
        try:
            response = await self.session.get(API_SYSTEM_STATUS)
            return response.data
        except Exception as e:
            self.logger.error("Failed to fetch status", error=str(e), error_type=type(e).__name__)
            return None

    async def test_connection(self) -> bool:
        """True when the status endpoint answers with the current token."""
        if not self._ensure_validated("test_connection"):
            return False
        try:
            await self.session.get(API_SYSTEM_STATUS)
            self.logger.info("Successfully connected to Portainer API")
            return True
        except Exception as e:
            self.logger.error(
                "Failed to connect to Portainer API", error=str(e), error_type=type(e).__name__
            )
            return False

    async def get_stacks(self) -> list[dict[str, Any]] | None:
        """Every stack visible to the token, across environments."""
        if not self._ensure_validated("get_stacks"):
            return None
        try:
            response = await self.session.get(API_STACKS)
            return as_record_list(response.data)
        except Exception as e:
            self.logger.error("Failed to fetch stacks", error=str(e), error_type=type(e).__name__)
            return None

    async def get_stack_by_id(self, stack_id: int) -> dict[str, Any] | None:
        if not is_positive_id(stack_id):
            return None
        stacks = await self.get_stacks()
        if not stacks:
            return None
        stack_id = int(stack_id)
        return next((stack for stack in stacks if stack.get("Id") == stack_id), None)

    async def get_stack_by_name(self, name: str) -> dict[str, Any] | None:
        if not is_non_empty_string(name):
            return None
        stacks = await self.get_stacks()
        if not stacks:
            return None
        name = name.strip()
        return next((stack for stack in stacks if stack.get("Name") == name), None)

    async def get_containers(
        self, environment_id: int | None = None, include_stopped: bool = True
    ) -> list[dict[str, Any]] | None:
        """List containers in an environment; stopped ones included by default."""
        if not self._ensure_validated("get_containers"):
            return None

        environment_id = await self._resolve_environment(environment_id, "get_containers")
        if environment_id is None:
            return None

        path = f"{API_DOCKER_CONTAINERS.format(environment_id=environment_id)}/json"
        if include_stopped:
            path += "?all=true"

        try:
            response = await self.session.get(path)
            return as_record_list(response.data)
        except Exception as e:
            self.logger.error(
                "Failed to fetch containers",
                environment_id=environment_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def get_container_details(
        self, container_id: str, environment_id: int | None = None
    ) -> dict[str, Any] | None:
        """Inspect a container by id, falling back to exact then partial name match.

        The fallback returns the matching entry of the container list, which
        carries fewer fields than a full inspect.
        """
        if not self._ensure_validated("get_container_details"):
            return None
        if not is_non_empty_string(container_id):
            self.logger.error("Invalid container_id: must be a non-empty string")
            return None

        environment_id = await self._resolve_environment(environment_id, "get_container_details")
        if environment_id is None:
            return None

        container_id = container_id.strip()
        try:
            response = await self.session.get(
                f"{container_path(environment_id, container_id)}/json"
            )
            if isinstance(response.data, dict):
                return response.data
            self.logger.warning(
                "Unexpected container inspect payload, searching by name",
                container_id=container_id,
                payload_type=type(response.data).__name__,
            )
        except Exception as e:
            self.logger.warning(
                "Container lookup by id failed, searching by name",
                container_id=container_id,
                environment_id=environment_id,
                error=str(e),
            )

        containers = await self.get_containers(environment_id)
        if not containers:
            self.logger.error("Container not found", container_id=container_id)
            return None

        def names(container: dict[str, Any]) -> list[str]:
            aliases = container.get("Names")
            if not isinstance(aliases, list):
                return []
            return [alias for alias in aliases if isinstance(alias, str)]

        exact = next(
            (
                c
                for c in containers
                if any(n == container_id or n == f"/{container_id}" for n in names(c))
            ),
            None,
        )
        if exact is not None:
            return exact

        partial = next(
            (c for c in containers if any(container_id in n for n in names(c))), None
        )
        if partial is None:
            self.logger.error("Container not found", container_id=container_id)
        return partial

    async def get_images(self, environment_id: int | None = None) -> list[dict[str, Any]] | None:
        """List images in an environment."""
        if not self._ensure_validated("get_images"):
            return None

        environment_id = await self._resolve_environment(environment_id, "get_images")
        if environment_id is None:
            return None

        try:
            response = await self.session.get(
                API_DOCKER_IMAGES.format(environment_id=environment_id)
            )
            return as_record_list(response.data)
        except Exception as e:
            self.logger.error(
                "Failed to fetch images",
                environment_id=environment_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
