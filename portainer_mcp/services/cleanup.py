"""
Resource Deletion Service

Looks up a container or stack, optionally stops it, then removes it. Used
standalone and before redeploying a container under the same name.
"""

from typing import Any

import structlog

from ..constants import API_STACK, CONTAINER_STATE_RUNNING
from ..core.session import PortainerSession
from ..core.validation import is_non_empty_string, is_optional_environment_id, parse_stack_ref
from ..models.container import ContainerSummary
from ..models.refs import StackById
from .container import container_path
from .environment import EnvironmentService
from .resources import ResourceReader


class ResourceDeletion:
    """Container cleanup and stack deletion."""

    def __init__(
        self,
        session: PortainerSession,
        environments: EnvironmentService,
        reader: ResourceReader,
    ):
        self.session = session
        self.environments = environments
        self.reader = reader
        self.logger = structlog.get_logger().bind(service="ResourceDeletion")

    async def cleanup_existing_container(
        self, name: str, environment_id: int | None = None
    ) -> bool:
        """Stop (when running) and remove the first container whose name matches.

        Args:
            name: Container name or name fragment
            environment_id: Target environment; resolved when omitted

        Returns:
            True only if a matching container existed and was removed
        """
        if not is_non_empty_string(name):
            self.logger.error("Invalid container name: must be a non-empty string")
            return False
        if not is_optional_environment_id(environment_id):
            self.logger.error("Invalid environment_id: must be a positive integer or None")
            return False

        if environment_id is None:
            environment_id = await self.environments.ensure_environment()
        if environment_id is None:
            self.logger.error("No Portainer environments found. Cannot clean up container.")
            return False
        environment_id = int(environment_id)

        name = name.strip()
        try:
            containers = await self.reader.get_containers(environment_id)
            if containers is None:
                self.logger.error("Failed to list containers", environment_id=environment_id)
                return False

            match = next(
                (
                    container
                    for container in map(ContainerSummary.model_validate, containers)
                    if container.matches_name(name)
                ),
                None,
            )
            if match is None:
                self.logger.info("No existing container to clean up", name=name)
                return False

            base = container_path(environment_id, match.id)

            if match.state == CONTAINER_STATE_RUNNING:
                self.logger.info("Stopping existing container", name=name, container_id=match.id)
                try:
                    await self.session.post(f"{base}/stop")
                except Exception as e:
                    # Removal is still attempted
                    self.logger.warning(
                        "Failed to stop container before removal",
                        container_id=match.id,
                        error=str(e),
                        error_type=type(e).__name__,
                    )

            await self.session.delete(base)
            self.logger.info("Removed existing container", name=name, container_id=match.id)
            return True

        except Exception as e:
            self.logger.error(
                "Failed to clean up container",
                name=name,
                environment_id=environment_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def delete_stack(
        self, stack_id_or_name: int | str, environment_id: int | None = None
    ) -> Any | None:
        """Delete a stack by id or name after confirming it exists.

        Returns:
            The delete response payload (an empty dict for an empty body),
            or None on validation, resolution, not-found or transport failure
        """
        ref = parse_stack_ref(stack_id_or_name)
        if ref is None:
            self.logger.error(
                "Invalid stack reference: must be a positive id or a non-empty name",
                value=repr(stack_id_or_name),
            )
            return None
        if not is_optional_environment_id(environment_id):
            self.logger.error("Invalid environment_id: must be a positive integer or None")
            return None

        if environment_id is None:
            environment_id = await self.environments.ensure_environment()
        if environment_id is None:
            self.logger.error("No Portainer environments found. Cannot delete stack.")
            return None
        environment_id = int(environment_id)

        try:
            if isinstance(ref, StackById):
                stack = await self.reader.get_stack_by_id(ref.stack_id)
            else:
                stack = await self.reader.get_stack_by_name(ref.name)
            if stack is None:
                self.logger.error("Stack not found", stack=str(ref))
                return None

            stack_id = stack["Id"]
            response = await self.session.delete(
                f"{API_STACK.format(stack_id=stack_id)}?endpointId={environment_id}"
            )
            self.logger.info("Stack deleted", stack_id=stack_id, environment_id=environment_id)
            return response.data if response.data is not None else {}

        except Exception as e:
            self.logger.error(
                "Failed to delete stack",
                stack=str(ref),
                environment_id=environment_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
