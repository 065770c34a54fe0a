"""
Stack Controls

Validated start/stop/update wrappers over the Portainer stack endpoints and
the redeploy workflow built on top of them.
"""

import asyncio
from typing import Any

import structlog

from ..constants import API_STACK, REDEPLOY_SETTLE_SECONDS
from ..core.session import PortainerSession
from ..core.validation import is_non_empty_string, is_optional_environment_id, is_positive_id
from ..models.container import StackSummary
from .environment import EnvironmentService
from .resources import ResourceReader


class StackControls:
    """Stack lifecycle operations."""

    def __init__(
        self,
        session: PortainerSession,
        environments: EnvironmentService,
        reader: ResourceReader,
        settle_seconds: float = REDEPLOY_SETTLE_SECONDS,
    ):
        self.session = session
        self.environments = environments
        self.reader = reader
        self.settle_seconds = settle_seconds
        self.logger = structlog.get_logger().bind(service="StackControls")

    async def _prepare(self, operation: str, stack_id: Any, environment_id: Any) -> int | None:
        """Validate a stack id and environment, resolving the environment if omitted."""
        if not is_positive_id(stack_id):
            self.logger.error("Invalid stack_id: must be a positive integer", operation=operation)
            return None
        if not is_optional_environment_id(environment_id):
            self.logger.error(
                "Invalid environment_id: must be a positive integer or None", operation=operation
            )
            return None

        if environment_id is None:
            environment_id = await self.environments.ensure_environment()
        if environment_id is None:
            self.logger.error(
                f"No Portainer environments found. Cannot {operation} stack.", stack_id=stack_id
            )
            return None
        return int(environment_id)

    async def _post_lifecycle(self, operation: str, stack_id: int, environment_id: int) -> bool:
        path = f"{API_STACK.format(stack_id=stack_id)}/{operation}?endpointId={environment_id}"
        try:
            self.logger.info(f"Requesting stack {operation}", stack_id=stack_id)
            await self.session.post(path)
        except Exception as e:
            self.logger.error(
                f"Failed to {operation} stack",
                stack_id=stack_id,
                environment_id=environment_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        self.logger.info(f"Stack {operation} succeeded", stack_id=stack_id)
        return True

    async def start_stack(self, stack_id: int, environment_id: int | None = None) -> bool:
        environment_id = await self._prepare("start", stack_id, environment_id)
        if environment_id is None:
            return False
        return await self._post_lifecycle("start", int(stack_id), environment_id)

    async def stop_stack(self, stack_id: int, environment_id: int | None = None) -> bool:
        environment_id = await self._prepare("stop", stack_id, environment_id)
        if environment_id is None:
            return False
        return await self._post_lifecycle("stop", int(stack_id), environment_id)

    async def update_stack(
        self,
        stack_id: int,
        compose_content: str,
        environment_id: int | None = None,
        pull_image: bool = True,
    ) -> bool:
        """Replace a stack's compose file content.

        Args:
            stack_id: The ID of the stack to update
            compose_content: The new docker-compose content, sent verbatim
            environment_id: Target environment; resolved when omitted
            pull_image: Whether Portainer pulls the latest images

        Returns:
            True when Portainer accepted the update
        """
        if not is_non_empty_string(compose_content):
            self.logger.error("Invalid compose_content: must be a non-empty string")
            return False
        if not isinstance(pull_image, bool):
            self.logger.error("Invalid pull_image: must be a boolean")
            return False

        environment_id = await self._prepare("update", stack_id, environment_id)
        if environment_id is None:
            return False

        stack_id = int(stack_id)
        try:
            self.logger.info("Updating stack", stack_id=stack_id, pull_image=pull_image)
            await self.session.put(
                f"{API_STACK.format(stack_id=stack_id)}?endpointId={environment_id}",
                json={
                    "StackFileContent": compose_content,
                    "Prune": False,
                    "PullImage": pull_image,
                },
            )
        except Exception as e:
            self.logger.error(
                "Failed to update stack",
                stack_id=stack_id,
                environment_id=environment_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        self.logger.info("Stack updated successfully", stack_id=stack_id)
        return True

    async def redeploy_stack(self, stack_id: int, environment_id: int | None = None) -> bool:
        """Redeploy a stack: locate it, stop it, wait, then start it again.

        A failed stop is tolerated because the stack may already be stopped.
        A missing stack or a start that raises fails the redeploy.
        """
        environment_id = await self._prepare("redeploy", stack_id, environment_id)
        if environment_id is None:
            return False

        stack_id = int(stack_id)
        try:
            self.logger.info("Redeploying stack", stack_id=stack_id, environment_id=environment_id)

            stacks = await self.reader.get_stacks()
            if not stacks:
                self.logger.error("No stacks found", environment_id=environment_id)
                return False

            stack = next(
                (s for s in map(StackSummary.model_validate, stacks) if s.id == stack_id), None
            )
            if stack is None:
                self.logger.error("Stack not found", stack_id=stack_id)
                return False

            try:
                stopped = await self.stop_stack(stack_id, environment_id)
                if not stopped:
                    self.logger.warning("Stack may already be stopped", stack_id=stack_id)
            except Exception as e:
                self.logger.warning(
                    "Stack may already be stopped", stack_id=stack_id, error=str(e)
                )

            await asyncio.sleep(self.settle_seconds)

            # Start outcome is logged by start_stack; only a raise fails the redeploy
            await self.start_stack(stack_id, environment_id)

            self.logger.info("Stack redeployed successfully", stack_id=stack_id, name=stack.name)
            return True

        except Exception as e:
            self.logger.error(
                "Failed to redeploy stack",
                stack_id=stack_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
