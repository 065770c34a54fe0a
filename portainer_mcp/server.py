"""
FastMCP Portainer Server

Exposes Portainer stack, container and environment control as MCP tools.
"""

import argparse
import asyncio
import os
import sys
import tempfile
from pathlib import Path
from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import Field, ValidationError

from .client import PortainerClient
from .constants import ENV_FASTMCP_HOST, ENV_FASTMCP_PORT, ENV_LOG_LEVEL
from .core.config_loader import PortainerConfig, load_config
from .core.exceptions import ConfigurationError
from .core.logging_config import get_server_logger, setup_logging
from .middleware import LoggingMiddleware
from .models.container import (
    ContainerSummary,
    EnvironmentSummary,
    PortainerModel,
    StackSummary,
)
from .models.enums import (
    CONTAINER_QUERY_ACTIONS,
    ContainerAction,
    EnvironmentAction,
    StackAction,
)

VALID_CONTAINER_ACTIONS = [*CONTAINER_QUERY_ACTIONS, *(a.value for a in ContainerAction)]


def _invalid_action(action: str, valid: list[str]) -> dict[str, Any]:
    return {
        "success": False,
        "error": f"Invalid action '{action}'. Valid actions: {', '.join(valid)}",
        "valid_actions": valid,
    }


def _summarize(model: type[PortainerModel], items: Any) -> list[dict[str, Any]] | None:
    """Dump each entry through ``model``; entries that do not validate are skipped."""
    if not isinstance(items, list):
        return None
    summaries = []
    for item in items:
        try:
            summaries.append(model.model_validate(item).model_dump())
        except ValidationError:
            continue
    return summaries


def _result(success: bool, action: str, **data: Any) -> dict[str, Any]:
    result: dict[str, Any] = {"success": success, "action": action}
    result.update({k: v for k, v in data.items() if v is not None})
    if not success and "error" not in result:
        result["error"] = f"{action} failed; see server logs for details"
    return result


class PortainerMCPServer:
    """FastMCP server forwarding tool calls to a PortainerClient."""

    def __init__(self, config: PortainerConfig, client: PortainerClient | None = None):
        self.config = config
        self.client = client or PortainerClient.from_config(config)
        self.logger = get_server_logger()
        self.app: FastMCP | None = None

        self.logger.info(
            "Portainer MCP Server initialized",
            portainer_url=config.portainer_url,
            environment_id=config.environment_id,
        )

    def _parse_env_bool(self, var_name: str, default: bool) -> bool:
        value = os.getenv(var_name)
        if value is None:
            return default
        return value.strip().lower() in ("1", "true", "yes", "on")

    def _initialize_app(self) -> None:
        """Create the FastMCP app, add middleware and register tools."""
        self.app = FastMCP("Portainer Control")
        self.app.add_middleware(
            LoggingMiddleware(
                include_payloads=self._parse_env_bool("LOG_INCLUDE_PAYLOADS", True),
            )
        )

        self.app.tool(
            self.portainer_stack,
            annotations={
                "title": "Portainer Stack Management",
                "readOnlyHint": False,
                "destructiveHint": True,  # delete removes the stack
                "idempotentHint": False,
                "openWorldHint": True,
            },
        )
        self.app.tool(
            self.portainer_container,
            annotations={
                "title": "Portainer Container Management",
                "readOnlyHint": False,
                "destructiveHint": True,  # remove and cleanup delete containers
                "idempotentHint": False,
                "openWorldHint": True,
            },
        )
        self.app.tool(
            self.portainer_environment,
            annotations={
                "title": "Portainer Environment Information",
                "readOnlyHint": True,
                "destructiveHint": False,
                "idempotentHint": True,
                "openWorldHint": True,
            },
        )

    async def portainer_stack(
        self,
        action: Annotated[str, Field(description="Action to perform")],
        stack_id: Annotated[int, Field(default=0, ge=0, description="Stack identifier")] = 0,
        stack_name: Annotated[
            str, Field(default="", description="Stack name (delete only, alternative to id)")
        ] = "",
        compose_content: Annotated[
            str, Field(default="", description="Docker Compose file content (update)")
        ] = "",
        pull_image: Annotated[
            bool, Field(default=True, description="Pull latest images on update")
        ] = True,
        environment_id: Annotated[
            int | None, Field(default=None, description="Portainer environment id")
        ] = None,
    ) -> dict[str, Any]:
        """Portainer stack management.

        Actions:
        • list: List stacks
        • start / stop / redeploy: Required: stack_id
        • update: Required: stack_id, compose_content. Optional: pull_image
        • delete: Required: stack_id or stack_name
        """
        try:
            stack_action = StackAction(action)
        except ValueError:
            return _invalid_action(action, [a.value for a in StackAction])

        if stack_action is StackAction.LIST:
            summaries = _summarize(StackSummary, await self.client.get_stacks())
            if summaries is None:
                return _result(False, action)
            return _result(True, action, stacks=summaries, total=len(summaries))

        if stack_action is StackAction.DELETE:
            target: int | str = stack_id or stack_name
            response = await self.client.delete_stack(target, environment_id)
            return _result(response is not None, action, stack=target, response=response)

        if stack_action is StackAction.UPDATE:
            success = await self.client.update_stack(
                stack_id, compose_content, environment_id, pull_image
            )
            return _result(success, action, stack_id=stack_id)

        operations = {
            StackAction.START: self.client.start_stack,
            StackAction.STOP: self.client.stop_stack,
            StackAction.REDEPLOY: self.client.redeploy_stack,
        }
        success = await operations[stack_action](stack_id, environment_id)
        return _result(success, action, stack_id=stack_id)

    async def portainer_container(
        self,
        action: Annotated[str, Field(description="Action to perform")],
        container_id: Annotated[
            str, Field(default="", description="Container id or name")
        ] = "",
        container_name: Annotated[
            str, Field(default="", description="Container name (cleanup)")
        ] = "",
        environment_id: Annotated[
            int | None, Field(default=None, description="Portainer environment id")
        ] = None,
        include_stopped: Annotated[
            bool, Field(default=True, description="Include stopped containers (list)")
        ] = True,
        force: Annotated[bool, Field(default=False, description="Force removal")] = False,
        remove_volumes: Annotated[
            bool, Field(default=False, description="Remove anonymous volumes with the container")
        ] = False,
        signal: Annotated[
            str | None, Field(default=None, description="Signal for kill (default SIGKILL)")
        ] = None,
        timeout_ms: Annotated[
            int | None, Field(default=None, ge=0, description="Restart timeout in milliseconds")
        ] = None,
    ) -> dict[str, Any]:
        """Portainer container management.

        Actions:
        • list: List containers. Optional: include_stopped
        • info: Inspect a container by id, exact name or partial name
        • cleanup: Stop (if running) and remove a container by name
        • start / stop / pause / unpause: Required: container_id
        • kill: Required: container_id. Optional: signal
        • restart: Required: container_id. Optional: timeout_ms
        • remove: Required: container_id. Optional: force, remove_volumes
        """
        if action not in VALID_CONTAINER_ACTIONS:
            return _invalid_action(action, VALID_CONTAINER_ACTIONS)

        if action == "list":
            summaries = _summarize(
                ContainerSummary,
                await self.client.get_containers(environment_id, include_stopped),
            )
            if summaries is None:
                return _result(False, action)
            return _result(True, action, containers=summaries, total=len(summaries))

        if action == "info":
            details = await self.client.get_container_details(container_id, environment_id)
            return _result(details is not None, action, container_id=container_id, info=details)

        if action == "cleanup":
            name = container_name or container_id
            success = await self.client.cleanup_existing_container(name, environment_id)
            return _result(success, action, container_name=name)

        options: dict[str, Any] = {}
        if action == ContainerAction.REMOVE.value:
            options = {"force": force, "remove_volumes": remove_volumes}
        elif action == ContainerAction.KILL.value and signal:
            options = {"signal": signal}
        elif action == ContainerAction.RESTART.value and timeout_ms is not None:
            options = {"timeout_ms": timeout_ms}

        success = await self.client.handle_container(
            {
                "action": action,
                "container_id": container_id,
                "environment_id": environment_id,
                "options": options,
            }
        )
        return _result(success, action, container_id=container_id)

    async def portainer_environment(
        self,
        action: Annotated[str, Field(description="Action to perform")],
        environment_id: Annotated[
            int | None, Field(default=None, description="Portainer environment id")
        ] = None,
    ) -> dict[str, Any]:
        """Portainer environment information.

        Actions:
        • list: List environments
        • info: Environment details (defaults to the configured environment)
        • status: Portainer system status
        • images: List images in an environment
        • test_connection: Check the API token against Portainer
        """
        try:
            env_action = EnvironmentAction(action)
        except ValueError:
            return _invalid_action(action, [a.value for a in EnvironmentAction])

        if env_action is EnvironmentAction.LIST:
            summaries = _summarize(EnvironmentSummary, await self.client.get_environments())
            if summaries is None:
                return _result(False, action)
            return _result(True, action, environments=summaries, total=len(summaries))

        if env_action is EnvironmentAction.INFO:
            details = await self.client.get_environment_details(environment_id)
            return _result(details is not None, action, environment=details)

        if env_action is EnvironmentAction.STATUS:
            status = await self.client.get_status()
            return _result(status is not None, action, status=status)

        if env_action is EnvironmentAction.IMAGES:
            images = await self.client.get_images(environment_id)
            return _result(
                images is not None,
                action,
                images=images,
                total=len(images) if images is not None else None,
            )

        connected = await self.client.test_connection()
        return _result(connected, action, connected=connected)

    async def serve(self) -> None:
        """Validate the session, serve over HTTP, and close the session on shutdown.

        Runs on a single event loop so the aiohttp session created during
        validation stays usable for tool calls.
        """
        if self.app is None:
            raise RuntimeError("FastMCP app not initialized")

        validated = await self.client.connect()
        if not validated:
            self.logger.warning(
                "Portainer session not validated; reads will fail until the token is accepted",
                portainer_url=self.config.portainer_url,
            )

        self.logger.info(
            "Starting Portainer MCP Server",
            host=self.config.server_host,
            port=self.config.server_port,
        )
        try:
            await self.app.run_async(
                transport="http",
                host=self.config.server_host,
                port=self.config.server_port,
            )
        finally:
            await self.client.close()

    def run(self) -> None:
        """Run the FastMCP server."""
        try:
            self._initialize_app()
            asyncio.run(self.serve())
        except Exception as e:
            self.logger.error("Server startup failed", error=str(e))
            raise


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="FastMCP Portainer control server")
    parser.add_argument("--host", default=os.getenv(ENV_FASTMCP_HOST, "127.0.0.1"), help="Server host")
    parser.add_argument(
        "--port", type=int, default=int(os.getenv(ENV_FASTMCP_PORT, "8000")), help="Server port"
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv(ENV_LOG_LEVEL, "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument(
        "--log-dir",
        default=os.getenv("PORTAINER_MCP_LOG_DIR", str(Path(tempfile.gettempdir()) / "portainer-mcp")),
        help="Directory for log files",
    )
    return parser.parse_args(argv)


def main() -> None:
    """Main entry point."""
    args = parse_args()
    setup_logging(log_dir=args.log_dir, log_level=args.log_level)
    logger = get_server_logger()

    try:
        config = load_config(
            FASTMCP_HOST=args.host, FASTMCP_PORT=args.port, LOG_LEVEL=args.log_level
        )
    except ConfigurationError as e:
        logger.error("Configuration error", error=str(e))
        sys.exit(1)

    server = PortainerMCPServer(config)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error("Server error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
