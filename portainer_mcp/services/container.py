"""
Container Controls

Maps one validated container action onto exactly one Portainer Docker-proxy
call and reports the outcome as a boolean.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any
from urllib.parse import quote, urlencode

import structlog

from ..constants import API_DOCKER_CONTAINERS, DEFAULT_KILL_SIGNAL
from ..core.session import PortainerSession
from ..core.validation import parse_action_request
from ..models.container import ContainerActionOptions, ContainerActionRequest
from ..models.enums import ContainerAction
from .environment import EnvironmentService

# Actions issued as POST {container}/{action} with no extra parameters
_SIMPLE_POST_ACTIONS = {
    ContainerAction.START,
    ContainerAction.STOP,
    ContainerAction.PAUSE,
    ContainerAction.UNPAUSE,
}

_PAST_TENSE = {
    ContainerAction.START: "started",
    ContainerAction.STOP: "stopped",
    ContainerAction.KILL: "killed",
    ContainerAction.PAUSE: "paused",
    ContainerAction.UNPAUSE: "unpaused",
    ContainerAction.RESTART: "restarted",
    ContainerAction.REMOVE: "removed",
}


def container_path(environment_id: int, container_id: str) -> str:
    """Docker-proxy path of one container with the id escaped as a single segment.

    Raises:
        ValueError: If the id is a dot segment, which the URL would collapse
    """
    if container_id in (".", ".."):
        raise ValueError(f"Invalid container id: {container_id!r}")
    base = API_DOCKER_CONTAINERS.format(environment_id=environment_id)
    return f"{base}/{quote(container_id, safe='')}"


def format_restart_timeout(timeout_ms: float) -> str:
    """Milliseconds to seconds, rounded to two significant digits.

    Rendered in plain decimal notation: 5000 -> "5", 1234 -> "1.2",
    250 -> "0.25", 123456 -> "120".
    """
    seconds = Decimal(f"{timeout_ms / 1000:.2g}").normalize()
    return format(seconds, "f")


def build_container_call(
    action: ContainerAction,
    container_id: str,
    environment_id: int,
    options: ContainerActionOptions,
) -> tuple[str, str]:
    """Return the (HTTP method, path) pair for a container action."""
    base = container_path(environment_id, container_id)

    if action in _SIMPLE_POST_ACTIONS:
        return "post", f"{base}/{action.value}"
    if action is ContainerAction.KILL:
        query = urlencode({"signal": options.signal or DEFAULT_KILL_SIGNAL})
        return "post", f"{base}/kill?{query}"
    if action is ContainerAction.RESTART:
        if options.timeout_ms is None:
            return "post", f"{base}/restart"
        query = urlencode({"t": format_restart_timeout(options.timeout_ms)})
        return "post", f"{base}/restart?{query}"
    if action is ContainerAction.REMOVE:
        flags = {}
        if options.force:
            flags["force"] = "true"
        if options.remove_volumes:
            flags["v"] = "true"
        return "delete", f"{base}?{urlencode(flags)}" if flags else base

    raise ValueError(f"Unsupported container action: {action}")


class ContainerControls:
    """Single-action dispatcher for container lifecycle commands."""

    def __init__(self, session: PortainerSession, environments: EnvironmentService):
        self.session = session
        self.environments = environments
        self.logger = structlog.get_logger()

    async def handle_container(
        self, request: ContainerActionRequest | Mapping[str, Any]
    ) -> bool:
        """Validate, resolve the environment, and issue one container action.

        Args:
            request: Action request with ``action``, ``container_id`` and
                optional ``environment_id`` and ``options``

        Returns:
            True when the remote call succeeded, False otherwise
        """
        parsed = parse_action_request(request)
        if parsed is None:
            return False

        environment_id = parsed.environment_id
        if environment_id is None:
            environment_id = await self.environments.ensure_environment()
        if environment_id is None:
            self.logger.error(
                "No Portainer environments found. Cannot handle container action.",
                action=parsed.action.value,
                container_id=parsed.container_id,
            )
            return False

        try:
            method, path = build_container_call(
                parsed.action, parsed.container_id, environment_id, parsed.options
            )
            await getattr(self.session, method)(path)
        except Exception as e:
            self.logger.error(
                f"Failed to {parsed.action.value} container",
                container_id=parsed.container_id,
                environment_id=environment_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        self.logger.info(
            f"Container {_PAST_TENSE[parsed.action]} successfully",
            container_id=parsed.container_id,
            environment_id=environment_id,
            action=parsed.action.value,
        )
        return True
