"""
Environment Service

Environment listing, details, and resolution of the environment a command
applies to when the caller does not name one.
"""

from typing import Any

import structlog

from ..constants import API_ENDPOINT, API_ENDPOINTS, NO_ENVIRONMENT_MESSAGE, SESSION_NOT_VALIDATED
from ..core.session import PortainerSession
from ..core.validation import as_record_list, is_positive_id


class EnvironmentService:
    """Environment reads and the environment resolver."""

    def __init__(self, session: PortainerSession, environment_id: int | None = None):
        self.session = session
        self.environment_id = int(environment_id) if is_positive_id(environment_id) else None
        self.logger = structlog.get_logger()

    async def get_environments(self) -> list[dict[str, Any]] | None:
        """List every environment visible to the token."""
        if not self.session.is_validated:
            self.logger.error(SESSION_NOT_VALIDATED, operation="get_environments")
            return None

        try:
            response = await self.session.get(API_ENDPOINTS)
            return as_record_list(response.data)
        except Exception as e:
            self.logger.error(
                "Failed to fetch environments", error=str(e), error_type=type(e).__name__
            )
            return None

    async def get_environment_details(
        self, environment_id: int | None = None
    ) -> dict[str, Any] | None:
        """Fetch one environment; defaults to the client environment, then resolution."""
        if not self.session.is_validated:
            self.logger.error(SESSION_NOT_VALIDATED, operation="get_environment_details")
            return None

        if environment_id is not None and not is_positive_id(environment_id):
            self.logger.error("Invalid environment_id: must be a positive integer or None")
            return None

        if environment_id is None:
            environment_id = await self.ensure_environment()
        if environment_id is None:
            return None
        environment_id = int(environment_id)

        try:
            response = await self.session.get(API_ENDPOINT.format(environment_id=environment_id))
            return response.data
        except Exception as e:
            self.logger.error(
                "Failed to fetch environment",
                environment_id=environment_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def get_first_environment_id(self) -> int | None:
        """Id of the first discoverable environment, or None."""
        try:
            environments = await self.get_environments()
            if not environments:
                return None
            first_id = environments[0].get("Id")
            return int(first_id) if is_positive_id(first_id) else None
        except Exception as e:
            self.logger.error(
                "Error getting first environment ID", error=str(e), error_type=type(e).__name__
            )
            return None

    async def ensure_environment(self, explicit: int | None = None) -> int | None:
        """Return a confirmed environment id, or None when none is available.

        An explicit valid id is returned unchanged without a network call, as
        is the client-wide default. Otherwise the first environment wins.
        """
        if is_positive_id(explicit):
            return int(explicit)
        if self.environment_id is not None:
            return self.environment_id

        environment_id = await self.get_first_environment_id()
        if environment_id is None:
            self.logger.warning(NO_ENVIRONMENT_MESSAGE)
        return environment_id
