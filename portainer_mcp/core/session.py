"""Authenticated HTTP session for the Portainer API.

One session is created at startup, passed explicitly to every service that
needs it, and closed on shutdown.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any

import aiohttp
import structlog

from ..constants import API_KEY_HEADER, API_SYSTEM_STATUS, CONTENT_TYPE_JSON
from .exceptions import PortainerAuthError, PortainerRequestError

logger = structlog.get_logger()


@dataclass(frozen=True)
class PortainerResponse:
    """Decoded Portainer API response."""

    status: int
    data: Any = None


class PortainerSession:
    """aiohttp-backed session carrying the Portainer API token."""

    def __init__(
        self,
        base_url: str,
        api_token: str = "",
        timeout: float = 30.0,
        verify_ssl: bool = True,
    ):
        self.base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._session: aiohttp.ClientSession | None = None
        self.is_validated = False

    async def __aenter__(self) -> "PortainerSession":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": CONTENT_TYPE_JSON}
        if self._api_token:
            headers[API_KEY_HEADER] = self._api_token
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the underlying HTTP session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=10, ssl=self._verify_ssl)
            self._session = aiohttp.ClientSession(
                headers=self._get_headers(),
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                connector=connector,
            )
        return self._session

    @staticmethod
    def _decode_body(text: str) -> Any:
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text

    async def request(self, method: str, path: str, json_body: Any = None) -> PortainerResponse:
        """Issue one request against the Portainer API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path, including any query string
            json_body: Optional JSON request body

        Returns:
            Decoded response

        Raises:
            PortainerAuthError: If Portainer rejects the token
            PortainerRequestError: On transport failure or non-2xx status
        """
        url = f"{self.base_url}{path}"
        kwargs: dict[str, Any] = {}
        if json_body is not None:
            kwargs["json"] = json_body

        try:
            async with self._get_session().request(method, url, **kwargs) as response:
                text = await response.text()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise PortainerRequestError(
                f"{method} {path} failed: {e}", method=method, path=path
            ) from e

        data = self._decode_body(text)
        if status in (401, 403):
            raise PortainerAuthError(
                f"{method} {path} rejected with status {status}",
                method=method,
                path=path,
                status=status,
            )
        if status >= 400:
            detail = data.get("message") if isinstance(data, dict) else data
            raise PortainerRequestError(
                f"{method} {path} returned {status}: {detail}",
                method=method,
                path=path,
                status=status,
            )

        logger.debug("Portainer request completed", method=method, path=path, status=status)
        return PortainerResponse(status=status, data=data)

    async def get(self, path: str) -> PortainerResponse:
        return await self.request("GET", path)

    async def post(self, path: str, json: Any = None) -> PortainerResponse:
        return await self.request("POST", path, json)

    async def put(self, path: str, json: Any = None) -> PortainerResponse:
        return await self.request("PUT", path, json)

    async def delete(self, path: str) -> PortainerResponse:
        return await self.request("DELETE", path)

    async def validate(self) -> bool:
        """Check the token against the API and record the outcome in ``is_validated``."""
        try:
            await self.get(API_SYSTEM_STATUS)
        except Exception as e:
            self.is_validated = False
            logger.error(
                "Portainer session validation failed",
                base_url=self.base_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        self.is_validated = True
        logger.info("Portainer session validated", base_url=self.base_url)
        return True

    async def close(self) -> None:
        """Close the HTTP session and invalidate it."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
        self.is_validated = False
