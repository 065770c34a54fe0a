"""Tests for the FastMCP tool surface using in-memory clients."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastmcp import Client

from portainer_mcp.client import PortainerClient
from portainer_mcp.server import PortainerMCPServer, parse_args

from .conftest import CONTAINERS, ENVIRONMENTS, STACKS


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock(spec=PortainerClient)
    client.get_stacks = AsyncMock(return_value=list(STACKS))
    client.start_stack = AsyncMock(return_value=True)
    client.stop_stack = AsyncMock(return_value=True)
    client.redeploy_stack = AsyncMock(return_value=True)
    client.update_stack = AsyncMock(return_value=True)
    client.delete_stack = AsyncMock(return_value={})
    client.get_containers = AsyncMock(return_value=list(CONTAINERS))
    client.get_container_details = AsyncMock(return_value={"Id": "abc123"})
    client.cleanup_existing_container = AsyncMock(return_value=True)
    client.handle_container = AsyncMock(return_value=True)
    client.get_environments = AsyncMock(return_value=list(ENVIRONMENTS))
    client.get_environment_details = AsyncMock(return_value=ENVIRONMENTS[0])
    client.get_status = AsyncMock(return_value={"Version": "2.19.4"})
    client.get_images = AsyncMock(return_value=[{"Id": "sha256:1"}])
    client.test_connection = AsyncMock(return_value=True)
    client.connect = AsyncMock(return_value=True)
    client.close = AsyncMock()
    return client


@pytest.fixture
def server(config, mock_client) -> PortainerMCPServer:
    server = PortainerMCPServer(config, client=mock_client)
    server._initialize_app()
    return server


@pytest.fixture
async def mcp_client(server) -> AsyncGenerator[Client, None]:
    async with Client(server.app) as client:
        yield client


class TestToolRegistration:
    @pytest.mark.asyncio
    async def test_tools_listed(self, mcp_client):
        tools = await mcp_client.list_tools()
        assert {tool.name for tool in tools} == {
            "portainer_stack",
            "portainer_container",
            "portainer_environment",
        }


class TestStackTool:
    """portainer_stack tool routing."""

    @pytest.mark.asyncio
    async def test_list(self, mcp_client):
        result = await mcp_client.call_tool("portainer_stack", {"action": "list"})

        assert result.data["success"] is True
        assert result.data["total"] == 2
        assert result.data["stacks"][0] == {
            "id": 5, "name": "web", "environment_id": 1, "status": 1
        }

    @pytest.mark.asyncio
    async def test_update(self, mcp_client, mock_client):
        result = await mcp_client.call_tool(
            "portainer_stack",
            {"action": "update", "stack_id": 5, "compose_content": "services: {}", "pull_image": False},
        )

        assert result.data["success"] is True
        mock_client.update_stack.assert_awaited_once_with(5, "services: {}", None, False)

    @pytest.mark.asyncio
    async def test_redeploy_failure(self, mcp_client, mock_client):
        mock_client.redeploy_stack.return_value = False

        result = await mcp_client.call_tool(
            "portainer_stack", {"action": "redeploy", "stack_id": 5, "environment_id": 2}
        )

        assert result.data["success"] is False
        assert "error" in result.data
        mock_client.redeploy_stack.assert_awaited_once_with(5, 2)

    @pytest.mark.asyncio
    async def test_delete_by_name(self, mcp_client, mock_client):
        result = await mcp_client.call_tool(
            "portainer_stack", {"action": "delete", "stack_name": "web"}
        )

        assert result.data["success"] is True
        mock_client.delete_stack.assert_awaited_once_with("web", None)

    @pytest.mark.asyncio
    async def test_invalid_action(self, mcp_client):
        result = await mcp_client.call_tool("portainer_stack", {"action": "explode"})

        assert result.data["success"] is False
        assert "redeploy" in result.data["valid_actions"]


class TestContainerTool:
    """portainer_container tool routing."""

    @pytest.mark.asyncio
    async def test_remove_builds_request(self, mcp_client, mock_client):
        await mcp_client.call_tool(
            "portainer_container",
            {"action": "remove", "container_id": "abc123", "force": True},
        )

        mock_client.handle_container.assert_awaited_once_with(
            {
                "action": "remove",
                "container_id": "abc123",
                "environment_id": None,
                "options": {"force": True, "remove_volumes": False},
            }
        )

    @pytest.mark.asyncio
    async def test_restart_timeout_forwarded(self, mcp_client, mock_client):
        await mcp_client.call_tool(
            "portainer_container",
            {"action": "restart", "container_id": "abc123", "timeout_ms": 2500, "environment_id": 3},
        )

        request = mock_client.handle_container.await_args.args[0]
        assert request["options"] == {"timeout_ms": 2500}
        assert request["environment_id"] == 3

    @pytest.mark.asyncio
    async def test_kill_without_signal_sends_no_options(self, mcp_client, mock_client):
        await mcp_client.call_tool("portainer_container", {"action": "kill", "container_id": "abc"})

        assert mock_client.handle_container.await_args.args[0]["options"] == {}

    @pytest.mark.asyncio
    async def test_list(self, mcp_client, mock_client):
        result = await mcp_client.call_tool(
            "portainer_container", {"action": "list", "include_stopped": False}
        )

        assert result.data["total"] == 2
        assert result.data["containers"][0]["names"] == ["/web-app"]
        mock_client.get_containers.assert_awaited_once_with(None, False)

    @pytest.mark.asyncio
    async def test_cleanup(self, mcp_client, mock_client):
        result = await mcp_client.call_tool(
            "portainer_container", {"action": "cleanup", "container_name": "web"}
        )

        assert result.data["success"] is True
        mock_client.cleanup_existing_container.assert_awaited_once_with("web", None)

    @pytest.mark.asyncio
    async def test_invalid_action(self, mcp_client, mock_client):
        result = await mcp_client.call_tool(
            "portainer_container", {"action": "explode", "container_id": "abc"}
        )

        assert result.data["success"] is False
        mock_client.handle_container.assert_not_called()


class TestEnvironmentTool:
    """portainer_environment tool routing."""

    @pytest.mark.asyncio
    async def test_list(self, mcp_client):
        result = await mcp_client.call_tool("portainer_environment", {"action": "list"})

        assert result.data["total"] == 2
        assert result.data["environments"][1]["name"] == "edge"

    @pytest.mark.asyncio
    async def test_status_unavailable(self, mcp_client, mock_client):
        mock_client.get_status.return_value = None

        result = await mcp_client.call_tool("portainer_environment", {"action": "status"})

        assert result.data["success"] is False

    @pytest.mark.asyncio
    async def test_test_connection(self, mcp_client):
        result = await mcp_client.call_tool("portainer_environment", {"action": "test_connection"})
        assert result.data["connected"] is True


class TestServerLifecycle:
    def test_run_validates_then_closes(self, config, mock_client):
        mock_client.connect.return_value = False
        server = PortainerMCPServer(config, client=mock_client)

        with patch("portainer_mcp.server.FastMCP.run_async", new_callable=AsyncMock) as run:
            server.run()

        mock_client.connect.assert_awaited_once()
        run.assert_awaited_once_with(transport="http", host="127.0.0.1", port=8000)
        mock_client.close.assert_awaited_once()

    def test_session_closed_when_server_fails(self, config, mock_client):
        server = PortainerMCPServer(config, client=mock_client)

        with patch(
            "portainer_mcp.server.FastMCP.run_async",
            new_callable=AsyncMock,
            side_effect=OSError("address in use"),
        ):
            with pytest.raises(OSError, match="address in use"):
                server.run()

        mock_client.close.assert_awaited_once()

    def test_parse_args(self, monkeypatch):
        monkeypatch.delenv("FASTMCP_PORT", raising=False)

        args = parse_args(["--host", "0.0.0.0", "--log-level", "DEBUG"])

        assert args.host == "0.0.0.0"
        assert args.port == 8000
        assert args.log_level == "DEBUG"


class TestMalformedListPayloads:
    """List actions tolerate payloads the models cannot read."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "tool,getter",
        [
            ("portainer_stack", "get_stacks"),
            ("portainer_container", "get_containers"),
            ("portainer_environment", "get_environments"),
        ],
    )
    async def test_non_list_payload(self, mcp_client, mock_client, tool, getter):
        getattr(mock_client, getter).return_value = "<html>proxy error</html>"

        result = await mcp_client.call_tool(tool, {"action": "list"})

        assert result.data["success"] is False
        assert "error" in result.data

    @pytest.mark.asyncio
    async def test_entries_without_id_skipped(self, mcp_client, mock_client):
        mock_client.get_stacks.return_value = [{"Name": "orphan"}, STACKS[1]]

        result = await mcp_client.call_tool("portainer_stack", {"action": "list"})

        assert result.data["success"] is True
        assert result.data["total"] == 1
        assert result.data["stacks"][0]["name"] == "db"
