"""Tests for request logging middleware."""

from types import SimpleNamespace

import pytest

from portainer_mcp.middleware import LoggingMiddleware

from .conftest import MockCall


class TestLoggingMiddleware:
    """Logging, redaction and error propagation."""

    @pytest.mark.asyncio
    async def test_request_logging_success(self, logging_middleware, mock_context):
        call_next = MockCall(return_value={"success": True})

        result = await logging_middleware.on_message(mock_context, call_next)

        assert result == {"success": True}
        assert call_next.call_count == 1

    @pytest.mark.asyncio
    async def test_request_failure_is_reraised(self, logging_middleware, mock_context):
        call_next = MockCall(exception=ValueError("Portainer unreachable"))

        with pytest.raises(ValueError, match="Portainer unreachable"):
            await logging_middleware.on_message(mock_context, call_next)

    @pytest.mark.asyncio
    async def test_payloads_disabled(self, mock_context):
        middleware = LoggingMiddleware(include_payloads=False)

        result = await middleware.on_message(mock_context, MockCall())

        assert result == {"status": "success"}

    def test_sensitive_fields(self):
        assert LoggingMiddleware._is_sensitive_field("api_token")
        assert LoggingMiddleware._is_sensitive_field("X-API-Key")
        assert LoggingMiddleware._is_sensitive_field("Authorization")
        assert not LoggingMiddleware._is_sensitive_field("container_id")
        assert not LoggingMiddleware._is_sensitive_field("compose_content")

    def test_sanitize_message_redacts_nested(self, logging_middleware):
        message = SimpleNamespace(
            name="portainer_stack",
            arguments={"action": "list", "api_token": "ptr_secret", "headers": {"auth": "x"}},
            _private="hidden",
        )

        sanitized = logging_middleware._sanitize_message(message)

        assert sanitized["name"] == "portainer_stack"
        assert sanitized["arguments"]["action"] == "list"
        assert sanitized["arguments"]["api_token"] == "[REDACTED]"
        assert sanitized["arguments"]["headers"]["auth"] == "[REDACTED]"
        assert "_private" not in sanitized

    def test_long_values_truncated(self, logging_middleware):
        compose = "x" * 500

        sanitized = logging_middleware._sanitize_message(
            SimpleNamespace(arguments={"compose_content": compose})
        )

        value = sanitized["arguments"]["compose_content"]
        assert value.startswith("x" * 100)
        assert value.endswith("... [TRUNCATED]")
        assert len(value) < len(compose)
