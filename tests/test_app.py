"""Tests for dispatcher wiring."""

from unittest.mock import MagicMock

from perplexity_insight.app import build_dispatcher, make_client
from perplexity_insight.config import RateLimitConfig, ServerConfig, ToolDefaults


def _config() -> ServerConfig:
    return ServerConfig(
        api_key="pplx-test",
        api_endpoint="https://proxy.example.com/chat",
        request_timeout=12,
        rate_limit=RateLimitConfig(per_minute=7, per_day=70),
        tools=ToolDefaults(models=["sonar", "sonar-pro"], default_model="sonar-pro"),
    )


class TestBuildDispatcher:
    def test_limits_from_config(self) -> None:
        dispatcher = build_dispatcher(_config(), MagicMock())
        assert dispatcher.limiter.per_minute == 7
        assert dispatcher.limiter.per_day == 70

    def test_tool_defaults_from_config(self) -> None:
        dispatcher = build_dispatcher(_config(), MagicMock())
        ask = dispatcher.registry.get("perplexity_ask").to_listing()
        model = ask["inputSchema"]["properties"]["model"]
        assert model["enum"] == ["sonar", "sonar-pro"]
        assert model["default"] == "sonar-pro"

    async def test_initialize_reports_server_identity(self) -> None:
        dispatcher = build_dispatcher(_config(), MagicMock())
        response = await dispatcher.handle('{"jsonrpc":"2.0","id":1,"method":"initialize","params":{}}')
        assert response is not None
        assert response.result["server"] == {"name": "perplexity-insight", "version": "0.1.0"}


class TestMakeClient:
    def test_uses_config(self) -> None:
        client = make_client(_config())
        assert client._endpoint == "https://proxy.example.com/chat"
        assert client._timeout.read == 12
