"""Tests for PerplexityClient over httpx.MockTransport."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from perplexity_insight.errors import UpstreamError
from perplexity_insight.upstream.client import DEFAULT_ENDPOINT, PerplexityClient
from perplexity_insight.upstream.models import ChatCompletionRequest


def _request() -> ChatCompletionRequest:
    return ChatCompletionRequest.build(
        model="sonar-reasoning",
        system_prompt="Be helpful.",
        user_content="Hello?",
        max_tokens=100,
    )


def _completion_body(text: str = "Hi there") -> dict[str, Any]:
    return {
        "id": "abc",
        "model": "sonar-reasoning",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 5, "completion_tokens": 3, "total_tokens": 8},
        "citations": ["https://example.com"],
    }


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> PerplexityClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PerplexityClient("test-key", http_client=http)


class TestComplete:
    async def test_success(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_completion_body())

        async with _client(handler) as client:
            completion = await client.complete(_request())

        assert completion.text == "Hi there"
        assert completion.citations == ["https://example.com"]
        assert completion.usage is not None and completion.usage.total_tokens == 8

        sent = seen[0]
        assert str(sent.url) == DEFAULT_ENDPOINT
        assert sent.headers["Authorization"] == "Bearer test-key"
        body = json.loads(sent.content)
        assert body["model"] == "sonar-reasoning"
        assert [m["role"] for m in body["messages"]] == ["system", "user"]
        assert body["max_tokens"] == 100

    async def test_non_success_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, text="Too Many Requests")

        async with _client(handler) as client:
            with pytest.raises(UpstreamError) as exc_info:
                await client.complete(_request())

        assert exc_info.value.status_code == 429
        assert exc_info.value.body == "Too Many Requests"
        assert str(exc_info.value) == "Perplexity API error: 429 Too Many Requests"

    async def test_body_not_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        async with _client(handler) as client:
            with pytest.raises(UpstreamError, match="not JSON"):
                await client.complete(_request())

    @pytest.mark.parametrize(
        "body",
        [
            {"choices": []},
            {"choices": [{"message": {}}]},
            {"id": "x"},
            ["not", "an", "object"],
        ],
    )
    async def test_missing_choice_content(self, body: Any) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        async with _client(handler) as client:
            with pytest.raises(UpstreamError, match="Malformed upstream response"):
                await client.complete(_request())

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(UpstreamError, match="connection refused") as exc_info:
                await client.complete(_request())
        assert exc_info.value.status_code is None

    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            with pytest.raises(UpstreamError, match="timed out"):
                await client.complete(_request())

    async def test_requires_context_manager(self) -> None:
        client = PerplexityClient("k")
        with pytest.raises(RuntimeError, match="async context manager"):
            await client.complete(_request())


class TestLifecycle:
    async def test_injected_client_left_open(self) -> None:
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with PerplexityClient("k", http_client=http):
            pass
        assert not http.is_closed
        await http.aclose()

    async def test_owned_client_closed(self) -> None:
        client = PerplexityClient("k")
        async with client:
            http = client._client
            assert http is not None
        assert http.is_closed
        assert client._client is None
