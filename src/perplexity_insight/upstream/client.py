"""PerplexityClient — one authenticated POST to the chat-completions endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from perplexity_insight.errors import UpstreamError
from perplexity_insight.upstream.models import ChatCompletion, ChatCompletionRequest
from perplexity_insight.utils.telemetry import (
    ATTR_MODEL,
    ATTR_UPSTREAM_STATUS,
    get_tracer,
    usage_attributes,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_ENDPOINT = "https://api.perplexity.ai/chat/completions"


class PerplexityClient:
    """Async client for the Perplexity chat-completions API.

    Usage::

        async with PerplexityClient(api_key) as client:
            completion = await client.complete(request)
            print(completion.text)

    Every failure (non-2xx status, transport error, timeout, malformed body)
    is raised as :class:`UpstreamError`.
    """

    def __init__(
        self,
        api_key: str,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._endpoint = endpoint
        self._timeout = httpx.Timeout(timeout)
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> PerplexityClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "PerplexityClient must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    async def complete(self, request: ChatCompletionRequest) -> ChatCompletion:
        """Send *request* and return the parsed completion."""
        with _tracer.start_as_current_span("upstream.complete") as span:
            span.set_attribute(ATTR_MODEL, request.model)
            try:
                response = await self._http().post(
                    self._endpoint,
                    json=request.model_dump(),
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "Content-Type": "application/json",
                    },
                    timeout=self._timeout,
                )
            except httpx.HTTPError as exc:
                logger.error("Perplexity request failed: %s", exc)
                raise UpstreamError(str(exc) or exc.__class__.__name__) from exc

            span.set_attribute(ATTR_UPSTREAM_STATUS, response.status_code)
            if not response.is_success:
                logger.error("Perplexity API returned %d", response.status_code)
                raise UpstreamError(
                    response.text,
                    status_code=response.status_code,
                    body=response.text,
                )

            completion = self._parse(response)
            usage = completion.usage
            if usage is not None:
                span.set_attributes(usage_attributes(usage.prompt_tokens, usage.completion_tokens, usage.total_tokens))
            return completion

    @staticmethod
    def _parse(response: httpx.Response) -> ChatCompletion:
        """Parse the body, rejecting anything without ``choices[0].message.content``."""
        try:
            data: Any = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Malformed upstream response: body is not JSON",
                body=response.text,
            ) from exc
        try:
            return ChatCompletion.model_validate(data)
        except ValidationError as exc:
            raise UpstreamError(
                "Malformed upstream response: missing choices[0].message.content",
                body=response.text,
            ) from exc
