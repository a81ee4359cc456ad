"""Shared fixtures: a controllable clock and a stubbed upstream client."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from perplexity_insight.server.dispatcher import MessageDispatcher
from perplexity_insight.server.ratelimit import RateLimiter
from perplexity_insight.tools.perplexity import PerplexityTools, build_registry
from perplexity_insight.upstream.models import ChatCompletion


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _completion(text: str = "stubbed answer") -> ChatCompletion:
    return ChatCompletion.model_validate({
        "id": "cmpl-1",
        "model": "sonar-reasoning",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"},
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
    })


@pytest.fixture
def make_completion() -> Callable[..., ChatCompletion]:
    return _completion


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream() -> MagicMock:
    """Stands in for PerplexityClient; ``complete`` returns a fixed completion."""
    client = MagicMock()
    client.complete = AsyncMock(return_value=_completion())
    return client


@pytest.fixture
def limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(per_minute=3, per_day=100, clock=clock)


@pytest.fixture
def dispatcher(upstream: MagicMock, limiter: RateLimiter) -> MessageDispatcher:
    registry = build_registry(PerplexityTools(upstream))
    return MessageDispatcher(registry, limiter, server_name="perplexity-insight", server_version="0.1.0")
