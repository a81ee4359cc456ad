"""Wiring — assemble the dispatcher from a :class:`ServerConfig` and serve."""

from __future__ import annotations

from typing import TYPE_CHECKING

from perplexity_insight.server.dispatcher import MessageDispatcher
from perplexity_insight.server.ratelimit import RateLimiter
from perplexity_insight.server.transport import StdioServer
from perplexity_insight.tools.perplexity import PerplexityTools, build_registry
from perplexity_insight.upstream.client import PerplexityClient

if TYPE_CHECKING:
    from perplexity_insight.config import ServerConfig
    from perplexity_insight.server.dispatcher import DiagnosticSink


def build_dispatcher(
    config: ServerConfig,
    client: PerplexityClient,
    *,
    limiter: RateLimiter | None = None,
    diagnostics: DiagnosticSink | None = None,
) -> MessageDispatcher:
    """Create a dispatcher serving both Perplexity tools through *client*."""
    registry = build_registry(PerplexityTools(client), config.tools)
    limiter = limiter or RateLimiter(
        per_minute=config.rate_limit.per_minute,
        per_day=config.rate_limit.per_day,
    )
    return MessageDispatcher(
        registry,
        limiter,
        server_name=config.server_name,
        server_version=config.server_version,
        diagnostics=diagnostics,
    )


def make_client(config: ServerConfig) -> PerplexityClient:
    return PerplexityClient(
        config.api_key,
        endpoint=config.api_endpoint,
        timeout=config.request_timeout,
    )


async def serve_stdio(config: ServerConfig) -> None:
    """Serve JSON-RPC on stdin/stdout until stdin closes."""
    async with make_client(config) as client:
        dispatcher = build_dispatcher(config, client)
        await StdioServer(dispatcher).serve()
