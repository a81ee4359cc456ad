"""The ``perplexity_ask`` and ``perplexity_search`` tools."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from perplexity_insight.config import ToolDefaults
from perplexity_insight.errors import UpstreamError
from perplexity_insight.server.models import ToolResult
from perplexity_insight.tools.models import ASK_TOOL, SEARCH_TOOL, AskArguments, SearchArguments
from perplexity_insight.tools.registry import ToolDescriptor, ToolRegistry
from perplexity_insight.tools.schema import ParameterSchema, ParameterSpec
from perplexity_insight.upstream.models import ChatCompletionRequest

if TYPE_CHECKING:
    from perplexity_insight.upstream.client import PerplexityClient

logger = logging.getLogger(__name__)

ASK_DESCRIPTION = (
    "Send a direct question to Perplexity AI and receive a comprehensive answer. "
    "This tool leverages powerful AI models to analyse and respond to complex questions "
    "with detailed, factual answers. Citations for sources are included when available. "
    "Best for direct questions requiring factual or analytical responses."
)

SEARCH_DESCRIPTION = (
    "Perform a web search query with Perplexity AI to find relevant information online. "
    "This tool combines web search capabilities with AI-powered analysis to deliver "
    "comprehensive search results with source citations. "
    "Best for research questions, current events queries, or when you need information "
    "from multiple online sources."
)

SEARCH_INSTRUCTION = " When responding to search queries, please include sources and citations."


def _shared_parameters(defaults: ToolDefaults) -> tuple[ParameterSpec, ...]:
    return (
        ParameterSpec(
            name="model",
            type="string",
            description="Perplexity model to use",
            enum=tuple(defaults.models),
            default=defaults.default_model,
        ),
        ParameterSpec(
            name="system_prompt",
            type="string",
            description="Optional system prompt to guide the model's behaviour",
            default=defaults.system_prompt,
        ),
        ParameterSpec(
            name="max_tokens",
            type="number",
            description="Maximum number of tokens in the response",
            default=defaults.max_tokens,
        ),
    )


def ask_schema(defaults: ToolDefaults) -> ParameterSchema:
    question = ParameterSpec(
        name="question",
        type="string",
        description="The question to ask Perplexity AI",
        required=True,
    )
    return ParameterSchema(parameters=(question, *_shared_parameters(defaults)))


def search_schema(defaults: ToolDefaults) -> ParameterSchema:
    query = ParameterSpec(
        name="query",
        type="string",
        description="Search query to find information online",
        required=True,
    )
    return ParameterSchema(parameters=(query, *_shared_parameters(defaults)))


class PerplexityTools:
    """Tool handlers backed by a :class:`PerplexityClient`.

    Upstream failures never escape: they come back as a :class:`ToolResult`
    with ``isError`` set.
    """

    def __init__(self, client: PerplexityClient) -> None:
        self._client = client

    async def ask(self, args: AskArguments) -> ToolResult:
        request = ChatCompletionRequest.build(
            model=args.model,
            system_prompt=args.system_prompt,
            user_content=args.question,
            max_tokens=args.max_tokens,
        )
        return await self._complete(ASK_TOOL, request)

    async def search(self, args: SearchArguments) -> ToolResult:
        request = ChatCompletionRequest.build(
            model=args.model,
            system_prompt=args.system_prompt + SEARCH_INSTRUCTION,
            user_content=f"Search for information about: {args.query}",
            max_tokens=args.max_tokens,
        )
        return await self._complete(SEARCH_TOOL, request)

    async def _complete(self, tool: str, request: ChatCompletionRequest) -> ToolResult:
        try:
            completion = await self._client.complete(request)
        except UpstreamError as exc:
            logger.error("%s failed: %s", tool, exc)
            return ToolResult.error(str(exc))
        return ToolResult.from_text(completion.text)


def build_registry(tools: PerplexityTools, defaults: ToolDefaults | None = None) -> ToolRegistry:
    """Create the registry serving both Perplexity tools."""
    defaults = defaults or ToolDefaults()
    return ToolRegistry([
        ToolDescriptor(
            name=ASK_TOOL,
            description=ASK_DESCRIPTION,
            parameters=ask_schema(defaults),
            handler=tools.ask,
        ),
        ToolDescriptor(
            name=SEARCH_TOOL,
            description=SEARCH_DESCRIPTION,
            parameters=search_schema(defaults),
            handler=tools.search,
        ),
    ])
