"""Typed tool arguments — a tagged union over the served tools."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

ASK_TOOL = "perplexity_ask"
SEARCH_TOOL = "perplexity_search"


class _CompletionArguments(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str
    system_prompt: str
    max_tokens: int


class AskArguments(_CompletionArguments):
    """Arguments of ``perplexity_ask``."""

    tool: Literal["perplexity_ask"] = ASK_TOOL
    question: str


class SearchArguments(_CompletionArguments):
    """Arguments of ``perplexity_search``."""

    tool: Literal["perplexity_search"] = SEARCH_TOOL
    query: str


ToolArguments = Annotated[AskArguments | SearchArguments, Field(discriminator="tool")]

_arguments_adapter: TypeAdapter[AskArguments | SearchArguments] = TypeAdapter(ToolArguments)


def parse_tool_arguments(tool: str, values: dict[str, object]) -> AskArguments | SearchArguments:
    """Build the typed arguments for *tool* from schema-validated *values*."""
    return _arguments_adapter.validate_python({**values, "tool": tool})
