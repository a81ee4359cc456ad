"""Tool layer — parameter schemas, descriptors and the Perplexity tools."""

from perplexity_insight.tools.models import AskArguments, SearchArguments, ToolArguments
from perplexity_insight.tools.registry import ToolDescriptor, ToolRegistry
from perplexity_insight.tools.schema import ParameterSchema, ParameterSpec

__all__ = [
    "AskArguments",
    "ParameterSchema",
    "ParameterSpec",
    "SearchArguments",
    "ToolArguments",
    "ToolDescriptor",
    "ToolRegistry",
]
