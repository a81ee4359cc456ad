"""ToolRegistry — immutable name-to-descriptor lookup for served tools."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from perplexity_insight.errors import InvalidParamsError, ToolNotFoundError
from perplexity_insight.server.models import ToolResult
from perplexity_insight.tools.models import AskArguments, SearchArguments, parse_tool_arguments
from perplexity_insight.tools.schema import ParameterSchema

ToolHandler = Callable[[Any], Awaitable[ToolResult]]


class ToolDescriptor(BaseModel):
    """A named, schema-described tool bound to its handler."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str
    parameters: ParameterSchema
    handler: ToolHandler

    def to_listing(self) -> dict[str, Any]:
        """Render the ``tools/list`` entry for this tool."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters.to_json_schema(),
        }

    def parse_arguments(self, arguments: dict[str, Any]) -> AskArguments | SearchArguments:
        """Validate raw ``tools/call`` arguments against the declared schema."""
        values = self.parameters.validate_arguments(arguments)
        try:
            return parse_tool_arguments(self.name, values)
        except ValidationError as exc:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise InvalidParamsError(errors) from exc


class ToolRegistry:
    """Holds tool descriptors keyed by name, in registration order.

    Usage::

        registry = ToolRegistry([ask_descriptor, search_descriptor])
        registry.list_tools()          # tools/list payload
        registry.get("perplexity_ask")  # raises ToolNotFoundError if absent
    """

    def __init__(self, descriptors: Iterable[ToolDescriptor]) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in self._tools:
                msg = f"duplicate tool name: {descriptor.name}"
                raise ValueError(msg)
            self._tools[descriptor.name] = descriptor

    def get(self, name: str) -> ToolDescriptor:
        descriptor = self._tools.get(name)
        if descriptor is None:
            raise ToolNotFoundError(name)
        return descriptor

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[dict[str, Any]]:
        """Return a fresh ``tools/list`` payload built from every descriptor."""
        return [descriptor.to_listing() for descriptor in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())
