"""Tests for ToolDescriptor and ToolRegistry."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from perplexity_insight.config import ToolDefaults
from perplexity_insight.errors import InvalidParamsError, ToolNotFoundError
from perplexity_insight.server.models import ToolResult
from perplexity_insight.tools.models import AskArguments, SearchArguments
from perplexity_insight.tools.perplexity import ask_schema, build_registry, search_schema
from perplexity_insight.tools.registry import ToolDescriptor, ToolRegistry


def _descriptor(name: str = "perplexity_ask") -> ToolDescriptor:
    schema = ask_schema(ToolDefaults()) if name == "perplexity_ask" else search_schema(ToolDefaults())
    return ToolDescriptor(
        name=name,
        description=f"{name} tool",
        parameters=schema,
        handler=AsyncMock(return_value=ToolResult.from_text("ok")),
    )


class TestToolRegistry:
    def test_lookup_by_name(self) -> None:
        ask = _descriptor()
        registry = ToolRegistry([ask])
        assert registry.get("perplexity_ask") is ask
        assert "perplexity_ask" in registry
        assert len(registry) == 1

    def test_unknown_name_raises(self) -> None:
        registry = ToolRegistry([_descriptor()])
        with pytest.raises(ToolNotFoundError, match="Unknown tool: nope"):
            registry.get("nope")

    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="duplicate"):
            ToolRegistry([_descriptor(), _descriptor()])

    def test_preserves_registration_order(self) -> None:
        registry = ToolRegistry([_descriptor("perplexity_search"), _descriptor("perplexity_ask")])
        assert registry.names() == ["perplexity_search", "perplexity_ask"]
        assert [t["name"] for t in registry.list_tools()] == registry.names()

    def test_listing_shape(self) -> None:
        listing = ToolRegistry([_descriptor()]).list_tools()[0]
        assert set(listing) == {"name", "description", "inputSchema"}
        assert listing["inputSchema"]["type"] == "object"

    def test_descriptor_is_immutable(self) -> None:
        descriptor = _descriptor()
        with pytest.raises(ValidationError):
            descriptor.name = "other"  # type: ignore[misc]


class TestParseArguments:
    def test_ask_arguments_tagged(self) -> None:
        args = _descriptor().parse_arguments({"question": "why?"})
        assert isinstance(args, AskArguments)
        assert args.tool == "perplexity_ask"
        assert args.question == "why?"
        assert args.model == "sonar-reasoning"
        assert args.max_tokens == 1000

    def test_search_arguments_tagged(self) -> None:
        args = _descriptor("perplexity_search").parse_arguments({"query": "news", "max_tokens": 200})
        assert isinstance(args, SearchArguments)
        assert args.query == "news"
        assert args.max_tokens == 200

    def test_fractional_token_budget_rejected(self) -> None:
        with pytest.raises(InvalidParamsError, match="max_tokens"):
            _descriptor().parse_arguments({"question": "q", "max_tokens": 10.5})

    def test_missing_required_argument(self) -> None:
        with pytest.raises(InvalidParamsError, match="question"):
            _descriptor().parse_arguments({"query": "wrong tool's field"})


class TestBuildRegistry:
    def test_serves_both_tools(self) -> None:
        registry = build_registry(MagicMock())
        assert registry.names() == ["perplexity_ask", "perplexity_search"]

    def test_custom_defaults_flow_into_schema(self) -> None:
        defaults = ToolDefaults(models=["sonar", "sonar-pro"], default_model="sonar", max_tokens=500)
        registry = build_registry(MagicMock(), defaults)
        props = registry.get("perplexity_ask").to_listing()["inputSchema"]["properties"]
        assert props["model"]["enum"] == ["sonar", "sonar-pro"]
        assert props["model"]["default"] == "sonar"
        assert props["max_tokens"]["default"] == 500
