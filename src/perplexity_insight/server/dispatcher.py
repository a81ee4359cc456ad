"""MessageDispatcher — the JSON-RPC protocol state machine.

Each raw line is handled independently: parsed, validated, routed to
``initialize``, ``tools/list`` or ``tools/call``, and turned into exactly one
:class:`JsonRpcResponse`, or into nothing when the line is not JSON.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import ValidationError

from perplexity_insight.errors import (
    INTERNAL_ERROR,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ProtocolError,
    RateLimitExceededError,
)
from perplexity_insight.server.models import JsonRpcRequest, JsonRpcResponse, RequestId, ToolResult
from perplexity_insight.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_TOOL_IS_ERROR,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from perplexity_insight.server.ratelimit import RateLimiter
    from perplexity_insight.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receives input lines that could not be parsed as JSON."""

    def unparseable(self, line: str, error: Exception) -> None: ...


class LoggingDiagnosticSink:
    """Reports unparseable input through the module logger."""

    def unparseable(self, line: str, error: Exception) -> None:
        logger.warning("Dropping unparseable message (%s): %.200s", error, line)


class MessageDispatcher:
    """Routes JSON-RPC lines to the tool registry.

    Usage::

        dispatcher = MessageDispatcher(registry, limiter)
        response = await dispatcher.handle('{"jsonrpc": "2.0", "id": 1, "method": "tools/list"}')
        if response is not None:
            print(json.dumps(response.to_wire()))

    :meth:`handle` never raises.  Everything up to the tool handler runs
    without awaiting, so the rate-limit check and its counter update are
    never interleaved with another line's.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        limiter: RateLimiter,
        *,
        server_name: str = "perplexity-insight",
        server_version: str = "0.1.0",
        diagnostics: DiagnosticSink | None = None,
    ) -> None:
        self._registry = registry
        self._limiter = limiter
        self._server_info = {"name": server_name, "version": server_version}
        self._diagnostics = diagnostics or LoggingDiagnosticSink()

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    async def handle(self, raw_line: str) -> JsonRpcResponse | None:
        """Process one line; return its response, or ``None`` if it was dropped."""
        try:
            message = json.loads(raw_line)
        except (ValueError, RecursionError) as exc:
            self._diagnostics.unparseable(raw_line, exc)
            return None

        request_id = _correlation_id(message)
        with _tracer.start_as_current_span("rpc.handle") as span:
            if request_id is not None:
                span.set_attribute(ATTR_RPC_ID, str(request_id))
            try:
                request = self._validate_envelope(message)
                span.set_attribute(ATTR_RPC_METHOD, request.method)
                logger.debug("Received method: %s", request.method)
                result = await self._route(request)
                return JsonRpcResponse.success(request.id, result)
            except ProtocolError as exc:
                logger.info("Rejected message %r: %s", request_id, exc)
                span.set_attribute(ATTR_RPC_ERROR_CODE, exc.code)
                return JsonRpcResponse.failure(request_id, exc.code, str(exc))
            except Exception as exc:
                logger.exception("Error handling message %r", request_id)
                span.set_attribute(ATTR_RPC_ERROR_CODE, INTERNAL_ERROR)
                return JsonRpcResponse.failure(request_id, INTERNAL_ERROR, str(exc) or "Internal error")

    @staticmethod
    def _validate_envelope(message: Any) -> JsonRpcRequest:
        if not isinstance(message, dict):
            raise InvalidRequestError("expected a JSON object")
        if message.get("id") is None:
            raise InvalidRequestError("missing 'id'")
        if not message.get("method"):
            raise InvalidRequestError("missing 'method'")
        try:
            return JsonRpcRequest.model_validate(message)
        except ValidationError as exc:
            fields = ", ".join(dict.fromkeys(str(err["loc"][0]) for err in exc.errors() if err["loc"]))
            raise InvalidRequestError(f"invalid {fields or 'envelope'}") from exc

    async def _route(self, request: JsonRpcRequest) -> dict[str, Any]:
        if request.method == "initialize":
            return self._initialize(request.params)
        if request.method == "tools/list":
            return {"tools": self._registry.list_tools()}
        if request.method == "tools/call":
            result = await self._call_tool(request.params)
            return result.to_wire()
        raise MethodNotFoundError(request.method)

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        client = params.get("clientInfo")
        if client:
            logger.info("Client connected: %s", client)
        return {
            "server": dict(self._server_info),
            "capabilities": {"tools": {"listChanged": True}},
        }

    async def _call_tool(self, params: dict[str, Any]) -> ToolResult:
        name = params.get("name")
        arguments = params.get("arguments")
        if not name or not isinstance(name, str):
            raise InvalidParamsError("'name' is required")
        if arguments is None:
            raise InvalidParamsError("'arguments' is required")
        if not isinstance(arguments, dict):
            raise InvalidParamsError("'arguments' must be an object")

        descriptor = self._registry.get(name)
        args = descriptor.parse_arguments(arguments)

        with _tracer.start_as_current_span("tool.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            try:
                self._limiter.check()
            except RateLimitExceededError as exc:
                result = ToolResult.error(str(exc))
            else:
                result = await descriptor.handler(args)
            span.set_attribute(ATTR_TOOL_IS_ERROR, result.is_error)
            return result


def _correlation_id(message: Any) -> RequestId | None:
    """The message's ``id`` when it can be echoed back, else ``None``."""
    if not isinstance(message, dict):
        return None
    value = message.get("id")
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return None
    return value
