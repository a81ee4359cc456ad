"""Server layer — framing, dispatch, rate limiting and the stdio loop."""

from perplexity_insight.server.dispatcher import (
    DiagnosticSink,
    LoggingDiagnosticSink,
    MessageDispatcher,
)
from perplexity_insight.server.framer import LineFramer
from perplexity_insight.server.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    TextContent,
    ToolResult,
)
from perplexity_insight.server.ratelimit import RateLimiter, RateWindow
from perplexity_insight.server.transport import StdioServer

__all__ = [
    "DiagnosticSink",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "LineFramer",
    "LoggingDiagnosticSink",
    "MessageDispatcher",
    "RateLimiter",
    "RateWindow",
    "StdioServer",
    "TextContent",
    "ToolResult",
]
