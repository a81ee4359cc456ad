"""Shared error types for Perplexity Insight."""

from __future__ import annotations

# JSON-RPC 2.0 standard error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class PerplexityInsightError(Exception):
    """Base error for all Perplexity Insight failures."""


class ConfigError(PerplexityInsightError):
    """Configuration could not be loaded or is incomplete."""


class MissingApiKeyError(ConfigError):
    """No Perplexity API key was configured."""


class ProtocolError(PerplexityInsightError):
    """A message was recognised but cannot be served.

    Surfaced to the caller as a JSON-RPC error object carrying :attr:`code`.
    """

    code: int = INTERNAL_ERROR


class InvalidRequestError(ProtocolError):
    """The envelope is not a valid JSON-RPC request."""

    code = INVALID_REQUEST

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Invalid message format" + (f": {detail}" if detail else ""))


class MethodNotFoundError(ProtocolError):
    """The requested method is not served."""

    code = METHOD_NOT_FOUND

    def __init__(self, method: str, message: str | None = None) -> None:
        self.method = method
        super().__init__(message or f"Unknown method: {method}")


class ToolNotFoundError(MethodNotFoundError):
    """``tools/call`` named a tool that is not in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__("tools/call", f"Unknown tool: {name}")


class InvalidParamsError(ProtocolError):
    """Request parameters or tool arguments failed validation."""

    code = INVALID_PARAMS

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid params: {detail}")


class RateLimitExceededError(PerplexityInsightError):
    """The per-minute or per-day call budget is exhausted."""

    def __init__(self, window: str, limit: int) -> None:
        self.window = window
        self.limit = limit
        super().__init__(f"Rate limit exceeded: {limit} requests per {window}")


class UpstreamError(PerplexityInsightError):
    """The completions API failed or returned an unusable body."""

    def __init__(self, detail: str, *, status_code: int | None = None, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.detail = detail
        message = "Perplexity API error"
        if status_code is not None:
            message += f": {status_code}"
        if detail:
            message += f" {detail}" if status_code is not None else f": {detail}"
        super().__init__(message)
