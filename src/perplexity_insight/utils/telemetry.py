"""OpenTelemetry tracing helpers for Perplexity Insight.

Provides a thin wrapper around the OpenTelemetry API so the rest of the
codebase can call ``get_tracer()`` without caring whether the SDK is
installed.  When the SDK is *not* configured the API returns no-op
implementations.

Usage::

    from perplexity_insight.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("my.operation") as span:
        span.set_attribute("key", "value")

To activate real tracing, call :func:`configure_telemetry` once at startup
(requires the ``otel`` extra: ``pip install perplexity-insight[otel]``).
Console spans are written to stderr; stdout carries the JSON-RPC stream.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

if TYPE_CHECKING:
    from collections.abc import Mapping

# ---------------------------------------------------------------------------
# Semantic attribute keys
# ---------------------------------------------------------------------------

ATTR_RPC_METHOD = "pplx.rpc.method"
ATTR_RPC_ID = "pplx.rpc.id"
ATTR_RPC_ERROR_CODE = "pplx.rpc.error_code"
ATTR_TOOL_NAME = "pplx.tool.name"
ATTR_TOOL_IS_ERROR = "pplx.tool.is_error"
ATTR_MODEL = "pplx.model"
ATTR_UPSTREAM_STATUS = "pplx.upstream.status"
ATTR_TOKENS_PROMPT = "pplx.tokens.prompt"
ATTR_TOKENS_COMPLETION = "pplx.tokens.completion"
ATTR_TOKENS_TOTAL = "pplx.tokens.total"

_INSTRUMENTATION_NAME = "perplexity_insight"
_OTEL_EXTRA_HINT = "Install it with: pip install perplexity-insight[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name*; a no-op one until :func:`configure_telemetry` runs."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def usage_attributes(prompt: int, completion: int, total: int) -> Mapping[str, int]:
    """Token-usage span attributes for one upstream completion."""
    return {
        ATTR_TOKENS_PROMPT: prompt,
        ATTR_TOKENS_COMPLETION: completion,
        ATTR_TOKENS_TOTAL: total,
    }


def configure_telemetry(
    *,
    service_name: str = "perplexity-insight",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a global tracer provider (requires ``perplexity-insight[otel]``).

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        Write finished spans as JSON to stderr.
    otlp_endpoint:
        Also ship spans via OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If ``opentelemetry-sdk`` is missing, or ``opentelemetry-exporter-otlp``
        is missing while *otlp_endpoint* is set.  Nothing is installed then.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = f"opentelemetry-sdk is required for configure_telemetry(). {_OTEL_EXTRA_HINT}"
        raise ImportError(msg) from exc

    processors = _span_processors(export_to_console, otlp_endpoint)

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    for processor in processors:
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _span_processors(export_to_console: bool, otlp_endpoint: str | None) -> list[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if export_to_console:
        # Simple (synchronous) so spans appear next to the log lines they belong to.
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))

    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = f"opentelemetry-exporter-otlp is required for OTLP export. {_OTEL_EXTRA_HINT}"
            raise ImportError(msg) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

    return processors
