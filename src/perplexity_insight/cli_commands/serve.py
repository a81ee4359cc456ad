"""``perplexity-insight serve`` — run the JSON-RPC server on stdio."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.markup import escape

from perplexity_insight.cli_commands._output import configure_logging, err_console
from perplexity_insight.config import LOG_LEVELS, load_config


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file with server settings.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override the configured log level.",
)
@click.option("--telemetry", is_flag=True, help="Export trace spans to stderr.")
@click.option("--otlp-endpoint", default=None, help="Export trace spans via OTLP/gRPC.")
def serve(
    config_path: str | None,
    log_level: str | None,
    telemetry: bool,
    otlp_endpoint: str | None,
) -> None:
    """Serve perplexity_ask and perplexity_search over stdin/stdout."""
    from perplexity_insight.app import serve_stdio
    from perplexity_insight.errors import ConfigError

    try:
        config = load_config(Path(config_path) if config_path else None)
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    configure_logging(log_level or config.log_level)

    if telemetry or otlp_endpoint:
        from perplexity_insight.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(
                service_name=config.server_name,
                export_to_console=telemetry,
                otlp_endpoint=otlp_endpoint,
            )
        except ImportError as exc:
            err_console.print(f"[red]Telemetry error:[/red] {escape(str(exc))}")
            sys.exit(1)

    try:
        asyncio.run(serve_stdio(config))
    except KeyboardInterrupt:
        pass
