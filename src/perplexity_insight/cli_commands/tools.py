"""``perplexity-insight tools`` — show the served tool catalogue."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.markup import escape

from perplexity_insight.cli_commands._output import console, err_console, print_tools_table


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file whose tool defaults (models, default_model, ...) are listed.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the tools/list payload as JSON.")
def tools(config_path: str | None, as_json: bool) -> None:
    """List the tools exposed by the server.

    No API key is needed; the listing never contacts Perplexity.
    """
    from perplexity_insight.config import load_tool_defaults
    from perplexity_insight.errors import ConfigError
    from perplexity_insight.tools.perplexity import PerplexityTools, build_registry
    from perplexity_insight.upstream.client import PerplexityClient

    try:
        defaults = load_tool_defaults(Path(config_path) if config_path else None)
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    registry = build_registry(PerplexityTools(PerplexityClient(api_key="")), defaults)
    listing = registry.list_tools()

    if as_json:
        console.print_json(json.dumps({"tools": listing}))
        return

    print_tools_table(listing)
