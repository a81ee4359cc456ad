"""Perplexity Insight CLI entrypoint."""

from __future__ import annotations

import click
from dotenv import load_dotenv

from perplexity_insight import __version__


@click.group()
@click.version_option(version=__version__, prog_name="perplexity-insight")
def main() -> None:
    """Perplexity Insight — JSON-RPC tool server for Perplexity AI."""
    load_dotenv()


# Register subcommands
from perplexity_insight.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
