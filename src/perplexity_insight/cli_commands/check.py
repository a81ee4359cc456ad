"""``perplexity-insight check`` — verify the Perplexity API connection."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.markup import escape

from perplexity_insight.cli_commands._output import console

PLACEHOLDER_KEY = "your_api_key_here"
CHECK_QUESTION = "What's the current status of AI language models? Keep it brief."


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file with server settings.",
)
@click.option("--model", default="sonar", show_default=True, help="Model used for the probe.")
@click.option("--max-tokens", default=300, show_default=True, type=int, help="Token budget.")
def check(config_path: str | None, model: str, max_tokens: int) -> None:
    """Send one short question to Perplexity, bypassing the JSON-RPC layer.

    Uses the same key, endpoint and timeout that ``serve`` would.
    """
    from perplexity_insight.app import make_client
    from perplexity_insight.config import API_KEY_ENV, DEFAULT_SYSTEM_PROMPT, load_config
    from perplexity_insight.errors import ConfigError, MissingApiKeyError, UpstreamError
    from perplexity_insight.upstream.models import ChatCompletion, ChatCompletionRequest

    try:
        config = load_config(Path(config_path) if config_path else None)
    except MissingApiKeyError:
        config = None
    except ConfigError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    if config is None or config.api_key == PLACEHOLDER_KEY:
        console.print("[bold red]Error: Perplexity API key not provided.[/bold red]")
        console.print(f"[yellow]Please set your {API_KEY_ENV} in the .env file.[/yellow]")
        sys.exit(1)

    console.print(f"[cyan]Testing Perplexity API connection ({escape(config.api_endpoint)})...[/cyan]")

    request = ChatCompletionRequest.build(
        model=model,
        system_prompt=DEFAULT_SYSTEM_PROMPT,
        user_content=CHECK_QUESTION,
        max_tokens=max_tokens,
    )

    async def _probe() -> ChatCompletion:
        async with make_client(config) as client:
            return await client.complete(request)

    try:
        completion = asyncio.run(_probe())
    except UpstreamError as exc:
        console.print(f"[bold red]❌ {escape(str(exc))}[/bold red]")
        sys.exit(1)

    tokens = completion.usage.total_tokens if completion.usage else "Unknown"
    console.print("\n[bold green]✅ API Connection Successful![/bold green]")
    console.print(f"[cyan]Model: {completion.model or model}[/cyan]")
    console.print(f"[cyan]Tokens Used: {tokens}[/cyan]")
    console.print("\n[bold green]Response Content:[/bold green]")
    console.print(completion.text, markup=False)
    if completion.citations:
        console.print("\n[bold green]Citations:[/bold green]")
        for url in completion.citations:
            console.print(f"  {url}", markup=False)
    console.print("\n[green]Your Perplexity API connection is working correctly.[/green]")
    console.print("[cyan]You can now run the server with 'perplexity-insight serve'.[/cyan]")
