"""Shared CLI output helpers."""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console()
# stdout belongs to the JSON-RPC stream while serving; diagnostics go here.
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def print_tools_table(tools: list[dict[str, Any]]) -> None:
    """Pretty-print ``tools/list`` entries as a table."""
    table = Table(title="Perplexity Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Required")
    table.add_column("Optional")
    table.add_column("Description")

    for tool in tools:
        schema = tool.get("inputSchema", {})
        required = schema.get("required", [])
        optional = [name for name in schema.get("properties", {}) if name not in required]
        table.add_row(
            tool.get("name", "?"),
            ", ".join(required) or "-",
            ", ".join(optional) or "-",
            _truncate(tool.get("description", "")),
        )

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
