"""Perplexity Insight — JSON-RPC tool server for Perplexity AI."""

from __future__ import annotations

__version__ = "0.1.0"
