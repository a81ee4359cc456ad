"""Upstream layer — the Perplexity chat-completions client."""

from perplexity_insight.upstream.client import PerplexityClient
from perplexity_insight.upstream.models import ChatCompletion, ChatCompletionRequest, ChatMessage

__all__ = [
    "ChatCompletion",
    "ChatCompletionRequest",
    "ChatMessage",
    "PerplexityClient",
]
