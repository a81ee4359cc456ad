"""Chat-completions payloads exchanged with the Perplexity API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A role-tagged message block."""

    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionRequest(BaseModel):
    """The request body of ``POST /chat/completions``."""

    model: str
    messages: list[ChatMessage]
    max_tokens: int

    @classmethod
    def build(cls, *, model: str, system_prompt: str, user_content: str, max_tokens: int) -> ChatCompletionRequest:
        """A system instruction followed by the user content."""
        return cls(
            model=model,
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=user_content),
            ],
            max_tokens=max_tokens,
        )


class ChoiceMessage(BaseModel):
    role: str = "assistant"
    content: str


class Choice(BaseModel):
    index: int = 0
    message: ChoiceMessage
    finish_reason: str | None = None


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletion(BaseModel):
    """The subset of a completion response the server relies on."""

    id: str = ""
    model: str = ""
    choices: list[Choice] = Field(min_length=1)
    usage: Usage | None = None
    citations: list[str] = []

    @property
    def text(self) -> str:
        """Content of the first choice."""
        return self.choices[0].message.content
