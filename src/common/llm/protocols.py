"""
LLM Provider Protocols

Defines the interface for chat-completion providers used by the resolver
and enrichment stages. Uses typing.Protocol for duck-typed interface
definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable


class MessageRole(str, Enum):
    """Role of a message in the conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class LLMMessage:
    """A single chat message."""

    role: MessageRole
    content: str = ""


@dataclass(frozen=True)
class LLMResponse:
    """
    Response from an LLM completion request.

    `content` is the raw text exactly as the provider produced it; callers
    are responsible for parsing it.
    """

    content: str = ""
    finish_reason: str = "stop"
    usage: dict[str, int] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


@runtime_checkable
class LLMProvider(Protocol):
    """
    Protocol for chat-completion providers.

    Implementations must fail closed: transport errors and timeouts are
    raised to the caller, never swallowed.
    """

    @property
    def model_name(self) -> str:
        """Return the model name/identifier."""
        ...

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.0,
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Generate a completion for the given messages.

        Args:
            messages: Conversation history
            temperature: Sampling temperature (0.0 for deterministic)
            max_tokens: Maximum tokens in response
            json_mode: Ask the provider to constrain output to a JSON object
                where it supports that

        Returns:
            LLMResponse with the raw text content
        """
        ...
