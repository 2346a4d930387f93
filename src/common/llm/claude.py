"""
Claude (Anthropic) LLM Provider

Implementation of LLMProvider using the Anthropic Messages API.
"""

from __future__ import annotations

import logging
from typing import Any

from src.common.llm.clients import (
    DEFAULT_TIMEOUT_SECONDS,
    anthropic_message_create,
    create_anthropic_client,
)
from src.common.llm.protocols import LLMMessage, LLMResponse, MessageRole
from src.common.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class ClaudeProvider:
    """
    LLM provider using Anthropic's Messages API.

    The Messages API has no JSON response mode; `json_mode` is honoured by
    prefilling the assistant turn with "{" so the reply continues a JSON
    object.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: Any = None,
    ):
        self._model = model
        self._client = client or create_anthropic_client(
            api_key=api_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._model

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.0,
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate a completion using Claude."""
        with tracer.start_as_current_span("llm.complete") as span:
            span.set_attribute("llm.provider", "anthropic")
            span.set_attribute("llm.model", self._model)
            span.set_attribute("llm.temperature", temperature)
            span.set_attribute("llm.max_tokens", max_tokens)
            span.set_attribute("llm.json_mode", json_mode)

            # System prompts travel separately in the Anthropic API
            system_parts = [m.content for m in messages if m.role == MessageRole.SYSTEM]
            anthropic_messages = [
                {"role": m.role.value, "content": m.content}
                for m in messages
                if m.role != MessageRole.SYSTEM
            ]
            if json_mode:
                anthropic_messages.append({"role": "assistant", "content": "{"})

            response = await anthropic_message_create(
                self._client,
                model=self._model,
                messages=anthropic_messages,
                max_tokens=max_tokens,
                temperature=temperature,
                system="\n\n".join(system_parts) or None,
            )

            text = "".join(
                block.text for block in response.content if getattr(block, "type", "") == "text"
            )
            if json_mode:
                text = "{" + text
            content = text.strip()

            input_tokens = response.usage.input_tokens if response.usage else 0
            output_tokens = response.usage.output_tokens if response.usage else 0
            span.set_attribute("llm.prompt_tokens", input_tokens)
            span.set_attribute("llm.completion_tokens", output_tokens)
            # Report truncation the same way the OpenAI provider does
            finish_reason = "length" if response.stop_reason == "max_tokens" else "stop"
            span.set_attribute("llm.finish_reason", response.stop_reason or "end_turn")

            return LLMResponse(
                content=content,
                finish_reason=finish_reason,
                usage={
                    "prompt_tokens": input_tokens,
                    "completion_tokens": output_tokens,
                    "total_tokens": input_tokens + output_tokens,
                },
            )
