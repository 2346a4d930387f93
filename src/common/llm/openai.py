"""
OpenAI-compatible LLM Provider

Implementation of LLMProvider over the OpenAI chat completions API.
Also serves Hugging Face Inference Providers through their
OpenAI-compatible router.
"""

from __future__ import annotations

import logging
from typing import Any

from src.common.llm.clients import (
    DEFAULT_TIMEOUT_SECONDS,
    create_huggingface_client,
    create_openai_client,
    openai_chat_completion,
)
from src.common.llm.protocols import LLMMessage, LLMResponse
from src.common.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class OpenAIProvider:
    """
    LLM provider using an OpenAI-compatible chat completions endpoint.

    For standard OpenAI:
        OpenAIProvider(api_key="sk-...", model="gpt-4o-mini")

    For the Hugging Face router:
        OpenAIProvider.for_huggingface(api_key="hf_...",
                                       model="meta-llama/Meta-Llama-3-70B-Instruct")
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        provider_label: str = "openai",
        client: Any = None,
    ):
        """
        Initialize the provider.

        Args:
            api_key: API key (falls back to OPENAI_API_KEY)
            model: Model name
            base_url: Optional custom base URL
            timeout_seconds: Transport timeout per request
            provider_label: Name used in logs and span attributes
            client: Pre-built async client (tests, custom transports)
        """
        self._model = model
        self._provider_label = provider_label
        self._client = client or create_openai_client(
            api_key=api_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    @classmethod
    def for_huggingface(
        cls,
        api_key: str | None = None,
        model: str = "meta-llama/Meta-Llama-3-70B-Instruct",
        base_url: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> OpenAIProvider:
        """Build a provider that talks to Hugging Face Inference Providers."""
        client = create_huggingface_client(
            api_key=api_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )
        return cls(model=model, provider_label="huggingface", client=client)

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
        """
        Generate a completion.

        Args:
            messages: Conversation history
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response
            json_mode: Request `{"type": "json_object"}` output

        Returns:
            LLMResponse with the stripped text content
        """
        with tracer.start_as_current_span("llm.complete") as span:
            span.set_attribute("llm.provider", self._provider_label)
            span.set_attribute("llm.model", self._model)
            span.set_attribute("llm.temperature", temperature)
            span.set_attribute("llm.max_tokens", max_tokens)
            span.set_attribute("llm.json_mode", json_mode)

            openai_messages = [
                {"role": msg.role.value, "content": msg.content} for msg in messages
            ]

            response = await openai_chat_completion(
                self._client,
                model=self._model,
                messages=openai_messages,
                max_tokens=max_tokens,
                temperature=temperature,
                response_format={"type": "json_object"} if json_mode else None,
                # The HF router follows the older parameter name
                use_max_completion_tokens=self._provider_label == "openai",
            )

            if not response.choices:
                logger.warning(f"{self._provider_label} returned no choices for {self._model}")
                return LLMResponse(content="", finish_reason="empty")

            choice = response.choices[0]
            content = (choice.message.content or "").strip()

            usage = response.usage
            prompt_tokens = usage.prompt_tokens if usage else 0
            completion_tokens = usage.completion_tokens if usage else 0
            total_tokens = usage.total_tokens if usage else 0
            span.set_attribute("llm.prompt_tokens", prompt_tokens)
            span.set_attribute("llm.completion_tokens", completion_tokens)
            span.set_attribute("llm.finish_reason", choice.finish_reason or "stop")

            return LLMResponse(
                content=content,
                finish_reason=choice.finish_reason or "stop",
                usage={
                    "prompt_tokens": prompt_tokens,
                    "completion_tokens": completion_tokens,
                    "total_tokens": total_tokens,
                },
            )
