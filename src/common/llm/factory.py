"""
LLM Provider Factory

Factory function to create LLM providers based on configuration.
"""

from __future__ import annotations

from typing import Literal

from src.common.llm.clients import DEFAULT_TIMEOUT_SECONDS
from src.common.llm.protocols import LLMProvider

ProviderName = Literal["huggingface", "openai", "claude"]


def create_llm_provider(
    provider: ProviderName,
    api_key: str | None = None,
    model: str | None = None,
    base_url: str | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> LLMProvider:
    """
    Create an LLM provider instance.

    Args:
        provider: Provider type ("huggingface", "openai" or "claude")
        api_key: API key (provider-specific environment fallback when None)
        model: Model name (uses provider default if not specified)
        base_url: Optional endpoint override
        timeout_seconds: Transport timeout per request

    Raises:
        ValueError: If unknown provider is specified
    """
    if provider == "huggingface":
        from src.common.llm.openai import OpenAIProvider

        return OpenAIProvider.for_huggingface(
            api_key=api_key,
            model=model or "meta-llama/Meta-Llama-3-70B-Instruct",
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    elif provider == "openai":
        from src.common.llm.openai import OpenAIProvider

        return OpenAIProvider(
            api_key=api_key,
            model=model or "gpt-4o-mini",
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    elif provider == "claude":
        from src.common.llm.claude import ClaudeProvider

        return ClaudeProvider(
            api_key=api_key,
            model=model or "claude-sonnet-4-20250514",
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider}")
