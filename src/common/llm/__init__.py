"""
LLM Provider Abstraction Layer

Unified chat-completion interface over OpenAI, the Hugging Face router
and Anthropic Claude.
"""

from src.common.llm.factory import create_llm_provider
from src.common.llm.protocols import LLMMessage, LLMProvider, LLMResponse, MessageRole

__all__ = [
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "MessageRole",
    "create_llm_provider",
]
