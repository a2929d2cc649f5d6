"""Multi-provider LLM abstraction layer."""

from .base import (
    LLMAuthError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    LLMTimeoutError,
)
from .factory import build_provider_chain, create_llm_provider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "build_provider_chain",
    "LLMError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMTimeoutError",
]
