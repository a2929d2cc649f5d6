"""LLM provider factory and ordered provider chains."""

import os

import structlog

from .base import LLMAuthError, LLMError, LLMProvider

logger = structlog.get_logger().bind(source="llm_factory")

_PROVIDER_ENV_KEYS = {
    "gemini": "GOOGLE_API_KEY",
    "groq": "GROQ_API_KEY",
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
}


def create_llm_provider(
    provider: str,
    api_key: str | None = None,
    model: str | None = None,
    client=None,
    timeout: float | None = None,
) -> LLMProvider:
    """Create an LLM provider instance.

    Args:
        provider: "gemini", "groq", "openai" or "claude"
        api_key: Explicit API key (overrides env var)
        model: Model name (None = provider default)
        client: Pre-built SDK client for testing/DI
        timeout: Per-request SDK timeout in seconds (None = SDK default)

    Returns:
        LLMProvider instance

    Raises:
        LLMAuthError: no key passed and the provider's env var is unset
        LLMError: unknown provider or SDK not installed
    """
    if provider not in _PROVIDER_ENV_KEYS:
        raise LLMError(f"Unknown provider: {provider}. Use: {', '.join(_PROVIDER_ENV_KEYS)}")

    if not api_key and not client:
        env_var = _PROVIDER_ENV_KEYS[provider]
        api_key = os.getenv(env_var)
        if not api_key:
            raise LLMAuthError(f"{env_var} is missing")

    if provider == "gemini":
        from .providers.gemini import GeminiProvider

        return GeminiProvider(api_key=api_key, model=model, client=client, timeout=timeout)
    elif provider == "groq":
        from .providers.groq import GroqProvider

        return GroqProvider(api_key=api_key, model=model, client=client, timeout=timeout)
    elif provider == "openai":
        from .providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model, client=client, timeout=timeout)
    else:
        from .providers.claude import ClaudeProvider

        return ClaudeProvider(api_key=api_key, model=model, client=client, timeout=timeout)


class UnavailableProvider(LLMProvider):
    """Chain placeholder for a provider that could not be constructed.

    Keeps the chain position so the construction error is reported in
    the same place a runtime failure would be.
    """

    def __init__(self, provider_name: str, model: str | None, reason: str):
        self.provider_name = provider_name
        self.model = model or "unavailable"
        self.reason = reason

    def complete(self, system, query, temperature=0.0, max_tokens=2048) -> str:
        raise LLMAuthError(self.reason)


def build_provider_chain(entries, timeout: float | None = None) -> list[LLMProvider]:
    """Instantiate providers in configured order.

    ``entries`` is any sequence of objects with ``name``, ``model`` and
    ``api_key`` attributes, such as the config ProviderConfig.
    A provider that fails to build is kept as an UnavailableProvider.
    ``timeout`` is handed to each SDK client so a hung request ends in
    the worker thread too, not only in the caller.
    """
    chain: list[LLMProvider] = []
    for entry in entries:
        try:
            provider = create_llm_provider(
                entry.name, api_key=entry.api_key, model=entry.model, timeout=timeout
            )
        except LLMError as e:
            logger.warning("llm.provider_unavailable", provider=entry.name, reason=str(e))
            chain.append(UnavailableProvider(entry.name, entry.model, str(e)))
            continue
        chain.append(provider)
    return chain

