"""OpenAI chat-completions provider, also used for OpenAI-compatible endpoints."""

from ..base import LLMAuthError, LLMError, LLMProvider, LLMRateLimitError, require_text

# Lazy exception references, set when the package is available
_openai_exceptions = None


def _get_openai_exceptions():
    global _openai_exceptions
    if _openai_exceptions is None:
        try:
            from openai import APIError, AuthenticationError, RateLimitError

            _openai_exceptions = (AuthenticationError, RateLimitError, APIError)
        except ImportError:
            _openai_exceptions = ()
    return _openai_exceptions


def _handle_openai_error(e: Exception, label: str = "OpenAI"):
    exc = _get_openai_exceptions()
    if exc and len(exc) == 3:
        AuthErr, RateErr, ApiErr = exc
        if isinstance(e, AuthErr):
            raise LLMAuthError(f"{label} auth failed: {e}") from e
        if isinstance(e, RateErr):
            raise LLMRateLimitError(f"{label} rate limit: {e}") from e
        if isinstance(e, ApiErr):
            raise LLMError(f"{label} API error: {e}") from e
    raise LLMError(f"{label} error: {e}") from e


class OpenAIProvider(LLMProvider):
    """OpenAI GPT provider."""

    provider_name = "openai"
    label = "OpenAI"
    default_model = "gpt-4o-mini"
    base_url: str | None = None

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client=None,
        timeout: float | None = None,
    ):
        self.model = model or self.default_model

        if client:
            self.client = client
            return

        try:
            from openai import OpenAI
        except ImportError:
            raise LLMError("openai package not installed. Run: pip install openai")

        kwargs = {"timeout": timeout} if timeout else {}
        self.client = OpenAI(api_key=api_key, base_url=self.base_url, **kwargs)

    def complete(
        self,
        system: str,
        query: str,
        temperature: float = 0.0,
        max_tokens: int = 2048,
    ) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": query},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
            text = response.choices[0].message.content if response.choices else None
        except Exception as e:
            _handle_openai_error(e, self.label)
        return require_text(self.label, text)
