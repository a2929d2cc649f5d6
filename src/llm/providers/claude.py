"""Claude (Anthropic) LLM provider."""

from ..base import LLMAuthError, LLMError, LLMProvider, LLMRateLimitError, require_text


class ClaudeProvider(LLMProvider):
    """Anthropic Claude provider."""

    provider_name = "claude"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client=None,
        timeout: float | None = None,
    ):
        self.model = model or "claude-sonnet-4-20250514"

        if client:
            self.client = client
            return

        try:
            from anthropic import Anthropic
        except ImportError:
            raise LLMError("anthropic package not installed. Run: pip install anthropic")

        kwargs = {"timeout": timeout} if timeout else {}
        self.client = Anthropic(api_key=api_key, **kwargs)

    def _handle_error(self, e: Exception):
        from anthropic import APIError, AuthenticationError, RateLimitError

        if isinstance(e, AuthenticationError):
            raise LLMAuthError(f"Claude auth failed: {e}") from e
        if isinstance(e, RateLimitError):
            raise LLMRateLimitError(f"Claude rate limit: {e}") from e
        if isinstance(e, APIError):
            raise LLMError(f"Claude API error: {e}") from e
        raise LLMError(f"Claude error: {e}") from e

    def complete(
        self,
        system: str,
        query: str,
        temperature: float = 0.0,
        max_tokens: int = 2048,
    ) -> str:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                system=system,
                messages=[{"role": "user", "content": query}],
                temperature=temperature,
            )
            text = "".join(
                block.text for block in response.content if getattr(block, "type", "text") == "text"
            )
        except Exception as e:
            self._handle_error(e)
        return require_text("Claude", text)
