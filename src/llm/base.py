"""Base LLM provider abstraction."""

from abc import ABC, abstractmethod


class LLMError(Exception):
    """Base LLM error."""


class LLMRateLimitError(LLMError):
    """Rate limit hit."""


class LLMAuthError(LLMError):
    """Authentication failure or missing credential."""


class LLMTimeoutError(LLMError):
    """Provider did not answer within the caller's deadline."""


class LLMProvider(ABC):
    """Single-turn completion interface shared by every provider."""

    provider_name: str = "base"
    model: str = ""

    @abstractmethod
    def complete(
        self,
        system: str,
        query: str,
        temperature: float = 0.0,
        max_tokens: int = 2048,
    ) -> str:
        """Answer one user query under a system instruction.

        Args:
            system: System instruction (carries the knowledge context)
            query: End-user message
            temperature: Sampling temperature, forwarded verbatim
            max_tokens: Max response tokens

        Returns:
            Generated text. Raises LLMError subclasses on failure.
        """
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} model={self.model!r}>"


def require_text(provider: str, text: str | None) -> str:
    """Reject empty completions so the caller can fall back."""
    if not text or not text.strip():
        raise LLMError(f"{provider} returned an empty response")
    return text
