"""Google Gemini LLM provider using google-genai SDK."""

from ..base import LLMAuthError, LLMError, LLMProvider, LLMRateLimitError, require_text


def _handle_gemini_error(e: Exception):
    err_str = str(e).lower()
    if "api key" in err_str or "authentication" in err_str or "permission" in err_str:
        raise LLMAuthError(f"Gemini auth failed: {e}") from e
    if ("resource" in err_str and "exhausted" in err_str) or "rate" in err_str:
        raise LLMRateLimitError(f"Gemini rate limit: {e}") from e
    raise LLMError(f"Gemini API error: {e}") from e


class GeminiProvider(LLMProvider):
    """Google Gemini provider (google-genai SDK)."""

    provider_name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client=None,
        timeout: float | None = None,
    ):
        self.model = model or "gemini-2.0-flash"

        if client:
            self.client = client
            return

        try:
            from google import genai
            from google.genai import types
        except ImportError:
            raise LLMError("google-genai package not installed. Run: pip install google-genai")

        # HttpOptions.timeout is in milliseconds
        http_options = types.HttpOptions(timeout=int(timeout * 1000)) if timeout else None
        self.client = genai.Client(api_key=api_key, http_options=http_options)

    def complete(
        self,
        system: str,
        query: str,
        temperature: float = 0.0,
        max_tokens: int = 2048,
    ) -> str:
        try:
            from google.genai import types

            response = self.client.models.generate_content(
                model=self.model,
                contents=query,
                config=types.GenerateContentConfig(
                    system_instruction=system,
                    temperature=temperature,
                    max_output_tokens=max_tokens,
                ),
            )
            text = response.text
        except Exception as e:
            _handle_gemini_error(e)
        return require_text("Gemini", text)
