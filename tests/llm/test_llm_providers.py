"""Tests for LLM provider adapters."""

from unittest.mock import MagicMock

import httpx
import pytest

from llm import LLMAuthError, LLMError, LLMRateLimitError
from llm.providers.claude import ClaudeProvider
from llm.providers.gemini import GeminiProvider
from llm.providers.groq import GroqProvider
from llm.providers.openai import OpenAIProvider


def _openai_response(content):
    resp = MagicMock()
    resp.choices = [MagicMock(message=MagicMock(content=content))]
    return resp


def _http_response(status_code):
    return httpx.Response(status_code, request=httpx.Request("POST", "https://api.example.com"))


class TestGeminiProvider:
    def test_complete(self):
        mock_client = MagicMock()
        mock_client.models.generate_content.return_value = MagicMock(text="Hello from Gemini")

        provider = GeminiProvider(client=mock_client)
        result = provider.complete("Be helpful", "hi", temperature=0.3, max_tokens=100)

        assert result == "Hello from Gemini"
        kwargs = mock_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["contents"] == "hi"
        assert kwargs["config"].system_instruction == "Be helpful"
        assert kwargs["config"].temperature == 0.3
        assert kwargs["config"].max_output_tokens == 100

    def test_custom_model(self):
        provider = GeminiProvider(client=MagicMock(), model="gemini-2.5-flash")
        assert provider.model == "gemini-2.5-flash"

    def test_empty_response(self):
        mock_client = MagicMock()
        mock_client.models.generate_content.return_value = MagicMock(text="")

        provider = GeminiProvider(client=mock_client)
        with pytest.raises(LLMError, match="empty response"):
            provider.complete("sys", "hi")

    def test_quota_error(self):
        mock_client = MagicMock()
        mock_client.models.generate_content.side_effect = Exception("429 RESOURCE_EXHAUSTED")

        provider = GeminiProvider(client=mock_client)
        with pytest.raises(LLMRateLimitError):
            provider.complete("sys", "hi")

    def test_auth_error(self):
        mock_client = MagicMock()
        mock_client.models.generate_content.side_effect = Exception("API key not valid")

        provider = GeminiProvider(client=mock_client)
        with pytest.raises(LLMAuthError):
            provider.complete("sys", "hi")


class TestOpenAIProvider:
    def test_complete(self):
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _openai_response("Hello from GPT")

        provider = OpenAIProvider(client=mock_client)
        result = provider.complete("Be helpful", "hi", temperature=0.0, max_tokens=50)

        assert result == "Hello from GPT"
        mock_client.chat.completions.create.assert_called_once_with(
            model="gpt-4o-mini",
            messages=[
                {"role": "system", "content": "Be helpful"},
                {"role": "user", "content": "hi"},
            ],
            temperature=0.0,
            max_tokens=50,
        )

    def test_no_choices(self):
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = MagicMock(choices=[])

        provider = OpenAIProvider(client=mock_client)
        with pytest.raises(LLMError, match="OpenAI returned an empty response"):
            provider.complete("sys", "hi")

    def test_rate_limit_error(self):
        from openai import RateLimitError

        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = RateLimitError(
            "rate limited", response=_http_response(429), body=None
        )

        provider = OpenAIProvider(client=mock_client)
        with pytest.raises(LLMRateLimitError, match="OpenAI rate limit"):
            provider.complete("sys", "hi")


class TestGroqProvider:
    def test_defaults(self):
        provider = GroqProvider(client=MagicMock())
        assert provider.provider_name == "groq"
        assert provider.model == "llama-3.1-8b-instant"
        assert provider.base_url == "https://api.groq.com/openai/v1"

    def test_complete_uses_chat_completions(self):
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _openai_response("Hello from Groq")

        provider = GroqProvider(client=mock_client, model="llama-3.3-70b-versatile")
        assert provider.complete("sys", "hi") == "Hello from Groq"
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama-3.3-70b-versatile"

    def test_auth_error_is_labelled(self):
        from openai import AuthenticationError

        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = AuthenticationError(
            "invalid api key", response=_http_response(401), body=None
        )

        provider = GroqProvider(client=mock_client)
        with pytest.raises(LLMAuthError, match="Groq auth failed"):
            provider.complete("sys", "hi")


class TestClaudeProvider:
    def test_complete(self):
        mock_client = MagicMock()
        mock_resp = MagicMock()
        mock_resp.content = [MagicMock(type="text", text="Hello from Claude")]
        mock_client.messages.create.return_value = mock_resp

        provider = ClaudeProvider(client=mock_client)
        result = provider.complete("Be helpful", "hi", temperature=0.2, max_tokens=100)

        assert result == "Hello from Claude"
        mock_client.messages.create.assert_called_once_with(
            model="claude-sonnet-4-20250514",
            max_tokens=100,
            system="Be helpful",
            messages=[{"role": "user", "content": "hi"}],
            temperature=0.2,
        )

    def test_auth_error(self):
        from anthropic import AuthenticationError

        mock_client = MagicMock()
        mock_client.messages.create.side_effect = AuthenticationError(
            message="bad key", response=MagicMock(status_code=401), body={}
        )

        provider = ClaudeProvider(client=mock_client)
        with pytest.raises(LLMAuthError):
            provider.complete("sys", "hi")

    def test_empty_content(self):
        mock_client = MagicMock()
        mock_client.messages.create.return_value = MagicMock(content=[])

        provider = ClaudeProvider(client=mock_client)
        with pytest.raises(LLMError, match="empty response"):
            provider.complete("sys", "hi")
