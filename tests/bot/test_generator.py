"""Tests for AnswerGenerator provider fallback."""

import time

import pytest

from bot.generator import AnswerGenerator, ProviderRole
from llm.base import LLMError, LLMRateLimitError

CONTEXT = "--- Page: Library ---\nLibrary opens at 8am."


def _generator(providers, **kwargs):
    kwargs.setdefault("apology_message", "Sorry, busy.")
    return AnswerGenerator(providers, **kwargs)


class TestFallback:
    @pytest.mark.asyncio
    async def test_primary_answers(self, make_provider):
        primary = make_provider("gemini", "gemini-2.0-flash", answer="8am.")
        fallback = make_provider("groq", "llama-3.1-8b-instant", answer="unused")

        result = await _generator([primary, fallback]).generate("When does the library open?", CONTEXT)

        assert result.text == "8am."
        assert result.provider_used is ProviderRole.PRIMARY
        assert result.model == "gemini-2.0-flash"
        assert result.provider_name == "gemini"
        assert result.errors == []
        assert result.succeeded
        assert fallback.calls == []

    @pytest.mark.asyncio
    async def test_fallback_after_primary_error(self, make_provider):
        primary = make_provider("gemini", "gemini-2.0-flash", error=LLMRateLimitError("quota exceeded"))
        fallback = make_provider("groq", "llama-3.1-8b-instant", answer="It opens at 8am.")

        result = await _generator([primary, fallback]).generate("hours?", CONTEXT)

        assert result.text == "It opens at 8am."
        assert result.provider_used is ProviderRole.FALLBACK
        assert result.model == "llama-3.1-8b-instant"
        assert result.errors == ["quota exceeded"]
        assert len(primary.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_primary_output_falls_back(self, make_provider):
        primary = make_provider("gemini", "gemini-2.0-flash", answer="")
        fallback = make_provider("groq", "llama-3.1-8b-instant", answer="ok")

        result = await _generator([primary, fallback]).generate("hi", CONTEXT)

        assert result.provider_used is ProviderRole.FALLBACK
        assert result.errors == ["gemini returned an empty response"]

    @pytest.mark.asyncio
    async def test_all_providers_fail(self, make_provider):
        primary = make_provider("gemini", "gemini-2.0-flash", error=LLMError("E1"))
        fallback = make_provider("groq", "llama-3.1-8b-instant", error=LLMError("E2"))

        result = await _generator([primary, fallback]).generate("hi", CONTEXT)

        assert result.provider_used is ProviderRole.NONE
        assert result.model == "none"
        assert result.provider_name is None
        assert not result.succeeded
        assert result.errors == ["E1", "E2"]
        assert result.text == "Sorry, busy.\n\n[Primary Error]: E1\n\n[Fallback Error]: E2"

    @pytest.mark.asyncio
    async def test_errors_can_be_hidden(self, make_provider):
        primary = make_provider("gemini", "gemini-2.0-flash", error=LLMError("secret detail"))

        result = await _generator([primary], expose_errors=False).generate("hi", CONTEXT)

        assert result.text == "Sorry, busy."
        assert result.errors == ["secret detail"]

    @pytest.mark.asyncio
    async def test_third_provider(self, make_provider):
        chain = [
            make_provider("gemini", "g", error=LLMError("E1")),
            make_provider("groq", "q", error=LLMError("E2")),
            make_provider("openai", "o", answer="third time lucky"),
        ]

        result = await _generator(chain).generate("hi", CONTEXT)

        assert result.text == "third time lucky"
        assert result.provider_used is ProviderRole.FALLBACK
        assert result.errors == ["E1", "E2"]

    @pytest.mark.asyncio
    async def test_unnamed_exception_is_reported_by_type(self, make_provider):
        primary = make_provider("gemini", "g", error=RuntimeError())

        result = await _generator([primary]).generate("hi", CONTEXT)

        assert result.errors == ["RuntimeError"]

    def test_requires_a_provider(self):
        with pytest.raises(ValueError):
            AnswerGenerator([])


class TestTimeout:
    @pytest.mark.asyncio
    async def test_slow_provider_times_out(self, make_provider):
        slow = make_provider("gemini", "gemini-2.0-flash", answer="late")
        original = slow.complete

        def _slow_complete(*args, **kwargs):
            time.sleep(0.3)
            return original(*args, **kwargs)

        slow.complete = _slow_complete
        fallback = make_provider("groq", "llama-3.1-8b-instant", answer="fast")

        result = await _generator([slow, fallback], timeout_seconds=0.05).generate("hi", CONTEXT)

        assert result.text == "fast"
        assert result.provider_used is ProviderRole.FALLBACK
        assert result.errors == ["gemini timed out after 0.05s"]


class TestRequest:
    @pytest.mark.asyncio
    async def test_forwards_query_and_settings(self, make_provider):
        provider = make_provider("gemini", "g", answer="ok")

        await _generator([provider], temperature=0.7, max_tokens=256).generate("Where is room 301?", CONTEXT)

        call = provider.calls[0]
        assert call["query"] == "Where is room 301?"
        assert call["temperature"] == 0.7
        assert call["max_tokens"] == 256

    @pytest.mark.asyncio
    async def test_fallback_gets_same_prompt_and_temperature(self, make_provider):
        primary = make_provider("gemini", "g", error=LLMRateLimitError("quota exceeded"))
        fallback = make_provider("groq", "q", answer="ok")

        await _generator([primary, fallback], temperature=0.4).generate("hours?", CONTEXT)

        p, f = primary.calls[0], fallback.calls[0]
        assert p["system"] == f["system"]
        assert p["query"] == f["query"] == "hours?"
        assert p["temperature"] == f["temperature"] == 0.4
        assert p["max_tokens"] == f["max_tokens"]

    @pytest.mark.asyncio
    async def test_context_is_embedded_verbatim(self, make_provider):
        provider = make_provider("gemini", "g", answer="ok")
        context = "Fees: {amount} NTD"

        await _generator([provider]).generate("hi", context)

        system = provider.calls[0]["system"]
        assert "<KnowledgeContext>\nFees: {amount} NTD\n</KnowledgeContext>" in system

    @pytest.mark.asyncio
    async def test_same_context_same_prompt(self, make_provider):
        a = make_provider("gemini", "g", answer="ok")
        b = make_provider("gemini", "g", answer="ok")
        generator = _generator([a])
        await generator.generate("q1", CONTEXT)
        generator.providers = [b]
        await generator.generate("q2", CONTEXT)
        assert a.calls[0]["system"] == b.calls[0]["system"]

    def test_from_config(self, make_provider):
        from cli.config_models import BotConfig

        config = BotConfig.from_dict(
            {"llm": {"temperature": 0.4}, "prompt": {"language": "English", "expose_errors": False}}
        )
        generator = AnswerGenerator.from_config(config, [make_provider("gemini", "g", answer="x")])

        assert generator.temperature == 0.4
        assert generator.language == "English"
        assert generator.expose_errors is False
