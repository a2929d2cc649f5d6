"""Answer generation over an ordered chain of LLM providers."""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum

import structlog

from bot.prompts import build_failure_text, build_system_prompt
from llm.base import LLMProvider, LLMTimeoutError
from observability import metrics

logger = structlog.get_logger().bind(source="generator")


class ProviderRole(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    NONE = "none"


@dataclass
class GenerationResult:
    """Outcome of one generate() call."""

    text: str
    provider_used: ProviderRole
    model: str
    provider_name: str | None = None
    errors: list[str] = field(default_factory=list)
    latency_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.provider_used is not ProviderRole.NONE


class AnswerGenerator:
    """Try each provider in order; the first non-empty answer wins.

    Failures (including timeouts) are captured, not retried. When every
    provider fails the result carries an apology that lists each error.
    """

    def __init__(
        self,
        providers: list[LLMProvider],
        temperature: float = 0.0,
        timeout_seconds: float | None = 30.0,
        max_tokens: int = 2048,
        persona: str = "a helpful AI assistant",
        source_name: str = "the knowledge base",
        language: str = "English",
        extra_instructions: str | None = None,
        apology_message: str = "Sorry, the AI service is unavailable right now.",
        expose_errors: bool = True,
    ):
        if not providers:
            raise ValueError("AnswerGenerator needs at least one provider")
        self.providers = list(providers)
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.persona = persona
        self.source_name = source_name
        self.language = language
        self.extra_instructions = extra_instructions
        self.apology_message = apology_message
        self.expose_errors = expose_errors

    @classmethod
    def from_config(cls, config, providers: list[LLMProvider]) -> "AnswerGenerator":
        return cls(
            providers,
            temperature=config.llm.temperature,
            timeout_seconds=config.llm.timeout_seconds,
            max_tokens=config.llm.max_tokens,
            persona=config.prompt.persona,
            source_name=config.prompt.source_name,
            language=config.prompt.language,
            extra_instructions=config.prompt.extra_instructions,
            apology_message=config.prompt.apology_message,
            expose_errors=config.prompt.expose_errors,
        )

    def system_prompt(self, context: str) -> str:
        return build_system_prompt(
            context,
            persona=self.persona,
            source_name=self.source_name,
            language=self.language,
            extra_instructions=self.extra_instructions,
        )

    async def generate(self, query: str, context: str) -> GenerationResult:
        system = self.system_prompt(context)
        errors: list[str] = []
        start = time.perf_counter()

        for position, provider in enumerate(self.providers):
            role = ProviderRole.PRIMARY if position == 0 else ProviderRole.FALLBACK
            logger.info(
                "generation.attempt",
                role=role.value,
                provider=provider.provider_name,
                model=provider.model,
            )
            try:
                text = await self._call(provider, system, query)
            except Exception as e:
                errors.append(str(e) or type(e).__name__)
                metrics.counter(f"generation.failed.{provider.provider_name}")
                logger.warning(
                    "generation.provider_failed",
                    role=role.value,
                    provider=provider.provider_name,
                    error=errors[-1],
                )
                continue

            metrics.counter(f"generation.{role.value}")
            if errors:
                logger.info("generation.fallback_used", provider=provider.provider_name)
            return GenerationResult(
                text=text,
                provider_used=role,
                model=provider.model,
                provider_name=provider.provider_name,
                errors=errors,
                latency_ms=self._elapsed_ms(start),
            )

        metrics.counter("generation.none")
        logger.error("generation.all_failed", errors=errors)
        return GenerationResult(
            text=build_failure_text(self.apology_message, errors, self.expose_errors),
            provider_used=ProviderRole.NONE,
            model="none",
            errors=errors,
            latency_ms=self._elapsed_ms(start),
        )

    async def _call(self, provider: LLMProvider, system: str, query: str) -> str:
        """Run the blocking SDK call in a worker thread, bounded by the timeout.

        wait_for cannot stop the thread itself; the SDK clients get the same
        timeout from build_provider_chain so the worker is released as well.
        """
        call = asyncio.to_thread(
            provider.complete,
            system,
            query,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        with metrics.timer(f"generation.{provider.provider_name}"):
            try:
                return await asyncio.wait_for(call, timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                raise LLMTimeoutError(
                    f"{provider.provider_name} timed out after {self.timeout_seconds:g}s"
                )

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return round((time.perf_counter() - start) * 1000, 1)

