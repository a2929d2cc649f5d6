"""Route an inbound chat message through mode check, knowledge and generation."""

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog

from bot.generator import AnswerGenerator, ProviderRole
from bot.modes import DEFAULT_MODE, ConversationModeStore, Mode
from knowledge.cache import KnowledgeCache
from knowledge.models import NO_DOCUMENTS_MARKER
from observability import metrics

logger = structlog.get_logger().bind(source="dispatcher")


@dataclass
class ReplyPayload:
    """Text to send back to the conversation, plus where it came from."""

    conversation_id: str
    text: str
    provider_used: ProviderRole
    model: str


class MessageDispatcher:
    """Decide whether and how to answer one inbound text message.

    ``handle`` returns None (no reply) for conversations in Human mode;
    that is a normal outcome the transport must accept.
    """

    def __init__(
        self,
        mode_store: ConversationModeStore,
        knowledge_cache: KnowledgeCache,
        generator: AnswerGenerator,
    ):
        self.mode_store = mode_store
        self.knowledge_cache = knowledge_cache
        self.generator = generator

    async def handle(self, conversation_id: str, message_text: str) -> Optional[ReplyPayload]:
        if not message_text or not message_text.strip():
            return None

        log = logger.bind(conversation_id=conversation_id)
        mode = await self._read_mode(conversation_id)
        if mode is Mode.HUMAN:
            metrics.counter("dispatch.human_skipped")
            log.info("dispatch.skipped_human_mode")
            return None

        context = await self._read_context()
        result = await self.generator.generate(message_text, context)

        metrics.counter("dispatch.replied")
        log.info(
            "dispatch.replied",
            provider=result.provider_used.value,
            model=result.model,
            latency_ms=result.latency_ms,
        )
        return ReplyPayload(
            conversation_id=conversation_id,
            text=result.text,
            provider_used=result.provider_used,
            model=result.model,
        )

    async def handle_many(self, messages: list[tuple[str, str]]) -> list:
        """Handle independent (conversation_id, text) pairs concurrently.

        Results keep input order; a failing message yields its exception
        in place instead of aborting the others.
        """
        return await asyncio.gather(
            *(self.handle(cid, text) for cid, text in messages),
            return_exceptions=True,
        )

    async def _read_mode(self, conversation_id: str) -> Mode:
        try:
            return await self.mode_store.get_mode(conversation_id)
        except Exception as e:
            # Fail open: a broken session store must not silence the bot
            metrics.counter("dispatch.mode_read_failed")
            logger.error("dispatch.mode_read_failed", conversation_id=conversation_id, error=str(e))
            return DEFAULT_MODE

    async def _read_context(self) -> str:
        try:
            snapshot = await self.knowledge_cache.get()
        except Exception as e:
            logger.error("dispatch.knowledge_failed", error=str(e))
            return NO_DOCUMENTS_MARKER
        return snapshot.combined_context
