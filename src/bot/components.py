"""Wire the pipeline together from a BotConfig."""

from dataclasses import dataclass

import structlog

from bot.dispatcher import MessageDispatcher
from bot.generator import AnswerGenerator
from bot.modes import ConversationModeStore
from bot.session_store import SessionRepository
from cli.config_models import BotConfig
from knowledge.cache import KnowledgeCache, KnowledgeSource
from knowledge.notion import NotionKnowledgeSource
from llm.factory import build_provider_chain

logger = structlog.get_logger().bind(source="components")


@dataclass
class BotComponents:
    config: BotConfig
    knowledge_source: KnowledgeSource
    knowledge_cache: KnowledgeCache
    generator: AnswerGenerator
    mode_store: ConversationModeStore
    dispatcher: MessageDispatcher

    async def aclose(self) -> None:
        await self.knowledge_source.aclose()


def build_components(
    config: BotConfig,
    providers=None,
    knowledge_source: KnowledgeSource | None = None,
    repository=None,
) -> BotComponents:
    """Build every pipeline object; injected collaborators replace the real ones."""
    if knowledge_source is None:
        if not config.knowledge.notion_api_key:
            logger.warning("components.notion_key_missing")
        knowledge_source = NotionKnowledgeSource(
            api_key=config.knowledge.notion_api_key,
            notion_version=config.knowledge.notion_version,
            timeout=config.knowledge.request_timeout,
            retry_config=config.retry,
        )

    cache = KnowledgeCache(
        knowledge_source,
        config.knowledge.page_ids,
        ttl_seconds=config.knowledge.ttl_seconds,
        tag=config.knowledge.tag,
        max_concurrency=config.knowledge.max_concurrency,
    )

    if providers is None:
        providers = build_provider_chain(config.llm.providers, timeout=config.llm.timeout_seconds)
    generator = AnswerGenerator.from_config(config, providers)

    if repository is None:
        repository = SessionRepository(config.paths.sessions_db)
    mode_store = ConversationModeStore(repository)

    return BotComponents(
        config=config,
        knowledge_source=knowledge_source,
        knowledge_cache=cache,
        generator=generator,
        mode_store=mode_store,
        dispatcher=MessageDispatcher(mode_store, cache, generator),
    )
