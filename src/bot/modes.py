"""Per-conversation AI/Human handling mode."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

import structlog

logger = structlog.get_logger().bind(source="mode_store")


class Mode(str, Enum):
    AI = "AI"
    HUMAN = "Human"

    @property
    def toggled(self) -> "Mode":
        return Mode.HUMAN if self is Mode.AI else Mode.AI


DEFAULT_MODE = Mode.AI


@dataclass
class ConversationState:
    """Persisted mode of one end-user conversation."""

    conversation_id: str
    mode: Mode
    last_active: datetime
    external_ref: Optional[str] = None


def resolve_mode(state: Optional[ConversationState]) -> Mode:
    """Mode for a possibly-missing record; no record means AI."""
    return state.mode if state is not None else DEFAULT_MODE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationModeStore:
    """Async facade over the session repository.

    Repository calls are blocking SQLite work, so each one runs in a
    worker thread. Persistence errors propagate to the caller.
    """

    def __init__(self, repository, clock: Callable[[], datetime] = _utcnow):
        self.repository = repository
        self._clock = clock

    async def get_state(self, conversation_id: str) -> Optional[ConversationState]:
        return await asyncio.to_thread(self.repository.find_by_conversation_id, conversation_id)

    async def get_mode(self, conversation_id: str) -> Mode:
        """Current mode. Reading never creates a record."""
        return resolve_mode(await self.get_state(conversation_id))

    async def set_mode(self, conversation_id: str, mode: Mode | str) -> ConversationState:
        """Upsert the conversation's mode and bump its last_active time."""
        mode = Mode(mode)
        state = ConversationState(
            conversation_id=conversation_id,
            mode=mode,
            last_active=self._clock(),
        )
        saved = await asyncio.to_thread(self.repository.upsert, state)
        logger.info("mode.set", conversation_id=conversation_id, mode=mode.value)
        return saved

    async def toggle(self, conversation_id: str) -> ConversationState:
        """Operator action: flip AI <-> Human."""
        current = await self.get_mode(conversation_id)
        return await self.set_mode(conversation_id, current.toggled)

    async def list_by_mode(self, mode: Mode | str = Mode.HUMAN) -> list[ConversationState]:
        """Conversations in ``mode``, most recently active first."""
        return await asyncio.to_thread(self.repository.list_by_mode, Mode(mode))
