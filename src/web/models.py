"""Pydantic request/response schemas for the web API."""

from typing import Optional

from pydantic import BaseModel, Field

from bot.modes import ConversationState, Mode

# --- Sessions ---


class ModeUpdate(BaseModel):
    mode: Mode


class SessionResponse(BaseModel):
    conversation_id: str
    mode: Mode
    last_active: Optional[str] = None
    external_ref: Optional[str] = None
    persisted: bool = True

    @classmethod
    def from_state(cls, state: ConversationState) -> "SessionResponse":
        return cls(
            conversation_id=state.conversation_id,
            mode=state.mode,
            last_active=state.last_active.isoformat(),
            external_ref=state.external_ref,
        )


# --- Knowledge ---


class KnowledgeStatus(BaseModel):
    tag: str
    ttl_seconds: float
    generation: int
    configured_pages: int
    filled: bool
    stale: bool
    fetched_at: Optional[float] = None
    age_seconds: Optional[float] = None
    pages: list[str] = []
    fill_in_progress: bool = False


class RefreshResponse(BaseModel):
    invalidated: bool
    tag: str
    generation: int
    pages: Optional[list[str]] = None


# --- Test bot (admin dry run) ---


class AskRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=5000)


class AskResponse(BaseModel):
    response: str
    context: str
    model: str
    provider: str
    provider_name: Optional[str] = None
    errors: list[str] = []
    pages: list[str] = []
    latency_ms: float
