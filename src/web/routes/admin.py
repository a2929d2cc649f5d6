"""Operator routes: knowledge refresh, human-handover queue, test bot."""

import time

from fastapi import APIRouter, Depends, Query

from bot.components import BotComponents
from bot.modes import Mode
from observability import metrics
from web.deps import get_components
from web.models import (
    AskRequest,
    AskResponse,
    KnowledgeStatus,
    ModeUpdate,
    RefreshResponse,
    SessionResponse,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/knowledge", response_model=KnowledgeStatus)
async def knowledge_status(components: BotComponents = Depends(get_components)):
    return components.knowledge_cache.status()


@router.post("/knowledge/refresh", response_model=RefreshResponse)
async def refresh_knowledge(
    warm: bool = Query(default=False, description="Refill immediately instead of on next message"),
    components: BotComponents = Depends(get_components),
):
    cache = components.knowledge_cache
    invalidated = cache.invalidate()
    pages = None
    if warm:
        snapshot = await cache.get()
        pages = snapshot.titles
    return RefreshResponse(
        invalidated=invalidated, tag=cache.tag, generation=cache.generation, pages=pages
    )


@router.get("/sessions", response_model=list[SessionResponse])
async def list_sessions(
    mode: Mode = Query(default=Mode.HUMAN),
    components: BotComponents = Depends(get_components),
):
    states = await components.mode_store.list_by_mode(mode)
    return [SessionResponse.from_state(s) for s in states]


@router.get("/sessions/{conversation_id}", response_model=SessionResponse)
async def get_session(conversation_id: str, components: BotComponents = Depends(get_components)):
    state = await components.mode_store.get_state(conversation_id)
    if state is None:
        return SessionResponse(conversation_id=conversation_id, mode=Mode.AI, persisted=False)
    return SessionResponse.from_state(state)


@router.put("/sessions/{conversation_id}/mode", response_model=SessionResponse)
async def set_session_mode(
    conversation_id: str,
    body: ModeUpdate,
    components: BotComponents = Depends(get_components),
):
    state = await components.mode_store.set_mode(conversation_id, body.mode)
    return SessionResponse.from_state(state)


@router.post("/sessions/{conversation_id}/toggle", response_model=SessionResponse)
async def toggle_session_mode(
    conversation_id: str, components: BotComponents = Depends(get_components)
):
    state = await components.mode_store.toggle(conversation_id)
    return SessionResponse.from_state(state)


@router.post("/test-bot", response_model=AskResponse)
async def test_bot(body: AskRequest, components: BotComponents = Depends(get_components)):
    """Run cache + generator directly, ignoring conversation mode."""
    start = time.perf_counter()
    snapshot = await components.knowledge_cache.get()
    result = await components.generator.generate(body.message, snapshot.combined_context)
    return AskResponse(
        response=result.text,
        context=snapshot.combined_context,
        model=result.model,
        provider=result.provider_used.value,
        provider_name=result.provider_name,
        errors=result.errors,
        pages=snapshot.titles,
        latency_ms=round((time.perf_counter() - start) * 1000, 1),
    )


@router.get("/stats")
async def stats():
    return metrics.summary()
