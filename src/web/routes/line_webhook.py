"""LINE webhook: verify, fan out events, reply."""

import asyncio
import json

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request

from bot.components import BotComponents
from bot.dispatcher import MessageDispatcher
from web.deps import get_components, get_line_client
from web.line import LineMessagingClient, verify_signature

logger = structlog.get_logger().bind(source="line_webhook")

router = APIRouter(prefix="/api/line", tags=["line"])


async def _process_event(
    event: dict, dispatcher: MessageDispatcher, line_client: LineMessagingClient
) -> None:
    message = event.get("message") or {}
    if event.get("type") != "message" or message.get("type") != "text":
        return

    user_id = (event.get("source") or {}).get("userId")
    if not user_id:
        logger.info("line.event_without_user", source_type=(event.get("source") or {}).get("type"))
        return

    reply = await dispatcher.handle(user_id, message.get("text", ""))
    if reply is None:
        return

    try:
        await line_client.reply_text(event.get("replyToken", ""), reply.text)
    except Exception as e:
        # Verification requests carry dummy reply tokens; the webhook still acks
        logger.warning("line.reply_failed", user_id=user_id, error=str(e))
        return
    logger.info("line.replied", user_id=user_id, model=reply.model)


@router.post("/webhook")
async def line_webhook(
    request: Request,
    x_line_signature: str | None = Header(default=None),
    components: BotComponents = Depends(get_components),
    line_client: LineMessagingClient = Depends(get_line_client),
):
    body = await request.body()
    secret = components.config.line.channel_secret
    if not secret:
        logger.error("line.channel_secret_missing")
        raise HTTPException(status_code=500, detail="Server configuration error")

    if not verify_signature(body, secret, x_line_signature):
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        events = json.loads(body).get("events") or []
    except (ValueError, AttributeError):
        raise HTTPException(status_code=400, detail="Invalid webhook body")
    if not isinstance(events, list):
        raise HTTPException(status_code=400, detail="Invalid webhook body")

    skipped = [e for e in events if not isinstance(e, dict)]
    if skipped:
        logger.warning("line.malformed_events", count=len(skipped))
    events = [e for e in events if isinstance(e, dict)]

    results = await asyncio.gather(
        *(_process_event(e, components.dispatcher, line_client) for e in events),
        return_exceptions=True,
    )
    for event, result in zip(events, results):
        if isinstance(result, Exception):
            logger.error("line.event_failed", event_type=event.get("type"), error=str(result))

    return {"status": "success"}
