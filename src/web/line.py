"""LINE Messaging API: webhook signature check and reply client."""

import base64
import hashlib
import hmac
from typing import Optional

import httpx
import structlog

logger = structlog.get_logger().bind(source="line")

MAX_TEXT_LENGTH = 5000


class LineAPIError(Exception):
    """Reply could not be delivered to LINE."""


def verify_signature(body: bytes, channel_secret: str, signature: Optional[str]) -> bool:
    """Check X-Line-Signature: base64(HMAC-SHA256(channel_secret, body))."""
    if not signature or not channel_secret:
        return False
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("ascii")
    return hmac.compare_digest(expected, signature)


def truncate_text(text: str, limit: int = MAX_TEXT_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


class LineMessagingClient:
    """Minimal async client for the reply endpoint."""

    def __init__(
        self,
        access_token: Optional[str],
        api_base: str = "https://api.line.me",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.client = httpx.AsyncClient(
            base_url=api_base,
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {access_token or ''}"},
        )

    async def reply_text(self, reply_token: str, text: str) -> None:
        if not self.access_token:
            raise LineAPIError("LINE_CHANNEL_ACCESS_TOKEN is missing")
        response = await self.client.post(
            "/v2/bot/message/reply",
            json={
                "replyToken": reply_token,
                "messages": [{"type": "text", "text": truncate_text(text)}],
            },
        )
        if response.status_code >= 400:
            raise LineAPIError(f"LINE reply failed ({response.status_code}): {response.text[:200]}")

    async def aclose(self) -> None:
        await self.client.aclose()
