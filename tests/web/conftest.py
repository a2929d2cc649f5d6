"""Shared fixtures for web API tests."""

import base64
import hashlib
import hmac
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from bot.components import build_components
from cli.config_models import BotConfig

CHANNEL_SECRET = "test-channel-secret"


def sign(body: bytes, secret: str = CHANNEL_SECRET) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


@pytest.fixture
def bot_config(sessions_db):
    return BotConfig.from_dict(
        {
            "knowledge": {"page_ids": ["p1", "p2"]},
            "prompt": {"apology_message": "Sorry.", "language": "English"},
            "line": {"channel_secret": CHANNEL_SECRET, "channel_access_token": "token"},
            "paths": {"sessions_db": str(sessions_db)},
        }
    )


@pytest.fixture
def primary(make_provider):
    return make_provider("gemini", "gemini-2.0-flash", answer="Library opens at 8am.")


@pytest.fixture
def components(bot_config, fake_source, primary):
    return build_components(bot_config, providers=[primary], knowledge_source=fake_source)


@pytest.fixture
def line_client():
    client = MagicMock()
    client.reply_text = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def client(components, line_client):
    """Test client with the pipeline and LINE client swapped for test doubles."""
    from web.app import app
    from web.deps import get_components, get_line_client

    app.dependency_overrides[get_components] = lambda: components
    app.dependency_overrides[get_line_client] = lambda: line_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def post_webhook(client):
    """POST a signed LINE webhook payload."""

    def _post(events: list, signature: str | None = None):
        body = json.dumps({"destination": "Ubot", "events": events}).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        headers["X-Line-Signature"] = signature if signature is not None else sign(body)
        return client.post("/api/line/webhook", content=body, headers=headers)

    return _post


def text_event(user_id: str = "U1", text: str = "Library hours?", reply_token: str = "reply-1") -> dict:
    return {
        "type": "message",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": user_id},
        "message": {"type": "text", "id": "m1", "text": text},
    }


@pytest.fixture
def make_text_event():
    return text_event
