"""Notion knowledge source over the public REST API."""

import time
from typing import Callable, Optional

import httpx
import structlog

from cli.retry import http_retry, retry_from_config
from knowledge.blocks import OPAQUE_BLOCK_TYPES, extract_title, render_block
from knowledge.cache import KnowledgeSource
from knowledge.models import DocumentRecord

logger = structlog.get_logger().bind(source="notion")


class KnowledgeSourceError(Exception):
    """A knowledge page could not be fetched."""


class NotionAPIError(KnowledgeSourceError):
    """Notion answered with an error status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(f"Notion API {status_code}: {message}")


class NotionTransientError(NotionAPIError):
    """Rate limited or server-side failure; worth retrying."""


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message") or response.reason_phrase
    except ValueError:
        return response.text[:200] or response.reason_phrase


class NotionKnowledgeSource(KnowledgeSource):
    """Fetch Notion pages and flatten their block trees to text."""

    API_BASE = "https://api.notion.com/v1"
    PAGE_SIZE = 100

    def __init__(
        self,
        api_key: Optional[str],
        notion_version: str = "2022-06-28",
        timeout: float = 30.0,
        max_depth: int = 3,
        retry_config=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.api_key = api_key
        self.max_depth = max_depth
        self._clock = clock
        self.client = httpx.AsyncClient(
            base_url=self.API_BASE,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key or ''}",
                "Notion-Version": notion_version,
                "User-Agent": "helpdesk-bot/0.1",
            },
        )

        retryable = (httpx.TransportError, NotionTransientError)
        if retry_config is not None:
            decorator = retry_from_config(retry_config, exceptions=retryable)
        else:
            decorator = http_retry(exceptions=retryable)
        self._get_json = decorator(self._get_json_once)

    async def fetch_document(self, identifier: str) -> DocumentRecord:
        if not self.api_key:
            raise KnowledgeSourceError("NOTION_API_KEY is missing")

        page = await self._get_json(f"/pages/{identifier}")
        title = extract_title(page)
        lines = await self._render_children(identifier, depth=0)
        content = "\n".join(lines).strip()

        logger.debug("notion.page_fetched", page_id=identifier, title=title, chars=len(content))
        return DocumentRecord(
            identifier=identifier,
            title=title,
            content=content,
            fetched_at=self._clock(),
        )

    async def _get_json_once(self, path: str, params: Optional[dict] = None) -> dict:
        response = await self.client.get(path, params=params)
        if response.status_code == 429 or response.status_code >= 500:
            raise NotionTransientError(response.status_code, _error_message(response))
        if response.status_code >= 400:
            raise NotionAPIError(response.status_code, _error_message(response))
        return response.json()

    async def _list_children(self, block_id: str) -> list[dict]:
        """All child blocks of a block, following pagination cursors."""
        blocks: list[dict] = []
        cursor = None
        while True:
            params = {"page_size": self.PAGE_SIZE}
            if cursor:
                params["start_cursor"] = cursor
            data = await self._get_json(f"/blocks/{block_id}/children", params=params)
            blocks.extend(data.get("results", []))
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return blocks

    async def _render_children(self, block_id: str, depth: int) -> list[str]:
        lines: list[str] = []
        number = 0
        for block in await self._list_children(block_id):
            block_type = block.get("type")
            number = number + 1 if block_type == "numbered_list_item" else 0

            line = render_block(block, depth=depth, number=number)
            if line is not None:
                lines.append(line)

            if (
                block.get("has_children")
                and block_type not in OPAQUE_BLOCK_TYPES
                and depth < self.max_depth
            ):
                # Layout containers (columns, synced blocks) keep their children's depth
                child_depth = depth if line is None else depth + 1
                lines.extend(await self._render_children(block["id"], child_depth))
        return lines

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
