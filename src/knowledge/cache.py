"""In-process knowledge cache with TTL, tag invalidation and single-flight fills."""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import structlog

from knowledge.models import NO_PAGES_MARKER, DocumentRecord, KnowledgeSnapshot
from observability import metrics

logger = structlog.get_logger().bind(source="knowledge_cache")

DEFAULT_TTL_SECONDS = 86400
DEFAULT_TAG = "notion-data"


class KnowledgeSource(ABC):
    """External knowledge store that returns one flattened page per identifier."""

    @abstractmethod
    async def fetch_document(self, identifier: str) -> DocumentRecord:
        """Fetch one page. Raises on any failure."""
        ...

    async def aclose(self) -> None:
        """Release network resources, if any."""


class KnowledgeCache:
    """Cache the combined context of a fixed list of knowledge pages.

    A snapshot is reused until it is older than ``ttl_seconds`` or until
    ``invalidate()`` bumps the cache generation. Concurrent ``get()``
    calls during a miss await one shared fill task per generation.
    """

    def __init__(
        self,
        source: KnowledgeSource,
        page_ids: list[str],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        tag: str = DEFAULT_TAG,
        max_concurrency: int = 5,
        clock: Callable[[], float] = time.time,
    ):
        self.source = source
        self.page_ids = list(page_ids)
        self.ttl_seconds = ttl_seconds
        self.tag = tag
        self.max_concurrency = max(1, max_concurrency)
        self._clock = clock

        self._snapshot: Optional[KnowledgeSnapshot] = None
        self._snapshot_generation = -1
        self._generation = 0
        self._pending: Optional[asyncio.Task] = None
        self._pending_generation = -1
        self.fill_count = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_stale(self) -> bool:
        return not self._is_fresh()

    def _is_fresh(self) -> bool:
        if self._snapshot is None or self._snapshot_generation != self._generation:
            return False
        return self._clock() - self._snapshot.fetched_at <= self.ttl_seconds

    async def get(self) -> KnowledgeSnapshot:
        """Return the current snapshot, filling it first on a miss."""
        if self._is_fresh():
            metrics.counter("knowledge.hit")
            return self._snapshot

        if self._pending is None or self._pending_generation != self._generation:
            self._start_fill()
        else:
            metrics.counter("knowledge.joined_fill")

        # shield: a cancelled caller must not cancel the fill other callers share
        return await asyncio.shield(self._pending)

    def invalidate(self, tag: Optional[str] = None) -> bool:
        """Mark the current snapshot stale; the next get() refills.

        Returns False when ``tag`` is given and is not this cache's tag.
        """
        if tag is not None and tag != self.tag:
            return False
        self._generation += 1
        metrics.counter("knowledge.invalidated")
        logger.info("knowledge.invalidated", tag=self.tag, generation=self._generation)
        return True

    def peek(self) -> Optional[KnowledgeSnapshot]:
        """Current snapshot, possibly stale, without triggering a fill."""
        return self._snapshot

    def status(self) -> dict:
        snapshot = self._snapshot
        return {
            "tag": self.tag,
            "ttl_seconds": self.ttl_seconds,
            "generation": self._generation,
            "configured_pages": len(self.page_ids),
            "filled": snapshot is not None,
            "stale": self.is_stale,
            "fetched_at": snapshot.fetched_at if snapshot else None,
            "age_seconds": round(self._clock() - snapshot.fetched_at, 1) if snapshot else None,
            "pages": snapshot.titles if snapshot else [],
            "fill_in_progress": self._pending is not None,
        }

    def _start_fill(self) -> None:
        generation = self._generation
        task = asyncio.get_running_loop().create_task(self._fill(generation))
        self._pending = task
        self._pending_generation = generation
        task.add_done_callback(self._fill_done)

    def _fill_done(self, task: asyncio.Task) -> None:
        if self._pending is task:
            self._pending = None
        if not task.cancelled() and task.exception() is not None:
            logger.error("knowledge.fill_failed", error=str(task.exception()))

    async def _fill(self, generation: int) -> KnowledgeSnapshot:
        self.fill_count += 1
        metrics.counter("knowledge.fill")
        logger.info("knowledge.fill_start", pages=len(self.page_ids), generation=generation)

        if not self.page_ids:
            snapshot = KnowledgeSnapshot.build((), self._clock(), empty_marker=NO_PAGES_MARKER)
        else:
            semaphore = asyncio.Semaphore(self.max_concurrency)
            with metrics.timer("knowledge.fill"):
                # gather keeps argument order, so documents follow configured order
                results = await asyncio.gather(
                    *(self._fetch_limited(semaphore, pid) for pid in self.page_ids)
                )
            documents = [doc for doc in results if doc is not None]
            snapshot = KnowledgeSnapshot.build(documents, self._clock())

        self._install(generation, snapshot)
        logger.info(
            "knowledge.fill_done",
            generation=generation,
            fetched=len(snapshot.documents),
            failed=len(self.page_ids) - len(snapshot.documents),
            context_chars=len(snapshot.combined_context),
        )
        return snapshot

    async def _fetch_limited(
        self, semaphore: asyncio.Semaphore, identifier: str
    ) -> Optional[DocumentRecord]:
        async with semaphore:
            try:
                return await self.source.fetch_document(identifier)
            except Exception as e:
                metrics.counter("knowledge.fetch_failed")
                logger.warning("knowledge.fetch_failed", page_id=identifier, error=str(e))
                return None

    def _install(self, generation: int, snapshot: KnowledgeSnapshot) -> None:
        # An older fill finishing late must not replace a newer snapshot
        if generation < self._snapshot_generation:
            return
        self._snapshot = snapshot
        self._snapshot_generation = generation
