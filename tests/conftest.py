"""Shared test fixtures for the helpdesk bot."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from knowledge.cache import KnowledgeSource  # noqa: E402
from knowledge.models import DocumentRecord  # noqa: E402
from llm.base import LLMError, LLMProvider  # noqa: E402
from observability import metrics  # noqa: E402


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource(KnowledgeSource):
    """In-memory knowledge source.

    ``pages`` maps id -> content, or -> an Exception to raise. ``gates``
    maps id -> asyncio.Event the fetch waits on before returning.
    """

    def __init__(self, pages: dict, titles: dict | None = None, clock=None):
        self.pages = dict(pages)
        self.titles = titles or {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []
        self.closed = False
        self._clock = clock or (lambda: 0.0)

    async def fetch_document(self, identifier: str) -> DocumentRecord:
        self.calls.append(identifier)
        gate = self.gates.get(identifier)
        if gate is not None:
            await gate.wait()
        value = self.pages[identifier]
        if isinstance(value, Exception):
            raise value
        return DocumentRecord(
            identifier=identifier,
            title=self.titles.get(identifier, identifier.upper()),
            content=value,
            fetched_at=self._clock(),
        )

    async def aclose(self) -> None:
        self.closed = True


class FakeProvider(LLMProvider):
    """Provider returning a canned answer or raising a canned error."""

    def __init__(self, name: str, model: str, answer: str | None = None, error: Exception | None = None):
        self.provider_name = name
        self.model = model
        self.answer = answer
        self.error = error
        self.calls: list[dict] = []

    def complete(self, system, query, temperature=0.0, max_tokens=2048) -> str:
        self.calls.append(
            {"system": system, "query": query, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.error is not None:
            raise self.error
        if not self.answer:
            raise LLMError(f"{self.provider_name} returned an empty response")
        return self.answer


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_source(clock):
    return FakeSource(
        {"p1": "Library opens at 8am.", "p2": "Tuition is due in March."},
        titles={"p1": "Library", "p2": "Tuition"},
        clock=clock,
    )


@pytest.fixture
def sessions_db(tmp_path):
    return tmp_path / "sessions.db"


@pytest.fixture
def make_source(clock):
    """Factory for FakeSource bound to the test clock."""

    def _make(pages: dict, titles: dict | None = None) -> FakeSource:
        return FakeSource(pages, titles=titles, clock=clock)

    return _make


@pytest.fixture
def make_provider():
    """Factory for FakeProvider."""
    return FakeProvider
