"""CLI command modules."""

from .ask import ask
from .knowledge import knowledge
from .serve import serve
from .sessions import sessions

__all__ = [
    "ask",
    "knowledge",
    "serve",
    "sessions",
]
