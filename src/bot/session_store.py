"""SQLite persistence for conversation mode records."""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import structlog

from bot.modes import ConversationState, Mode
from db import wal_connect

logger = structlog.get_logger().bind(source="session_store")


class SessionRepository:
    """One row per conversation id; rows are never deleted."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        conn = wal_connect(self.db_path)
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS conversation_sessions (
                    id TEXT PRIMARY KEY,
                    conversation_id TEXT NOT NULL UNIQUE,
                    mode TEXT NOT NULL CHECK(mode IN ('AI','Human')),
                    last_active TIMESTAMP NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
                CREATE INDEX IF NOT EXISTS idx_sessions_mode
                    ON conversation_sessions(mode, last_active DESC);
            """)
            conn.commit()
        finally:
            conn.close()

    def find_by_conversation_id(self, conversation_id: str) -> Optional[ConversationState]:
        conn = wal_connect(self.db_path, row_factory=True)
        try:
            row = conn.execute(
                "SELECT id, conversation_id, mode, last_active FROM conversation_sessions"
                " WHERE conversation_id = ?",
                (conversation_id,),
            ).fetchone()
        finally:
            conn.close()
        return self._row_to_state(row) if row else None

    def upsert(self, state: ConversationState) -> ConversationState:
        """Insert, or update mode/last_active of the existing row in place.

        The row id (external_ref) of an existing record is preserved.
        """
        conn = wal_connect(self.db_path, row_factory=True)
        try:
            conn.execute(
                """INSERT INTO conversation_sessions (id, conversation_id, mode, last_active)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(conversation_id) DO UPDATE SET
                       mode = excluded.mode,
                       last_active = excluded.last_active""",
                (
                    state.external_ref or uuid.uuid4().hex,
                    state.conversation_id,
                    Mode(state.mode).value,
                    state.last_active.isoformat(),
                ),
            )
            conn.commit()
            row = conn.execute(
                "SELECT id, conversation_id, mode, last_active FROM conversation_sessions"
                " WHERE conversation_id = ?",
                (state.conversation_id,),
            ).fetchone()
        finally:
            conn.close()
        return self._row_to_state(row)

    def list_by_mode(self, mode: Mode) -> list[ConversationState]:
        conn = wal_connect(self.db_path, row_factory=True)
        try:
            rows = conn.execute(
                "SELECT id, conversation_id, mode, last_active FROM conversation_sessions"
                " WHERE mode = ? ORDER BY last_active DESC",
                (Mode(mode).value,),
            ).fetchall()
        finally:
            conn.close()
        return [self._row_to_state(r) for r in rows]

    def count(self) -> int:
        conn = wal_connect(self.db_path)
        try:
            return conn.execute("SELECT COUNT(*) FROM conversation_sessions").fetchone()[0]
        finally:
            conn.close()

    @staticmethod
    def _row_to_state(row) -> ConversationState:
        return ConversationState(
            conversation_id=row["conversation_id"],
            mode=Mode(row["mode"]),
            last_active=datetime.fromisoformat(row["last_active"]),
            external_ref=row["id"],
        )
