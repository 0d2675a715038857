"""SQLite history store.

Persists the chat conversation in a SQLite database file using aiosqlite.
"""

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from ..models import DeliveryStatus, Message, MessageRole
from .base import HistoryStore
from .in_memory import DEFAULT_SESSION_ID


class SQLiteHistoryStore(HistoryStore):
    """SQLite-backed history store.

    One row per message, ordered by ``position`` within a session. A save
    rewrites the whole session inside a single transaction.
    """

    def __init__(
        self,
        path: str | Path = "./chat_history.db",
        default_session_id: str = DEFAULT_SESSION_ID
    ):
        self._db_path = Path(path).expanduser()
        self._default_session_id = default_session_id
        self._connection: aiosqlite.Connection | None = None

    @property
    def _conn(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLiteHistoryStore is not connected; call connect() first")
        return self._connection

    async def connect(self) -> None:
        """Open the database and create the schema."""
        if self._connection is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()

    async def _create_schema(self) -> None:
        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                session_id TEXT PRIMARY KEY,
                updated_at TEXT NOT NULL
            )
        """)

        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                role TEXT NOT NULL,
                text TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                status TEXT,
                FOREIGN KEY (session_id) REFERENCES sessions(session_id) ON DELETE CASCADE
            )
        """)

        await self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_session
            ON messages(session_id, position)
        """)

        await self._conn.commit()

    async def disconnect(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def load(self, session_id: str | None = None) -> list[Message] | None:
        sid = session_id or self._default_session_id

        async with self._conn.execute(
            "SELECT 1 FROM sessions WHERE session_id = ?", (sid,)
        ) as cursor:
            if await cursor.fetchone() is None:
                return None

        async with self._conn.execute(
            """
            SELECT role, text, timestamp, status
            FROM messages
            WHERE session_id = ?
            ORDER BY position ASC
            """,
            (sid,)
        ) as cursor:
            rows = await cursor.fetchall()

        return [
            Message(
                role=MessageRole(role),
                text=text,
                timestamp=datetime.fromisoformat(ts),
                status=DeliveryStatus(status) if status else None,
            )
            for role, text, ts, status in rows
        ]

    async def save(self, messages: list[Message], session_id: str | None = None) -> None:
        sid = session_id or self._default_session_id
        now = datetime.now(timezone.utc).isoformat()

        await self._conn.execute("""
            INSERT INTO sessions (session_id, updated_at)
            VALUES (?, ?)
            ON CONFLICT(session_id) DO UPDATE SET updated_at = excluded.updated_at
        """, (sid, now))

        await self._conn.execute("DELETE FROM messages WHERE session_id = ?", (sid,))

        await self._conn.executemany("""
            INSERT INTO messages (session_id, position, role, text, timestamp, status)
            VALUES (?, ?, ?, ?, ?, ?)
        """, [
            (
                sid,
                position,
                msg.role.value,
                msg.text,
                msg.timestamp.isoformat(),
                msg.status.value if msg.status else None,
            )
            for position, msg in enumerate(messages)
        ])

        await self._conn.commit()

    async def clear(self, session_id: str | None = None) -> None:
        sid = session_id or self._default_session_id
        await self._conn.execute("DELETE FROM messages WHERE session_id = ?", (sid,))
        await self._conn.execute("DELETE FROM sessions WHERE session_id = ?", (sid,))
        await self._conn.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
