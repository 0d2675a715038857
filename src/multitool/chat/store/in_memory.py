"""In-memory history store.

Dict-based storage for session-only history; lost when the app exits.
"""

from ..models import Message
from .base import HistoryStore

DEFAULT_SESSION_ID = "default"


class InMemoryHistoryStore(HistoryStore):
    """Session-only history store, suitable for tests and throwaway runs."""

    def __init__(self, default_session_id: str = DEFAULT_SESSION_ID):
        self._default_session_id = default_session_id
        self._sessions: dict[str, list[Message]] = {}

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def load(self, session_id: str | None = None) -> list[Message] | None:
        stored = self._sessions.get(session_id or self._default_session_id)
        return list(stored) if stored is not None else None

    async def save(self, messages: list[Message], session_id: str | None = None) -> None:
        self._sessions[session_id or self._default_session_id] = list(messages)

    async def clear(self, session_id: str | None = None) -> None:
        self._sessions.pop(session_id or self._default_session_id, None)

    @property
    def backend_type(self) -> str:
        return "memory"
