"""Abstract base class for chat history stores.

The abstraction hides:
- Storage format (SQLite rows, in-process dicts)
- Persistence mechanism (file, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod
from typing import Any

from ..models import Message


class HistoryStore(ABC):
    """Persists the visible chat conversation between runs.

    Only the present message list is stored; undo/redo state is
    session-local and is not persisted.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def load(self, session_id: str | None = None) -> list[Message] | None:
        """Return the stored conversation, or None when nothing is stored."""

    @abstractmethod
    async def save(self, messages: list[Message], session_id: str | None = None) -> None:
        """Replace the stored conversation with ``messages``."""

    @abstractmethod
    async def clear(self, session_id: str | None = None) -> None:
        """Delete the stored conversation."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Backend type identifier."""

    async def __aenter__(self) -> "HistoryStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
