"""Chat history persistence ("local storage" for the chat panel)."""

from .base import HistoryStore
from .factory import create_history_store
from .in_memory import InMemoryHistoryStore

__all__ = [
    "HistoryStore",
    "InMemoryHistoryStore",
    "create_history_store",
]
