"""Factory for creating chat history stores."""

from typing import Any

from .base import HistoryStore


def create_history_store(
    backend: str = "memory",
    **kwargs: Any
) -> HistoryStore:
    """Create a chat history store.

    Args:
        backend: Backend type ("memory" or "sqlite")
        **kwargs: Backend-specific configuration (e.g. ``path`` for sqlite)

    Returns:
        HistoryStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryHistoryStore
        return InMemoryHistoryStore(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteHistoryStore
        return SQLiteHistoryStore(**kwargs)

    raise ValueError(
        f"Unsupported history backend: {backend}. "
        f"Supported backends: memory, sqlite"
    )
