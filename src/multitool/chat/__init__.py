"""Chat panel core: message model, undo/redo history, streaming and persistence.

Module structure:
- models.py: Message, roles and read receipts
- history.py: past/present/future undo stack
- stream.py: folds streamed chunks into the last model message
- store/: persistence backends for the visible conversation
- session.py: orchestration of a send, undo/redo, clear and share
"""

from .history import ChatHistory
from .models import DeliveryStatus, Message, MessageRole
from .session import ERROR_REPLY, GREETING, ChatSession
from .store import HistoryStore, InMemoryHistoryStore, create_history_store
from .stream import StreamAccumulator

__all__ = [
    "ERROR_REPLY",
    "GREETING",
    "ChatHistory",
    "ChatSession",
    "DeliveryStatus",
    "HistoryStore",
    "InMemoryHistoryStore",
    "Message",
    "MessageRole",
    "StreamAccumulator",
    "create_history_store",
]
