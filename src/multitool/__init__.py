"""
Multitool: a terminal workspace for Gemini chat, media generation,
grounded search and live voice conversation.

Each subpackage hides one design decision: ``llm`` the chat provider,
``chat`` the conversation model and its persistence, ``tools`` the
one-shot generation calls, ``audio`` the live audio pipeline and ``ui``
the Textual front end.
"""

__version__ = "0.1.0"

from .chat import ChatHistory, ChatSession, Message, create_history_store
from .settings import Settings

__all__ = [
    "ChatHistory",
    "ChatSession",
    "Message",
    "Settings",
    "create_history_store",
]
