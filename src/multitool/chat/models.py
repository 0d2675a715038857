"""Data models for the chat panel.

These models are independent of both the provider and the history store.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..llm import ChatMessage


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    """Who wrote a chat message."""

    USER = "user"
    MODEL = "model"


class DeliveryStatus(str, Enum):
    """Read receipt shown next to user messages."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class Message(BaseModel):
    """A single chat message.

    Frozen: streaming updates replace the last model message with a copy
    (see ``with_text``) instead of mutating it.
    """

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    text: str = ""
    timestamp: datetime = Field(default_factory=utcnow)
    status: DeliveryStatus | None = None

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role=MessageRole.USER, text=text, status=DeliveryStatus.SENT)

    @classmethod
    def model(cls, text: str = "") -> "Message":
        return cls(role=MessageRole.MODEL, text=text)

    def with_text(self, text: str) -> "Message":
        """Copy with new text and a fresh timestamp."""
        return self.model_copy(update={"text": text, "timestamp": utcnow()})

    def with_status(self, status: DeliveryStatus) -> "Message":
        return self.model_copy(update={"status": status})

    def to_chat_message(self) -> ChatMessage:
        """Convert to the provider-neutral message format."""
        return ChatMessage(role=self.role.value, content=self.text)

    def format_line(self) -> str:
        """Render as ``[HH:MM] Role: text`` for sharing."""
        stamp = self.timestamp.astimezone().strftime("%H:%M")
        return f"[{stamp}] {self.role.value.capitalize()}: {self.text}"
