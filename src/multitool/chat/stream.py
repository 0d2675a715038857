"""Streaming reducer: folds text chunks into the last model message."""

from .history import ChatHistory
from .models import Message, MessageRole


class StreamAccumulator:
    """Accumulates streamed chunks into a model placeholder message.

    Every update goes through ``ChatHistory.replace_present`` so a whole
    streamed reply never produces more than the single undo step that
    the user message created.
    """

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._started = False

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    @property
    def started(self) -> bool:
        return self._started

    def begin(self, history: ChatHistory) -> Message:
        """Append an empty model placeholder to the present."""
        placeholder = Message.model()
        history.replace_present([*history.present, placeholder])
        self._chunks = []
        self._started = True
        return placeholder

    def feed(self, history: ChatHistory, chunk: str) -> Message | None:
        """Append a chunk and rewrite the placeholder with the joined text.

        Returns the updated message, or None for an empty chunk.
        """
        if not self._started:
            raise RuntimeError("feed() called before begin()")
        if not chunk:
            return None

        self._chunks.append(chunk)
        messages = history.present
        last = messages[-1] if messages else None
        if last is None or last.role != MessageRole.MODEL:
            raise RuntimeError("Present does not end with a model placeholder")

        updated = last.with_text(self.text)
        messages[-1] = updated
        history.replace_present(messages)
        return updated

    def discard(self, history: ChatHistory) -> None:
        """Remove the placeholder (used when the stream fails)."""
        messages = history.present
        if self._started and messages and messages[-1].role == MessageRole.MODEL:
            history.replace_present(messages[:-1])
        self._started = False
