"""Chat session: ties the history stack, the provider and the store together.

Hides the order of history operations during a send, so the undo stack
always ends up with exactly one new entry per user message.
"""

from collections.abc import Callable

from ..llm import DebugCallback, LLMProvider
from .history import ChatHistory
from .models import DeliveryStatus, Message, MessageRole
from .store import HistoryStore
from .stream import StreamAccumulator

GREETING = "Hello! How can I help you today?"
ERROR_REPLY = "Sorry, I encountered an error. Please try again."

# Called with the current present after every change
StreamCallback = Callable[[list[Message]], None]


class ChatSession:
    """Single-conversation chat driven by a streaming provider.

    Example:
        session = ChatSession(provider, store)
        await session.load()
        reply = await session.send_message("Hi")
        await session.undo()
    """

    def __init__(
        self,
        provider: LLMProvider,
        store: HistoryStore | None = None,
        model: str | None = None,
        greeting: str = GREETING,
    ) -> None:
        self._provider = provider
        self._store = store
        self._model = model
        self._greeting = greeting
        self._history = ChatHistory([Message.model(greeting)])
        self._busy = False
        self._stream_callback: StreamCallback | None = None
        self._debug_callback: DebugCallback | None = None
        self._last_usage: dict | None = None

    @property
    def history(self) -> ChatHistory:
        return self._history

    @property
    def messages(self) -> list[Message]:
        return self._history.present

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def can_share(self) -> bool:
        """True while there is anything to copy, a lone greeting included."""
        return len(self._history.present) > 0

    @property
    def can_clear(self) -> bool:
        return not self._busy and len(self._history.present) > 1

    @property
    def last_usage(self) -> dict | None:
        """Token usage of the most recent reply, if the provider reported it."""
        return self._last_usage

    def set_store(self, store: HistoryStore | None) -> None:
        """Swap the persistence backend; None keeps the conversation in memory only."""
        self._store = store

    def set_stream_callback(self, callback: StreamCallback | None) -> None:
        """Set callback invoked with the present after every update."""
        self._stream_callback = callback

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set debug callback: Callable(level, component, message)."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Chat", message)

    def _notify(self) -> None:
        if self._stream_callback:
            self._stream_callback(self._history.present)

    def _greeting_messages(self) -> list[Message]:
        return [Message.model(self._greeting)]

    async def load(self) -> None:
        """Restore the stored conversation, or start from the greeting."""
        stored = await self._store.load() if self._store else None
        if stored:
            self._history.reset(stored)
            self._debug("info", f"Restored {len(stored)} message(s) from {self._store.backend_type}")
        else:
            self._history.reset(self._greeting_messages())
        self._notify()

    async def _persist(self) -> None:
        if self._store is None:
            return
        messages = self._history.present
        # A lone greeting is not stored
        if len(messages) > 1:
            await self._store.save(messages)
        else:
            await self._store.clear()

    def _set_user_status(self, index: int, status: DeliveryStatus) -> None:
        messages = self._history.present
        if 0 <= index < len(messages) and messages[index].role == MessageRole.USER:
            messages[index] = messages[index].with_status(status)
            self._history.replace_present(messages)

    async def send_message(self, text: str) -> Message | None:
        """Send user text and stream the model reply into the history.

        Returns the final model message, or None when the input is blank or
        another send is still running. Provider errors are turned into an
        error reply rather than raised.
        """
        if not text.strip() or self._busy:
            return None

        self._busy = True
        accumulator = StreamAccumulator()
        try:
            base = self._history.present
            user_message = Message.user(text)
            self._history.commit([*base, user_message])
            user_index = len(base)
            self._notify()

            conversation = [m.to_chat_message() for m in self._history.present]
            accumulator.begin(self._history)
            self._notify()

            try:
                stream = await self._provider.chat_completion_stream(conversation, model=self._model)
                async for chunk in stream:
                    if accumulator.feed(self._history, chunk) is None:
                        continue
                    if accumulator.chunk_count == 1:
                        self._set_user_status(user_index, DeliveryStatus.DELIVERED)
                    self._notify()
                self._last_usage = getattr(stream, "usage", None)
            except Exception as e:
                self._debug("error", f"Error sending message: {e}")
                accumulator.discard(self._history)
                error_reply = Message.model(ERROR_REPLY)
                self._history.commit([*self._history.present, error_reply])
                self._notify()
                await self._persist()
                return error_reply

            self._set_user_status(user_index, DeliveryStatus.READ)
            self._notify()
            self._debug("debug", f"Reply complete: {accumulator.chunk_count} chunk(s), {len(accumulator.text)} chars")
            await self._persist()
            return self._history.present[-1]
        finally:
            self._busy = False

    async def undo(self) -> bool:
        """Step back one edit and persist the result."""
        if self._busy or not self._history.undo():
            return False
        await self._persist()
        self._notify()
        return True

    async def redo(self) -> bool:
        """Step forward one edit and persist the result."""
        if self._busy or not self._history.redo():
            return False
        await self._persist()
        self._notify()
        return True

    async def clear(self) -> None:
        """Reset to the greeting and delete the stored conversation."""
        self._history.reset(self._greeting_messages())
        if self._store is not None:
            await self._store.clear()
        self._debug("info", "Chat history cleared")
        self._notify()

    def share_text(self) -> str:
        """The conversation as ``[HH:MM] Role: text`` lines."""
        return "\n".join(message.format_line() for message in self._history.present)
