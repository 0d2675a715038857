"""Tests for ChatSession: sending, streaming, undo/redo, persistence."""
import asyncio

import pytest
from conftest import FakeProvider

from multitool.chat import (
    ERROR_REPLY,
    GREETING,
    ChatSession,
    DeliveryStatus,
    InMemoryHistoryStore,
    MessageRole,
)


@pytest.fixture
def store():
    return InMemoryHistoryStore()


async def wait_until_busy(session):
    for _ in range(100):
        if session.is_busy:
            return
        await asyncio.sleep(0)
    raise AssertionError("send never started")


class TestSendMessage:
    """Tests for a full send cycle."""

    @pytest.mark.asyncio
    async def test_starts_with_greeting(self, provider):
        """Test that a new session holds only the greeting."""
        session = ChatSession(provider)
        assert [m.text for m in session.messages] == [GREETING]

    @pytest.mark.asyncio
    async def test_reply_is_streamed_into_history(self, provider):
        """Test that the streamed reply lands after the user message."""
        session = ChatSession(provider)
        reply = await session.send_message("Hi")

        assert reply.text == "Hello there"
        messages = session.messages
        assert [m.role for m in messages] == [MessageRole.MODEL, MessageRole.USER, MessageRole.MODEL]
        assert messages[1].status == DeliveryStatus.READ

    @pytest.mark.asyncio
    async def test_one_undo_step_per_send(self, provider):
        """Test that one send adds exactly one undo step."""
        session = ChatSession(provider)
        await session.send_message("Hi")

        assert len(session.history.past) == 1
        assert await session.undo() is True
        assert [m.text for m in session.messages] == [GREETING]

    @pytest.mark.asyncio
    async def test_conversation_sent_to_provider(self, provider):
        """Test that the whole conversation is sent with provider roles."""
        session = ChatSession(provider, model="m")
        await session.send_message("first")
        await session.send_message("second")

        last_call = provider.calls[-1]
        assert [m.content for m in last_call] == [GREETING, "first", "Hello there", "second"]
        assert [m.role for m in last_call] == ["model", "user", "model", "user"]

    @pytest.mark.asyncio
    async def test_undone_turns_are_not_sent(self, provider):
        """Test that undone turns are left out of the next request."""
        session = ChatSession(provider)
        await session.send_message("first")
        await session.undo()
        await session.send_message("again")

        assert [m.content for m in provider.calls[-1]] == [GREETING, "again"]

    @pytest.mark.asyncio
    async def test_blank_input_is_ignored(self, provider):
        """Test that whitespace-only input never reaches the provider."""
        session = ChatSession(provider)
        assert await session.send_message("   ") is None
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_stream_callback_sees_growing_reply(self, provider):
        """Test that the stream callback sees each partial reply."""
        session = ChatSession(provider)
        seen: list[str] = []
        session.set_stream_callback(lambda messages: seen.append(messages[-1].text))

        await session.send_message("Hi")

        assert "Hello" in seen
        assert seen[-1] == "Hello there"

    @pytest.mark.asyncio
    async def test_status_delivered_after_first_chunk(self):
        """Test that the user message moves from sent to delivered to read."""
        provider = FakeProvider(chunks=["a", "b"])
        session = ChatSession(provider)
        statuses: list[DeliveryStatus | None] = []
        session.set_stream_callback(lambda messages: statuses.append(messages[1].status))

        await session.send_message("Hi")

        assert statuses[0] == DeliveryStatus.SENT
        assert DeliveryStatus.DELIVERED in statuses
        assert statuses[-1] == DeliveryStatus.READ

    @pytest.mark.asyncio
    async def test_usage_recorded(self, provider):
        """Test that token usage from the stream is kept."""
        session = ChatSession(provider)
        await session.send_message("Hi")
        assert session.last_usage["total_tokens"] == 5

    @pytest.mark.asyncio
    async def test_not_busy_after_send(self, provider):
        """Test that the busy flag is released after a send."""
        session = ChatSession(provider)
        await session.send_message("Hi")
        assert session.is_busy is False


class TestBusyGuard:
    """Tests for calls made while a send is still streaming."""

    @pytest.mark.asyncio
    async def test_second_send_is_refused_while_busy(self):
        """Test that a send during another send returns None and changes nothing."""
        gate = asyncio.Event()
        provider = FakeProvider(gate=gate)
        session = ChatSession(provider)

        first = asyncio.create_task(session.send_message("one"))
        await wait_until_busy(session)

        assert await session.send_message("two") is None
        assert len(provider.calls) == 1

        gate.set()
        await first

        assert [m.text for m in session.messages] == [GREETING, "one", "Hello there"]
        assert len(session.history.past) == 1

    @pytest.mark.asyncio
    async def test_undo_and_redo_are_refused_while_busy(self):
        """Test that undo and redo do nothing while a reply is streaming."""
        gate = asyncio.Event()
        gate.set()
        session = ChatSession(FakeProvider(gate=gate))
        await session.send_message("earlier")
        gate.clear()

        pending = asyncio.create_task(session.send_message("one"))
        await wait_until_busy(session)

        assert await session.undo() is False
        assert await session.redo() is False
        assert session.can_clear is False

        gate.set()
        await pending

        assert [m.text for m in session.messages] == [GREETING, "earlier", "Hello there", "one", "Hello there"]
        assert len(session.history.past) == 2


class TestButtonRules:
    """Tests for the copy/clear availability flags."""

    def test_lone_greeting_can_be_shared(self, provider):
        """Test that a conversation holding only the greeting is still copyable."""
        session = ChatSession(provider)
        assert session.can_share is True

    def test_lone_greeting_cannot_be_cleared(self, provider):
        """Test that clearing needs more than the greeting."""
        session = ChatSession(provider)
        assert session.can_clear is False

    @pytest.mark.asyncio
    async def test_clear_enabled_after_a_reply(self, provider):
        """Test that a finished exchange can be cleared."""
        session = ChatSession(provider)
        await session.send_message("Hi")
        assert session.can_clear is True


class TestSendErrors:
    """Tests for provider failures during a send."""

    @pytest.mark.asyncio
    async def test_error_before_first_chunk_appends_error_reply(self, debug_log):
        """Test that a failing provider produces the error reply and a log entry."""
        session = ChatSession(FakeProvider(error=RuntimeError("boom")))
        session.set_debug_callback(debug_log)

        reply = await session.send_message("Hi")

        assert reply.text == ERROR_REPLY
        texts = [m.text for m in session.messages]
        assert texts == [GREETING, "Hi", ERROR_REPLY]
        assert any(level == "error" and component == "Chat" for level, component, _ in debug_log.entries)
        assert session.is_busy is False

    @pytest.mark.asyncio
    async def test_partial_reply_is_replaced_by_error(self):
        """Test that a stream failing midway leaves no partial reply behind."""
        session = ChatSession(FakeProvider(chunks=["part", "ial"], error=RuntimeError("x"), fail_after=1))
        await session.send_message("Hi")

        texts = [m.text for m in session.messages]
        assert "part" not in texts
        assert texts[-1] == ERROR_REPLY


class TestPersistence:
    """Tests for the session/store interaction."""

    @pytest.mark.asyncio
    async def test_load_without_stored_history_shows_greeting(self, provider, store):
        """Test that an empty store loads as the greeting."""
        session = ChatSession(provider, store)
        await session.load()
        assert [m.text for m in session.messages] == [GREETING]

    @pytest.mark.asyncio
    async def test_send_persists_and_reload_restores(self, provider, store):
        """Test that a stored conversation is restored without undo steps."""
        session = ChatSession(provider, store)
        await session.send_message("Hi")

        restored = ChatSession(provider, store)
        await restored.load()

        assert [m.text for m in restored.messages] == [GREETING, "Hi", "Hello there"]
        assert not restored.history.can_undo

    @pytest.mark.asyncio
    async def test_undo_to_greeting_clears_store(self, provider, store):
        """Test that undoing back to the greeting deletes the stored record."""
        session = ChatSession(provider, store)
        await session.send_message("Hi")
        await session.undo()

        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_clear_resets_and_deletes(self, provider, store, debug_log):
        """Test that clear resets the history and empties the store."""
        session = ChatSession(provider, store)
        session.set_debug_callback(debug_log)
        await session.send_message("Hi")
        await session.clear()

        assert [m.text for m in session.messages] == [GREETING]
        assert not session.history.can_undo
        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_detached_store_is_not_written(self, provider, store):
        """Test that a session without a store does not persist."""
        session = ChatSession(provider, store)
        session.set_store(None)
        await session.send_message("Hi")

        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_share_text(self, provider):
        """Test that share text has one timestamped line per message."""
        session = ChatSession(provider)
        await session.send_message("Hi")

        lines = session.share_text().splitlines()
        assert len(lines) == 3
        assert lines[1].endswith("User: Hi")
        assert lines[2].endswith("Model: Hello there")
