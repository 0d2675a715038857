"""Unit tests for the streaming accumulator."""
import pytest

from multitool.chat import ChatHistory, Message, MessageRole, StreamAccumulator


@pytest.fixture
def history():
    history = ChatHistory([Message.model("Hello!")])
    history.commit([*history.present, Message.user("hi")])
    return history


class TestStreamAccumulator:
    """Tests for folding chunks into the last model message."""

    def test_begin_appends_placeholder_without_undo_step(self, history):
        """Test that begin adds an empty model message without an undo step."""
        accumulator = StreamAccumulator()
        accumulator.begin(history)

        assert history.present[-1].role == MessageRole.MODEL
        assert history.present[-1].text == ""
        assert len(history.past) == 1
        assert accumulator.started

    def test_feed_joins_chunks(self, history):
        """Test that fed chunks are concatenated into the placeholder."""
        accumulator = StreamAccumulator()
        accumulator.begin(history)
        accumulator.feed(history, "Hel")
        updated = accumulator.feed(history, "lo")

        assert updated.text == "Hello"
        assert history.present[-1].text == "Hello"
        assert accumulator.chunk_count == 2
        assert len(history.past) == 1

    def test_empty_chunk_is_ignored(self, history):
        """Test that empty chunks are skipped and not counted."""
        accumulator = StreamAccumulator()
        accumulator.begin(history)

        assert accumulator.feed(history, "") is None
        assert accumulator.chunk_count == 0

    def test_feed_before_begin_fails(self, history):
        """Test that feeding before begin raises."""
        with pytest.raises(RuntimeError):
            StreamAccumulator().feed(history, "x")

    def test_feed_requires_model_placeholder(self, history):
        """Test that feeding fails once the last message is not the placeholder."""
        accumulator = StreamAccumulator()
        accumulator.begin(history)
        history.replace_present([*history.present, Message.user("late")])

        with pytest.raises(RuntimeError):
            accumulator.feed(history, "x")

    def test_discard_removes_placeholder(self, history):
        """Test that discard drops the partial reply."""
        accumulator = StreamAccumulator()
        accumulator.begin(history)
        accumulator.feed(history, "partial")
        accumulator.discard(history)

        assert history.present[-1].role == MessageRole.USER
        assert not accumulator.started
