"""Pytest configuration and shared fixtures.

The GenAI SDK is never called: tests build fake clients and responses from
SimpleNamespace and AsyncMock that expose the attributes the code reads.
"""
import asyncio
from collections.abc import AsyncIterator
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from multitool.llm import ChatMessage, LLMProvider, LLMResponse, StreamingResponse


def make_part(text: str | None = None, data: bytes | None = None, mime_type: str = "image/png"):
    inline = SimpleNamespace(data=data, mime_type=mime_type) if data is not None else None
    return SimpleNamespace(text=text, inline_data=inline)


def make_response(
    text: str | None = None,
    parts: list | None = None,
    grounding_chunks: list | None = None,
    usage: tuple[int, int, int] | None = None,
):
    """A fake GenerateContentResponse with one candidate."""
    if parts is None:
        parts = [make_part(text=text)] if text is not None else []
    metadata = None
    if usage is not None:
        metadata = SimpleNamespace(
            prompt_token_count=usage[0],
            candidates_token_count=usage[1],
            total_token_count=usage[2],
        )
    candidate = SimpleNamespace(
        content=SimpleNamespace(parts=parts),
        grounding_metadata=SimpleNamespace(grounding_chunks=grounding_chunks),
    )
    return SimpleNamespace(candidates=[candidate], text=text, usage_metadata=metadata)


async def _aiter(items):
    for item in items:
        yield item


def make_client(**models: Any):
    """A fake genai.Client whose ``aio`` namespace holds AsyncMocks."""
    return SimpleNamespace(
        aio=SimpleNamespace(
            models=SimpleNamespace(
                generate_content=models.get("generate_content", AsyncMock()),
                generate_content_stream=models.get("generate_content_stream", AsyncMock()),
                generate_images=models.get("generate_images", AsyncMock()),
                generate_videos=models.get("generate_videos", AsyncMock()),
            ),
            operations=SimpleNamespace(get=models.get("operations_get", AsyncMock())),
            files=SimpleNamespace(download=models.get("files_download", AsyncMock())),
        )
    )


class FakeProvider(LLMProvider):
    """Streams a fixed list of chunks, or raises ``error`` mid-stream.

    When ``gate`` is given the stream waits for it before the first chunk.
    """

    def __init__(
        self,
        chunks: list[str] | None = None,
        error: Exception | None = None,
        fail_after: int = 0,
        gate: asyncio.Event | None = None,
    ):
        self.chunks = chunks if chunks is not None else ["Hello", " there"]
        self.error = error
        self.fail_after = fail_after
        self.gate = gate
        self.calls: list[list[ChatMessage]] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "fake-model"

    async def chat_completion(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs) -> LLMResponse:
        self.calls.append(list(messages))
        return LLMResponse(content="".join(self.chunks), model=model or self.model)

    async def chat_completion_stream(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs) -> StreamingResponse:
        self.calls.append(list(messages))

        async def _generate() -> AsyncIterator[str]:
            if self.gate is not None:
                await self.gate.wait()
            for index, chunk in enumerate(self.chunks):
                if self.error is not None and index >= self.fail_after:
                    raise self.error
                yield chunk
            if self.error is not None:
                raise self.error
            response.set_usage({"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5})

        response = StreamingResponse(_generate())
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def debug_log():
    """A debug callback that records (level, component, message) tuples."""
    entries: list[tuple[str, str, str]] = []

    def _callback(level: str, component: str, message: str) -> None:
        entries.append((level, component, message))

    _callback.entries = entries
    return _callback


@pytest.fixture
def aiter_of():
    """Turn a list into an async iterator (for fake streams)."""
    return _aiter
