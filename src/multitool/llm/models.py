from collections.abc import AsyncIterator
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class StreamingResponse:
    """Async iterator over text chunks of a streamed model reply.

    Token usage only arrives with the final chunk, so it is exposed after
    iteration finishes. The joined text is kept as well, which saves callers
    from keeping their own buffer when they only need the full reply.

    Usage:
        stream = await provider.chat_completion_stream(messages)
        async for chunk in stream:
            print(chunk, end="")
        print(stream.text, stream.usage)
    """

    def __init__(self, async_iter: AsyncIterator[str]):
        self._iter = async_iter
        self._usage: dict[str, Any] | None = None
        self._chunks: list[str] = []

    @property
    def usage(self) -> dict[str, Any] | None:
        """Token usage (available after iteration completes)."""
        return self._usage

    @property
    def text(self) -> str:
        """Text received so far."""
        return "".join(self._chunks)

    def set_usage(self, usage: dict[str, Any]) -> None:
        """Record token usage (called by the provider at end of stream)."""
        self._usage = usage

    def __aiter__(self) -> "StreamingResponse":
        return self

    async def __anext__(self) -> str:
        chunk = await self._iter.__anext__()
        self._chunks.append(chunk)
        return chunk


class ChatMessage(BaseModel):
    """A provider-neutral chat turn sent to an LLM provider."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant", "model"] = Field(
        description="Sender role; 'assistant' and 'model' are equivalent"
    )
    content: str = Field(description="Content of the message")


class LLMResponse(BaseModel):
    """Non-streaming response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )
