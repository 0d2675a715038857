from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from .models import ChatMessage, LLMResponse, StreamingResponse

# Callable(level, component, message); level is debug/info/warning/error
DebugCallback = Callable[[str, str, str], None]


class LLMProvider(ABC):
    """Abstract base class for chat-capable LLM providers.

    This module hides the design decision of which provider SDK answers chat
    requests. Implementations own:
    - API client setup and authentication
    - Conversion between ChatMessage and the provider's content format
    - Retries for empty responses

    Supports the async context manager protocol:
        async with provider:
            response = await provider.chat_completion(messages)
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Default model name."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a complete reply.

        Args:
            messages: Conversation so far, oldest first
            model: Model to use (None uses the provider default)
            temperature: Sampling temperature (0.0 to 2.0)
            max_tokens: Maximum tokens to generate
            **kwargs: Provider-specific generation parameters

        Returns:
            LLMResponse containing generated content and metadata
        """

    @abstractmethod
    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Generate a reply as a stream of text chunks.

        Returns:
            StreamingResponse yielding text chunks; usage is set once the
            stream is exhausted.
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close on exit.

        "Event loop is closed" during cleanup is a known harmless race in
        httpx/anyio teardown and is suppressed.
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
