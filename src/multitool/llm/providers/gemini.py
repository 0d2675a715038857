"""Google Gemini chat provider.

Uses the official Google GenAI SDK (async surface, ``client.aio``).
Reference: https://github.com/googleapis/python-genai

Gemini occasionally returns empty candidates (safety filtering or transient
service issues), so non-streaming calls are retried a few times.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import types

from ..base import DebugCallback, LLMProvider
from ..models import ChatMessage, LLMResponse, StreamingResponse

DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]


def extract_text(response: Any) -> str:
    """Join the text parts of the first candidate of a Gemini response.

    Falls back to ``response.text``; returns an empty string when the
    response carries no text at all.
    """
    if response.candidates:
        candidate = response.candidates[0]
        if candidate.content and candidate.content.parts:
            texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
            if texts:
                return "".join(texts)

    try:
        return response.text or ""
    except (ValueError, AttributeError):
        return ""


def usage_from(metadata: Any) -> dict[str, int] | None:
    """Convert Gemini usage metadata into the provider-neutral usage dict."""
    if not metadata:
        return None
    return {
        "prompt_tokens": metadata.prompt_token_count or 0,
        "completion_tokens": metadata.candidates_token_count or 0,
        "total_tokens": metadata.total_token_count or 0,
    }


class GeminiProvider(LLMProvider):
    """Google Gemini chat provider.

    Hidden design decisions:
    - Google GenAI client initialization (or injection, for tests and for
      sharing one client with the media tools)
    - Role mapping: 'assistant' and 'model' both map to Gemini's 'model'
    - Retry logic for empty responses
    - Relaxed safety settings
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-2.5-flash",
        max_retries: int = 3,
        client: genai.Client | None = None,
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key (ignored when ``client`` is given)
            model: Default chat model
            max_retries: Attempts for empty non-streaming responses
            client: Pre-built ``genai.Client`` to reuse
            **client_kwargs: Additional kwargs for ``genai.Client``
        """
        if client is None and not api_key:
            raise TypeError("GeminiProvider requires 'api_key' or 'client'")
        self._model = model
        self._max_retries = max(1, max_retries)
        self._client = client or genai.Client(api_key=api_key, **client_kwargs)
        self._debug_callback: DebugCallback | None = None

    @property
    def model(self) -> str:
        return self._model

    @property
    def client(self) -> genai.Client:
        """The underlying GenAI client."""
        return self._client

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set debug callback: Callable(level, component, message)."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "LLM", message)

    def _convert_messages(self, messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
        """Split ChatMessages into (system_instruction, contents)."""
        system_instruction = None
        contents = []

        for msg in messages:
            if msg.role == "system":
                system_instruction = msg.content
            elif msg.role == "user":
                contents.append(types.Content(role="user", parts=[types.Part(text=msg.content)]))
            else:
                contents.append(types.Content(role="model", parts=[types.Part(text=msg.content)]))

        return system_instruction, contents

    def _build_config(
        self,
        system_instruction: str | None,
        temperature: float,
        max_tokens: int | None,
        **kwargs: Any
    ) -> types.GenerateContentConfig:
        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_instruction,
            safety_settings=DEFAULT_SAFETY_SETTINGS,
            **kwargs
        )
        if max_tokens is not None:
            config.max_output_tokens = max_tokens
        return config

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a reply, retrying when Gemini answers with no text."""
        model_to_use = model or self._model
        system_instruction, contents = self._convert_messages(messages)
        config = self._build_config(system_instruction, temperature, max_tokens, **kwargs)

        content = ""
        usage = None

        for attempt in range(self._max_retries):
            response = await self._client.aio.models.generate_content(
                model=model_to_use,
                contents=contents,
                config=config
            )
            usage = usage_from(response.usage_metadata) or usage
            content = extract_text(response)

            if content:
                break

            if attempt < self._max_retries - 1:
                self._debug("warning", f"Empty response from {model_to_use}, retry {attempt + 1}")
                await asyncio.sleep(0.5 * (attempt + 1))

        return LLMResponse(content=content, model=model_to_use, usage=usage)

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Stream a reply chunk by chunk."""
        model_to_use = model or self._model
        system_instruction, contents = self._convert_messages(messages)
        config = self._build_config(system_instruction, temperature, max_tokens, **kwargs)

        self._debug("debug", f"Streaming {len(contents)} turn(s) to {model_to_use}")
        response: StreamingResponse

        async def _generate() -> AsyncIterator[str]:
            usage = None
            stream = await self._client.aio.models.generate_content_stream(
                model=model_to_use, contents=contents, config=config
            )
            async for chunk in stream:
                usage = usage_from(chunk.usage_metadata) or usage
                text = extract_text(chunk)
                if text:
                    yield text
            if usage:
                response.set_usage(usage)

        response = StreamingResponse(_generate())
        return response

    async def close(self) -> None:
        """The GenAI client holds no resources that need explicit closing."""
