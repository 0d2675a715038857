"""Shared infrastructure for the generation tools."""

from typing import Any

from google import genai
from google.genai import types

from ..llm import DebugCallback
from ..llm.providers.gemini import extract_text


class ToolError(RuntimeError):
    """A tool call failed; ``str(error)`` is safe to show to the user."""


class GeminiTool:
    """Base class holding the GenAI client and the debug callback.

    Subclasses issue one request/response (or long-poll) cycle per call
    and translate SDK responses into the models in ``tools.models``.
    """

    component = "Tool"

    def __init__(self, client: genai.Client) -> None:
        self._client = client
        self._debug_callback: DebugCallback | None = None

    @property
    def client(self) -> genai.Client:
        return self._client

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set debug callback: Callable(level, component, message)."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, self.component, message)

    @staticmethod
    def _require_text(value: str, what: str = "Prompt") -> str:
        if not value or not value.strip():
            raise ValueError(f"{what} cannot be empty.")
        return value

    @staticmethod
    def _extract_text(response: Any) -> str:
        return extract_text(response)

    @staticmethod
    def _inline_parts(response: Any) -> list[types.Blob]:
        """All inline-data parts of the first candidate, in order."""
        if not response.candidates:
            return []
        content = response.candidates[0].content
        if not content or not content.parts:
            return []
        return [part.inline_data for part in content.parts if getattr(part, "inline_data", None)]

    async def _generate(self, model: str, contents: Any, config: types.GenerateContentConfig | None = None) -> Any:
        self._debug("debug", f"generate_content on {model}")
        return await self._client.aio.models.generate_content(model=model, contents=contents, config=config)
