"""Complex tasks with optional extended thinking."""

from google.genai import types

from ..llm.providers.gemini import usage_from
from .base import GeminiTool, ToolError
from .models import TASK_MODELS, TaskResult

DEFAULT_TASK_MODEL = "gemini-2.5-flash"
THINKING_MODEL = "gemini-2.5-pro"
THINKING_BUDGET = 32768


class TaskSolver(GeminiTool):
    component = "Tasks"

    async def solve(self, prompt: str, model: str = DEFAULT_TASK_MODEL, thinking: bool = False) -> TaskResult:
        """Run one prompt; thinking mode always uses the pro model."""
        self._require_text(prompt)
        if model not in TASK_MODELS:
            raise ValueError(f"Unknown model: {model}. Available: {', '.join(TASK_MODELS)}")

        config = None
        if thinking:
            model = THINKING_MODEL
            config = types.GenerateContentConfig(
                thinking_config=types.ThinkingConfig(thinking_budget=THINKING_BUDGET)
            )

        try:
            response = await self._generate(model, prompt, config)
        except Exception as e:
            self._debug("error", f"Task failed on {model}: {e}")
            raise ToolError("An error occurred. Please try again.") from e

        usage = usage_from(getattr(response, "usage_metadata", None))
        self._debug("info", f"Task answered by {model} (thinking={thinking})")
        return TaskResult(text=self._extract_text(response), model=model, thinking=thinking, usage=usage)
