"""Generation tools: image, video, speech, grounded search and complex tasks.

Each tool wraps one GenAI client and issues a single request/response
(or long-poll) cycle per call. Failures the user should see are raised
as ``ToolError`` with a display-ready message.
"""

from .base import GeminiTool, ToolError
from .image import ImageTools
from .models import (
    IMAGE_ASPECT_RATIOS,
    TASK_MODELS,
    VIDEO_ASPECT_RATIOS,
    VOICES,
    GeneratedImage,
    GeneratedVideo,
    GroundingSource,
    Location,
    MediaInput,
    ReviewSnippet,
    SearchResult,
    SpeechResult,
    TaskResult,
)
from .reasoning import TaskSolver
from .search import GroundedSearch
from .speech import SpeechTools
from .video import VideoTools

__all__ = [
    "IMAGE_ASPECT_RATIOS",
    "TASK_MODELS",
    "VIDEO_ASPECT_RATIOS",
    "VOICES",
    "GeminiTool",
    "GeneratedImage",
    "GeneratedVideo",
    "GroundedSearch",
    "GroundingSource",
    "ImageTools",
    "Location",
    "MediaInput",
    "ReviewSnippet",
    "SearchResult",
    "SpeechResult",
    "TaskResult",
    "TaskSolver",
    "ToolError",
    "VideoTools",
]
