"""Video generation (long-running operation) and video analysis."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from google.genai import types

from .base import GeminiTool, ToolError
from .models import VIDEO_ASPECT_RATIOS, GeneratedVideo, MediaInput

GENERATE_MODEL = "veo-3.1-fast-generate-preview"
ANALYZE_MODEL = "gemini-2.5-pro"
ANALYZE_PROMPT = (
    "Analyze this video for key information. "
    "Describe the main subject, actions, and overall theme."
)
MAX_ANALYZE_BYTES = 20 * 1024 * 1024
NO_VIDEO_MESSAGE = "Video generation completed but no download link was found."

LOADING_MESSAGES = (
    "Warming up the digital director's chair...",
    "Conceptualizing the visual narrative...",
    "Assembling pixels into a masterpiece...",
    "Rendering the first few frames...",
    "This might take a few minutes. Great art takes time!",
    "Applying cinematic color grading...",
    "Finalizing the special effects...",
    "Almost ready for the premiere...",
)

ProgressCallback = Callable[[str], None]


class VideoTools(GeminiTool):
    """Generate / Analyze sub-tools of the video panel.

    Generation is a long-running operation: it is polled every
    ``poll_interval`` seconds while progress messages rotate every
    ``message_interval`` seconds.
    """

    component = "Video"

    def __init__(
        self,
        client: Any,
        poll_interval: float = 10.0,
        message_interval: float = 5.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        super().__init__(client)
        self._poll_interval = poll_interval
        self._message_interval = message_interval
        self._sleep = sleep

    async def generate(
        self,
        prompt: str = "",
        image: MediaInput | None = None,
        aspect_ratio: str = "16:9",
        progress: ProgressCallback | None = None,
    ) -> GeneratedVideo:
        """Create a 720p video from a prompt, an optional starting image, or both."""
        if not prompt.strip() and image is None:
            raise ValueError("Please provide a prompt or an image.")
        if aspect_ratio not in VIDEO_ASPECT_RATIOS:
            raise ValueError(
                f"Unsupported aspect ratio: {aspect_ratio}. "
                f"Supported: {', '.join(VIDEO_ASPECT_RATIOS)}"
            )

        request: dict[str, Any] = {
            "model": GENERATE_MODEL,
            "prompt": prompt,
            "config": types.GenerateVideosConfig(
                number_of_videos=1,
                resolution="720p",
                aspect_ratio=aspect_ratio,
            ),
        }
        if image is not None:
            request["image"] = types.Image(image_bytes=image.data, mime_type=image.mime_type)

        try:
            operation = await self._client.aio.models.generate_videos(**request)
            operation = await self._wait(operation, progress)
            video = self._first_video(operation)
            if video is None:
                raise ToolError(NO_VIDEO_MESSAGE)
            data = await self._download(video)
        except ToolError:
            raise
        except Exception as e:
            self._debug("error", f"Video generation failed: {e}")
            if "Requested entity was not found" in str(e):
                raise ToolError("API key is invalid. Please select a valid key.") from e
            raise ToolError("Failed to generate video. Please try again.") from e

        self._debug("info", f"Downloaded video ({len(data)} bytes)")
        return GeneratedVideo(data=data, mime_type=video.mime_type or "video/mp4", uri=video.uri)

    async def _wait(self, operation: Any, progress: ProgressCallback | None) -> Any:
        index = 0
        if progress:
            progress(LOADING_MESSAGES[index])

        since_poll = 0.0
        since_message = 0.0
        step = min(self._poll_interval, self._message_interval)
        while not operation.done:
            await self._sleep(step)
            since_poll += step
            since_message += step

            if progress and since_message >= self._message_interval:
                index = (index + 1) % len(LOADING_MESSAGES)
                progress(LOADING_MESSAGES[index])
                since_message = 0.0

            if since_poll >= self._poll_interval:
                operation = await self._client.aio.operations.get(operation)
                since_poll = 0.0
                self._debug("debug", f"Operation {getattr(operation, 'name', '?')} done={operation.done}")

        if operation.error:
            self._debug("error", f"Operation failed: {operation.error}")
            raise ToolError(NO_VIDEO_MESSAGE)
        return operation

    @staticmethod
    def _first_video(operation: Any) -> types.Video | None:
        response = operation.response
        if not response or not response.generated_videos:
            return None
        return response.generated_videos[0].video

    async def _download(self, video: types.Video) -> bytes:
        if video.video_bytes:
            return video.video_bytes
        if not video.uri:
            raise ToolError(NO_VIDEO_MESSAGE)
        return await self._client.aio.files.download(file=video)

    async def analyze(self, video: MediaInput, prompt: str = ANALYZE_PROMPT) -> str:
        """Describe an uploaded video (inline upload, 20 MB limit)."""
        if video.size > MAX_ANALYZE_BYTES:
            raise ValueError("File is too large. Please select a video under 20MB.")
        if not video.is_video:
            raise ValueError(f"Expected a video file, got {video.mime_type}")

        try:
            response = await self._generate(
                ANALYZE_MODEL,
                [types.Part.from_bytes(data=video.data, mime_type=video.mime_type), prompt],
            )
        except Exception as e:
            self._debug("error", f"Video analysis failed: {e}")
            raise ToolError(
                "Failed to analyze video. This feature is experimental "
                "and may have file size/format limitations."
            ) from e
        return self._extract_text(response)
