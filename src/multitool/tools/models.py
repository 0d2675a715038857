"""Data models for the generation tools.

Independent of the provider SDK types so panels and the CLI never touch them.
"""

import mimetypes
from pathlib import Path
from typing import Literal

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field

from ..audio.pcm import decode_pcm16, duration_seconds, write_wav

ImageAspectRatio = Literal["1:1", "16:9", "9:16", "4:3", "3:4"]
VideoAspectRatio = Literal["16:9", "9:16"]
SearchMode = Literal["web", "maps"]

IMAGE_ASPECT_RATIOS: tuple[str, ...] = ("1:1", "16:9", "9:16", "4:3", "3:4")
VIDEO_ASPECT_RATIOS: tuple[str, ...] = ("16:9", "9:16")
VOICES: tuple[str, ...] = ("Kore", "Puck", "Charon", "Fenrir", "Zephyr")
TASK_MODELS: tuple[str, ...] = ("gemini-2.5-flash", "gemini-flash-lite-latest", "gemini-2.5-pro")


class MediaInput(BaseModel):
    """An uploaded file: raw bytes plus MIME type."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    mime_type: str
    name: str = ""

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> "MediaInput":
        """Read a file, guessing its MIME type from the extension."""
        file_path = Path(path).expanduser()
        guessed, _ = mimetypes.guess_type(file_path.name)
        mime = mime_type or guessed
        if not mime:
            raise ValueError(f"Cannot determine the MIME type of {file_path.name}")
        return cls(data=file_path.read_bytes(), mime_type=mime, name=file_path.name)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")


class GeneratedImage(BaseModel):
    """An image returned by the provider."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    mime_type: str = "image/png"

    @property
    def extension(self) -> str:
        return mimetypes.guess_extension(self.mime_type) or ".png"

    def save(self, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.data)
        return target


class GeneratedVideo(BaseModel):
    """A downloaded video."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    mime_type: str = "video/mp4"
    uri: str | None = None

    def save(self, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.data)
        return target


class SpeechResult(BaseModel):
    """Synthesized speech as raw 16-bit little-endian PCM."""

    model_config = ConfigDict(frozen=True)

    pcm: bytes = Field(repr=False)
    sample_rate: int = 24000
    channels: int = 1
    voice: str = "Kore"

    @property
    def duration(self) -> float:
        return duration_seconds(len(self.pcm) // 2, self.sample_rate, self.channels)

    def samples(self) -> NDArray[np.float32]:
        """Decode into float32 samples in [-1, 1]."""
        return decode_pcm16(self.pcm, self.channels)

    def save_wav(self, path: str | Path) -> Path:
        return write_wav(path, self.pcm, self.sample_rate, self.channels)


class Location(BaseModel):
    """A point for Maps grounding."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class ReviewSnippet(BaseModel):
    uri: str = ""
    title: str = ""
    snippet: str = ""


class GroundingSource(BaseModel):
    """A web page or a Maps place that grounded a search answer."""

    kind: Literal["web", "maps"]
    uri: str = ""
    title: str = ""
    review_snippets: list[ReviewSnippet] = Field(default_factory=list)

    @property
    def display_title(self) -> str:
        return self.title or self.uri


class SearchResult(BaseModel):
    """Grounded answer plus its sources."""

    text: str
    sources: list[GroundingSource] = Field(default_factory=list)
    mode: SearchMode = "web"


class TaskResult(BaseModel):
    """Answer to a complex reasoning task."""

    text: str
    model: str
    thinking: bool = False
    usage: dict[str, int] | None = None
