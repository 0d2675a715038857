"""Environment configuration.

Values come from the process environment (optionally populated from a
``.env`` file by python-dotenv) and are validated by a pydantic model.
CLI flags override individual fields via ``model_copy(update=...)``.
"""

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .tools.models import Location

DEFAULT_CHAT_MODEL = "gemini-2.5-flash"
DEFAULT_HISTORY_PATH = "~/.multitool/chat_history.db"
DEFAULT_OUTPUT_DIR = "./multitool_output"

HistoryBackend = Literal["memory", "sqlite"]


class Settings(BaseModel):
    """Runtime settings for the CLI and the TUI."""

    model_config = ConfigDict(frozen=True)

    api_key: str | None = Field(default=None, repr=False)
    chat_model: str = DEFAULT_CHAT_MODEL
    history_backend: HistoryBackend = "sqlite"
    history_path: Path = Path(DEFAULT_HISTORY_PATH).expanduser()
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None, dotenv: bool = True) -> "Settings":
        """Build settings from ``env`` (defaults to ``os.environ``).

        Environment variables:
            GEMINI_API_KEY: API key (falls back to GOOGLE_API_KEY, then API_KEY)
            MULTITOOL_CHAT_MODEL: Chat model (default: gemini-2.5-flash)
            MULTITOOL_HISTORY_BACKEND: memory or sqlite (default: sqlite)
            MULTITOOL_HISTORY_PATH: SQLite file (default: ~/.multitool/chat_history.db)
            MULTITOOL_OUTPUT_DIR: Where media is written (default: ./multitool_output)
            MULTITOOL_LATITUDE / MULTITOOL_LONGITUDE: Location for Maps search
        """
        if env is None:
            if dotenv:
                load_dotenv()
            env = dict(os.environ)

        api_key = env.get("GEMINI_API_KEY") or env.get("GOOGLE_API_KEY") or env.get("API_KEY")
        return cls(
            api_key=api_key or None,
            chat_model=env.get("MULTITOOL_CHAT_MODEL", DEFAULT_CHAT_MODEL),
            history_backend=env.get("MULTITOOL_HISTORY_BACKEND", "sqlite").lower(),
            history_path=Path(env.get("MULTITOOL_HISTORY_PATH", DEFAULT_HISTORY_PATH)).expanduser(),
            output_dir=Path(env.get("MULTITOOL_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)).expanduser(),
            latitude=_optional_float(env.get("MULTITOOL_LATITUDE")),
            longitude=_optional_float(env.get("MULTITOOL_LONGITUDE")),
        )

    @property
    def location(self) -> Location | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Location(latitude=self.latitude, longitude=self.longitude)


def _optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError as e:
        raise ValueError(f"Expected a number, got {value!r}") from e
