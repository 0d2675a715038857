"""Provider factory functions for CLI.

Centralizes creation of the GenAI client, the chat provider and the
history store from ``Settings``. Hides configuration details from command
implementations.
"""

from pathlib import Path
from typing import Any

import typer
from google import genai
from rich.console import Console
from rich.markup import escape

from ..chat import HistoryStore, create_history_store
from ..llm import DebugCallback, LLMProvider, create_llm_provider
from ..settings import Settings

# Default console for output
_console = Console()


def get_settings(
    console: Console | None = None,
    history: str | None = None,
    history_path: Path | None = None,
    output_dir: Path | None = None,
) -> Settings:
    """Load settings from the environment and apply CLI overrides.

    Raises:
        SystemExit: If a setting fails validation
    """
    con = console or _console
    try:
        settings = Settings.from_env(dotenv=False)
        overrides: dict[str, Any] = {}
        if history is not None:
            overrides["history_backend"] = history.lower()
        if history_path is not None:
            overrides["history_path"] = history_path.expanduser()
        if output_dir is not None:
            overrides["output_dir"] = output_dir.expanduser()
        if overrides:
            settings = Settings.model_validate({**settings.model_dump(), **overrides})
    except ValueError as e:
        con.print(f"[red]Error: Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e
    return settings


def get_client(settings: Settings, console: Console | None = None) -> genai.Client:
    """Create the GenAI client.

    Raises:
        SystemExit: If no API key is configured

    Environment variables:
        GEMINI_API_KEY (or GOOGLE_API_KEY / API_KEY): Gemini API key (required)
    """
    con = console or _console
    if not settings.api_key:
        con.print("[red]Error: GEMINI_API_KEY not set in environment[/red]")
        raise typer.Exit(code=1)
    return genai.Client(api_key=settings.api_key)


def get_provider(settings: Settings, client: genai.Client) -> LLMProvider:
    """Chat provider sharing ``client`` with the generation tools."""
    return create_llm_provider("gemini", client=client, model=settings.chat_model)


def get_store(settings: Settings) -> HistoryStore:
    """History store for the configured backend.

    Environment variables:
        MULTITOOL_HISTORY_BACKEND: memory or sqlite (default: sqlite)
        MULTITOOL_HISTORY_PATH: SQLite file (default: ~/.multitool/chat_history.db)
    """
    if settings.history_backend == "sqlite":
        settings.history_path.parent.mkdir(parents=True, exist_ok=True)
        return create_history_store("sqlite", path=str(settings.history_path))
    return create_history_store("memory")


def console_debug_callback(console: Console | None = None) -> DebugCallback:
    """Debug callback printing to the console (for ``--verbose``)."""
    con = console or _console
    styles = {"warning": "yellow", "error": "red"}

    def _callback(level: str, component: str, message: str) -> None:
        style = styles.get(level, "dim")
        con.print(f"[{style}]\\[{component}] {escape(message)}[/{style}]")

    return _callback
