"""Main Textual TUI application.

Routes between the feature panels and owns the shared resources (GenAI
client, chat session, history store, live conversation).
"""

import asyncio
import contextlib
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, TabbedContent, TabPane

from ..audio.live import LiveConversation
from ..chat import ChatSession, HistoryStore
from ..llm import LLMProvider
from ..tools import GroundedSearch, ImageTools, Location, SpeechTools, TaskSolver, VideoTools
from .callbacks import DebugRouter
from .config import FEATURES, LogLevel
from .panels import AudioPanel, ChatPanel, ImagePanel, SearchPanel, TasksPanel, ToolPanel, VideoPanel
from .styles import APP_CSS
from .themes import GEMINI_DARK
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel


class MultiToolApp(App):
    """Textual TUI with one tab per feature."""

    CSS = APP_CSS
    TITLE = "Gemini Multi-Tool"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+d", "toggle_debug", "Log"),
        Binding("ctrl+l", "clear_log", "Clear Log"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(
        self,
        client: Any,
        provider: LLMProvider,
        store: HistoryStore | None = None,
        output_dir: str | Path = "./multitool_output",
        location: Location | None = None,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._client = client
        self._provider = provider
        self._store = store
        self._output_dir = Path(output_dir)
        self._log_level = log_level

        self.session = ChatSession(provider, store=store, model=provider.model)
        self.live = LiveConversation(client)
        self._image_tools = ImageTools(client)
        self._video_tools = VideoTools(client)
        self._speech_tools = SpeechTools(client)
        self._search = GroundedSearch(client, location=location)
        self._solver = TaskSolver(client)
        self._audio_panel: AudioPanel | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        panels = {
            "chat": lambda: ChatPanel(self.session),
            "image": lambda: ImagePanel(self._image_tools, self._output_dir),
            "video": lambda: VideoPanel(self._video_tools, self._output_dir),
            "audio": self._create_audio_panel,
            "search": lambda: SearchPanel(self._search, self._output_dir),
            "tasks": lambda: TasksPanel(self._solver, self._output_dir),
        }
        with TabbedContent(initial="chat", id="features"):
            for feature_id, label, _ in FEATURES:
                with TabPane(label, id=feature_id):
                    yield panels[feature_id]()
        yield DebugPanel(id="debug-panel")
        yield Footer()

    def _create_audio_panel(self) -> AudioPanel:
        self._audio_panel = AudioPanel(self.live, self._speech_tools, self._output_dir)
        return self._audio_panel

    async def on_mount(self) -> None:
        self.register_theme(GEMINI_DARK)
        self.theme = "gemini-dark"

        tabs = self.query_one(TabbedContent)
        for feature_id, _, tooltip in FEATURES:
            tabs.get_tab(feature_id).tooltip = tooltip

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        router = DebugRouter(log_panel, app=self)
        for component in (
            self.session, self.live, self._image_tools, self._video_tools,
            self._speech_tools, self._search, self._solver,
        ):
            component.set_debug_callback(router)
        if hasattr(self._provider, "set_debug_callback"):
            self._provider.set_debug_callback(router)
        for panel in self.query(ToolPanel):
            panel._debug_callback = router

        backend = self._store.backend_type if self._store else "none"
        self.sub_title = f"{self._provider.model} | history: {backend}"

        chat_panel = self.query_one(ChatPanel)
        if self._store is not None:
            try:
                await self._store.connect()
                chat_panel.load_history()
            except Exception as e:
                log_panel.error("Store", f"History unavailable: {e}")
                self.session.set_store(None)
                self._store = None
                self.notify(f"Chat history unavailable: {str(e)[:50]}", severity="warning", timeout=5)
        chat_panel.query_one(ChatInputBar).focus_input()

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_clear_log(self) -> None:
        self.query_one("#debug-panel", DebugPanel).clear()
        self.notify("Log cleared", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last model response to clipboard."""
        response = self.query_one(ChatHistoryWidget).get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")

    def action_cancel(self) -> None:
        """Cancel running workers (chat send, generation calls)."""
        running = [worker for worker in self.workers if worker.is_running]
        for worker in running:
            worker.cancel()

    async def shutdown(self) -> None:
        """Release audio devices, the history store and the provider."""
        await self.live.stop()
        if self._audio_panel is not None:
            self._audio_panel.close_player()
        if self._store is not None:
            with contextlib.suppress(Exception):
                await self._store.disconnect()
        with contextlib.suppress(Exception):
            await self._provider.close()


async def run_textual_tui(
    client: Any,
    provider: LLMProvider,
    store: HistoryStore | None = None,
    output_dir: str | Path = "./multitool_output",
    location: Location | None = None,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        client: google-genai client used by the generation tools
        provider: Chat provider
        store: Chat history store, None for no persistence
        output_dir: Where generated media is written
        location: Location for Maps search
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = MultiToolApp(
        client=client,
        provider=provider,
        store=store,
        output_dir=output_dir,
        location=location,
        log_level=log_level,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await app.shutdown()
