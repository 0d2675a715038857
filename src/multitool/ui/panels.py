"""Feature panels, one per tab.

Each panel owns its inputs and result area and runs its provider call in
an exclusive async worker. Errors are shown inline in the panel status
line and as a notification.
"""

import asyncio
from pathlib import Path
from typing import Any

from textual import work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, RadioButton, RadioSet, Select, Static, Switch

from ..audio.live import STATUS_IDLE, LiveConversation
from ..audio.playback import AudioPlayer
from ..chat import ChatSession
from ..llm import DebugCallback
from ..output import output_path
from ..tools import (
    IMAGE_ASPECT_RATIOS,
    TASK_MODELS,
    VIDEO_ASPECT_RATIOS,
    VOICES,
    GroundedSearch,
    ImageTools,
    MediaInput,
    SpeechTools,
    TaskSolver,
    VideoTools,
)
from .formatting import format_sources, format_task_result, format_transcript
from .screens import ConfirmationScreen
from .widgets import ChatHistoryWidget, ChatInputBar, MediaView, ResultView


class ToolPanel(Vertical):
    """Base for panels with sub-tools selected by a radio row.

    Widgets carrying the class ``only-<mode>`` are shown only while that
    sub-tool is selected.
    """

    MODES: list[tuple[str, str]] = []

    def __init__(self, output_dir: Path, debug: DebugCallback | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._output_dir = output_dir
        self._debug_callback = debug
        self.mode = self.MODES[0][0] if self.MODES else ""

    def compose_modes(self) -> ComposeResult:
        if len(self.MODES) > 1:
            with RadioSet(classes="mode-switch"):
                for index, (_, label) in enumerate(self.MODES):
                    yield RadioButton(label, value=index == 0)

    def compose_status(self) -> ComposeResult:
        yield Static("", classes="panel-status")

    def on_mount(self) -> None:
        self._apply_mode()

    def on_radio_set_changed(self, event: RadioSet.Changed) -> None:
        event.stop()
        self.mode = self.MODES[event.index][0]
        self._apply_mode()

    def _apply_mode(self) -> None:
        for mode_id, _ in self.MODES:
            for widget in self.query(f".only-{mode_id}"):
                widget.display = mode_id == self.mode

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "TUI", message)

    def set_status(self, text: str, style: str = "") -> None:
        status = self.query_one(".panel-status", Static)
        status.set_classes("panel-status" + (f" -{style}" if style else ""))
        status.update(text)

    def show_error(self, error: BaseException) -> None:
        message = str(error) or type(error).__name__
        self._debug("error", f"{type(self).__name__}: {message}")
        self.set_status(f"Error: {message}", "error")
        self.app.notify(message[:80], title="Error", severity="error", timeout=5)

    def show_cancelled(self) -> None:
        self.set_status("Cancelled.", "warning")
        self.app.notify("Cancelled", severity="warning", timeout=2)

    def set_busy(self, busy: bool) -> None:
        self.set_class(busy, "-busy")
        for bar in self.query(ChatInputBar):
            bar.set_enabled(not busy)

    def read_media(self, selector: str) -> MediaInput | None:
        path = self.query_one(selector, Input).value.strip()
        if not path:
            return None
        return MediaInput.from_path(path)


class ChatPanel(Vertical):
    """Streaming chat with undo / redo / copy / clear."""

    def __init__(self, session: ChatSession, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._session = session

    def compose(self) -> ComposeResult:
        with Horizontal(classes="toolbar"):
            yield Button("Undo", id="chat-undo").with_tooltip("Undo last message")
            yield Button("Redo", id="chat-redo").with_tooltip("Redo last message")
            yield Button("Copy", id="chat-copy").with_tooltip("Copy chat history")
            yield Button("Clear", id="chat-clear", variant="error").with_tooltip("Clear chat history")
            yield Static("", id="chat-busy", classes="busy-indicator")
        yield ChatHistoryWidget(id="chat-history")
        yield ChatInputBar(id="chat-input-bar")

    def on_mount(self) -> None:
        self._session.set_stream_callback(self._on_session_update)
        self.refresh_view(final=True)

    def _on_session_update(self, messages: list) -> None:
        self.query_one(ChatHistoryWidget).sync(messages)
        self._update_buttons()

    def refresh_view(self, final: bool = False) -> None:
        self.query_one(ChatHistoryWidget).sync(self._session.messages, final=final)
        self._update_buttons()

    def _update_buttons(self) -> None:
        busy = self._session.is_busy
        history = self._session.history
        self.query_one("#chat-undo", Button).disabled = busy or not history.can_undo
        self.query_one("#chat-redo", Button).disabled = busy or not history.can_redo
        self.query_one("#chat-copy", Button).disabled = not self._session.can_share
        self.query_one("#chat-clear", Button).disabled = not self._session.can_clear
        self.query_one("#chat-busy", Static).update("[yellow]Gemini is typing...[/]" if busy else "")
        self.query_one(ChatInputBar).set_enabled(not busy)

    @work(exclusive=True, group="chat")
    async def load_history(self) -> None:
        await self._session.load()
        self.refresh_view(final=True)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        event.stop()
        if self._session.is_busy:
            return
        self._send(event.value)

    @work(exclusive=True, group="chat")
    async def _send(self, text: str) -> None:
        try:
            await self._session.send_message(text)
        except asyncio.CancelledError:
            self.app.notify("Cancelled", severity="warning", timeout=2)
        except Exception as e:
            self.app.notify(str(e)[:80], title="Error", severity="error", timeout=5)
        finally:
            self.refresh_view(final=True)
            self.query_one(ChatInputBar).focus_input()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "chat-undo":
            self._history_action("undo")
        elif event.button.id == "chat-redo":
            self._history_action("redo")
        elif event.button.id == "chat-copy":
            self.copy_history()
        elif event.button.id == "chat-clear":
            self.confirm_clear()

    @work(exclusive=True, group="chat")
    async def _history_action(self, action: str) -> None:
        if action == "undo":
            await self._session.undo()
        else:
            await self._session.redo()
        self.refresh_view(final=True)

    def copy_history(self) -> None:
        self.app.copy_to_clipboard(self._session.share_text())
        self.app.notify("Chat history copied to clipboard!", timeout=2)

    def confirm_clear(self) -> None:
        def on_result(confirmed: bool | None) -> None:
            if confirmed:
                self._clear()

        self.app.push_screen(
            ConfirmationScreen(
                "Clear Chat History",
                "Are you sure you want to clear the chat history? This action cannot be undone.",
                confirm_label="Clear History",
            ),
            on_result,
        )

    @work(exclusive=True, group="chat")
    async def _clear(self) -> None:
        await self._session.clear()
        self.refresh_view(final=True)
        self.app.notify("Chat cleared", timeout=2)


class ImagePanel(ToolPanel):
    MODES = [("generate", "Generate"), ("edit", "Edit"), ("analyze", "Analyze")]

    def __init__(self, tools: ImageTools, output_dir: Path, debug: DebugCallback | None = None, **kwargs: Any) -> None:
        super().__init__(output_dir, debug, **kwargs)
        self._tools = tools

    def compose(self) -> ComposeResult:
        yield from self.compose_modes()
        with Horizontal(classes="options"):
            yield Label("Aspect ratio", classes="only-generate")
            yield Select(
                [(ratio, ratio) for ratio in IMAGE_ASPECT_RATIOS],
                value="1:1",
                allow_blank=False,
                id="image-aspect",
                classes="only-generate",
            )
            yield Input(placeholder="Path to an image file", id="image-file", classes="only-edit only-analyze")
        yield ChatInputBar(placeholder="Describe the image...", button_label="Run", allow_empty=True)
        yield from self.compose_status()
        yield MediaView(id="image-media")
        yield ResultView(id="image-result")

    def _apply_mode(self) -> None:
        super()._apply_mode()
        # The file input is shared by two sub-tools
        self.query_one("#image-file", Input).display = self.mode in ("edit", "analyze")

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        event.stop()
        self._run(self.mode, event.value)

    @work(exclusive=True, group="image")
    async def _run(self, mode: str, prompt: str) -> None:
        media = self.query_one(MediaView)
        result = self.query_one(ResultView)
        media.clear()
        result.clear()
        self.set_busy(True)
        self.set_status("Working...", "busy")
        try:
            if mode == "generate":
                aspect = str(self.query_one("#image-aspect", Select).value)
                images = await self._tools.generate(prompt, aspect_ratio=aspect)
                paths = [image.save(output_path(self._output_dir, "image", image.extension)) for image in images]
                media.show_image(paths[0])
                self.set_status(f"Generated {len(paths)} image(s).", "success")
            else:
                image = self.read_media("#image-file")
                if image is None:
                    raise ValueError("Please select an image file.")
                if mode == "edit":
                    edited = await self._tools.edit(image, prompt)
                    media.show_image(edited.save(output_path(self._output_dir, "edited", edited.extension)))
                    self.set_status("Image edited.", "success")
                else:
                    analysis = await (
                        self._tools.analyze(image, prompt) if prompt else self._tools.analyze(image)
                    )
                    result.show(analysis)
                    self.set_status("Analysis complete.", "success")
        except asyncio.CancelledError:
            self.show_cancelled()
        except Exception as e:
            self.show_error(e)
        finally:
            self.set_busy(False)


class VideoPanel(ToolPanel):
    MODES = [("generate", "Generate"), ("analyze", "Analyze")]

    def __init__(self, tools: VideoTools, output_dir: Path, debug: DebugCallback | None = None, **kwargs: Any) -> None:
        super().__init__(output_dir, debug, **kwargs)
        self._tools = tools

    def compose(self) -> ComposeResult:
        yield from self.compose_modes()
        with Horizontal(classes="options"):
            yield Label("Aspect ratio", classes="only-generate")
            yield Select(
                [(f"{ratio} ({'Landscape' if ratio == '16:9' else 'Portrait'})", ratio) for ratio in VIDEO_ASPECT_RATIOS],
                value="16:9",
                allow_blank=False,
                id="video-aspect",
                classes="only-generate",
            )
            yield Input(placeholder="Optional starting image", id="video-image", classes="only-generate")
            yield Input(placeholder="Path to a video file (max 20MB)", id="video-file", classes="only-analyze")
        yield ChatInputBar(placeholder="Describe the video...", button_label="Run", allow_empty=True)
        yield from self.compose_status()
        yield MediaView(id="video-media")
        yield ResultView(id="video-result")

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        event.stop()
        self._run(self.mode, event.value)

    def _progress(self, message: str) -> None:
        self.set_status(message, "busy")

    @work(exclusive=True, group="video")
    async def _run(self, mode: str, prompt: str) -> None:
        media = self.query_one(MediaView)
        result = self.query_one(ResultView)
        media.clear()
        result.clear()
        self.set_busy(True)
        self.set_status("Working...", "busy")
        try:
            if mode == "generate":
                aspect = str(self.query_one("#video-aspect", Select).value)
                image = self.read_media("#video-image")
                video = await self._tools.generate(prompt, image=image, aspect_ratio=aspect, progress=self._progress)
                path = video.save(output_path(self._output_dir, "video", ".mp4"))
                media.show_file(path)
                self.set_status("Video ready.", "success")
            else:
                video_input = self.read_media("#video-file")
                if video_input is None:
                    raise ValueError("Please select a video file.")
                analysis = await (
                    self._tools.analyze(video_input, prompt) if prompt else self._tools.analyze(video_input)
                )
                result.show(analysis)
                self.set_status("Analysis complete.", "success")
        except asyncio.CancelledError:
            self.show_cancelled()
        except Exception as e:
            self.show_error(e)
        finally:
            self.set_busy(False)


class AudioPanel(ToolPanel):
    MODES = [("live", "Live Conversation"), ("tts", "Text-to-Speech")]

    def __init__(
        self,
        live: LiveConversation,
        speech: SpeechTools,
        output_dir: Path,
        debug: DebugCallback | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(output_dir, debug, **kwargs)
        self._live = live
        self._speech = speech
        self._player: AudioPlayer | None = None

    def compose(self) -> ComposeResult:
        yield from self.compose_modes()
        with Horizontal(classes="options only-live"):
            yield Button("Start Conversation", id="live-start", variant="success")
            yield Button("Stop Conversation", id="live-stop", variant="error", disabled=True)
            yield Static(f"Status: {STATUS_IDLE}", id="live-status")
        with Horizontal(classes="options only-tts"):
            yield Label("Voice")
            yield Select([(voice, voice) for voice in VOICES], value="Kore", allow_blank=False, id="tts-voice")
        yield ChatInputBar(placeholder="Enter text to convert to speech...", button_label="Speak", classes="only-tts")
        yield from self.compose_status()
        yield MediaView(id="audio-media", classes="only-tts")
        yield ResultView(id="live-transcript", classes="only-live")

    def on_mount(self) -> None:
        super().on_mount()
        self._live.set_status_callback(self._on_live_status)
        self._live.set_transcript_callback(self._on_transcript)

    def _on_live_status(self, status: str) -> None:
        self.query_one("#live-status", Static).update(f"Status: {status}")
        running = self._live.is_running
        self.query_one("#live-start", Button).disabled = running
        self.query_one("#live-stop", Button).disabled = not running

    def _on_transcript(self, entries: list) -> None:
        self.query_one("#live-transcript", ResultView).show(format_transcript(entries))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "live-start":
            self._start_live()
        elif event.button.id == "live-stop":
            self._stop_live()

    @work(exclusive=True, group="live")
    async def _start_live(self) -> None:
        try:
            self.query_one("#live-transcript", ResultView).clear()
            await self._live.start()
            self._on_live_status(self._live.status)
        except Exception as e:
            self.show_error(e)

    @work(exclusive=True, group="live")
    async def _stop_live(self) -> None:
        await self._live.stop()
        self._on_live_status(self._live.status)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        event.stop()
        self._speak(event.value)

    @work(exclusive=True, group="tts")
    async def _speak(self, text: str) -> None:
        media = self.query_one(MediaView)
        media.clear()
        self.set_busy(True)
        self.set_status("Generating audio...", "busy")
        try:
            voice = str(self.query_one("#tts-voice", Select).value)
            speech = await self._speech.synthesize(text, voice=voice)
            path = speech.save_wav(output_path(self._output_dir, "speech", ".wav"))
            media.show_file(path)
            self.set_status(f"{speech.duration:.1f}s of audio with voice {voice}.", "success")
            self._play(speech.samples())
        except asyncio.CancelledError:
            self.show_cancelled()
        except Exception as e:
            self.show_error(e)
        finally:
            self.set_busy(False)

    def _play(self, samples: Any) -> None:
        try:
            if self._player is None:
                self._player = AudioPlayer()
                self._player.start()
            self._player.interrupt()
            self._player.enqueue(samples)
        except Exception as e:
            self._debug("warning", f"Audio playback unavailable: {e}")
            self.app.notify("Audio playback unavailable; the file was saved.", severity="warning", timeout=4)

    def close_player(self) -> None:
        if self._player is not None:
            self._player.close()
            self._player = None


class SearchPanel(ToolPanel):
    MODES = [("web", "Web"), ("maps", "Maps")]

    def __init__(self, search: GroundedSearch, output_dir: Path, debug: DebugCallback | None = None, **kwargs: Any) -> None:
        super().__init__(output_dir, debug, **kwargs)
        self._search = search

    def compose(self) -> ComposeResult:
        yield from self.compose_modes()
        yield Static(self._location_text(), classes="only-maps location-label")
        yield ChatInputBar(placeholder="Ask a question...", button_label="Search")
        yield from self.compose_status()
        yield ResultView(id="search-result")

    def _location_text(self) -> str:
        location = self._search.location
        if location is None:
            return "[yellow]No location set (MULTITOOL_LATITUDE / MULTITOOL_LONGITUDE).[/]"
        return f"Location: {location.latitude:.4f}, {location.longitude:.4f}"

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        event.stop()
        self._run(self.mode, event.value)

    @work(exclusive=True, group="search")
    async def _run(self, mode: str, query: str) -> None:
        result_view = self.query_one(ResultView)
        result_view.clear()
        self.set_busy(True)
        self.set_status("Searching...", "busy")
        try:
            result = await self._search.search(query, mode=mode)
            result_view.show(format_sources(result))
            self.set_status(f"{len(result.sources)} source(s).", "success")
        except asyncio.CancelledError:
            self.show_cancelled()
        except Exception as e:
            self.show_error(e)
        finally:
            self.set_busy(False)


class TasksPanel(ToolPanel):
    def __init__(self, solver: TaskSolver, output_dir: Path, debug: DebugCallback | None = None, **kwargs: Any) -> None:
        super().__init__(output_dir, debug, **kwargs)
        self._solver = solver

    def compose(self) -> ComposeResult:
        with Horizontal(classes="options"):
            yield Label("Model")
            yield Select([(model, model) for model in TASK_MODELS], value=TASK_MODELS[0], allow_blank=False, id="task-model")
            yield Label("Thinking mode")
            yield Switch(value=False, id="task-thinking").with_tooltip("Uses gemini-2.5-pro with a large thinking budget")
        yield ChatInputBar(placeholder="Describe a complex task...", button_label="Solve")
        yield from self.compose_status()
        yield ResultView(id="task-result")

    def on_switch_changed(self, event: Switch.Changed) -> None:
        event.stop()
        self.query_one("#task-model", Select).disabled = event.value

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        event.stop()
        self._run(event.value)

    @work(exclusive=True, group="tasks")
    async def _run(self, prompt: str) -> None:
        result_view = self.query_one(ResultView)
        result_view.clear()
        self.set_busy(True)
        thinking = self.query_one("#task-thinking", Switch).value
        self.set_status("Thinking..." if thinking else "Working...", "busy")
        try:
            model = str(self.query_one("#task-model", Select).value)
            result = await self._solver.solve(prompt, model=model, thinking=thinking)
            result_view.show(format_task_result(result))
            self.set_status("Done.", "success")
        except asyncio.CancelledError:
            self.show_cancelled()
        except Exception as e:
            self.show_error(e)
        finally:
            self.set_busy(False)
