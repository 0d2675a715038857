"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Chat bubble rendering and streaming re-render throttling
- Log rendering and level filtering
- Image display for generated media
"""

from datetime import datetime
from pathlib import Path

# Import textual_image.renderable first: it runs terminal graphics detection,
# which must happen before the Textual app starts
import textual_image.renderable  # noqa: F401
from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Markdown, RichLog, Static, TextArea
from textual_image.widget import Image as ImageWidget

from ..chat.models import Message, MessageRole
from .config import (
    COMPONENT_COLORS,
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    STREAM_BUFFER_THRESHOLD,
    LogLevel,
)
from .formatting import clean_latex, message_header


class ChatInputBar(Horizontal):
    """Prompt input with TextArea, Send button and input history."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(
        self,
        *args,
        placeholder: str = "Type your message...",
        button_label: str = "Send",
        allow_empty: bool = False,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._placeholder = placeholder
        self._button_label = button_label
        self._allow_empty = allow_empty
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(classes="prompt-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button(self._button_label, classes="send-btn", variant="success").with_tooltip(
            "Submit (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one(TextArea)
        text_area.highlight_cursor_line = False
        text_area.placeholder = self._placeholder

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.has_class("send-btn"):
            event.stop()
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        return self.query_one(TextArea).cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one(TextArea)
        lines = text_area.text.split("\n")
        last_row = len(lines) - 1
        last_col = len(lines[-1]) if lines else 0
        return text_area.cursor_location == (last_row, last_col)

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one(TextArea)
        if direction < 0:  # Up
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:  # Down
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        text_area = self.query_one(TextArea)
        value = text_area.text.strip()
        if not value and not self._allow_empty:
            return
        if value and (not self._history or self._history[-1] != value):
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def set_enabled(self, enabled: bool) -> None:
        self.query_one(TextArea).disabled = not enabled
        self.query_one(Button).disabled = not enabled

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one(TextArea).focus()


class ChatBubble(Vertical):
    """One chat message; clicking it copies the text to the clipboard."""

    def __init__(self, message: Message) -> None:
        role_class = "user-message" if message.role == MessageRole.USER else "model-message"
        super().__init__(classes=f"chat-message {role_class}")
        self._message = message
        self._rendered_length = len(message.text)

    @property
    def message(self) -> Message:
        return self._message

    def compose(self):
        yield Static(message_header(self._message), classes="message-header")
        yield self._content_widget(self._message)

    @staticmethod
    def _content_widget(message: Message):
        if message.role == MessageRole.USER:
            return Static(Text(message.text), classes="message-content")
        if not message.text:
            return Static("[dim]...[/]", classes="message-content typing")
        return Markdown(clean_latex(message.text), classes="message-content")

    def set_message(self, message: Message, throttle: bool = False) -> None:
        """Re-render with ``message``.

        With ``throttle`` the body is only re-rendered once it has grown by
        at least ``STREAM_BUFFER_THRESHOLD`` characters.
        """
        previous = self._message
        self._message = message
        if not self.is_mounted:
            # compose() has not run yet and will render the new message
            self._rendered_length = len(message.text)
            return
        self.query_one(".message-header", Static).update(message_header(message))

        if message.text == previous.text:
            return
        if throttle and previous.text and len(message.text) - self._rendered_length < STREAM_BUFFER_THRESHOLD:
            return

        self._rendered_length = len(message.text)
        body = self.query_one(".message-content")
        if isinstance(body, Markdown):
            body.update(clean_latex(message.text))
        else:
            body.remove()
            self.mount(self._content_widget(message))

    def on_click(self, event: Click) -> None:
        event.stop()
        self.app.copy_to_clipboard(self._message.text)
        self.app.notify("Copied to clipboard", timeout=2)


class ChatHistoryWidget(VerticalScroll):
    """Scrollable message list mirroring the session's present."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_SELECT = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._bubbles: list[ChatBubble] = []

    def sync(self, messages: list[Message], final: bool = False) -> None:
        """Bring the bubbles in line with ``messages``.

        Same length: changed bubbles are updated in place (the last one
        throttled while streaming). Otherwise the list is rebuilt.
        """
        if len(messages) == len(self._bubbles):
            last = len(messages) - 1
            for index, (bubble, message) in enumerate(zip(self._bubbles, messages, strict=True)):
                if bubble.message != message:
                    bubble.set_message(message, throttle=index == last and not final)
        else:
            self.remove_children()
            self._bubbles = [ChatBubble(message) for message in messages]
            self.mount_all(self._bubbles)

        self.border_subtitle = f"{len(messages)} messages"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        for bubble in reversed(self._bubbles):
            if bubble.message.role == MessageRole.MODEL:
                return bubble.message.text
        return None


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def write_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        level_color = level_colors.get(level, "white")
        comp_color = COMPONENT_COLORS.get(component, "white")
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        line = Text.from_markup(
            f"[dim]{timestamp}[/] [{level_color}]{LogLevel.name(level):<5}[/] "
            f"[{comp_color}]\\[{component}][/] "
        )
        line.append(message)
        self.write(line)

    def debug(self, component: str, message: str) -> None:
        self.write_entry(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.write_entry(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        self.write_entry(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        self.write_entry(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True

    def get_plain_text(self) -> str:
        """Plain text content of the log for copying."""
        return "\n".join(line.text for line in self.lines)

    def on_click(self, event: Click) -> None:
        """Copy log content to clipboard when clicked."""
        event.stop()
        text = self.get_plain_text()
        if not text.strip():
            self.app.notify("Log is empty", timeout=2)
            return
        self.app.copy_to_clipboard(text)
        self.app.notify("Log copied", timeout=2)


class MediaView(Vertical):
    """Generated media: an inline image (Sixel/TGP/halfcell) and a path label."""

    def compose(self):
        yield ImageWidget(None, classes="media-image")
        yield Static("", classes="media-path")

    def on_mount(self) -> None:
        self.display = False

    def show_image(self, path: str | Path) -> None:
        image = self.query_one(ImageWidget)
        image.image = str(path)
        image.display = True
        self.query_one(".media-path", Static).update(Text(f"Saved: {path}"))
        self.display = True

    def show_file(self, path: str | Path, label: str = "Saved") -> None:
        """Show only a path (videos, audio files)."""
        image = self.query_one(ImageWidget)
        image.image = None
        image.display = False
        self.query_one(".media-path", Static).update(Text(f"{label}: {path}"))
        self.display = True

    def clear(self) -> None:
        self.query_one(ImageWidget).image = None
        self.query_one(".media-path", Static).update("")
        self.display = False


class ResultView(VerticalScroll):
    """Markdown result area shared by the tool panels."""

    def compose(self):
        yield Markdown("", classes="result-markdown")

    def show(self, markdown: str) -> None:
        self.query_one(Markdown).update(markdown)
        self.scroll_home(animate=False)

    def clear(self) -> None:
        self.query_one(Markdown).update("")
