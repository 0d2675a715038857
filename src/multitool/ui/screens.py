"""Modal screens for the TUI: the yes/no dialog used before destructive actions."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static


class ConfirmationScreen(ModalScreen[bool]):
    """Yes/No dialog; dismisses with True when confirmed.

    Example:
        self.app.push_screen(
            ConfirmationScreen("Clear Chat History", "Are you sure?"),
            on_result,
        )
    """

    CSS = """
    ConfirmationScreen {
        align: center middle;
    }

    #confirmation-dialog {
        width: 50;
        height: auto;
        border: round $warning;
        background: $surface;
        padding: 1 2;
    }

    #confirmation-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #confirmation-buttons {
        height: 3;
        align: right middle;
    }

    #confirmation-buttons Button {
        margin-left: 1;
    }
    """

    BINDINGS = [
        Binding("y", "confirm_yes", "Yes", show=False),
        Binding("n", "confirm_no", "No", show=False),
        Binding("escape", "confirm_no", "Cancel", show=False),
    ]

    def __init__(self, title: str, prompt: str, confirm_label: str = "Confirm") -> None:
        super().__init__()
        self._title = title
        self._prompt = prompt
        self._confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        with Vertical(id="confirmation-dialog"):
            yield Static(self._title, id="confirmation-title")
            yield Static(self._prompt, id="confirmation-prompt")
            with Horizontal(id="confirmation-buttons"):
                yield Button("Cancel", id="btn-no", variant="primary")
                yield Button(self._confirm_label, id="btn-yes", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-yes")

    def action_confirm_yes(self) -> None:
        self.dismiss(True)

    def action_confirm_no(self) -> None:
        self.dismiss(False)
