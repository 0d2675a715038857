"""Routing of component debug callbacks into the log panel.

Hides the details of how the TUI receives log messages from the chat
session, the tools and the live audio pipeline. Uses thread-safe methods
so components may log from worker threads.
"""

import threading
from typing import TYPE_CHECKING, Any

from .config import LogLevel

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import DebugPanel


class DebugRouter:
    """Callable(level, component, message) that writes into a ``DebugPanel``.

    Example:
        router = DebugRouter(log_panel, app=self)
        session.set_debug_callback(router)
    """

    def __init__(self, panel: "DebugPanel", app: "App | None" = None) -> None:
        self.panel = panel
        self.app = app

    def _call_thread_safe(self, func: Any, *args: Any) -> None:
        """Call a function in a thread-safe manner for UI updates."""
        if self.app is not None and self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args)
        else:
            func(*args)

    def __call__(self, level: str, component: str, message: str) -> None:
        self._call_thread_safe(self.panel.write_entry, component, message, LogLevel.from_string(level))
