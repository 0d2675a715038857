"""Terminal UI module for multitool.

Provides a Textual-based TUI with one tab per feature.

Module structure (each module hides a design decision):
- config.py: Log levels, tab definitions and display constants
- widgets.py: Custom widgets (prompt input, chat bubbles, log panel, media view)
- panels.py: One panel per feature tab (what each tab asks for and shows)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- screens.py: Modal dialogs (confirmation screens)
- callbacks.py: How components' debug messages reach the log panel
- formatting.py: Text cleanup and markdown for results
- app.py: Application orchestration (tab routing, shared resources)
"""

from .app import MultiToolApp, run_textual_tui
from .callbacks import DebugRouter
from .config import LogLevel
from .panels import AudioPanel, ChatPanel, ImagePanel, SearchPanel, TasksPanel, VideoPanel
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, MediaView

__all__ = [
    "AudioPanel",
    "ChatHistoryWidget",
    "ChatInputBar",
    "ChatPanel",
    "DebugPanel",
    "DebugRouter",
    "ImagePanel",
    "LogLevel",
    "MediaView",
    "MultiToolApp",
    "SearchPanel",
    "TasksPanel",
    "VideoPanel",
    "run_textual_tui",
]
