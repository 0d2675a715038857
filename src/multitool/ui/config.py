"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Streaming configuration
STREAM_BUFFER_THRESHOLD = 50  # Characters before re-rendering a streaming reply

# Input history configuration
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages

# Chat display configuration
CHAT_TIMESTAMP_FORMAT = "%H:%M"
RECEIPT_MARKS = {
    "sent": "✓",
    "delivered": "✓✓",
    "read": "[bold cyan]✓✓[/]",
}

# Tabs: (id, label, tooltip)
FEATURES = [
    ("chat", "Chat", "Engage in a conversation with a helpful AI assistant."),
    ("image", "Image", "Generate, edit, and analyze images."),
    ("video", "Video", "Create videos from text/images and analyze video content."),
    ("audio", "Audio", "Have live voice conversations and convert text to speech."),
    ("search", "Search", "Get up-to-date answers grounded in Google Search and Maps."),
    ("tasks", "Tasks", "Solve complex problems with advanced models and thinking mode."),
]

# Component colors in the log panel
COMPONENT_COLORS = {
    "TUI": "cyan",
    "Chat": "green",
    "LLM": "magenta",
    "Image": "bright_blue",
    "Video": "blue",
    "Speech": "bright_yellow",
    "Live": "yellow",
    "Search": "bright_magenta",
    "Tasks": "bright_green",
    "Store": "bright_white",
}
