"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - Tabs over a log panel
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

#features {
    height: 1fr;
}

TabPane {
    padding: 0 1;
}

ContentTab {
    color: $text-muted;

    &.-active {
        color: $primary;
        text-style: bold;
    }
}

/* ============================================
   Panels
   ============================================ */
ChatPanel, ToolPanel {
    height: 100%;
    background: $panel;
}

.mode-switch {
    layout: horizontal;
    height: auto;
    width: 100%;
    border: none;
    background: transparent;
    margin-bottom: 1;
}

.options {
    height: auto;
    margin-bottom: 1;

    & Label {
        padding: 1 1 0 0;
        color: $text-muted;
    }

    & Select {
        width: 28;
        margin-right: 2;
    }

    & Input {
        width: 1fr;
    }

    & Button {
        margin-right: 1;
    }
}

.toolbar {
    height: auto;
    margin-bottom: 1;

    & Button {
        margin-right: 1;
    }
}

.busy-indicator, #live-status, .location-label {
    padding: 1 1 0 1;
    color: $text-muted;
}

.panel-status {
    height: auto;
    padding: 0 1;
    color: $text-muted;

    &.-busy {
        color: $warning;
    }

    &.-success {
        color: $success;
    }

    &.-error {
        color: $error;
        text-style: bold;
    }

    &.-warning {
        color: $warning;
    }
}

/* ============================================
   Chat History
   ============================================ */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 2;
    background: transparent;
}

.user-message {
    border-left: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
        text-style: bold;
    }

    &:hover {
        background: $success 12%;
    }
}

.model-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }

    &:hover {
        background: $secondary 12%;
    }
}

.message-header, .message-content {
    height: auto;
    padding: 0;
    margin: 0;
}

/* ============================================
   Prompt Input Bar
   ============================================ */
ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

.prompt-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

.send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    text-style: bold;
}

/* ============================================
   Results and Media
   ============================================ */
ResultView {
    height: 1fr;
    border: round $secondary 60%;
    padding: 0 1;
}

MediaView {
    height: auto;
    max-height: 60%;
    border: round $accent 60%;
    padding: 0 1;
}

.media-image {
    width: auto;
    height: auto;
    max-height: 30;
}

.media-path {
    color: $text-muted;
    text-style: italic;
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 14;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
}

/* ============================================
   Tooltip, Toasts, Header, Footer
   ============================================ */
Tooltip {
    background: $panel;
    color: $foreground;
    border: tall $border;
    padding: 0 1;
}

Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
    }

    &.-error {
        border: tall $error;
    }

    &.-warning {
        border: tall $warning;
    }
}

Header {
    background: $panel;
    height: 1;
}

HeaderTitle {
    color: $primary;
    text-style: bold;
}

Footer {
    background: $panel;
}

MarkdownFence {
    background: $panel;
    border: round $border;
    margin: 1 0;
}
"""
