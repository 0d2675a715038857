"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Dark slate palette with a cyan accent
GEMINI_DARK = Theme(
    name="gemini-dark",
    primary="#22d3ee",      # Cyan - main accent
    secondary="#818cf8",    # Indigo - model messages
    accent="#fbbf24",       # Amber - highlights
    foreground="#e2e8f0",   # Light text
    background="#0b1120",   # Deepest background
    success="#34d399",      # Green - user messages, success states
    warning="#fb923c",      # Orange - warnings, busy state
    error="#f87171",        # Red - errors
    surface="#111827",      # Main surface
    panel="#0f172a",        # Panel backgrounds
    dark=True,
    variables={
        # Cursor styling
        "block-cursor-foreground": "#0b1120",
        "block-cursor-background": "#67e8f9",
        "block-cursor-text-style": "bold",
        "block-cursor-blurred-foreground": "#e2e8f0",
        "block-cursor-blurred-background": "#334155",
        "block-hover-background": "#1e293b 20%",

        # Input styling
        "input-cursor-background": "#e2e8f0",
        "input-cursor-foreground": "#0b1120",
        "input-selection-background": "#22d3ee 30%",

        # Border colors
        "border": "#334155",
        "border-blurred": "#1e293b",

        # Scrollbar styling
        "scrollbar": "#1e293b",
        "scrollbar-hover": "#334155",
        "scrollbar-active": "#22d3ee",
        "scrollbar-background": "#0f172a",
        "scrollbar-corner-color": "#0f172a",

        # Footer styling
        "footer-foreground": "#cbd5e1",
        "footer-background": "#0b1120",
        "footer-key-foreground": "#fbbf24",
        "footer-key-background": "#1e293b",
        "footer-description-foreground": "#94a3b8",

        # Text variants
        "text-muted": "#64748b",
        "text-disabled": "#334155",

        # Link styling
        "link-color": "#22d3ee",
        "link-style": "underline",
        "link-background-hover": "#22d3ee 15%",
        "link-color-hover": "#67e8f9",
        "link-style-hover": "bold",

        # Button styling
        "button-foreground": "#e2e8f0",
        "button-color-foreground": "#0b1120",
        "button-focus-text-style": "bold reverse",
    },
)
