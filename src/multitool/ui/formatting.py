"""Text formatting utilities for the TUI.

Hides the details of markdown rendering and text cleanup.
"""

import re
from collections.abc import Iterable

from ..audio.transcript import TranscriptEntry
from ..chat.models import Message, MessageRole
from ..tools.models import SearchResult, TaskResult
from .config import CHAT_TIMESTAMP_FORMAT, RECEIPT_MARKS


def clean_latex(text: str) -> str:
    """Convert LaTeX notation to plain text equivalents.

    Handles common LaTeX patterns that Rich cannot render:
    - \\( ... \\) inline math -> just the content
    - \\[ ... \\] display math -> just the content
    - $...$ inline math -> just the content
    - $$...$$ display math -> just the content
    """
    # Remove \( ... \) inline math delimiters
    text = re.sub(r'\\\(\s*', '', text)
    text = re.sub(r'\s*\\\)', '', text)

    # Remove \[ ... \] display math delimiters
    text = re.sub(r'\\\[\s*', '', text)
    text = re.sub(r'\s*\\\]', '', text)

    # Remove $$ ... $$ display math delimiters (do this before single $)
    text = re.sub(r'\$\$\s*', '', text)

    # Remove $ ... $ inline math delimiters (but not escaped \$)
    text = re.sub(r'(?<!\\)\$([^$]+)(?<!\\)\$', r'\1', text)

    # Clean up common LaTeX commands
    text = re.sub(r'\\frac\{([^}]*)\}\{([^}]*)\}', r'(\1)/(\2)', text)
    text = re.sub(r'\\sqrt\{([^}]*)\}', r'sqrt(\1)', text)
    text = re.sub(r'\\times', 'x', text)
    text = re.sub(r'\\cdot', '*', text)
    text = re.sub(r'\\pm', '+/-', text)
    text = re.sub(r'\\leq', '<=', text)
    text = re.sub(r'\\geq', '>=', text)
    text = re.sub(r'\\neq', '!=', text)
    text = re.sub(r'\\approx', '~=', text)
    text = re.sub(r'\\infty', 'infinity', text)
    text = re.sub(r'\\text\{([^}]*)\}', r'\1', text)
    text = re.sub(r'\\textbf\{([^}]*)\}', r'\1', text)
    text = re.sub(r'\\mathrm\{([^}]*)\}', r'\1', text)

    # Remove remaining backslash commands but keep the argument
    text = re.sub(r'\\[a-zA-Z]+\{([^}]*)\}', r'\1', text)

    return text


def message_header(message: Message) -> str:
    """Header line of a chat bubble: author, local time and read receipt."""
    author = "You" if message.role == MessageRole.USER else "Gemini"
    timestamp = message.timestamp.astimezone().strftime(CHAT_TIMESTAMP_FORMAT)
    header = f"{author} [{timestamp}]"
    if message.status is not None:
        header += f" {RECEIPT_MARKS[message.status.value]}"
    return header


def format_sources(result: SearchResult) -> str:
    """Answer text followed by a markdown list of grounding sources."""
    lines = [result.text.strip() or "_No answer returned._"]
    if result.sources:
        lines += ["", "**Sources**", ""]
        for source in result.sources:
            title = source.display_title.replace("]", "\\]")
            lines.append(f"- [{title}]({source.uri})" if source.uri else f"- {title}")
            for review in source.review_snippets:
                label = review.title or review.snippet or review.uri
                if label:
                    lines.append(f"  - {label}")
    return "\n".join(lines)


def format_task_result(result: TaskResult) -> str:
    mode = " with thinking" if result.thinking else ""
    footer = f"_{result.model}{mode}_"
    if result.usage:
        footer += f" _({result.usage.get('total_tokens', 0):,} tokens)_"
    return f"{clean_latex(result.text)}\n\n{footer}"


def format_transcript(entries: Iterable[TranscriptEntry]) -> str:
    """Transcript as markdown, one bold-labelled paragraph per utterance."""
    return "\n\n".join(
        f"**{'You' if entry.speaker == 'user' else 'Gemini'}:** {entry.text}" for entry in entries
    )
