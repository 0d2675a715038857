"""Live conversation transcript.

Transcription fragments stream in for both sides of the conversation; they
are buffered and only become entries when the server signals the end of a
turn.
"""

from dataclasses import dataclass, field
from typing import Literal

Speaker = Literal["user", "model"]


@dataclass(frozen=True)
class TranscriptEntry:
    """One flushed utterance."""

    speaker: Speaker
    text: str


@dataclass
class TranscriptBuffer:
    """Append-only transcript with per-speaker pending fragments."""

    entries: list[TranscriptEntry] = field(default_factory=list)
    _pending_input: list[str] = field(default_factory=list)
    _pending_output: list[str] = field(default_factory=list)

    def add_input(self, text: str | None) -> None:
        """Buffer a fragment of what the user said."""
        if text:
            self._pending_input.append(text)

    def add_output(self, text: str | None) -> None:
        """Buffer a fragment of what the model said."""
        if text:
            self._pending_output.append(text)

    @property
    def pending_input(self) -> str:
        return "".join(self._pending_input)

    @property
    def pending_output(self) -> str:
        return "".join(self._pending_output)

    def flush_turn(self) -> list[TranscriptEntry]:
        """Close the current turn: user text first, then model text.

        Blank texts produce no entry. Returns the entries added.
        """
        added = []
        for speaker, text in (("user", self.pending_input), ("model", self.pending_output)):
            text = text.strip()
            if text:
                entry = TranscriptEntry(speaker=speaker, text=text)
                self.entries.append(entry)
                added.append(entry)
        self._pending_input.clear()
        self._pending_output.clear()
        return added

    def reset(self) -> None:
        self.entries.clear()
        self._pending_input.clear()
        self._pending_output.clear()

    def format(self) -> str:
        return "\n".join(f"{entry.speaker.capitalize()}: {entry.text}" for entry in self.entries)
