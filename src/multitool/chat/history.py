"""Linear undo/redo history of chat message lists.

Hides the snapshot representation. Each snapshot is a separate list, so
callers can freely mutate what ``present`` returns.
"""

from collections.abc import Iterable

from .models import Message


class ChatHistory:
    """Past / present / future stack of message lists.

    ``commit`` is a new edit: it pushes the current present onto ``past``
    and clears ``future``. ``replace_present`` is a streaming update and
    leaves both stacks alone.
    """

    def __init__(self, messages: Iterable[Message] = ()) -> None:
        self._past: list[list[Message]] = []
        self._present: list[Message] = list(messages)
        self._future: list[list[Message]] = []

    @property
    def present(self) -> list[Message]:
        return list(self._present)

    @property
    def past(self) -> list[list[Message]]:
        return [list(snapshot) for snapshot in self._past]

    @property
    def future(self) -> list[list[Message]]:
        return [list(snapshot) for snapshot in self._future]

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def __len__(self) -> int:
        return len(self._present)

    def commit(self, messages: Iterable[Message]) -> None:
        """Record a new edit."""
        self._past.append(self._present)
        self._present = list(messages)
        self._future = []

    def replace_present(self, messages: Iterable[Message]) -> None:
        """Replace the present without touching undo/redo state."""
        self._present = list(messages)

    def undo(self) -> bool:
        """Step back one edit. Returns False when there is nothing to undo."""
        if not self._past:
            return False
        self._future.insert(0, self._present)
        self._present = self._past.pop()
        return True

    def redo(self) -> bool:
        """Step forward one edit. Returns False when there is nothing to redo."""
        if not self._future:
            return False
        self._past.append(self._present)
        self._present = self._future.pop(0)
        return True

    def reset(self, messages: Iterable[Message] = ()) -> None:
        """Drop all undo/redo state and start over from ``messages``."""
        self._past = []
        self._present = list(messages)
        self._future = []
