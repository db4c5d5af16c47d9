"""Linear undo/redo history over marker snapshots."""

from __future__ import annotations

import logging

from ..core import HistorySnapshot

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class HistoryManager:
    """Bounded list of snapshots with a cursor.

    ``index`` points at the snapshot matching the current store content and is
    ``-1`` while nothing has been recorded. Recording after an undo discards the
    redo branch.
    """

    def __init__(self, *, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._history: list[HistorySnapshot] = []
        self.index = -1

    def record(self, snapshot: HistorySnapshot) -> None:
        if self.index < len(self._history) - 1:
            del self._history[self.index + 1 :]

        self._history.append(snapshot)
        self.index += 1

        if len(self._history) > self.limit:
            self._history.pop(0)
            self.index -= 1

    def undo(self) -> HistorySnapshot | None:
        if self.index <= 0:
            return None
        self.index -= 1
        logger.debug("Undo to history entry %s", self.index)
        return self._history[self.index]

    def redo(self) -> HistorySnapshot | None:
        if self.index >= len(self._history) - 1:
            return None
        self.index += 1
        logger.debug("Redo to history entry %s", self.index)
        return self._history[self.index]

    def reset(self) -> None:
        self._history.clear()
        self.index = -1

    @property
    def can_undo(self) -> bool:
        return self.index > 0

    @property
    def can_redo(self) -> bool:
        return self.index < len(self._history) - 1

    @property
    def current(self) -> HistorySnapshot | None:
        if self.index < 0:
            return None
        return self._history[self.index]

    @property
    def entries(self) -> tuple[HistorySnapshot, ...]:
        return tuple(self._history)

    def __len__(self) -> int:
        return len(self._history)
