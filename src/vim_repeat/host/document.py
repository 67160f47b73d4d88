"""In-memory document with a change counter and linear undo history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(slots=True)
class UndoEntry:
    label: str
    before: tuple[str, ...]
    after: tuple[str, ...]


class UndoTimeline:
    """Linear undo/redo history; a new change drops the redo tail."""

    def __init__(self) -> None:
        self._entries: List[UndoEntry] = []
        self._index: int = -1

    def push(self, entry: UndoEntry) -> None:
        if self._index < len(self._entries) - 1:
            self._entries = self._entries[: self._index + 1]
        self._entries.append(entry)
        self._index = len(self._entries) - 1

    def can_undo(self) -> bool:
        return self._index >= 0

    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def undo(self) -> Optional[UndoEntry]:
        if not self.can_undo():
            return None
        entry = self._entries[self._index]
        self._index -= 1
        return entry

    def redo(self) -> Optional[UndoEntry]:
        if not self.can_redo():
            return None
        self._index += 1
        return self._entries[self._index]


class MemoryDocument:
    """List-of-lines text whose revision bumps on every content change.

    The revision starts at 1 and never goes back, undo and redo included,
    which is the contract ``RevisionOracle`` asks of hosts.
    """

    def __init__(self, name: str, text: str = "") -> None:
        self.name = name
        self._lines: List[str] = text.split("\n") if text else [""]
        self._revision = 1
        self.undo_timeline = UndoTimeline()
        self.cursor: tuple[int, int] = (0, 0)

    def current_revision(self) -> int:
        return self._revision

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def replace_lines(
        self, start: int, end: int, lines: Sequence[str], *, label: str
    ) -> None:
        if start < 0 or end < start or end > len(self._lines):
            raise IndexError(f"Line range {start}:{end} out of bounds")
        before = tuple(self._lines)
        self._lines[start:end] = list(lines)
        if not self._lines:
            self._lines = [""]
        self.undo_timeline.push(
            UndoEntry(label=label, before=before, after=tuple(self._lines))
        )
        self._touch()

    def append_line(self, line: str) -> None:
        self.replace_lines(len(self._lines), len(self._lines), [line], label="append")

    def undo(self) -> bool:
        entry = self.undo_timeline.undo()
        if entry is None:
            return False
        self._lines = list(entry.before)
        self._touch()
        return True

    def redo(self) -> bool:
        entry = self.undo_timeline.redo()
        if entry is None:
            return False
        self._lines = list(entry.after)
        self._touch()
        return True

    def reload(self, text: str) -> None:
        self._lines = text.split("\n") if text else [""]
        self.undo_timeline = UndoTimeline()
        self._touch()

    def _touch(self) -> None:
        self._revision += 1


__all__ = ["MemoryDocument", "UndoEntry", "UndoTimeline"]
