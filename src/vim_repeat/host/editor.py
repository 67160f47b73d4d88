"""Reference host that drives a ``SessionManager`` from in-memory documents."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from vim_repeat.config import RepeatSettings
from vim_repeat.core.events import LifecycleEvent
from vim_repeat.runtime import telemetry
from vim_repeat.session import SessionManager

from .document import MemoryDocument
from .input import InputChunk, InputQueue
from .registers import RegisterBank

UNDO_KEY = "u"
REDO_KEY = "<C-R>"


def _split_count(tokens: tuple[str, ...]) -> tuple[int, tuple[str, ...]]:
    digits = []
    for token in tokens:
        if token.isdigit() and (digits or token != "0"):
            digits.append(token)
        else:
            break
    count = int("".join(digits)) if digits else 0
    return count, tokens[len(digits) :]


class MemoryEditor:
    """Owns documents, typeahead and registers, and fires lifecycle events.

    Every state change goes through the same notifications a real editor
    would deliver, so the session sees leave/enter, save, reload, text and
    cursor events in host order.
    """

    def __init__(self, *, settings: Optional[RepeatSettings] = None) -> None:
        self.input = InputQueue()
        self.registers = RegisterBank()
        self.session = SessionManager(
            self.input,
            settings=settings or RepeatSettings(),
            expressions=self.registers,
            logger_name="vim_repeat.host",
        )
        self.documents: Dict[str, MemoryDocument] = {}
        self.current: Optional[str] = None
        self.executed: List[str] = []
        self._commands: Dict[str, Callable[[MemoryDocument], bool]] = {
            UNDO_KEY: MemoryDocument.undo,
            REDO_KEY: MemoryDocument.redo,
        }

    @property
    def document(self) -> MemoryDocument:
        if self.current is None:
            raise RuntimeError("No document has focus")
        return self.documents[self.current]

    def open(self, name: str, text: str = "") -> MemoryDocument:
        document = MemoryDocument(name, text)
        self.documents[name] = document
        self.session.open_document(name, document)
        self.switch_to(name)
        return document

    def switch_to(self, name: str) -> None:
        if name not in self.documents:
            raise KeyError(f"Unknown document '{name}'")
        if self.current == name:
            return
        if self.current is not None:
            self._notify(self.current, LifecycleEvent.BUF_LEAVE)
        self.current = name
        self._notify(name, LifecycleEvent.BUF_ENTER)

    def save(self) -> None:
        name = self._require_current()
        self._notify(name, LifecycleEvent.BUF_WRITE_PRE)
        self._notify(name, LifecycleEvent.BUF_WRITE_POST)

    def reload(self, text: str) -> None:
        name = self._require_current()
        self._notify(name, LifecycleEvent.BUF_READ_PRE)
        self.documents[name].reload(text)
        self._notify(name, LifecycleEvent.BUF_ENTER)

    def close(self, name: str) -> None:
        if name == self.current:
            self._notify(name, LifecycleEvent.BUF_LEAVE)
            self.current = None
        self._notify(name, LifecycleEvent.BUF_UNLOAD)
        self.session.close_document(name)
        del self.documents[name]

    def append_line(self, line: str) -> None:
        self.document.append_line(line)
        self._notify(self._require_current(), LifecycleEvent.TEXT_CHANGED)

    def move_cursor(self, row: int, col: int) -> None:
        self.document.cursor = (row, col)
        self._notify(self._require_current(), LifecycleEvent.CURSOR_MOVED)

    def process_input(self) -> List[str]:
        """Consume the typeahead; undo/redo keys act on the focused document."""

        consumed: List[str] = []
        while True:
            chunk = self.input.pop()
            if chunk is None:
                break
            consumed.append(self._execute(chunk))
        return consumed

    def _execute(self, chunk: InputChunk) -> str:
        keys = "".join(chunk.tokens)
        self.executed.append(keys)
        count, rest = _split_count(chunk.tokens)
        command = self._commands.get(rest[0]) if len(rest) == 1 else None
        if command is not None and self.current is not None:
            changed = False
            for _ in range(count or 1):
                changed = command(self.document) or changed
            if changed:
                self._notify(self.current, LifecycleEvent.TEXT_CHANGED)
        return keys

    def _require_current(self) -> str:
        if self.current is None:
            raise RuntimeError("No document has focus")
        return self.current

    def _notify(self, name: str, event: LifecycleEvent) -> None:
        telemetry.record_event(
            "host.notify",
            data={"document": name, "event": event.value},
            logger_name="vim_repeat.host",
        )
        self.session.notify(name, event)


__all__ = ["MemoryEditor", "REDO_KEY", "UNDO_KEY"]
