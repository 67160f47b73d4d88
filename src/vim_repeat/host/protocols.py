"""Contracts the host editor fulfils for the repeat engine."""

from __future__ import annotations

from typing import Protocol, Sequence


class RevisionOracle(Protocol):
    """Monotonic per-document change counter (never below 1)."""

    def current_revision(self) -> int:
        ...


class InputSink(Protocol):
    """Accepts keys to be interpreted as if typed by the user."""

    def feed(self, tokens: Sequence[str], *, remap: bool, insert: bool) -> None:
        """Queue ``tokens``; ``insert=True`` places them ahead of pending input."""
        ...

    def reserve(self, tokens: Sequence[str]) -> None:
        """Raise ``ReplayRejectedError`` unless all of ``tokens`` would be accepted.

        Called before a multi-part feed so that a refusal queues nothing.
        """
        ...


class ExpressionSource(Protocol):
    def expression_source(self) -> str:
        """Return the unevaluated text of the expression register."""
        ...


class ReplayRejectedError(RuntimeError):
    """Raised by input sinks that refuse to accept replayed keys."""

    def __init__(self, message: str, *, tokens: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.tokens = tuple(tokens)


__all__ = [
    "ExpressionSource",
    "InputSink",
    "ReplayRejectedError",
    "RevisionOracle",
]
