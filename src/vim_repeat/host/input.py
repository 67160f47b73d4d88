"""Typeahead queue standing in for the host's input buffer."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Sequence

from .protocols import ReplayRejectedError


@dataclass(frozen=True, slots=True)
class InputChunk:
    tokens: tuple[str, ...]
    remap: bool


class InputQueue:
    """Pending keys; ``insert=True`` jumps ahead of everything already queued."""

    def __init__(self, *, limit: int = 1000) -> None:
        self._chunks: Deque[InputChunk] = deque()
        self._limit = limit

    def feed(self, tokens: Sequence[str], *, remap: bool, insert: bool) -> None:
        chunk = InputChunk(tokens=tuple(tokens), remap=remap)
        if not chunk.tokens:
            return
        self.reserve(chunk.tokens)
        if insert:
            self._chunks.appendleft(chunk)
        else:
            self._chunks.append(chunk)

    def reserve(self, tokens: Sequence[str]) -> None:
        if self.pending_tokens() + len(tokens) > self._limit:
            raise ReplayRejectedError("typeahead buffer full", tokens=tokens)

    def pending_tokens(self) -> int:
        return sum(len(chunk.tokens) for chunk in self._chunks)

    @property
    def keys(self) -> str:
        return "".join("".join(chunk.tokens) for chunk in self._chunks)

    def chunks(self) -> tuple[InputChunk, ...]:
        return tuple(self._chunks)

    def pop(self) -> InputChunk | None:
        return self._chunks.popleft() if self._chunks else None


__all__ = ["InputChunk", "InputQueue"]
