"""Dataclasses describing repeatable actions and the sync state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

DEFAULT_REGISTER = '"'
EXPRESSION_REGISTER = "="


def _split_keys(text: str) -> tuple[str, ...]:
    tokens: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "<":
            close = text.find(">", index + 1)
            # "<Plug>(Name)" style names keep their parenthesised suffix
            if close > index + 1:
                end = close + 1
                plug = text.startswith("<Plug>", index)
                if plug and end < len(text) and text[end] == "(":
                    paren = text.find(")", end)
                    if paren != -1:
                        end = paren + 1
                tokens.append(text[index:end])
                index = end
                continue
        tokens.append(char)
        index += 1
    return tuple(tokens)


@dataclass(frozen=True, slots=True)
class ActionSequence:
    """Immutable key-token sequence that replays a command when typed."""

    tokens: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.tokens:
            raise ValueError("ActionSequence requires at least one token")
        if any(not token for token in self.tokens):
            raise ValueError("ActionSequence tokens cannot be empty")
        object.__setattr__(self, "tokens", tuple(self.tokens))

    @classmethod
    def parse(cls, text: str) -> "ActionSequence":
        """Split Vim key notation, keeping ``<...>`` names as single tokens."""

        return cls(_split_keys(text))

    @classmethod
    def coerce(cls, value: "ActionSequence | str | Iterable[str]") -> "ActionSequence":
        if isinstance(value, ActionSequence):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        return cls(tuple(value))

    @property
    def keys(self) -> str:
        return "".join(self.tokens)

    def __str__(self) -> str:
        return self.keys


@dataclass(frozen=True, slots=True)
class RegisteredAction:
    sequence: ActionSequence
    count: int = 0


@dataclass(frozen=True, slots=True)
class RegisterAssociation:
    """Register to reuse when ``sequence`` is the action being repeated."""

    sequence: ActionSequence
    register_name: str

    def applies_to(self, action: RegisteredAction | None) -> bool:
        return action is not None and action.sequence == self.sequence


@dataclass(frozen=True, slots=True)
class Unsynced:
    """Nothing tracked matches the document; repeat must defer to native."""

    def __repr__(self) -> str:
        return "Unsynced"


@dataclass(frozen=True, slots=True)
class Synced:
    """Between a leave-type and an enter-type event, with sync preserved."""

    def __repr__(self) -> str:
        return "Synced"


@dataclass(frozen=True, slots=True)
class Revision:
    """Document and revision observed when the action was last tracked."""

    document_id: str
    value: int

    def __post_init__(self) -> None:
        if not self.document_id:
            raise ValueError("revision requires a document id")
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("revision must be an int")
        if self.value < 1:
            raise ValueError(f"revision must be positive, got {self.value}")


SyncState = Union[Unsynced, Synced, Revision]

UNSYNCED = Unsynced()
SYNCED = Synced()


def normalize_count(value: object) -> int:
    """Map absent, negative, or non-numeric counts to 0."""

    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value if value > 0 else 0
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def count_tokens(count: int) -> tuple[str, ...]:
    return tuple(str(count)) if count else ()


__all__ = [
    "ActionSequence",
    "DEFAULT_REGISTER",
    "EXPRESSION_REGISTER",
    "RegisterAssociation",
    "RegisteredAction",
    "Revision",
    "SYNCED",
    "SyncState",
    "Synced",
    "UNSYNCED",
    "Unsynced",
    "count_tokens",
    "normalize_count",
]
