"""Settings mirroring the host editor options the repeat engine consults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from vim_repeat.core.events import LifecycleEvent
from vim_repeat.core.models import DEFAULT_REGISTER

ENV_PREFIX = "VIM_REPEAT_"

DEFAULT_RESYNC_EVENTS = (LifecycleEvent.CURSOR_MOVED, LifecycleEvent.TEXT_CHANGED)


def _parse_events(raw: str) -> tuple[LifecycleEvent, ...]:
    names = [part for part in (piece.strip() for piece in raw.split(",")) if part]
    if not names:
        raise ValueError("resync events cannot be empty")
    return tuple(dict.fromkeys(LifecycleEvent.parse(name) for name in names))


@dataclass(frozen=True, slots=True)
class RepeatSettings:
    """Host options plus the tokens used for native repeat.

    ``clipboard`` and ``foldopen`` take the host's option strings verbatim
    (for example ``"unnamedplus"`` or ``"hor,undo"``).
    """

    clipboard: str = ""
    foldopen: str = ""
    native_repeat: str = "."
    resync_events: tuple[LifecycleEvent, ...] = DEFAULT_RESYNC_EVENTS

    def __post_init__(self) -> None:
        if not self.native_repeat:
            raise ValueError("native_repeat cannot be empty")
        if not self.resync_events:
            raise ValueError("resync_events cannot be empty")

    @property
    def default_register(self) -> str:
        if "unnamedplus" in self.clipboard:
            return "+"
        if "unnamed" in self.clipboard:
            return "*"
        return DEFAULT_REGISTER

    @property
    def reveal_on_undo(self) -> bool:
        return "undo" in self.foldopen or "all" in self.foldopen

    def is_default_register(self, name: Optional[str]) -> bool:
        return not name or name == self.default_register

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RepeatSettings":
        env = os.environ if environ is None else environ

        def read(name: str) -> Optional[str]:
            return env.get(f"{ENV_PREFIX}{name}")

        resync = read("RESYNC_EVENTS")
        return cls(
            clipboard=read("CLIPBOARD") or "",
            foldopen=read("FOLDOPEN") or "",
            native_repeat=read("NATIVE_REPEAT") or ".",
            resync_events=(
                _parse_events(resync) if resync is not None else DEFAULT_RESYNC_EVENTS
            ),
        )


__all__ = ["DEFAULT_RESYNC_EVENTS", "RepeatSettings"]
