"""Register storage, including the expression register."""

from __future__ import annotations

from typing import Dict

from vim_repeat.core.models import DEFAULT_REGISTER, EXPRESSION_REGISTER


class RegisterBank:
    """Tracks unnamed and named registers plus the expression source."""

    def __init__(self) -> None:
        self._registers: Dict[str, str] = {DEFAULT_REGISTER: ""}
        self._expression = ""

    def get(self, name: str) -> str:
        return self._registers.get(name, "")

    def yank_to(self, name: str, text: str) -> None:
        if name == EXPRESSION_REGISTER:
            self._expression = text
            return
        self._registers[name] = text
        if name != DEFAULT_REGISTER:
            self._registers[DEFAULT_REGISTER] = text

    def expression_source(self) -> str:
        return self._expression


__all__ = ["RegisterBank"]
